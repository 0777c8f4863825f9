"""Тесты блокирующего Networker."""

import json
import logging
import threading
import time
from typing import List

import pytest
import requests
import responses
from pydantic import BaseModel
from responses import matchers

from networker import Networker, NetworkerConfig, NetworkRequest
from networker.core.cache import NetworkCache
from networker.core.config import CacheConfig, CacheKeyStrategy, RetryConfig, SecurityConfig
from networker.core.errors import ErrorKind
from networker.core.logging import LoggingConfig, NetworkLogger
from networker.core.models import CachedDownloadLocation, NetworkResponse, ResponseInfo
from networker.core.transport import Transport, TransportResult
from networker.interceptors import AuthInterceptor, RequestInterceptor

URL = "https://api.example.com/users"


class User(BaseModel):
    id: int
    name: str


def _wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached")
        time.sleep(0.01)


class GatedTransport(Transport):
    """Транспорт, который держит каждый вызов до открытия его gate."""

    def __init__(self, calls=2):
        self.gates = [threading.Event() for _ in range(calls)]
        self.calls = 0
        self._lock = threading.Lock()

    def send(self, request, cancel_event=None):
        with self._lock:
            gate = self.gates[self.calls]
            self.calls += 1
        gate.wait(timeout=5)
        return TransportResult(data=b"ok", response=ResponseInfo(status_code=200))

    def upload(self, request, data, cancel_event=None):
        return self.send(request, cancel_event)

    def download(self, request, destination, cancel_event=None):
        raise NotImplementedError


class TestPerform:
    """Основной путь perform()."""

    def test_success(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, json=[{"id": 1}], status=200)

        result = networker.perform(NetworkRequest("/users"))

        response = result.unwrap()
        assert isinstance(response, NetworkResponse)
        assert response.status_code == 200
        assert response.json() == [{"id": 1}]

    def test_post_json_body(self, networker, mock_responses):
        mock_responses.add(
            responses.POST, URL, status=201, body=b"{}",
            match=[matchers.json_params_matcher({"name": "Alice"}),
                   matchers.header_matcher({"Content-Type": "application/json"})],
        )

        result = networker.perform(NetworkRequest("/users", method="POST", body={"name": "Alice"}))
        assert result.unwrap().status_code == 201

    def test_config_headers_sent(self, base_url, mock_responses):
        mock_responses.add(responses.GET, URL, body=b"ok", match=[matchers.header_matcher({"X-App": "test"})])

        with Networker(NetworkerConfig(base_url=base_url, headers={"X-App": "test"})) as networker:
            assert networker.perform(NetworkRequest("/users")).is_success

    def test_empty_body_is_success(self, networker, mock_responses):
        mock_responses.add(responses.DELETE, URL, status=204)
        assert networker.perform(NetworkRequest("/users", method="DELETE")).unwrap().data == b""

    def test_invalid_url_not_sent(self, networker, mock_responses):
        result = networker.perform(NetworkRequest("ftp://files.example.com/x"))
        assert result.error.kind is ErrorKind.INVALID_URL
        assert len(mock_responses.calls) == 0

    def test_unencodable_body(self, networker, mock_responses):
        result = networker.perform(NetworkRequest("/users", method="POST", body={"x": object()}))
        assert result.error.kind is ErrorKind.PARSING_ERROR
        assert len(mock_responses.calls) == 0

    def test_not_found_with_api_message(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, status=404, body=b"User not found")

        result = networker.perform(NetworkRequest("/users"))

        assert result.error.kind is ErrorKind.NOT_FOUND
        assert result.error.status_code == 404
        assert result.error.detailed_description == \
            "Not Found: The requested resource could not be found. - User not found"
        assert len(mock_responses.calls) == 1

    def test_redirect_not_followed(self, base_url, mock_responses):
        mock_responses.add(responses.GET, URL, status=301, headers={"Location": "https://other.example.com"})
        config = NetworkerConfig(base_url=base_url, security=SecurityConfig(allow_redirects=False))

        with Networker(config) as networker:
            result = networker.perform(NetworkRequest("/users"))

        assert result.error.kind is ErrorKind.MOVED_PERMANENTLY

    def test_completion_called_with_result(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, body=b"ok")
        received = []

        result = networker.perform(NetworkRequest("/users"), completion=received.append)

        assert received == [result]

    def test_completion_runs_on_caller_thread_before_return(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, body=b"ok")
        threads = []

        networker.perform(NetworkRequest("/users"), completion=lambda _: threads.append(threading.current_thread()))

        assert threads == [threading.current_thread()]

    def test_never_raises_on_transport_error(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, body=requests.exceptions.ChunkedEncodingError("broken"))
        result = networker.perform(NetworkRequest("/users"))
        assert result.error.kind is ErrorKind.NETWORK_ERROR


class TestRetry:
    """Повторы: max_retries + 1 попыток."""

    def test_server_error_retried_until_limit(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, status=500)

        result = networker.perform(NetworkRequest("/users"))

        assert result.error.kind is ErrorKind.SERVER_ERROR
        assert len(mock_responses.calls) == 3

    def test_recovers_after_failure(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, status=503)
        mock_responses.add(responses.GET, URL, body=requests.exceptions.ReadTimeout())
        mock_responses.add(responses.GET, URL, body=b"ok")

        assert networker.perform(NetworkRequest("/users")).unwrap().data == b"ok"
        assert len(mock_responses.calls) == 3

    def test_connection_error_is_invalid_url_and_retried(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, body=requests.exceptions.ConnectionError("refused"))

        result = networker.perform(NetworkRequest("/users"))

        assert result.error.kind is ErrorKind.INVALID_URL
        assert len(mock_responses.calls) == 3

    def test_timeout(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, body=requests.exceptions.ReadTimeout())
        assert networker.perform(NetworkRequest("/users")).error.kind is ErrorKind.TIME_OUT

    def test_client_error_not_retried_by_default(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, status=401)
        assert networker.perform(NetworkRequest("/users")).error.kind is ErrorKind.UNAUTHORIZED
        assert len(mock_responses.calls) == 1

    def test_client_error_retried_when_enabled(self, base_url, mock_responses):
        mock_responses.add(responses.GET, URL, status=429)
        config = NetworkerConfig(base_url=base_url,
                                 retry=RetryConfig(max_retries=1, delay=0, retry_client_errors=True))

        with Networker(config) as networker:
            result = networker.perform(NetworkRequest("/users"))

        assert result.error.kind is ErrorKind.UNKNOWN
        assert result.error.status_code == 429
        assert len(mock_responses.calls) == 2

    def test_retry_disabled(self, base_url, mock_responses):
        mock_responses.add(responses.GET, URL, status=500)

        with Networker(NetworkerConfig(base_url=base_url, retry=RetryConfig(enabled=False))) as networker:
            networker.perform(NetworkRequest("/users"))

        assert len(mock_responses.calls) == 1


class TestCache:
    """Кэш ответов."""

    @pytest.fixture
    def cached_networker(self, base_url):
        networker = Networker(NetworkerConfig(base_url=base_url, retry=RetryConfig(delay=0)))
        yield networker
        networker.close()

    def test_second_call_served_from_cache(self, cached_networker, mock_responses):
        mock_responses.add(responses.GET, URL, body=b"ok")

        first = cached_networker.perform(NetworkRequest("/users"))
        second = cached_networker.perform(NetworkRequest("/users"))

        assert second.unwrap() == first.unwrap()
        assert len(mock_responses.calls) == 1

    def test_failures_not_cached(self, cached_networker, mock_responses):
        mock_responses.add(responses.GET, URL, status=404)
        mock_responses.add(responses.GET, URL, body=b"ok")

        assert cached_networker.perform(NetworkRequest("/users")).is_failure
        assert cached_networker.perform(NetworkRequest("/users")).is_success

    def test_method_and_body_are_part_of_key(self, cached_networker, mock_responses):
        mock_responses.add(responses.GET, URL, body=b"get")
        mock_responses.add(responses.POST, URL, body=b"post")

        cached_networker.perform(NetworkRequest("/users"))
        cached_networker.perform(NetworkRequest("/users", method="POST", body={"a": 1}))
        cached_networker.perform(NetworkRequest("/users", method="POST", body={"a": 2}))

        assert len(mock_responses.calls) == 3

    def test_url_strategy_shares_entry(self, base_url, mock_responses):
        mock_responses.add(responses.GET, URL, body=b"get")
        config = NetworkerConfig(base_url=base_url, cache=CacheConfig(key_strategy=CacheKeyStrategy.URL))

        with Networker(config) as networker:
            networker.perform(NetworkRequest("/users"))
            result = networker.perform(NetworkRequest("/users", method="POST"))

        assert result.unwrap().data == b"get"
        assert len(mock_responses.calls) == 1

    def test_expired_entry_refetched(self, base_url, mock_responses):
        mock_responses.add(responses.GET, URL, body=b"ok")
        now = [0.0]
        cache = NetworkCache(expiration=10, clock=lambda: now[0])

        with Networker(NetworkerConfig(base_url=base_url), cache=cache) as networker:
            networker.perform(NetworkRequest("/users"))
            now[0] = 10.5
            networker.perform(NetworkRequest("/users"))

        assert len(mock_responses.calls) == 2

    def test_clear_cache(self, cached_networker, mock_responses):
        mock_responses.add(responses.GET, URL, body=b"ok")

        cached_networker.perform(NetworkRequest("/users"))
        cached_networker.clear_cache()
        cached_networker.perform(NetworkRequest("/users"))

        assert len(mock_responses.calls) == 2

    def test_key_ignores_interceptor_changes(self, base_url, mock_responses):
        class Nonce(RequestInterceptor):
            counter = 0

            def intercept(self, request):
                Nonce.counter += 1
                request.set_header("X-Nonce", str(Nonce.counter))
                return request

        mock_responses.add(responses.GET, URL, body=b"ok")

        with Networker(NetworkerConfig(base_url=base_url), interceptors=[Nonce()]) as networker:
            networker.perform(NetworkRequest("/users"))
            networker.perform(NetworkRequest("/users"))

        assert len(mock_responses.calls) == 1

    def test_cache_disabled(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, body=b"ok")
        networker.perform(NetworkRequest("/users"))
        networker.perform(NetworkRequest("/users"))
        assert len(mock_responses.calls) == 2


class TestDecoded:

    def test_decodes_model(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, json={"id": 1, "name": "Alice"})

        result = networker.perform_decoded(NetworkRequest("/users"), User)

        assert result.unwrap().value == User(id=1, name="Alice")
        assert result.value.raw.status_code == 200

    def test_decodes_generic_list(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, json=[{"id": 1, "name": "a"}, {"id": 2, "name": "b"}])
        result = networker.perform_decoded(NetworkRequest("/users"), List[User])
        assert [u.id for u in result.unwrap().value] == [1, 2]

    def test_decoding_error_not_retried(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, json={"id": 1})

        result = networker.perform_decoded(NetworkRequest("/users"), User)

        assert result.error.kind is ErrorKind.DECODING_ERROR
        assert result.error.description == \
            "Decoding Error: Key 'name' not found: Field required, codingPath: []"
        assert len(mock_responses.calls) == 1

    def test_transport_failure_passed_through(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, status=403)
        received = []
        result = networker.perform_decoded(NetworkRequest("/users"), User, completion=received.append)
        assert result.error.kind is ErrorKind.FORBIDDEN
        assert received == [result]


class TestUpload:

    def test_sends_data(self, networker, mock_responses):
        mock_responses.add(responses.PUT, URL, body=b"stored")

        result = networker.perform_upload(NetworkRequest("/users", method="PUT"), b"\x00\x01payload")

        assert result.unwrap().data == b"stored"
        assert mock_responses.calls[0].request.body == b"\x00\x01payload"

    def test_not_cached(self, base_url, mock_responses):
        mock_responses.add(responses.POST, URL, body=b"ok")

        with Networker(NetworkerConfig(base_url=base_url)) as networker:
            networker.perform_upload(NetworkRequest("/users", method="POST"), b"data")
            networker.perform_upload(NetworkRequest("/users", method="POST"), b"data")

        assert len(mock_responses.calls) == 2

    def test_server_error_retried(self, networker, mock_responses):
        mock_responses.add(responses.POST, URL, status=500)
        result = networker.perform_upload(NetworkRequest("/users", method="POST"), b"data")
        assert result.error.kind is ErrorKind.SERVER_ERROR
        assert len(mock_responses.calls) == 3


class TestDownload:

    FILE_URL = "https://api.example.com/files/report.csv"

    def test_to_destination(self, networker, mock_responses, tmp_path):
        mock_responses.add(responses.GET, self.FILE_URL, body=b"a,b\n1,2\n")
        destination = tmp_path / "out" / "report.csv"

        result = networker.perform_download(NetworkRequest("/files/report.csv"), destination)

        assert result.unwrap() == destination
        assert destination.read_bytes() == b"a,b\n1,2\n"

    def test_to_temporary_file(self, networker, mock_responses):
        mock_responses.add(responses.GET, self.FILE_URL, body=b"data")

        path = networker.perform_download(NetworkRequest("/files/report.csv")).unwrap()
        try:
            assert path.suffix == ".csv"
            assert path.read_bytes() == b"data"
        finally:
            path.unlink()

    def test_error_status_leaves_no_file(self, networker, mock_responses, tmp_path):
        mock_responses.add(responses.GET, self.FILE_URL, status=404, body=b"no such file")
        destination = tmp_path / "report.csv"

        result = networker.perform_download(NetworkRequest("/files/report.csv"), destination)

        assert result.error.kind is ErrorKind.NOT_FOUND
        assert result.error.api_error_message == "no such file"
        assert not destination.exists()

    def test_cached_location(self, base_url, mock_responses, tmp_path):
        mock_responses.add(responses.GET, self.FILE_URL, body=b"data")
        destination = tmp_path / "report.csv"

        with Networker(NetworkerConfig(base_url=base_url)) as networker:
            first = networker.perform_download(NetworkRequest("/files/report.csv"), destination)
            second = networker.perform_download(NetworkRequest("/files/report.csv"), tmp_path / "other.csv")
            cached = networker.cache.get(f"download:GET {self.FILE_URL}")

        assert second.unwrap() == first.unwrap() == destination
        assert isinstance(cached, CachedDownloadLocation)
        assert len(mock_responses.calls) == 1

    def test_cached_location_missing_file_refetched(self, base_url, mock_responses, tmp_path):
        mock_responses.add(responses.GET, self.FILE_URL, body=b"data")
        destination = tmp_path / "report.csv"

        with Networker(NetworkerConfig(base_url=base_url)) as networker:
            networker.perform_download(NetworkRequest("/files/report.csv"), destination)
            destination.unlink()
            result = networker.perform_download(NetworkRequest("/files/report.csv"), destination)

        assert result.unwrap().read_bytes() == b"data"
        assert len(mock_responses.calls) == 2

    def test_download_and_data_caches_are_separate(self, base_url, mock_responses, tmp_path):
        mock_responses.add(responses.GET, self.FILE_URL, body=b"data")

        with Networker(NetworkerConfig(base_url=base_url)) as networker:
            networker.perform(NetworkRequest("/files/report.csv"))
            networker.perform_download(NetworkRequest("/files/report.csv"), tmp_path / "r.csv")

        assert len(mock_responses.calls) == 2


class TestLock:

    def test_locked_fails_fast(self, networker, mock_responses):
        networker.lock()
        assert networker.is_locked

        results = [
            networker.perform(NetworkRequest("/users")),
            networker.perform_decoded(NetworkRequest("/users"), User),
            networker.perform_upload(NetworkRequest("/users", method="POST"), b"x"),
            networker.perform_download(NetworkRequest("/users")),
        ]

        assert all(r.error.kind is ErrorKind.LOCKED for r in results)
        assert results[0].error.description == "The networker is locked."
        assert len(mock_responses.calls) == 0

    def test_unlock(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, body=b"ok")
        networker.lock()
        networker.unlock()
        assert networker.perform(NetworkRequest("/users")).is_success


class TestCancellation:

    @pytest.fixture
    def slow_networker(self, base_url):
        networker = Networker(NetworkerConfig(base_url=base_url, retry=RetryConfig(max_retries=1, delay=30)))
        yield networker
        networker.close()

    def _start(self, networker, task_id="slow"):
        results = []
        thread = threading.Thread(
            target=lambda: results.append(networker.perform(NetworkRequest("/users"), task_id=task_id))
        )
        thread.start()
        return thread, results

    def test_cancel_during_retry_wait(self, slow_networker, mock_responses):
        mock_responses.add(responses.GET, URL, status=500)

        thread, results = self._start(slow_networker)
        _wait_until(lambda: len(mock_responses.calls) == 1 and "slow" in slow_networker.active_tasks())

        assert slow_networker.cancel_task("slow") is True
        thread.join(timeout=5)

        assert not thread.is_alive()
        assert results[0].error.kind is ErrorKind.REQUEST_CANCELED
        assert results[0].error.description == "Request Canceled: The request was canceled."
        assert len(mock_responses.calls) == 1
        assert slow_networker.active_tasks() == []

    def test_cancel_unknown_task(self, networker):
        assert networker.cancel_task("nope") is False

    def test_duplicate_task_id_rejected(self, slow_networker, mock_responses):
        mock_responses.add(responses.GET, URL, status=500)

        thread, _ = self._start(slow_networker)
        _wait_until(lambda: len(mock_responses.calls) == 1 and "slow" in slow_networker.active_tasks())

        with pytest.raises(ValueError):
            slow_networker.perform(NetworkRequest("/users"), task_id="slow")
        assert len(mock_responses.calls) == 1

        slow_networker.cancel_all_tasks()
        thread.join(timeout=5)

    def test_cancel_all(self, slow_networker, mock_responses):
        mock_responses.add(responses.GET, URL, status=500)

        first, first_results = self._start(slow_networker, "a")
        second, second_results = self._start(slow_networker, "b")
        _wait_until(lambda: len(mock_responses.calls) == 2)
        _wait_until(lambda: sorted(slow_networker.active_tasks()) == ["a", "b"])

        assert slow_networker.cancel_all_tasks() == 2
        first.join(timeout=5)
        second.join(timeout=5)

        assert first_results[0].error.kind is ErrorKind.REQUEST_CANCELED
        assert second_results[0].error.kind is ErrorKind.REQUEST_CANCELED

    def test_reused_id_survives_cancelled_call_cleanup(self, base_url):
        transport = GatedTransport()
        networker = Networker(NetworkerConfig(base_url=base_url), transport=transport)

        first, first_results = self._start(networker, "job")
        _wait_until(lambda: transport.calls == 1)
        assert networker.cancel_task("job") is True

        second, second_results = self._start(networker, "job")
        _wait_until(lambda: transport.calls == 2)

        transport.gates[0].set()
        first.join(timeout=5)
        assert first_results[0].error.kind is ErrorKind.REQUEST_CANCELED
        assert networker.active_tasks() == ["job"]

        assert networker.cancel_task("job") is True
        transport.gates[1].set()
        second.join(timeout=5)
        assert second_results[0].error.kind is ErrorKind.REQUEST_CANCELED
        assert networker.active_tasks() == []
        networker.close()

    def test_finished_task_removed_from_registry(self, networker, mock_responses):
        mock_responses.add(responses.GET, URL, body=b"ok")
        networker.perform(NetworkRequest("/users"), task_id="done")
        assert networker.active_tasks() == []
        assert networker.cancel_task("done") is False


class TestInterceptors:

    def test_auth_header_sent(self, config, mock_responses):
        mock_responses.add(responses.GET, URL, body=b"ok",
                           match=[matchers.header_matcher({"Authorization": "Bearer secret"})])

        with Networker(config, interceptors=[AuthInterceptor(token="secret")]) as networker:
            assert networker.perform(NetworkRequest("/users")).is_success

    def test_add_and_remove(self, networker):
        interceptor = AuthInterceptor(token="x")
        networker.add_interceptor(interceptor)
        assert networker.interceptors == [interceptor]
        networker.remove_interceptor(interceptor)
        assert networker.interceptors == []


class TestLogging:

    LOGGER_NAME = "networker.test.orchestrator"

    @pytest.fixture
    def logged_networker(self, config):
        logger = NetworkLogger(LoggingConfig.create(level="DEBUG", enable_console=False), name=self.LOGGER_NAME)
        networker = Networker(config, logger=logger)
        yield networker
        networker.close()

    def _messages(self, caplog):
        return [r.getMessage() for r in caplog.records if r.name == self.LOGGER_NAME]

    def test_success_trace(self, logged_networker, mock_responses, caplog):
        caplog.set_level(logging.DEBUG, logger=self.LOGGER_NAME)
        mock_responses.add(responses.GET, URL, body=b"ok")

        logged_networker.perform(NetworkRequest("/users"), task_id="t-1")

        messages = self._messages(caplog)
        assert messages[0] == "Request"
        assert messages[1] == "Response"
        assert messages[2].startswith("Time Report: Request completed in ")
        records = [r for r in caplog.records if r.name == self.LOGGER_NAME]
        assert all(r.correlation_id == "t-1" for r in records)

    def test_retry_and_final_error_logged_once(self, logged_networker, mock_responses, caplog):
        caplog.set_level(logging.DEBUG, logger=self.LOGGER_NAME)
        mock_responses.add(responses.GET, URL, status=500)

        logged_networker.perform(NetworkRequest("/users"))

        messages = self._messages(caplog)
        assert sum(m.startswith("Retrying request") for m in messages) == 2
        errors = [m for m in messages if m.startswith("Description: ")]
        assert errors == ["Description: Server Error: The server encountered an internal error "
                          "and was unable to complete your request."]

    def test_cache_hit_logged(self, base_url, mock_responses, caplog):
        caplog.set_level(logging.DEBUG, logger=self.LOGGER_NAME)
        mock_responses.add(responses.GET, URL, body=b"ok")
        logger = NetworkLogger(LoggingConfig.create(enable_console=False), name=self.LOGGER_NAME)

        with Networker(NetworkerConfig(base_url=base_url), logger=logger) as networker:
            networker.perform(NetworkRequest("/users"))
            networker.perform(NetworkRequest("/users"))

        assert "Success: Cached Response" in self._messages(caplog)

    def test_logger_from_config(self, base_url):
        config = NetworkerConfig(base_url=base_url, logging=LoggingConfig.create(enable_console=False))
        with Networker(config) as networker:
            assert isinstance(networker.logger, NetworkLogger)

    def test_no_logger_by_default(self, networker):
        assert networker.logger is None


def test_request_body_bytes_sent_as_is(networker, mock_responses):
    mock_responses.add(responses.POST, URL, body=b"ok")
    networker.perform(NetworkRequest("/users", method="POST", body=json.dumps({"a": 1}).encode()))
    request = mock_responses.calls[0].request
    assert request.body == b'{"a": 1}'
    assert "Content-Type" not in request.headers
