"""
Общая часть оркестраторов Networker и AsyncNetworker.

Здесь всё, что не зависит от способа ожидания I/O: блокировка, реестр
задач, кэш, сборка запроса, интерцепторы, логирование и завершение
вызова. Циклы повторов реализуют подклассы.
"""

import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union
from urllib.parse import urlparse

from .cache import DATA_NAMESPACE, DOWNLOAD_NAMESPACE, NetworkCache, ResponseCache, make_cache_key
from .commons import handle_download_response, handle_response, make_url_request
from .config import NetworkerConfig
from .error_handler import ErrorHandler
from .errors import ErrorCase, NetworkError
from .logging import NetworkLogger
from .models import CachedDownloadLocation, NetworkRequest, NetworkResponse, URLRequest
from .result import Failure, Result, Success
from .tasks import TaskRegistry, TaskState, _TaskHandle
from .transport import TransportResult
from ..interceptors import RequestInterceptor, apply_interceptors, sort_interceptors

Completion = Callable[[Result], None]


class BaseNetworker:
    """
    Состояние и шаги конвейера, общие для обоих оркестраторов.

    Args:
        config: Конфигурация (по умолчанию NetworkerConfig())
        cache: Кэш ответов (по умолчанию NetworkCache из config.cache)
        logger: Логгер (по умолчанию создаётся из config.logging, если задан)
        interceptors: Интерцепторы запросов
    """

    def __init__(
        self,
        config: Optional[NetworkerConfig] = None,
        *,
        cache: Optional[ResponseCache] = None,
        logger: Optional[NetworkLogger] = None,
        interceptors: Optional[Iterable[RequestInterceptor]] = None,
    ):
        self._config = config or NetworkerConfig()
        self._cache = cache if cache is not None else NetworkCache.from_config(self._config.cache)

        if logger is None and self._config.logging is not None:
            logger = NetworkLogger(self._config.logging)
        self._logger = logger

        self._interceptors: List[RequestInterceptor] = sort_interceptors(interceptors or [])
        self._registry = TaskRegistry()
        self._locked = False
        self._state_lock = threading.Lock()

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # PUBLIC STATE
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    @property
    def config(self) -> NetworkerConfig:
        return self._config

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    @property
    def logger(self) -> Optional[NetworkLogger]:
        return self._logger

    @property
    def interceptors(self) -> List[RequestInterceptor]:
        return list(self._interceptors)

    def add_interceptor(self, interceptor: RequestInterceptor) -> None:
        """Добавить интерцептор и пересортировать по приоритету."""
        self._interceptors = sort_interceptors([*self._interceptors, interceptor])

    def remove_interceptor(self, interceptor: RequestInterceptor) -> None:
        self._interceptors = [i for i in self._interceptors if i is not interceptor]

    def lock(self) -> None:
        """
        Запретить новые вызовы.

        Пока блокировка держится, каждый новый вызов сразу получает
        Failure(Locked). Уже идущие вызовы не затрагиваются.
        """
        with self._state_lock:
            self._locked = True

    def unlock(self) -> None:
        with self._state_lock:
            self._locked = False

    @property
    def is_locked(self) -> bool:
        with self._state_lock:
            return self._locked

    def cancel_task(self, task_id: str) -> bool:
        """
        Отменить вызов по id и удалить его из реестра.

        Returns:
            False если вызова с таким id нет
        """
        return self._registry.cancel(task_id)

    def cancel_all_tasks(self) -> int:
        """Отменить все вызовы. Возвращает их количество."""
        return self._registry.cancel_all()

    def active_tasks(self) -> List[str]:
        """Id вызовов, которые сейчас выполняются."""
        return self._registry.ids()

    def clear_cache(self) -> None:
        self._cache.clear()

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # PIPELINE STEPS
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def _locked_failure(self) -> Failure:
        return self._fail(NetworkError(ErrorCase.locked()))

    def _prepare(self, request: NetworkRequest) -> Result[URLRequest]:
        """Собрать URLRequest; ошибка сборки финальная и логируется."""
        result = make_url_request(request, self._config)
        if result.is_failure:
            return self._fail(result.error)
        return result

    def _intercept(self, request: URLRequest) -> URLRequest:
        return apply_interceptors(self._interceptors, request)

    def _cache_key(self, request: URLRequest, namespace: str = DATA_NAMESPACE) -> Optional[str]:
        """Ключ кэша или None, если кэш выключен."""
        if not self._config.cache.enabled:
            return None
        return make_cache_key(request, self._config.cache.key_strategy, namespace)

    def _download_cache_key(self, request: URLRequest) -> Optional[str]:
        return self._cache_key(request, DOWNLOAD_NAMESPACE)

    def _cached_response(self, key: Optional[str]) -> Optional[NetworkResponse]:
        if key is None:
            return None
        cached = self._cache.get(key)
        if not isinstance(cached, NetworkResponse):
            return None
        if self._logger is not None:
            self._logger.log_event("Success", "Cached Response", cache_key=key)
            self._logger.log_response(cached)
        return cached

    def _cached_download(self, key: Optional[str]) -> Optional[Path]:
        if key is None:
            return None
        cached = self._cache.get(key)
        if not isinstance(cached, CachedDownloadLocation):
            return None
        if not cached.exists:
            self._cache.remove(key)
            return None
        if self._logger is not None:
            self._logger.log_event("Success", "Cached Download", path=str(cached.path))
        return cached.path

    def _store(self, key: Optional[str], value: object) -> None:
        if key is not None:
            self._cache.put(key, value)

    def _complete(self, result: TransportResult) -> Result[NetworkResponse]:
        if result.error is not None:
            return Failure(ErrorHandler.handle(result.error, result.data, result.response))
        return handle_response(result.data, result.response, self._logger)

    def _complete_download(self, result: TransportResult) -> Result[Path]:
        if result.error is not None:
            return Failure(ErrorHandler.handle(result.error, result.data, result.response))
        return handle_download_response(result.location, result.response, result.data, self._logger)

    @staticmethod
    def _temp_destination(url: str) -> Path:
        suffix = Path(urlparse(url).path).suffix
        fd, name = tempfile.mkstemp(prefix="networker-", suffix=suffix)
        os.close(fd)  # файл откроет транспорт
        return Path(name)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # STATE MACHINE HELPERS
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def _dispatched(self, handle: _TaskHandle, request: URLRequest) -> float:
        """Переход в DISPATCHED. Возвращает момент старта попытки."""
        handle.transition(TaskState.DISPATCHED)
        if self._logger is not None:
            self._logger.log_request(request, attempt=handle.attempts)
        return time.monotonic()

    def _report_time(self, started: float) -> None:
        if self._logger is None:
            return
        duration = time.monotonic() - started
        self._logger.log_event(
            "Time Report",
            f"Request completed in {duration:.3f} seconds.",
            duration_ms=round(duration * 1000, 2),
        )

    def _succeeded(self, handle: _TaskHandle, result: Success) -> Success:
        handle.transition(TaskState.SUCCEEDED)
        return result

    def _retrying(self, handle: _TaskHandle, error: NetworkError, attempt: int) -> None:
        handle.transition(TaskState.RETRYING)
        if self._logger is not None:
            self._logger.log_retry(
                error,
                attempt=attempt,
                max_retries=self._config.retry.max_retries,
                delay=self._config.retry.delay,
            )

    def _cancelled(self, handle: _TaskHandle) -> Failure:
        handle.transition(TaskState.CANCELLED)
        return self._fail(NetworkError(ErrorCase.request_canceled()))

    def _failed(self, handle: _TaskHandle, error: NetworkError) -> Failure:
        handle.transition(TaskState.FAILED)
        return self._fail(error)

    def _fail(self, error: NetworkError) -> Failure:
        """Финальная ошибка: логируется один раз."""
        if self._logger is not None:
            self._logger.log_error(error)
        return Failure(error)

    @staticmethod
    def _notify(completion: Optional[Completion], result: Result) -> Result:
        if completion is not None:
            completion(result)
        return result

    @staticmethod
    def _discard(path: Union[Path, None]) -> None:
        if path is not None:
            path.unlink(missing_ok=True)
