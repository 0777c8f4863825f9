"""
Блокирующий Networker на базе requests.

Каждый вызов выполняется в потоке вызывающего кода и возвращает Result.
Отменить вызов можно из другого потока через cancel_task(task_id).
"""

from pathlib import Path
from typing import Callable, Iterable, Optional, Type, TypeVar, Union

from .base import BaseNetworker, Completion
from .cache import ResponseCache
from .commons import decode_response
from .config import NetworkerConfig
from .logging import NetworkLogger, correlation_scope
from .models import CachedDownloadLocation, NetworkRequest, NetworkResponse, Response, URLRequest
from .result import Result, Success
from .retry_engine import RetryEngine
from .tasks import NetworkTask
from .transport import RequestsTransport, Transport, TransportResult
from ..interceptors import RequestInterceptor

T = TypeVar("T")

Dispatch = Callable[[URLRequest, NetworkTask], TransportResult]


class Networker(BaseNetworker):
    """
    HTTP клиент с retry, кэшем, интерцепторами и классификацией ошибок.

    Ни один публичный метод не выбрасывает NetworkError: результат всегда
    Success или Failure.

    Example:
        >>> with Networker(NetworkerConfig.create(base_url="https://api.example.com")) as networker:
        ...     result = networker.perform_decoded(NetworkRequest("/users/1"), User)
        ...     if result.is_success:
        ...         print(result.value.value.name)
        ...     else:
        ...         print(result.error.detailed_description)

        >>> # Отмена из другого потока
        >>> threading.Thread(target=networker.perform, args=(request,),
        ...                  kwargs={"task_id": "report"}).start()
        >>> networker.cancel_task("report")
    """

    def __init__(
        self,
        config: Optional[NetworkerConfig] = None,
        *,
        transport: Optional[Transport] = None,
        cache: Optional[ResponseCache] = None,
        logger: Optional[NetworkLogger] = None,
        interceptors: Optional[Iterable[RequestInterceptor]] = None,
    ):
        """
        Args:
            config: Конфигурация
            transport: Транспорт (по умолчанию RequestsTransport)
            cache: Кэш ответов
            logger: Логгер
            interceptors: Интерцепторы запросов
        """
        super().__init__(config, cache=cache, logger=logger, interceptors=interceptors)
        self._transport = transport or RequestsTransport(self._config)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        """Отменить выполняющиеся вызовы и закрыть транспорт."""
        self.cancel_all_tasks()
        self._transport.close()
        if self._logger is not None:
            self._logger.close()

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # PUBLIC API
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def perform(
        self,
        request: NetworkRequest,
        *,
        task_id: Optional[str] = None,
        completion: Optional[Completion] = None,
    ) -> Result[NetworkResponse]:
        """
        Выполнить запрос.

        Args:
            request: Описание запроса
            task_id: Id для cancel_task (по умолчанию генерируется)
            completion: Callback, который получит итоговый Result

        Returns:
            Success(NetworkResponse) или Failure(NetworkError)
        """
        return self._notify(completion, self._perform_data(request, task_id))

    def perform_decoded(
        self,
        request: NetworkRequest,
        model: Type[T],
        *,
        task_id: Optional[str] = None,
        completion: Optional[Completion] = None,
    ) -> Result[Response[T]]:
        """
        Выполнить запрос и декодировать JSON тело в model.

        Повторяется только сетевой вызов; ошибка декодирования финальная.
        """
        raw = self._perform_data(request, task_id)
        if raw.is_failure:
            return self._notify(completion, raw)
        return self._notify(completion, decode_response(raw.value, model, self._logger))

    def perform_upload(
        self,
        request: NetworkRequest,
        data: bytes,
        *,
        task_id: Optional[str] = None,
        completion: Optional[Completion] = None,
    ) -> Result[NetworkResponse]:
        """
        Отправить data как тело запроса. Ответы загрузок не кешируются.
        """
        if self.is_locked:
            return self._notify(completion, self._locked_failure())

        prepared = self._prepare(request)
        if prepared.is_failure:
            return self._notify(completion, prepared)

        def dispatch(url_request: URLRequest, handle: NetworkTask) -> TransportResult:
            return self._transport.upload(url_request, data, handle.cancel_event)

        result = self._execute(prepared.value, task_id, dispatch, self._complete)
        return self._notify(completion, result)

    def perform_download(
        self,
        request: NetworkRequest,
        destination: Optional[Union[str, Path]] = None,
        *,
        task_id: Optional[str] = None,
        completion: Optional[Completion] = None,
    ) -> Result[Path]:
        """
        Загрузить тело ответа в файл.

        Args:
            request: Описание запроса
            destination: Путь к файлу (по умолчанию временный файл)
            task_id: Id для cancel_task
            completion: Callback

        Returns:
            Success(Path) или Failure(NetworkError)
        """
        if self.is_locked:
            return self._notify(completion, self._locked_failure())

        prepared = self._prepare(request)
        if prepared.is_failure:
            return self._notify(completion, prepared)
        url_request = prepared.value

        key = self._download_cache_key(url_request)
        cached = self._cached_download(key)
        if cached is not None:
            return self._notify(completion, Success(cached))

        temporary = destination is None
        target = self._temp_destination(url_request.url) if temporary else Path(destination)

        def dispatch(req: URLRequest, handle: NetworkTask) -> TransportResult:
            return self._transport.download(req, target, handle.cancel_event)

        result = self._execute(url_request, task_id, dispatch, self._complete_download)

        if result.is_success:
            self._store(key, CachedDownloadLocation(path=result.value, url=url_request.url))
        elif temporary:
            self._discard(target)
        return self._notify(completion, result)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # EXECUTION
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def _perform_data(self, request: NetworkRequest, task_id: Optional[str]) -> Result[NetworkResponse]:
        if self.is_locked:
            return self._locked_failure()

        prepared = self._prepare(request)
        if prepared.is_failure:
            return prepared
        url_request = prepared.value

        key = self._cache_key(url_request)
        cached = self._cached_response(key)
        if cached is not None:
            return Success(cached)

        def dispatch(req: URLRequest, handle: NetworkTask) -> TransportResult:
            return self._transport.send(req, handle.cancel_event)

        result = self._execute(url_request, task_id, dispatch, self._complete)
        if result.is_success:
            self._store(key, result.value)
        return result

    def _execute(
        self,
        url_request: URLRequest,
        task_id: Optional[str],
        dispatch: Dispatch,
        complete: Callable[[TransportResult], Result],
    ) -> Result:
        """Зарегистрировать вызов, выполнить его и снять с учёта."""
        handle = NetworkTask(task_id)
        self._registry.register(handle)
        try:
            with correlation_scope(handle.id):
                return self._run(handle, self._intercept(url_request), dispatch, complete)
        finally:
            self._registry.discard(handle)

    def _run(
        self,
        handle: NetworkTask,
        request: URLRequest,
        dispatch: Dispatch,
        complete: Callable[[TransportResult], Result],
    ) -> Result:
        """
        Цикл DISPATCHED -> RETRYING -> DISPATCHED.

        Попытки строго последовательны; пауза перед повтором прерывается
        отменой задачи.
        """
        engine = RetryEngine(self._config.retry)

        while True:
            started = self._dispatched(handle, request)
            result = complete(dispatch(request, handle))
            self._report_time(started)

            if handle.cancelled:
                return self._cancelled(handle)

            if result.is_success:
                return self._succeeded(handle, result)

            if not engine.should_retry(result.error):
                return self._failed(handle, result.error)

            self._retrying(handle, result.error, engine.attempt + 1)
            if not engine.wait(handle.cancel_event):
                return self._cancelled(handle)
            engine.increment()
