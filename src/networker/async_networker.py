# src/networker/async_networker.py
"""
Асинхронный Networker на базе httpx.

Тот же конвейер, что и у Networker, но каждый вызов выполняется во
внутренней asyncio.Task, которую можно отменить через cancel_task().
"""

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Iterable, Optional, Type, TypeVar, Union

from .core.base import BaseNetworker, Completion
from .core.cache import ResponseCache
from .core.commons import decode_response
from .core.config import NetworkerConfig
from .core.logging import NetworkLogger, correlation_scope
from .core.models import CachedDownloadLocation, NetworkRequest, NetworkResponse, Response, URLRequest
from .core.result import Result, Success
from .core.retry_engine import RetryEngine
from .core.tasks import AsyncNetworkTask
from .core.transport import AsyncTransport, HTTPXTransport, TransportResult
from .interceptors import RequestInterceptor

T = TypeVar("T")

AsyncDispatch = Callable[[URLRequest], Awaitable[TransportResult]]


class AsyncNetworker(BaseNetworker):
    """
    Асинхронный HTTP клиент с retry, кэшем, интерцепторами и классификацией ошибок.

    Example:
        >>> async with AsyncNetworker(NetworkerConfig.create(base_url="https://api.example.com")) as networker:
        ...     result = await networker.perform(NetworkRequest("/users"))
        ...     print(result.unwrap().json())

        >>> # Отмена другой корутиной
        >>> call = asyncio.create_task(networker.perform(request, task_id="slow"))
        >>> networker.cancel_task("slow")
        >>> (await call).error.kind
        <ErrorKind.REQUEST_CANCELED: 'request_canceled'>

    Отмена через cancel_task() превращается в Failure(RequestCanceled).
    Отмена самой корутины вызывающим кодом пробрасывает CancelledError.
    cancel_task() вызывается из потока event loop.
    """

    def __init__(
        self,
        config: Optional[NetworkerConfig] = None,
        *,
        transport: Optional[AsyncTransport] = None,
        cache: Optional[ResponseCache] = None,
        logger: Optional[NetworkLogger] = None,
        interceptors: Optional[Iterable[RequestInterceptor]] = None,
    ):
        """
        Args:
            config: Конфигурация
            transport: Транспорт (по умолчанию HTTPXTransport)
            cache: Кэш ответов
            logger: Логгер
            interceptors: Интерцепторы запросов
        """
        super().__init__(config, cache=cache, logger=logger, interceptors=interceptors)
        self._transport = transport or HTTPXTransport(self._config)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    async def close(self) -> None:
        """Отменить выполняющиеся вызовы и закрыть транспорт."""
        self.cancel_all_tasks()
        await self._transport.close()
        if self._logger is not None:
            self._logger.close()

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # PUBLIC API
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    async def perform(
        self,
        request: NetworkRequest,
        *,
        task_id: Optional[str] = None,
        completion: Optional[Completion] = None,
    ) -> Result[NetworkResponse]:
        """Выполнить запрос. См. Networker.perform."""
        return self._notify(completion, await self._perform_data(request, task_id))

    async def perform_decoded(
        self,
        request: NetworkRequest,
        model: Type[T],
        *,
        task_id: Optional[str] = None,
        completion: Optional[Completion] = None,
    ) -> Result[Response[T]]:
        """Выполнить запрос и декодировать JSON тело в model."""
        raw = await self._perform_data(request, task_id)
        if raw.is_failure:
            return self._notify(completion, raw)
        return self._notify(completion, decode_response(raw.value, model, self._logger))

    async def perform_upload(
        self,
        request: NetworkRequest,
        data: bytes,
        *,
        task_id: Optional[str] = None,
        completion: Optional[Completion] = None,
    ) -> Result[NetworkResponse]:
        """Отправить data как тело запроса. Ответы не кешируются."""
        if self.is_locked:
            return self._notify(completion, self._locked_failure())

        prepared = self._prepare(request)
        if prepared.is_failure:
            return self._notify(completion, prepared)

        async def dispatch(url_request: URLRequest) -> TransportResult:
            return await self._transport.upload(url_request, data)

        result = await self._execute(prepared.value, task_id, dispatch, self._complete)
        return self._notify(completion, result)

    async def perform_download(
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

        async def dispatch(req: URLRequest) -> TransportResult:
            return await self._transport.download(req, target)

        try:
            result = await self._execute(url_request, task_id, dispatch, self._complete_download)
        except asyncio.CancelledError:
            if temporary:
                self._discard(target)
            raise

        if result.is_success:
            self._store(key, CachedDownloadLocation(path=result.value, url=url_request.url))
        elif temporary:
            self._discard(target)
        return self._notify(completion, result)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # EXECUTION
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    async def _perform_data(self, request: NetworkRequest, task_id: Optional[str]) -> Result[NetworkResponse]:
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

        async def dispatch(req: URLRequest) -> TransportResult:
            return await self._transport.send(req)

        result = await self._execute(url_request, task_id, dispatch, self._complete)
        if result.is_success:
            self._store(key, result.value)
        return result

    async def _execute(
        self,
        url_request: URLRequest,
        task_id: Optional[str],
        dispatch: AsyncDispatch,
        complete: Callable[[TransportResult], Result],
    ) -> Result:
        """
        Запустить вызов во внутренней задаче и дождаться её.

        CancelledError внутренней задачи превращается в Failure(RequestCanceled),
        только если отмену запросил реестр.
        """
        handle = AsyncNetworkTask(task_id)
        self._registry.register(handle)
        try:
            with correlation_scope(handle.id):
                request = self._intercept(url_request)
                handle.task = asyncio.ensure_future(self._run(handle, request, dispatch, complete))
                if handle.cancel_requested:
                    handle.task.cancel()

                try:
                    return await handle.task
                except asyncio.CancelledError:
                    if handle.cancel_requested:
                        return self._cancelled(handle)
                    handle.task.cancel()
                    raise
        finally:
            self._registry.discard(handle)

    async def _run(
        self,
        handle: AsyncNetworkTask,
        request: URLRequest,
        dispatch: AsyncDispatch,
        complete: Callable[[TransportResult], Result],
    ) -> Result:
        """Цикл DISPATCHED -> RETRYING -> DISPATCHED."""
        engine = RetryEngine(self._config.retry)

        while True:
            started = self._dispatched(handle, request)
            result = complete(await dispatch(request))
            self._report_time(started)

            if result.is_success:
                return self._succeeded(handle, result)

            if not engine.should_retry(result.error):
                return self._failed(handle, result.error)

            self._retrying(handle, result.error, engine.attempt + 1)
            await engine.async_wait()
            engine.increment()
