"""
Транспорты: адаптеры requests (блокирующий) и httpx (asyncio).

Транспорт только обменивается байтами. Исключения не выбрасываются, а
возвращаются в TransportResult.error для классификации ErrorHandler.
"""

import logging
import os
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import aiofiles
import httpx
import requests
from requests.adapters import HTTPAdapter

from .config import NetworkerConfig
from .errors import RequestCancelledError
from .http import HTTPStatusCode
from .models import ResponseInfo, TimeoutValue, URLRequest
from .session_manager import ThreadSafeSessionManager

logger = logging.getLogger(__name__)


@dataclass
class TransportResult:
    """
    Итог одного обмена с сервером.

    Attributes:
        data: Тело ответа (для загрузки: тело только при не-2xx)
        response: Метаданные ответа, если он получен
        error: Исключение транспорта
        location: Путь к загруженному файлу
    """
    data: Optional[bytes] = None
    response: Optional[ResponseInfo] = None
    error: Optional[BaseException] = None
    location: Optional[Path] = None


def _remove_partial(path: Path) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BLOCKING TRANSPORT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class Transport(ABC):
    """Интерфейс блокирующего транспорта."""

    @abstractmethod
    def send(self, request: URLRequest, cancel_event: Optional[threading.Event] = None) -> TransportResult:
        """Отправить запрос и прочитать тело."""

    @abstractmethod
    def upload(
        self,
        request: URLRequest,
        data: bytes,
        cancel_event: Optional[threading.Event] = None,
    ) -> TransportResult:
        """Отправить data как тело запроса."""

    @abstractmethod
    def download(
        self,
        request: URLRequest,
        destination: Path,
        cancel_event: Optional[threading.Event] = None,
    ) -> TransportResult:
        """Записать тело ответа в destination."""

    def close(self) -> None:
        """Освободить ресурсы."""


class RequestsTransport(Transport):
    """
    Транспорт на requests.

    Тело читается потоком по chunk_size байт; между чанками проверяется
    cancel_event, так что отмена прерывает передачу.

    Example:
        >>> transport = RequestsTransport(NetworkerConfig())
        >>> result = transport.send(URLRequest("GET", "https://api.example.com"))
        >>> result.response.status_code
        200
    """

    def __init__(
        self,
        config: Optional[NetworkerConfig] = None,
        session_factory: Optional[Callable[[], requests.Session]] = None,
    ):
        self._config = config or NetworkerConfig()
        self._sessions = ThreadSafeSessionManager(session_factory or self._create_session)

    def _create_session(self) -> requests.Session:
        """Create configured session."""
        session = requests.Session()

        adapter = HTTPAdapter(
            pool_connections=self._config.pool.pool_connections,
            pool_maxsize=self._config.pool.pool_maxsize,
            pool_block=self._config.pool.pool_block,
            max_retries=0  # Повторы делает Networker
        )
        session.mount('http://', adapter)
        session.mount('https://', adapter)
        session.max_redirects = self._config.pool.max_redirects
        return session

    @staticmethod
    def _check_cancelled(request: URLRequest, cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise RequestCancelledError(request.url)

    def _open(self, request: URLRequest, body: Optional[bytes]) -> requests.Response:
        return self._sessions.get_session().request(
            method=request.method,
            url=request.url,
            headers=request.headers,
            data=body,
            timeout=request.timeout,
            verify=self._config.security.verify_ssl,
            allow_redirects=self._config.security.allow_redirects,
            stream=True,
        )

    def _read(self, response: requests.Response, request: URLRequest,
              cancel_event: Optional[threading.Event]) -> bytes:
        chunks = []
        for chunk in response.iter_content(chunk_size=self._config.chunk_size):
            self._check_cancelled(request, cancel_event)
            chunks.append(chunk)
        return b"".join(chunks)

    def _exchange(self, request: URLRequest, body: Optional[bytes],
                  cancel_event: Optional[threading.Event]) -> TransportResult:
        info = None
        try:
            self._check_cancelled(request, cancel_event)
            with self._open(request, body) as response:
                info = ResponseInfo.from_requests(response)
                data = self._read(response, request, cancel_event)
            return TransportResult(data=data, response=info)
        except (requests.RequestException, RequestCancelledError, OSError) as e:
            return TransportResult(response=info, error=e)

    def send(self, request: URLRequest, cancel_event: Optional[threading.Event] = None) -> TransportResult:
        return self._exchange(request, request.body, cancel_event)

    def upload(
        self,
        request: URLRequest,
        data: bytes,
        cancel_event: Optional[threading.Event] = None,
    ) -> TransportResult:
        return self._exchange(request, data, cancel_event)

    def download(
        self,
        request: URLRequest,
        destination: Path,
        cancel_event: Optional[threading.Event] = None,
    ) -> TransportResult:
        info = None
        try:
            self._check_cancelled(request, cancel_event)
            with self._open(request, request.body) as response:
                info = ResponseInfo.from_requests(response)

                # Тело ошибки нужно для api_error_message, в файл не пишем
                if not HTTPStatusCode.is_successful(info.status_code):
                    return TransportResult(data=self._read(response, request, cancel_event), response=info)

                destination.parent.mkdir(parents=True, exist_ok=True)
                try:
                    with open(destination, 'wb') as f:
                        for chunk in response.iter_content(chunk_size=self._config.chunk_size):
                            self._check_cancelled(request, cancel_event)
                            f.write(chunk)
                except BaseException:
                    _remove_partial(destination)
                    raise

            return TransportResult(response=info, location=destination)
        except (requests.RequestException, RequestCancelledError, OSError) as e:
            return TransportResult(response=info, error=e)

    def close(self) -> None:
        self._sessions.close_all()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ASYNC TRANSPORT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

_HTTPX_ERRORS = (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, OSError)


class AsyncTransport(ABC):
    """Интерфейс asyncio транспорта. Отмена через asyncio.Task.cancel()."""

    @abstractmethod
    async def send(self, request: URLRequest) -> TransportResult:
        """Отправить запрос и прочитать тело."""

    @abstractmethod
    async def upload(self, request: URLRequest, data: bytes) -> TransportResult:
        """Отправить data как тело запроса."""

    @abstractmethod
    async def download(self, request: URLRequest, destination: Path) -> TransportResult:
        """Записать тело ответа в destination."""

    async def close(self) -> None:
        """Освободить ресурсы."""


class HTTPXTransport(AsyncTransport):
    """
    Транспорт на httpx.AsyncClient.

    Клиент создаётся лениво, либо передаётся готовый (тогда транспорт его
    не закрывает).
    """

    def __init__(self, config: Optional[NetworkerConfig] = None, client: Optional[httpx.AsyncClient] = None):
        self._config = config or NetworkerConfig()
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=self._config.security.verify_ssl,
                follow_redirects=self._config.security.allow_redirects,
                max_redirects=self._config.pool.max_redirects,
                limits=httpx.Limits(
                    max_connections=self._config.pool.pool_maxsize,
                    max_keepalive_connections=self._config.pool.pool_connections,
                ),
            )
        return self._client

    def _timeout(self, value: Optional[TimeoutValue]) -> httpx.Timeout:
        if value is None:
            value = self._config.timeout.as_tuple()
        if isinstance(value, tuple):
            connect, read = value
            return httpx.Timeout(connect=connect, read=read, write=read, pool=self._config.timeout.total)
        return httpx.Timeout(value)

    async def _exchange(self, request: URLRequest, body: Optional[bytes]) -> TransportResult:
        try:
            response = await self._get_client().request(
                request.method,
                request.url,
                headers=request.headers,
                content=body,
                timeout=self._timeout(request.timeout),
            )
        except _HTTPX_ERRORS as e:
            return TransportResult(error=e)
        return TransportResult(data=response.content, response=ResponseInfo.from_httpx(response))

    async def send(self, request: URLRequest) -> TransportResult:
        return await self._exchange(request, request.body)

    async def upload(self, request: URLRequest, data: bytes) -> TransportResult:
        return await self._exchange(request, data)

    async def download(self, request: URLRequest, destination: Path) -> TransportResult:
        info = None
        try:
            async with self._get_client().stream(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body,
                timeout=self._timeout(request.timeout),
            ) as response:
                info = ResponseInfo.from_httpx(response)

                if not HTTPStatusCode.is_successful(info.status_code):
                    return TransportResult(data=await response.aread(), response=info)

                destination.parent.mkdir(parents=True, exist_ok=True)
                try:
                    async with aiofiles.open(destination, 'wb') as f:
                        async for chunk in response.aiter_bytes(self._config.chunk_size):
                            await f.write(chunk)
                except BaseException:
                    _remove_partial(destination)
                    raise

            return TransportResult(response=info, location=destination)
        except _HTTPX_ERRORS as e:
            return TransportResult(response=info, error=e)

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
