"""
Value objects запросов и ответов.

- NetworkRequest: что хочет отправить вызывающий код
- URLRequest: собранный транспортный запрос (его мутируют интерцепторы)
- ResponseInfo / NetworkResponse: сырой ответ
- Response[T]: декодированный ответ
- CachedDownloadLocation: закешированный результат загрузки файла
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Generic, Mapping, Optional, Tuple, TypeVar, Union

from .http import HTTPMethod, HTTPStatusCode

T = TypeVar("T")

TimeoutValue = Union[float, Tuple[float, float]]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# REQUEST
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class NetworkRequest:
    """
    Неизменяемое описание запроса.

    Args:
        url: Абсолютный URL или путь относительно NetworkerConfig.base_url
        method: HTTP метод (HTTPMethod или строка)
        headers: Заголовки запроса
        body: bytes отправляются как есть, всё остальное кодируется в JSON
        timeout: Таймаут для этого запроса (переопределяет конфиг)

    Examples:
        >>> NetworkRequest("https://api.example.com/users")
        >>> NetworkRequest(
        ...     "/users",
        ...     method="POST",
        ...     headers={"Content-Type": "application/json"},
        ...     body={"name": "Alice"},
        ... )
    """
    url: Optional[str]
    method: HTTPMethod = HTTPMethod.GET
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    body: Any = None
    timeout: Optional[TimeoutValue] = None

    def __post_init__(self):
        """Нормализация метода и заморозка заголовков."""
        if not isinstance(self.method, HTTPMethod):
            object.__setattr__(self, 'method', HTTPMethod(str(self.method).upper()))
        if self.headers is None:
            object.__setattr__(self, 'headers', MappingProxyType({}))
        elif isinstance(self.headers, dict):
            object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers)))


@dataclass
class URLRequest:
    """
    Транспортный запрос, готовый к отправке.

    Мутабельный: интерцепторы меняют заголовки и тело на месте.
    """
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    timeout: Optional[TimeoutValue] = None

    def set_header(self, name: str, value: str) -> None:
        """Установить заголовок, заменив существующий без учёта регистра."""
        self.remove_header(name)
        self.headers[name] = value

    def remove_header(self, name: str) -> None:
        for key in [k for k in self.headers if k.lower() == name.lower()]:
            del self.headers[key]

    def get_header(self, name: str) -> Optional[str]:
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RESPONSE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class ResponseInfo:
    """
    Метаданные ответа: статус, заголовки, итоговый URL.

    Строится из requests.Response или httpx.Response.
    """
    status_code: int
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    url: str = ""
    reason: str = ""

    def __post_init__(self):
        if isinstance(self.headers, dict):
            object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers)))

    @classmethod
    def from_requests(cls, response) -> "ResponseInfo":
        """Из requests.Response."""
        return cls(
            status_code=response.status_code,
            headers=dict(response.headers),
            url=response.url or "",
            reason=response.reason or "",
        )

    @classmethod
    def from_httpx(cls, response) -> "ResponseInfo":
        """Из httpx.Response."""
        return cls(
            status_code=response.status_code,
            headers=dict(response.headers),
            url=str(response.url),
            reason=response.reason_phrase or "",
        )

    @property
    def status(self) -> Optional[HTTPStatusCode]:
        """Именованный статус (None для неизвестных кодов)."""
        return HTTPStatusCode.from_code(self.status_code)

    @property
    def is_successful(self) -> bool:
        return HTTPStatusCode.is_successful(self.status_code)


@dataclass(frozen=True)
class NetworkResponse:
    """Сырой ответ: тело + метаданные."""
    data: bytes
    response: ResponseInfo

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def headers(self) -> Mapping[str, str]:
        return self.response.headers

    @property
    def url(self) -> str:
        return self.response.url

    @property
    def text(self) -> str:
        return self.data.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.data)


@dataclass(frozen=True)
class Response(Generic[T]):
    """
    Декодированный ответ.

    Attributes:
        value: Результат декодирования тела в модель
        raw: Исходный NetworkResponse
    """
    value: T
    raw: NetworkResponse

    @property
    def status_code(self) -> int:
        return self.raw.status_code


@dataclass(frozen=True)
class CachedDownloadLocation:
    """Закешированная загрузка: путь к файлу, без тела."""
    path: Path
    url: str

    @property
    def exists(self) -> bool:
        return self.path.exists()
