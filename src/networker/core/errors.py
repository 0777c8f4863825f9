"""
Таксономия ошибок Networker.

Все сбои представлены одним типом NetworkError, который несёт ErrorCase
(вид ошибки + сообщение или исходное исключение) и опциональное сообщение
от API, извлечённое из тела ответа.

Example:
    >>> error = NetworkError(ErrorCase.bad_request("Invalid parameters"),
    ...                      api_error_message="Parameter 'id' is missing.")
    >>> error.detailed_description
    "Bad Request: Invalid parameters - Parameter 'id' is missing."
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class UnknownError(Exception):
    """
    Заглушка для ситуаций без распознаваемого исключения.

    Attributes:
        message: Описание
        code: Статус-код или -1
    """

    def __init__(self, message: str, code: int = -1):
        super().__init__(message)
        self.message = message
        self.code = code

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnknownError):
            return NotImplemented
        return (self.message, self.code) == (other.message, other.code)

    def __hash__(self) -> int:
        return hash((self.message, self.code))

    def __repr__(self) -> str:
        return f"UnknownError(message={self.message!r}, code={self.code})"


class RequestCancelledError(Exception):
    """Транспорт прервал запрос, потому что задачу отменили."""

    def __init__(self, url: Optional[str] = None):
        self.url = url
        super().__init__(f"Request to {url} was cancelled" if url else "Request was cancelled")


class ErrorKind(str, Enum):
    """Виды ошибок."""
    INVALID_URL = "invalid_url"
    NO_DATA = "no_data"
    TIME_OUT = "time_out"
    LOCKED = "locked"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    PARSING_ERROR = "parsing_error"
    REQUEST_CANCELED = "request_canceled"
    DECODING_ERROR = "decoding_error"
    NETWORK_ERROR = "network_error"
    UNKNOWN = "unknown"

    MULTIPLE_CHOICES = "multiple_choices"
    MOVED_PERMANENTLY = "moved_permanently"
    FOUND = "found"
    SEE_OTHER = "see_other"
    NOT_MODIFIED = "not_modified"
    USE_PROXY = "use_proxy"
    TEMPORARY_REDIRECT = "temporary_redirect"
    PERMANENT_REDIRECT = "permanent_redirect"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# DESCRIPTIONS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

_FIXED_DESCRIPTIONS = {
    ErrorKind.INVALID_URL: "The URL provided was invalid.",
    ErrorKind.NO_DATA: "No data was returned from the server.",
    ErrorKind.TIME_OUT: "The request timed out.",
    ErrorKind.LOCKED: "The networker is locked.",
}

# Виды с текстовым payload
_MESSAGE_PREFIXES = {
    ErrorKind.BAD_REQUEST: "Bad Request",
    ErrorKind.UNAUTHORIZED: "Unauthorized",
    ErrorKind.FORBIDDEN: "Forbidden",
    ErrorKind.NOT_FOUND: "Not Found",
    ErrorKind.SERVER_ERROR: "Server Error",
    ErrorKind.PARSING_ERROR: "Parsing Error",
    ErrorKind.REQUEST_CANCELED: "Request Canceled",
    ErrorKind.DECODING_ERROR: "Decoding Error",
    ErrorKind.MULTIPLE_CHOICES: "Multiple Choices",
    ErrorKind.MOVED_PERMANENTLY: "Moved Permanently",
    ErrorKind.FOUND: "Found",
    ErrorKind.SEE_OTHER: "See Other",
    ErrorKind.NOT_MODIFIED: "Not Modified",
    ErrorKind.USE_PROXY: "Use Proxy",
    ErrorKind.TEMPORARY_REDIRECT: "Temporary Redirect",
    ErrorKind.PERMANENT_REDIRECT: "Permanent Redirect",
}

# Виды, оборачивающие исключение
_ERROR_PREFIXES = {
    ErrorKind.NETWORK_ERROR: "Network Error",
    ErrorKind.UNKNOWN: "Unknown Error",
}

REDIRECTION_KINDS = frozenset({
    ErrorKind.MULTIPLE_CHOICES,
    ErrorKind.MOVED_PERMANENTLY,
    ErrorKind.FOUND,
    ErrorKind.SEE_OTHER,
    ErrorKind.NOT_MODIFIED,
    ErrorKind.USE_PROXY,
    ErrorKind.TEMPORARY_REDIRECT,
    ErrorKind.PERMANENT_REDIRECT,
})

CLIENT_ERROR_KINDS = frozenset({
    ErrorKind.BAD_REQUEST,
    ErrorKind.UNAUTHORIZED,
    ErrorKind.FORBIDDEN,
    ErrorKind.NOT_FOUND,
})


@dataclass(frozen=True)
class ErrorCase:
    """
    Один вариант ошибки: вид + payload.

    Для текстовых видов payload лежит в message, для NETWORK_ERROR и
    UNKNOWN в error. Создавайте через фабричные методы.

    Examples:
        >>> ErrorCase.not_found("The requested resource could not be found.").description
        'Not Found: The requested resource could not be found.'
        >>> ErrorCase.time_out().description
        'The request timed out.'
    """
    kind: ErrorKind
    message: Optional[str] = None
    error: Optional[BaseException] = None

    def __post_init__(self):
        """Валидация payload."""
        if self.kind in _MESSAGE_PREFIXES and self.message is None:
            raise ValueError(f"{self.kind.value} requires a message")
        if self.kind in _ERROR_PREFIXES and self.error is None:
            raise ValueError(f"{self.kind.value} requires an error")

    @property
    def description(self) -> str:
        """Человекочитаемое описание варианта."""
        if self.kind in _FIXED_DESCRIPTIONS:
            return _FIXED_DESCRIPTIONS[self.kind]
        if self.kind in _MESSAGE_PREFIXES:
            return f"{_MESSAGE_PREFIXES[self.kind]}: {self.message}"
        return f"{_ERROR_PREFIXES[self.kind]}: {self.error}"

    @property
    def is_redirection(self) -> bool:
        return self.kind in REDIRECTION_KINDS

    # Фабрики

    @classmethod
    def invalid_url(cls) -> "ErrorCase":
        return cls(ErrorKind.INVALID_URL)

    @classmethod
    def no_data(cls) -> "ErrorCase":
        return cls(ErrorKind.NO_DATA)

    @classmethod
    def time_out(cls) -> "ErrorCase":
        return cls(ErrorKind.TIME_OUT)

    @classmethod
    def locked(cls) -> "ErrorCase":
        return cls(ErrorKind.LOCKED)

    @classmethod
    def bad_request(cls, message: str) -> "ErrorCase":
        return cls(ErrorKind.BAD_REQUEST, message=message)

    @classmethod
    def unauthorized(cls, message: str) -> "ErrorCase":
        return cls(ErrorKind.UNAUTHORIZED, message=message)

    @classmethod
    def forbidden(cls, message: str) -> "ErrorCase":
        return cls(ErrorKind.FORBIDDEN, message=message)

    @classmethod
    def not_found(cls, message: str) -> "ErrorCase":
        return cls(ErrorKind.NOT_FOUND, message=message)

    @classmethod
    def server_error(cls, message: str) -> "ErrorCase":
        return cls(ErrorKind.SERVER_ERROR, message=message)

    @classmethod
    def parsing_error(cls, message: str) -> "ErrorCase":
        return cls(ErrorKind.PARSING_ERROR, message=message)

    @classmethod
    def request_canceled(cls, message: str = "The request was canceled.") -> "ErrorCase":
        return cls(ErrorKind.REQUEST_CANCELED, message=message)

    @classmethod
    def decoding_error(cls, message: str) -> "ErrorCase":
        return cls(ErrorKind.DECODING_ERROR, message=message)

    @classmethod
    def network_error(cls, error: BaseException) -> "ErrorCase":
        return cls(ErrorKind.NETWORK_ERROR, error=error)

    @classmethod
    def unknown(cls, error: Optional[BaseException] = None) -> "ErrorCase":
        return cls(ErrorKind.UNKNOWN, error=error or UnknownError("Unknown error occurred."))

    @classmethod
    def redirection(cls, kind: ErrorKind, message: str) -> "ErrorCase":
        """Любой из 3xx видов."""
        if kind not in REDIRECTION_KINDS:
            raise ValueError(f"{kind.value} is not a redirection kind")
        return cls(kind, message=message)


class NetworkError(Exception):
    """
    Ошибка, которую получает вызывающий код.

    Наследуется от Exception только ради Result.unwrap(); публичные методы
    Networker никогда её не выбрасывают.

    Args:
        error_case: Вариант ошибки
        api_error_message: Сообщение из тела ответа (если есть)
        status_code: HTTP статус, если ответ был получен
    """

    def __init__(
        self,
        error_case: ErrorCase,
        api_error_message: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.error_case = error_case
        self.api_error_message = api_error_message
        self.status_code = status_code
        super().__init__(self.detailed_description)

    @property
    def kind(self) -> ErrorKind:
        return self.error_case.kind

    @property
    def description(self) -> str:
        return self.error_case.description

    @property
    def detailed_description(self) -> str:
        """Описание варианта + сообщение API через " - "."""
        if self.api_error_message:
            return f"{self.error_case.description} - {self.api_error_message}"
        return self.error_case.description

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NetworkError):
            return NotImplemented
        return (
            self.error_case == other.error_case
            and self.api_error_message == other.api_error_message
            and self.status_code == other.status_code
        )

    def __hash__(self) -> int:
        return hash((self.error_case, self.api_error_message, self.status_code))

    def __repr__(self) -> str:
        return (
            f"NetworkError(kind={self.kind.value!r}, "
            f"detailed_description={self.detailed_description!r})"
        )
