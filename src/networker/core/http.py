"""
HTTP словарь: методы и статус-коды.

Чистые lookup-таблицы без состояния.
"""

from enum import Enum, IntEnum
from typing import Optional


class HTTPMethod(str, Enum):
    """HTTP методы, поддерживаемые Networker."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class HTTPStatusCode(IntEnum):
    """
    Известные HTTP статус-коды.

    Предикаты классификации работают с любым int, не только с членами enum.

    Examples:
        >>> HTTPStatusCode.is_successful(204)
        True
        >>> HTTPStatusCode.from_code(404)
        <HTTPStatusCode.NOT_FOUND: 404>
        >>> HTTPStatusCode.from_code(418) is None
        True
    """
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NO_CONTENT = 204

    MULTIPLE_CHOICES = 300
    MOVED_PERMANENTLY = 301
    FOUND = 302
    SEE_OTHER = 303
    NOT_MODIFIED = 304
    USE_PROXY = 305
    TEMPORARY_REDIRECT = 307
    PERMANENT_REDIRECT = 308

    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404

    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503

    @staticmethod
    def is_successful(code: int) -> bool:
        """2xx."""
        return 200 <= code <= 299

    @staticmethod
    def is_redirection(code: int) -> bool:
        """3xx."""
        return 300 <= code <= 399

    @staticmethod
    def is_client_error(code: int) -> bool:
        """4xx."""
        return 400 <= code <= 499

    @staticmethod
    def is_server_error(code: int) -> bool:
        """5xx."""
        return 500 <= code <= 599

    @classmethod
    def from_code(cls, code: int) -> Optional["HTTPStatusCode"]:
        """
        Найти именованный статус по числовому коду.

        Args:
            code: Числовой статус

        Returns:
            Член enum или None если код неизвестен
        """
        try:
            return cls(code)
        except ValueError:
            return None
