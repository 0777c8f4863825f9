"""
Классификатор ошибок.

Превращает исключение транспорта и/или HTTP статус + тело ответа в один
NetworkError. Чистая функция: не логирует и не выбрасывает.
"""

import asyncio
import builtins
import json
from typing import Any, Optional

import httpx
import requests
from pydantic import ValidationError

from .errors import (
    CLIENT_ERROR_KINDS,
    REDIRECTION_KINDS,
    ErrorCase,
    ErrorKind,
    NetworkError,
    RequestCancelledError,
    UnknownError,
)
from .http import HTTPStatusCode

_CLIENT_ERROR_TEXTS = {
    400: ErrorCase.bad_request("The request was malformed or contained invalid parameters."),
    401: ErrorCase.unauthorized("Authentication is required and has failed or has not yet been provided."),
    403: ErrorCase.forbidden("The server understood the request but refuses to authorize it."),
    404: ErrorCase.not_found("The requested resource could not be found."),
}

_SERVER_ERROR_TEXTS = {
    500: "The server encountered an internal error and was unable to complete your request.",
    501: "The server does not support the functionality required to fulfill the request.",
    502: "The server received an invalid response from the upstream server.",
    503: "The server is currently unable to handle the request due to temporary overload or maintenance.",
}

_REDIRECTION_TEXTS = {
    300: (ErrorKind.MULTIPLE_CHOICES, "Multiple choices available."),
    301: (ErrorKind.MOVED_PERMANENTLY, "The resource has been moved permanently."),
    302: (ErrorKind.FOUND, "The resource has been found at a different location."),
    303: (ErrorKind.SEE_OTHER, "See other resource."),
    304: (ErrorKind.NOT_MODIFIED, "The resource has not been modified."),
    305: (ErrorKind.USE_PROXY, "The resource is accessible only through a proxy."),
    307: (ErrorKind.TEMPORARY_REDIRECT, "The resource is temporarily located at a different location."),
    308: (ErrorKind.PERMANENT_REDIRECT, "The resource is permanently located at a different location."),
}

_TIMEOUT_ERRORS = (
    requests.exceptions.Timeout,
    httpx.TimeoutException,
    builtins.TimeoutError,
)

# Хост недоступен, соединение не установлено, URL не принят транспортом
_INVALID_URL_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.URLRequired,
    httpx.ConnectError,
    httpx.UnsupportedProtocol,
    httpx.InvalidURL,
)

_CANCEL_ERRORS = (RequestCancelledError, asyncio.CancelledError)

_TRANSPORT_ERRORS = (
    requests.exceptions.RequestException,
    httpx.HTTPError,
    httpx.StreamError,
    OSError,
)


class ErrorHandler:
    """
    Классификация ошибок Networker.

    Examples:
        >>> error = ErrorHandler.handle(response=ResponseInfo(status_code=404))
        >>> error.detailed_description
        'Not Found: The requested resource could not be found.'

        >>> error = ErrorHandler.handle(requests.exceptions.ReadTimeout())
        >>> error.kind
        <ErrorKind.TIME_OUT: 'time_out'>
    """

    @staticmethod
    def handle(
        error: Optional[BaseException] = None,
        data: Optional[bytes] = None,
        response: Any = None,
    ) -> NetworkError:
        """
        Классифицировать сбой.

        Приоритет: 4xx, 5xx, 3xx статус, затем исключение.

        Args:
            error: Исключение транспорта или декодера
            data: Тело ответа (становится api_error_message)
            response: ResponseInfo или любой объект с status_code

        Returns:
            NetworkError
        """
        api_message = ErrorHandler.api_error_message(data)
        status_code = getattr(response, 'status_code', None)

        if status_code is not None:
            error_case = ErrorHandler.classify_status(status_code)
            if error_case is not None:
                return NetworkError(error_case, api_message, status_code)

        return NetworkError(ErrorHandler.classify_exception(error), api_message, status_code)

    @staticmethod
    def classify_status(status_code: int) -> Optional[ErrorCase]:
        """
        Вариант ошибки по статус-коду.

        Returns:
            ErrorCase или None для 1xx/2xx и кодов вне диапазона
        """
        if HTTPStatusCode.is_client_error(status_code):
            if status_code in _CLIENT_ERROR_TEXTS:
                return _CLIENT_ERROR_TEXTS[status_code]
            return ErrorCase.unknown(
                UnknownError(f"Client error with status code {status_code}.", status_code)
            )

        if HTTPStatusCode.is_server_error(status_code):
            if status_code in _SERVER_ERROR_TEXTS:
                return ErrorCase.server_error(_SERVER_ERROR_TEXTS[status_code])
            return ErrorCase.unknown(
                UnknownError(f"Server error with status code {status_code}.", status_code)
            )

        if HTTPStatusCode.is_redirection(status_code):
            if status_code in _REDIRECTION_TEXTS:
                kind, message = _REDIRECTION_TEXTS[status_code]
                return ErrorCase.redirection(kind, message)
            return ErrorCase.unknown(
                UnknownError(f"Redirection with status code {status_code}.", status_code)
            )

        return None

    @staticmethod
    def classify_exception(error: Optional[BaseException]) -> ErrorCase:
        """Вариант ошибки по исключению (без статуса)."""
        if error is None:
            return ErrorCase.unknown()

        decoding_message = ErrorHandler.describe_decoding_error(error)
        if decoding_message is not None:
            return ErrorCase.decoding_error(decoding_message)

        if isinstance(error, _CANCEL_ERRORS):
            return ErrorCase.request_canceled()

        # ConnectTimeout наследует и Timeout, и ConnectionError
        if isinstance(error, _TIMEOUT_ERRORS):
            return ErrorCase.time_out()

        if isinstance(error, _INVALID_URL_ERRORS):
            return ErrorCase.invalid_url()

        if isinstance(error, _TRANSPORT_ERRORS):
            return ErrorCase.network_error(error)

        return ErrorCase.unknown(error)

    @staticmethod
    def describe_decoding_error(error: BaseException) -> Optional[str]:
        """
        Текст для ошибок декодирования JSON.

        Returns:
            Сообщение или None, если это не ошибка декодирования
        """
        if isinstance(error, json.JSONDecodeError):
            return f"Data corrupted: {error.msg} at line {error.lineno} column {error.colno}"

        if not isinstance(error, ValidationError):
            return None

        details = error.errors(include_url=False)
        if not details:
            return f"Data corrupted: {error}"

        first = details[0]
        error_type = first.get('type', '')
        loc = list(first.get('loc', ()))
        msg = first.get('msg', '')

        if error_type in ('json_invalid', 'json_type'):
            return f"Data corrupted: {msg}"
        if error_type == 'missing':
            key = loc[-1] if loc else ''
            return f"Key '{key}' not found: {msg}, codingPath: {loc[:-1]}"
        if first.get('input') is None:
            return f"Value '{error_type}' not found: {msg}, codingPath: {loc}"
        return f"Type '{error_type}' mismatch: {msg}, codingPath: {loc}"

    @staticmethod
    def api_error_message(data: Optional[bytes]) -> Optional[str]:
        """Тело ответа как UTF-8 строка (None если пусто или не декодируется)."""
        if not data:
            return None
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            return None

    @staticmethod
    def is_retryable(error: NetworkError, retry_client_errors: bool = False) -> bool:
        """
        Можно ли повторить запрос после этой ошибки.

        Отмена, блокировка, ошибки декодирования и сборки запроса не
        повторяются никогда. 3xx/4xx повторяются только с
        retry_client_errors=True.

        Args:
            error: Классифицированная ошибка
            retry_client_errors: Повторять ли 3xx/4xx

        Returns:
            True если retry допустим
        """
        if error.kind in (
            ErrorKind.REQUEST_CANCELED,
            ErrorKind.LOCKED,
            ErrorKind.DECODING_ERROR,
            ErrorKind.PARSING_ERROR,
        ):
            return False

        is_client_side = (
            error.kind in CLIENT_ERROR_KINDS
            or error.kind in REDIRECTION_KINDS
            or (error.status_code is not None and 300 <= error.status_code <= 499)
        )
        if is_client_side:
            return retry_client_errors

        return True
