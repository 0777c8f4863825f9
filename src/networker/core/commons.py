"""
Общие шаги конвейера Networker.

- make_url_request: NetworkRequest -> URLRequest
- handle_response / handle_download_response: сырые данные транспорта -> Result
- decode_response: NetworkResponse -> Response[T]

Функции не зависят от транспорта и используются обоими оркестраторами.
"""

import dataclasses
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Type, TypeVar
from urllib.parse import urlparse

from pydantic import BaseModel, TypeAdapter, ValidationError

from .config import NetworkerConfig
from .error_handler import ErrorHandler
from .errors import ErrorCase, NetworkError
from .http import HTTPStatusCode
from .logging import NetworkLogger
from .models import NetworkRequest, NetworkResponse, Response, ResponseInfo, URLRequest
from .result import Failure, Result, Success

T = TypeVar("T")

_ALLOWED_SCHEMES = ("http", "https")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# REQUEST BUILDING
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def resolve_url(url: Optional[str], base_url: Optional[str] = None) -> Optional[str]:
    """
    Собрать абсолютный URL из base_url и пути.

    Returns:
        Абсолютный http(s) URL или None, если собрать его нельзя

    Examples:
        >>> resolve_url("/users", "https://api.example.com")
        'https://api.example.com/users'
        >>> resolve_url("not a url") is None
        True
    """
    if not url:
        return None

    if "://" not in url and base_url:
        url = f"{base_url.rstrip('/')}/{url.lstrip('/')}"

    try:
        parsed = urlparse(url)
    except ValueError:
        return None

    if parsed.scheme.lower() not in _ALLOWED_SCHEMES or not parsed.hostname:
        return None
    return url


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_body(body: Any) -> Optional[bytes]:
    """
    Закодировать тело запроса.

    bytes/bytearray отправляются как есть, остальное в JSON (включая
    dataclasses и pydantic модели).

    Raises:
        TypeError, ValueError: Если значение нельзя закодировать
    """
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    return json.dumps(body, default=_json_default).encode("utf-8")


def make_url_request(
    request: NetworkRequest,
    config: Optional[NetworkerConfig] = None,
    body: Any = None,
) -> Result[URLRequest]:
    """
    Собрать транспортный запрос.

    Args:
        request: Описание запроса
        config: Конфиг (base_url, заголовки по умолчанию, таймауты)
        body: Тело вместо request.body (для upload)

    Returns:
        Success(URLRequest), Failure(InvalidURL) для неразбираемого URL,
        Failure(ParsingError) если тело не кодируется в JSON

    Example:
        >>> result = make_url_request(NetworkRequest(
        ...     "https://api.com/users", method="POST",
        ...     headers={"Content-Type": "application/json"}, body={"id": 1}))
        >>> result.value.body
        b'{"id": 1}'
    """
    config = config or NetworkerConfig()

    url = resolve_url(request.url, config.base_url)
    if url is None:
        return Failure(NetworkError(ErrorCase.invalid_url()))

    payload = request.body if body is None else body
    try:
        encoded = encode_body(payload)
    except (TypeError, ValueError) as e:
        return Failure(NetworkError(ErrorCase.parsing_error(f"Request body could not be encoded: {e}")))

    url_request = URLRequest(
        method=request.method.value,
        url=url,
        headers={**config.headers, **request.headers},
        body=encoded,
        timeout=request.timeout if request.timeout is not None else config.timeout.as_tuple(),
    )

    if encoded is not None and not isinstance(payload, (bytes, bytearray)):
        if url_request.get_header("Content-Type") is None:
            url_request.set_header("Content-Type", "application/json")

    return Success(url_request)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RESPONSE HANDLING
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def handle_response(
    data: Optional[bytes],
    response: Optional[ResponseInfo],
    logger: Optional[NetworkLogger] = None,
) -> Result[NetworkResponse]:
    """
    Проверить ответ транспорта.

    Returns:
        Failure(NoData) если нет тела или метаданных,
        классифицированную ошибку для не-2xx,
        Success(NetworkResponse) для 2xx
    """
    if data is None or response is None:
        return Failure(NetworkError(ErrorCase.no_data()))

    if not HTTPStatusCode.is_successful(response.status_code):
        return Failure(ErrorHandler.handle(data=data, response=response))

    network_response = NetworkResponse(data=data, response=response)
    if logger is not None:
        logger.log_response(network_response)
    return Success(network_response)


def handle_download_response(
    location: Optional[Path],
    response: Optional[ResponseInfo],
    data: Optional[bytes] = None,
    logger: Optional[NetworkLogger] = None,
) -> Result[Path]:
    """
    Проверить результат загрузки файла.

    Args:
        location: Куда транспорт записал файл (None при не-2xx)
        response: Метаданные ответа
        data: Тело ответа при ошибке (для api_error_message)
        logger: Логгер

    Returns:
        Success(Path) или Failure
    """
    if response is None:
        return Failure(NetworkError(ErrorCase.no_data()))

    if not HTTPStatusCode.is_successful(response.status_code):
        return Failure(ErrorHandler.handle(data=data, response=response))

    if location is None:
        return Failure(NetworkError(ErrorCase.no_data(), status_code=response.status_code))

    if logger is not None:
        logger.log_event("Download Finished", str(location), url=response.url,
                         status_code=response.status_code)
    return Success(location)


@lru_cache(maxsize=128)
def _type_adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


def decode_response(
    response: NetworkResponse,
    model: Type[T],
    logger: Optional[NetworkLogger] = None,
) -> Result[Response[T]]:
    """
    Разобрать JSON тело в модель.

    Модель: pydantic BaseModel, dataclass, TypedDict или любой тип,
    который понимает pydantic TypeAdapter. Ошибка декодирования
    логируется и не повторяется.

    Example:
        >>> result = decode_response(raw, User)
        >>> result.value.value.name
        'Alice'
    """
    try:
        value = _type_adapter(model).validate_json(response.data)
    except (ValidationError, ValueError) as e:
        error = ErrorHandler.handle(e)
        error.status_code = response.status_code
        if logger is not None:
            logger.log_error(error)
        return Failure(error)

    return Success(Response(value=value, raw=response))
