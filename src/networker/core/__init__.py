"""Core Networker модули."""

from .config import (
    TimeoutConfig,
    RetryConfig,
    CacheConfig,
    CacheKeyStrategy,
    ConnectionPoolConfig,
    SecurityConfig,
    NetworkerConfig,
)
from .errors import (
    ErrorKind,
    ErrorCase,
    NetworkError,
    UnknownError,
    RequestCancelledError,
)
from .http import HTTPMethod, HTTPStatusCode
from .result import Result, Success, Failure
from .models import (
    NetworkRequest,
    URLRequest,
    ResponseInfo,
    NetworkResponse,
    Response,
    CachedDownloadLocation,
)
from .error_handler import ErrorHandler
from .retry_engine import RetryEngine
from .cache import NetworkCache, ResponseCache, CacheEntry

__all__ = [
    # Config
    "TimeoutConfig",
    "RetryConfig",
    "CacheConfig",
    "CacheKeyStrategy",
    "ConnectionPoolConfig",
    "SecurityConfig",
    "NetworkerConfig",
    # Errors
    "ErrorKind",
    "ErrorCase",
    "NetworkError",
    "UnknownError",
    "RequestCancelledError",
    "ErrorHandler",
    # HTTP
    "HTTPMethod",
    "HTTPStatusCode",
    # Result
    "Result",
    "Success",
    "Failure",
    # Models
    "NetworkRequest",
    "URLRequest",
    "ResponseInfo",
    "NetworkResponse",
    "Response",
    "CachedDownloadLocation",
    # Retry / cache
    "RetryEngine",
    "NetworkCache",
    "ResponseCache",
    "CacheEntry",
]
