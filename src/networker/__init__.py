"""Networker - HTTP client core with retry, caching, interceptors and typed errors."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .core.networker import Networker
from .async_networker import AsyncNetworker
from .core.config import (
    NetworkerConfig,
    TimeoutConfig,
    RetryConfig,
    CacheConfig,
    CacheKeyStrategy,
    ConnectionPoolConfig,
    SecurityConfig,
)
from .core.errors import ErrorKind, ErrorCase, NetworkError
from .core.http import HTTPMethod, HTTPStatusCode
from .core.result import Result, Success, Failure
from .core.models import (
    NetworkRequest,
    URLRequest,
    ResponseInfo,
    NetworkResponse,
    Response,
    CachedDownloadLocation,
)
from .core.cache import NetworkCache
from .core.error_handler import ErrorHandler
from .core.logging import LoggingConfig, NetworkLogger
from .core.transport import RequestsTransport, HTTPXTransport
from .interceptors import (
    RequestInterceptor,
    InterceptorPriority,
    AuthInterceptor,
    HeadersInterceptor,
)

# Users can configure logging themselves using logging.getLogger('networker')
logging.getLogger('networker').addHandler(logging.NullHandler())

# Version info - read from package metadata (single source of truth in pyproject.toml)
try:
    __version__ = version("http-networker")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__all__ = [
    # Orchestrators
    "Networker",
    "AsyncNetworker",
    # Config
    "NetworkerConfig",
    "TimeoutConfig",
    "RetryConfig",
    "CacheConfig",
    "CacheKeyStrategy",
    "ConnectionPoolConfig",
    "SecurityConfig",
    "LoggingConfig",
    # Errors
    "ErrorKind",
    "ErrorCase",
    "NetworkError",
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
    # Infrastructure
    "NetworkCache",
    "NetworkLogger",
    "RequestsTransport",
    "HTTPXTransport",
    # Interceptors
    "RequestInterceptor",
    "InterceptorPriority",
    "AuthInterceptor",
    "HeadersInterceptor",
    "__version__",
]
