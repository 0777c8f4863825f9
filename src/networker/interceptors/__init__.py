"""Request interceptors for Networker."""

from .interceptor import (
    InterceptorPriority,
    RequestInterceptor,
    apply_interceptors,
    sort_interceptors,
)
from .auth_interceptor import AuthInterceptor
from .headers_interceptor import HeadersInterceptor

__all__ = [
    "InterceptorPriority",
    "RequestInterceptor",
    "apply_interceptors",
    "sort_interceptors",
    "AuthInterceptor",
    "HeadersInterceptor",
]
