# src/networker/interceptors/headers_interceptor.py

from typing import Dict

from ..core.models import URLRequest
from .interceptor import InterceptorPriority, RequestInterceptor


class HeadersInterceptor(RequestInterceptor):
    """
    Добавляет фиксированные заголовки к каждому запросу.

    Args:
        headers: Заголовки
        overwrite: Заменять ли заголовки, уже заданные в запросе

    Example:
        >>> HeadersInterceptor({"User-Agent": "MyApp/1.0", "Accept": "application/json"})
    """

    priority = InterceptorPriority.FIRST

    def __init__(self, headers: Dict[str, str], overwrite: bool = False):
        self.headers = dict(headers)
        self.overwrite = overwrite

    def intercept(self, request: URLRequest) -> URLRequest:
        for name, value in self.headers.items():
            if self.overwrite or request.get_header(name) is None:
                request.set_header(name, value)
        return request
