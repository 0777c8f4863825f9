# src/networker/interceptors/interceptor.py

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Iterable, List

from ..core.models import URLRequest

logger = logging.getLogger(__name__)


class InterceptorPriority:
    """
    Константы приоритетов для интерцепторов.

    Интерцепторы с меньшим приоритетом выполняются раньше.

    Example:
        >>> class SigningInterceptor(RequestInterceptor):
        ...     priority = InterceptorPriority.LAST  # Подписывает итоговый запрос
    """
    FIRST = 0       # Auth, базовые заголовки
    HIGH = 25
    NORMAL = 50     # По умолчанию
    LOW = 75
    LAST = 100      # Подпись запроса, трассировка


class RequestInterceptor(ABC):
    """
    Базовый класс интерцептора.

    Интерцептор получает собранный URLRequest перед отправкой и может
    изменить заголовки и тело. Канала ошибок нет.

    Attributes:
        priority: Порядок выполнения (меньше = раньше)
    """

    priority: int = InterceptorPriority.NORMAL

    @abstractmethod
    def intercept(self, request: URLRequest) -> URLRequest:
        """Вернуть (возможно изменённый) запрос."""


def sort_interceptors(interceptors: Iterable[RequestInterceptor]) -> List[RequestInterceptor]:
    """Стабильная сортировка по priority."""
    return sorted(interceptors, key=lambda i: getattr(i, 'priority', InterceptorPriority.NORMAL))


def apply_interceptors(interceptors: Iterable[RequestInterceptor], request: URLRequest) -> URLRequest:
    """
    Последовательно применить интерцепторы.

    Исключение интерцептора логируется, запрос передаётся дальше в том
    виде, в каком он был до этого интерцептора.
    """
    for interceptor in interceptors:
        candidate = replace(request, headers=dict(request.headers))
        try:
            result = interceptor.intercept(candidate)
        except Exception as e:
            logger.warning(f"Interceptor {interceptor.__class__.__name__} failed: {e}")
            continue
        request = candidate if result is None else result
    return request
