"""
Кэш ответов с ленивым истечением и LRU вытеснением.

Записи не удаляются фоновым потоком: устаревшая запись удаляется при
первом обращении к ней.
"""

import hashlib
import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .config import CacheConfig, CacheKeyStrategy
from .models import URLRequest

logger = logging.getLogger(__name__)

DATA_NAMESPACE = "data"
DOWNLOAD_NAMESPACE = "download"


def make_cache_key(
    url_request: URLRequest,
    strategy: CacheKeyStrategy = CacheKeyStrategy.REQUEST,
    namespace: str = DATA_NAMESPACE,
) -> str:
    """
    Построить ключ кэша для собранного запроса.

    Args:
        url_request: Транспортный запрос (до интерцепторов)
        strategy: REQUEST = метод + URL + хеш тела, URL = только URL
        namespace: Разделяет обычные ответы и загрузки

    Returns:
        Строковый ключ

    Examples:
        >>> make_cache_key(URLRequest("GET", "https://api.com/users"))
        'data:GET https://api.com/users'
        >>> make_cache_key(URLRequest("POST", "https://api.com/users"), CacheKeyStrategy.URL)
        'data:https://api.com/users'
    """
    if strategy == CacheKeyStrategy.URL:
        return f"{namespace}:{url_request.url}"

    key = f"{namespace}:{url_request.method.upper()} {url_request.url}"
    if url_request.body:
        key += f"#{hashlib.sha256(url_request.body).hexdigest()}"
    return key


@dataclass(frozen=True)
class CacheEntry:
    """Значение + время вставки."""
    value: Any
    timestamp: float


class ResponseCache(ABC):
    """Интерфейс кэша, который использует Networker."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Живое значение или None."""

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        """Вставить или заменить значение."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Удалить запись, если есть."""

    @abstractmethod
    def clear(self) -> None:
        """Очистить кэш."""


class NetworkCache(ResponseCache):
    """
    Потокобезопасный in-memory кэш.

    Args:
        expiration: Время жизни записи в секундах
        max_size: Максимум записей; при превышении вытесняются
            наименее недавно использованные
        clock: Источник времени (для тестов)

    Examples:
        >>> cache = NetworkCache(expiration=60)
        >>> cache.put("data:GET https://api.com", response)
        >>> cache.get("data:GET https://api.com") is response
        True
    """

    def __init__(
        self,
        expiration: float = 3600,
        max_size: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ):
        if expiration < 0:
            raise ValueError("expiration must be non-negative")
        if max_size <= 0:
            raise ValueError("max_size must be positive")

        self.expiration = expiration
        self.max_size = max_size
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    @classmethod
    def from_config(cls, config: CacheConfig) -> "NetworkCache":
        return cls(expiration=config.expiration, max_size=config.max_size)

    def get(self, key: str) -> Optional[Any]:
        """
        Получить значение.

        Запись старше expiration удаляется и считается промахом.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None

            if self._clock() - entry.timestamp > self.expiration:
                del self._entries[key]
                self._misses += 1
                logger.debug(f"Cache entry expired: {key}")
                return None

            self._entries.move_to_end(key)
            self._hits += 1
            return entry.value

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=value, timestamp=self._clock())
            self._entries.move_to_end(key)

            while len(self._entries) > self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Cache eviction: {evicted}, size now {len(self._entries)}")

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> Dict[str, int]:
        """Статистика: hits, misses, size."""
        with self._lock:
            return {
                "hits": self._hits,
                "misses": self._misses,
                "size": len(self._entries),
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
