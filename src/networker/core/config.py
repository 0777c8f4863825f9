"""
Система конфигурации для Networker.

Все конфиги immutable (frozen dataclasses) для потокобезопасности.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .logging import LoggingConfig

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TIMEOUT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class TimeoutConfig:
    """
    Конфигурация таймаутов транспорта.

    Args:
        connect: Таймаут подключения (сек)
        read: Таймаут чтения данных (сек)
        total: Лимит ожидания соединения из пула для httpx (опционально)

    Examples:
        >>> TimeoutConfig(connect=5, read=30)
    """
    connect: float = 5
    read: float = 30
    total: Optional[float] = None

    def __post_init__(self):
        """Валидация."""
        if self.connect <= 0:
            raise ValueError("connect timeout must be positive")
        if self.read <= 0:
            raise ValueError("read timeout must be positive")
        if self.total is not None and self.total <= 0:
            raise ValueError("total timeout must be positive")

    def as_tuple(self) -> Tuple[float, float]:
        """Вернуть как (connect, read) для requests."""
        return (self.connect, self.read)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RETRY CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class RetryConfig:
    """
    Конфигурация повторов.

    Задержка фиксированная: без exponential backoff и без jitter.

    Args:
        enabled: Разрешены ли повторы
        max_retries: Повторы сверх первой попытки (всего попыток max_retries + 1)
        delay: Пауза перед каждым повтором (сек)
        retry_client_errors: Повторять ли 3xx/4xx ответы

    Examples:
        >>> RetryConfig(max_retries=5, delay=0.5)
        >>> RetryConfig(enabled=False)
    """
    enabled: bool = True
    max_retries: int = 3
    delay: float = 2.0
    retry_client_errors: bool = False

    def __post_init__(self):
        """Валидация."""
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.delay < 0:
            raise ValueError("delay must be non-negative")

    @property
    def max_attempts(self) -> int:
        """Всего попыток, включая первую."""
        return self.max_retries + 1 if self.enabled else 1

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CACHE CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class CacheKeyStrategy(str, Enum):
    """Как строится ключ кэша."""
    REQUEST = "request"  # метод + URL + хеш тела
    URL = "url"          # только URL: GET и POST на один URL делят запись


@dataclass(frozen=True)
class CacheConfig:
    """
    Конфигурация кэша ответов.

    Args:
        enabled: Кешировать ли успешные ответы
        expiration: Время жизни записи (сек)
        max_size: Максимум записей (LRU вытеснение)
        key_strategy: Стратегия ключа

    Examples:
        >>> CacheConfig(expiration=60)
        >>> CacheConfig(enabled=False)
    """
    enabled: bool = True
    expiration: float = 3600
    max_size: int = 100
    key_strategy: CacheKeyStrategy = CacheKeyStrategy.REQUEST

    def __post_init__(self):
        """Валидация."""
        if self.expiration < 0:
            raise ValueError("expiration must be non-negative")
        if self.max_size <= 0:
            raise ValueError("max_size must be positive")
        if not isinstance(self.key_strategy, CacheKeyStrategy):
            object.__setattr__(self, 'key_strategy', CacheKeyStrategy(self.key_strategy))

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CONNECTION POOL CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class ConnectionPoolConfig:
    """
    Конфигурация connection pool транспорта.

    Args:
        pool_connections: Количество connection pools для кеширования
        pool_maxsize: Максимум соединений в пуле
        pool_block: Блокировать при достижении лимита
        max_redirects: Максимум редиректов
    """
    pool_connections: int = 10
    pool_maxsize: int = 10
    pool_block: bool = False
    max_redirects: int = 30

    def __post_init__(self):
        """Валидация."""
        if self.pool_connections <= 0:
            raise ValueError("pool_connections must be positive")
        if self.pool_maxsize <= 0:
            raise ValueError("pool_maxsize must be positive")
        if self.max_redirects < 0:
            raise ValueError("max_redirects must be non-negative")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SECURITY CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class SecurityConfig:
    """
    Конфигурация безопасности.

    Args:
        verify_ssl: Проверять SSL сертификаты
        allow_redirects: Следовать редиректам. При False 3xx ответы
            возвращаются как ошибки-редиректы.
    """
    verify_ssl: bool = True
    allow_redirects: bool = True

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MAIN CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class NetworkerConfig:
    """
    Главная конфигурация Networker.

    Args:
        base_url: Базовый URL для относительных путей (опционально)
        headers: Заголовки по умолчанию для всех запросов
        timeout: Конфигурация таймаутов
        retry: Конфигурация повторов
        cache: Конфигурация кэша
        pool: Конфигурация connection pool
        security: Конфигурация безопасности
        logging: Конфигурация логирования (None = без логирования)
        chunk_size: Размер чанка при чтении тела и загрузке файлов

    Examples:
        >>> config = NetworkerConfig(base_url="https://api.example.com")
        >>> config = NetworkerConfig.create(max_retries=5, retry_delay=0.5)
    """
    base_url: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    pool: ConnectionPoolConfig = field(default_factory=ConnectionPoolConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    logging: Optional['LoggingConfig'] = None
    chunk_size: int = 8192

    def __post_init__(self):
        """Normalize base_url and freeze headers."""
        if isinstance(self.headers, dict):
            object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers)))

        if self.base_url:
            normalized = self.base_url.rstrip('/')
            if normalized != self.base_url:
                object.__setattr__(self, 'base_url', normalized)

        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

    @classmethod
    def create(
        cls,
        base_url: Optional[str] = None,
        timeout: Union[float, Tuple[float, float], TimeoutConfig] = 30,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        allow_retry: bool = True,
        allows_cache: bool = True,
        cache_expiration: float = 3600,
        cache_max_size: int = 100,
        verify_ssl: bool = True,
        headers: Optional[Dict[str, str]] = None,
        logging: Optional['LoggingConfig'] = None,
        **kwargs
    ) -> 'NetworkerConfig':
        """
        Удобный конструктор конфигурации.

        Args:
            base_url: Базовый URL
            timeout: Таймаут (число, (connect, read) или TimeoutConfig)
            max_retries: Количество повторов
            retry_delay: Пауза между повторами (сек)
            allow_retry: Включить повторы
            allows_cache: Включить кэш
            cache_expiration: Время жизни записи кэша (сек)
            cache_max_size: Максимум записей кэша
            verify_ssl: Проверять SSL
            headers: Заголовки
            logging: Конфигурация логирования

        Returns:
            NetworkerConfig instance

        Examples:
            >>> config = NetworkerConfig.create(timeout=60)
            >>> config = NetworkerConfig.create(timeout=(5, 60), max_retries=5)
        """
        return cls(
            base_url=base_url,
            headers=headers or {},
            timeout=as_timeout_config(timeout),
            retry=RetryConfig(enabled=allow_retry, max_retries=max_retries, delay=retry_delay),
            cache=CacheConfig(enabled=allows_cache, expiration=cache_expiration, max_size=cache_max_size),
            security=SecurityConfig(verify_ssl=verify_ssl),
            logging=logging,
            **kwargs
        )

    def with_timeout(self, timeout: Union[float, Tuple[float, float], TimeoutConfig]) -> 'NetworkerConfig':
        """
        Создать новый конфиг с изменённым timeout.

        Example:
            >>> new_config = config.with_timeout(60)
        """
        return replace(self, timeout=as_timeout_config(timeout))

    def with_retry(self, max_retries: int, delay: Optional[float] = None) -> 'NetworkerConfig':
        """
        Создать новый конфиг с изменённым retry.

        Example:
            >>> new_config = config.with_retry(5, delay=1.0)
        """
        retry = replace(
            self.retry,
            max_retries=max_retries,
            delay=self.retry.delay if delay is None else delay,
        )
        return replace(self, retry=retry)

    def with_headers(self, headers: Dict[str, str]) -> 'NetworkerConfig':
        """
        Создать новый конфиг с дополнительными заголовками.

        Example:
            >>> new_config = config.with_headers({"X-API-Key": "secret"})
        """
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)

    def without_cache(self) -> 'NetworkerConfig':
        """Создать новый конфиг с выключенным кэшем."""
        return replace(self, cache=replace(self.cache, enabled=False))


def as_timeout_config(timeout: Union[float, Tuple[float, float], TimeoutConfig]) -> TimeoutConfig:
    """Число = read таймаут, пара = (connect, read)."""
    if isinstance(timeout, TimeoutConfig):
        return timeout
    if isinstance(timeout, tuple):
        return TimeoutConfig(connect=timeout[0], read=timeout[1])
    return TimeoutConfig(connect=5, read=timeout)
