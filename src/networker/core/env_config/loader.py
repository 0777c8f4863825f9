"""
Configuration loader from environment variables and .env files.

Main entry point for loading configuration.
"""

from typing import Optional

from ..config import (
    CacheConfig,
    CacheKeyStrategy,
    ConnectionPoolConfig,
    NetworkerConfig,
    RetryConfig,
    SecurityConfig,
    TimeoutConfig,
)
from ..logging.config import LoggingConfig
from ...utils.sanitizer import mask_headers, mask_url
from .validator import NetworkerSettings


def load_from_env(env_file: Optional[str] = None, **overrides) -> NetworkerConfig:
    """
    Load NetworkerConfig from environment variables.

    Priority (highest to lowest):
    1. **overrides - explicit parameters (NetworkerSettings field names)
    2. Environment variables (NETWORKER_*)
    3. .env file
    4. Defaults

    Args:
        env_file: Custom .env file path (default: ./.env)
        **overrides: Explicit config overrides

    Returns:
        NetworkerConfig instance

    Raises:
        pydantic.ValidationError: Если значения невалидны

    Example:
        >>> config = load_from_env()
        >>> config = load_from_env(env_file=".env.production", retry_max_retries=5)
    """
    if env_file is not None:
        overrides['_env_file'] = env_file

    return settings_to_config(NetworkerSettings(**overrides))


def settings_to_config(settings: NetworkerSettings) -> NetworkerConfig:
    """Собрать NetworkerConfig из провалидированных настроек."""
    logging_config = None
    if settings.log_enabled:
        logging_config = LoggingConfig.create(
            level=settings.log_level,
            format=settings.log_format,
            silent=settings.log_silent,
            enable_console=settings.log_enable_console,
            enable_file=settings.log_enable_file,
            file_path=settings.log_file_path,
            max_bytes=settings.log_max_bytes,
            backup_count=settings.log_backup_count,
            enable_correlation_id=settings.log_enable_correlation_id,
            body_limit=settings.log_body_limit,
        )

    return NetworkerConfig(
        base_url=settings.base_url,
        headers=settings.headers,
        timeout=TimeoutConfig(
            connect=settings.timeout_connect,
            read=settings.timeout_read,
            total=settings.timeout_total,
        ),
        retry=RetryConfig(
            enabled=settings.retry_enabled,
            max_retries=settings.retry_max_retries,
            delay=settings.retry_delay,
            retry_client_errors=settings.retry_client_errors,
        ),
        cache=CacheConfig(
            enabled=settings.cache_enabled,
            expiration=settings.cache_expiration,
            max_size=settings.cache_max_size,
            key_strategy=CacheKeyStrategy(settings.cache_key_strategy),
        ),
        pool=ConnectionPoolConfig(
            pool_connections=settings.pool_connections,
            pool_maxsize=settings.pool_maxsize,
            max_redirects=settings.pool_max_redirects,
        ),
        security=SecurityConfig(
            verify_ssl=settings.security_verify_ssl,
            allow_redirects=settings.security_allow_redirects,
        ),
        logging=logging_config,
        chunk_size=settings.chunk_size,
    )


def config_summary(config: NetworkerConfig) -> str:
    """
    Configuration summary with secrets masked.

    Example:
        >>> print(config_summary(load_from_env()))
        NetworkerConfig:
          base_url: https://api.example.com
          timeout: connect=5.0s, read=30.0s, total=None
          ...
    """
    lines = [
        "NetworkerConfig:",
        f"  base_url: {mask_url(config.base_url) if config.base_url else None}",
        f"  headers: {mask_headers(config.headers)}",
        f"  timeout: connect={config.timeout.connect}s, read={config.timeout.read}s, total={config.timeout.total}",
        f"  retry: enabled={config.retry.enabled}, max_retries={config.retry.max_retries}, "
        f"delay={config.retry.delay}s",
        f"  cache: enabled={config.cache.enabled}, expiration={config.cache.expiration}s, "
        f"max_size={config.cache.max_size}, key={config.cache.key_strategy.value}",
        f"  security: verify_ssl={config.security.verify_ssl}, allow_redirects={config.security.allow_redirects}",
        f"  pool: connections={config.pool.pool_connections}, maxsize={config.pool.pool_maxsize}",
    ]
    if config.logging:
        lines.append(f"  logging: level={config.logging.level.value}, format={config.logging.format.value}")
        if config.logging.enable_file:
            lines.append(f"    file: {config.logging.file_path}")
    return "\n".join(lines)
