"""
Pydantic settings for environment configuration.

Every field maps to a NETWORKER_* variable (case-insensitive).
"""

from typing import Dict, Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class NetworkerSettings(BaseSettings):
    """
    Networker configuration from environment variables.

    Reads from:
    1. Environment variables (NETWORKER_*)
    2. .env file
    3. Defaults

    Example .env file:
        NETWORKER_BASE_URL=https://api.example.com
        NETWORKER_TIMEOUT_READ=60
        NETWORKER_RETRY_MAX_RETRIES=5
        NETWORKER_RETRY_DELAY=0.5
        NETWORKER_CACHE_ENABLED=false
        NETWORKER_HEADERS={"Accept": "application/json"}
        NETWORKER_LOG_ENABLED=true
        NETWORKER_LOG_LEVEL=DEBUG

    Usage:
        >>> settings = NetworkerSettings()
        >>> settings.retry_max_retries
        5
    """

    model_config = SettingsConfigDict(
        env_prefix='NETWORKER_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # Base configuration
    base_url: Optional[str] = Field(default=None, description="Base URL for relative paths")
    headers: Dict[str, str] = Field(default_factory=dict, description="Default headers (JSON object)")
    chunk_size: int = Field(default=8192, gt=0)

    # Timeouts
    timeout_connect: float = Field(default=5.0, gt=0)
    timeout_read: float = Field(default=30.0, gt=0)
    timeout_total: Optional[float] = Field(default=None, gt=0)

    # Retry
    retry_enabled: bool = Field(default=True)
    retry_max_retries: int = Field(default=3, ge=0)
    retry_delay: float = Field(default=2.0, ge=0)
    retry_client_errors: bool = Field(default=False)

    # Cache
    cache_enabled: bool = Field(default=True)
    cache_expiration: float = Field(default=3600, ge=0)
    cache_max_size: int = Field(default=100, gt=0)
    cache_key_strategy: Literal["request", "url"] = Field(default="request")

    # Security
    security_verify_ssl: bool = Field(default=True)
    security_allow_redirects: bool = Field(default=True)

    # Connection pool
    pool_connections: int = Field(default=10, ge=1)
    pool_maxsize: int = Field(default=10, ge=1)
    pool_max_redirects: int = Field(default=30, ge=0)

    # Logging
    log_enabled: bool = Field(default=False, description="Build a LoggingConfig at all")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text", "colored"] = Field(default="text")
    log_silent: bool = Field(default=False)
    log_enable_console: bool = Field(default=True)
    log_enable_file: bool = Field(default=False)
    log_file_path: Optional[str] = None
    log_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    log_backup_count: int = Field(default=5, ge=0)
    log_enable_correlation_id: bool = Field(default=True)
    log_body_limit: int = Field(default=1024, ge=0)

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator('log_format', 'cache_key_strategy', mode='before')
    @classmethod
    def normalize_lower(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Empty string means no base URL; otherwise require an http(s) scheme."""
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got {v!r}")
        return v

    @model_validator(mode='after')
    def validate_file_path(self) -> 'NetworkerSettings':
        """Validate log_file_path is required when log_enable_file=True."""
        if self.log_enable_file and not self.log_file_path:
            raise ValueError("log_file_path is required when log_enable_file=True")
        return self
