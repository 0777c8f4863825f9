"""
Logging system for Networker.

Provides structured logging with multiple formats, handlers, and filters.

Example:
    >>> from networker.core.logging import NetworkLogger, LoggingConfig
    >>>
    >>> config = LoggingConfig.create(
    ...     level="DEBUG",
    ...     format="colored",
    ...     enable_file=True,
    ...     file_path="/var/log/app.log"
    ... )
    >>> logger = NetworkLogger(config)
    >>> logger.info("Networker started", base_url="https://api.com")
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import NetworkLogger
from .formatters import JSONFormatter, TextFormatter, ColoredFormatter, get_formatter
from .filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    correlation_scope,
    set_correlation_id,
    get_correlation_id,
    clear_correlation_id,
)
from .handlers import create_console_handler, create_file_handler

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Logger
    "NetworkLogger",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "ColoredFormatter",
    "get_formatter",
    # Filters
    "CorrelationIdFilter",
    "ExtraFieldsFilter",
    "correlation_scope",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    # Handlers
    "create_console_handler",
    "create_file_handler",
]
