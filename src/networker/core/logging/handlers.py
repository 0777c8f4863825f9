"""
Обработчики логов: stderr и файл с ротацией.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Optional, TypeVar

from .formatters import get_formatter

if TYPE_CHECKING:
    from .config import LoggingConfig

H = TypeVar("H", bound=logging.Handler)


def _configure(
    handler: H,
    level: int,
    formatter: logging.Formatter,
    filters: Optional[Iterable[logging.Filter]],
) -> H:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    for log_filter in filters or ():
        handler.addFilter(log_filter)
    return handler


def create_console_handler(
    level: int,
    formatter: logging.Formatter,
    filters: Optional[Iterable[logging.Filter]] = None,
) -> logging.StreamHandler:
    """Обработчик stderr."""
    return _configure(logging.StreamHandler(sys.stderr), level, formatter, filters)


def create_file_handler(
    file_path: str,
    level: int,
    formatter: logging.Formatter,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    filters: Optional[Iterable[logging.Filter]] = None,
) -> RotatingFileHandler:
    """
    Файл с ротацией по размеру.

    Родительская директория создаётся при необходимости.

    Example:
        >>> create_file_handler("/var/log/networker.log", logging.INFO, JSONFormatter(), max_bytes=1_000_000)
    """
    Path(file_path).parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=file_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8',
    )
    return _configure(handler, level, formatter, filters)


def handlers_for(config: "LoggingConfig") -> List[logging.Handler]:
    """
    Обработчики, которые требует конфиг (может быть пусто).

    Все обработчики получают один форматтер и порог config.level.
    """
    level = config.level.numeric
    formatter = get_formatter(config.format.value)

    handlers: List[logging.Handler] = []
    if config.enable_console:
        handlers.append(create_console_handler(level, formatter))
    if config.enable_file and config.file_path:
        handlers.append(create_file_handler(
            config.file_path,
            level,
            formatter,
            max_bytes=config.max_bytes,
            backup_count=config.backup_count,
        ))
    return handlers
