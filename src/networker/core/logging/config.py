"""
Настройки логирования Networker.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union


class LogLevel(str, Enum):
    """
    Порог логирования.

    Request/Response/Time Report и повторы пишутся на INFO, финальная
    ошибка вызова на ERROR. WARNING и выше оставляют только ошибки.
    """
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def numeric(self) -> int:
        """Уровень stdlib logging."""
        return logging.getLevelName(self.value)


class LogFormat(str, Enum):
    JSON = "json"
    TEXT = "text"
    COLORED = "colored"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Конфигурация NetworkLogger.

    Attributes:
        level: Порог логирования
        format: json, text или colored
        silent: Выключить вывод целиком (вызовы логгера становятся no-op)
        enable_console: Писать в stderr
        enable_file: Писать в файл с ротацией
        file_path: Путь к файлу (обязателен при enable_file)
        max_bytes: Размер файла до ротации
        backup_count: Сколько старых файлов хранить
        enable_correlation_id: Добавлять id задачи к каждой записи
        body_limit: Сколько байт тела запроса/ответа писать в лог (0 = не писать)
        extra_fields: Статические поля каждой записи (service, environment)

    Example:
        >>> LoggingConfig.create(level="debug", format="json", extra_fields={"service": "billing"})
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    silent: bool = False
    enable_console: bool = True
    enable_file: bool = False
    file_path: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    enable_correlation_id: bool = True
    body_limit: int = 1024
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.enable_file and not self.file_path:
            raise ValueError("file_path is required when enable_file=True")
        if self.body_limit < 0:
            raise ValueError("body_limit must be non-negative")
        if self.max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        if self.backup_count < 0:
            raise ValueError("backup_count must be non-negative")

    @classmethod
    def create(
        cls,
        level: Union[str, LogLevel] = LogLevel.INFO,
        format: Union[str, LogFormat] = LogFormat.TEXT,
        extra_fields: Optional[Dict[str, Any]] = None,
        **options: Any,
    ) -> "LoggingConfig":
        """
        Собрать конфиг из строк (env, YAML).

        Регистр level и format не важен; остальные поля передаются как есть.

        Raises:
            ValueError: Неизвестный уровень или формат
        """
        return cls(
            level=LogLevel(level.upper()) if isinstance(level, str) else level,
            format=LogFormat(format.lower()) if isinstance(format, str) else format,
            extra_fields=dict(extra_fields or {}),
            **options,
        )

