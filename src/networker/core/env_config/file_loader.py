"""
NetworkerConfig из YAML или JSON файла.

Пример YAML (секция networker необязательна):

    networker:
      base_url: https://api.example.com
      headers:
        Accept: application/json
      timeout:            # или просто число (read) / [connect, read]
        connect: 5
        read: 60
      retry:
        max_retries: 5
        delay: 0.5
      cache:
        expiration: 600
        key_strategy: url
      logging:
        level: DEBUG
        format: json
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Type, Union

import yaml

from ..config import (
    CacheConfig,
    ConnectionPoolConfig,
    NetworkerConfig,
    RetryConfig,
    SecurityConfig,
    TimeoutConfig,
    as_timeout_config,
)
from ..logging import LoggingConfig

CONFIG_FILE_ENV = "NETWORKER_CONFIG_FILE"

PathLike = Union[str, Path]


class ConfigValidationError(Exception):
    """Файл конфигурации не читается или содержит невалидные значения."""


def _read(path: PathLike, parse: Callable[[Any], Any], errors: Tuple[Type[Exception], ...], label: str) -> Any:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = parse(f)
        except errors as e:
            raise ConfigValidationError(f"Invalid {label} syntax in {path}: {e}")

    if not data:
        raise ConfigValidationError(f"Empty config file: {path}")
    return data


class ConfigFileLoader:
    """
    Загрузчик конфигурации из файлов.

    Examples:
        >>> ConfigFileLoader.from_file("networker.yaml")
        >>> ConfigFileLoader.from_env_path()  # путь из NETWORKER_CONFIG_FILE
    """

    @staticmethod
    def from_yaml(path: PathLike) -> NetworkerConfig:
        """
        Raises:
            FileNotFoundError: Файла нет
            ConfigValidationError: Синтаксис или значения невалидны
        """
        return ConfigFileLoader.from_dict(_read(path, yaml.safe_load, (yaml.YAMLError,), "YAML"), str(path))

    @staticmethod
    def from_json(path: PathLike) -> NetworkerConfig:
        """
        Raises:
            FileNotFoundError: Файла нет
            ConfigValidationError: Синтаксис или значения невалидны
        """
        return ConfigFileLoader.from_dict(_read(path, json.load, (json.JSONDecodeError,), "JSON"), str(path))

    @staticmethod
    def from_file(path: PathLike) -> NetworkerConfig:
        """
        Формат по расширению: .yaml, .yml или .json.

        Raises:
            ValueError: Расширение не поддерживается
        """
        suffix = Path(path).suffix.lower()
        if suffix in (".yaml", ".yml"):
            return ConfigFileLoader.from_yaml(path)
        if suffix == ".json":
            return ConfigFileLoader.from_json(path)
        raise ValueError(f"Unsupported config file format: {suffix}. Supported formats: .yaml, .yml, .json")

    @staticmethod
    def from_env_path() -> Optional[NetworkerConfig]:
        """Файл из NETWORKER_CONFIG_FILE или None, если переменная не задана."""
        config_path = os.environ.get(CONFIG_FILE_ENV)
        return ConfigFileLoader.from_file(config_path) if config_path else None

    @staticmethod
    def from_dict(data: Dict[str, Any], source: str = "<dict>") -> NetworkerConfig:
        """
        Собрать NetworkerConfig из разобранных данных.

        Raises:
            ConfigValidationError: Неизвестный ключ, неверный тип или значение
        """
        root = data.get("networker", data) if isinstance(data, dict) else data
        if not isinstance(root, dict):
            raise ConfigValidationError(f"Config must be a dictionary, got {type(root).__name__} in {source}")

        headers = root.get("headers") or {}
        if not isinstance(headers, dict):
            raise ConfigValidationError(f"headers must be a dictionary in {source}")

        try:
            logging_config = None
            if "logging" in root:
                logging_config = LoggingConfig.create(**_section(root, "logging", source))

            return NetworkerConfig(
                base_url=root.get("base_url"),
                headers={str(k): str(v) for k, v in headers.items()},
                timeout=_timeout(root.get("timeout"), source),
                retry=RetryConfig(**_section(root, "retry", source)),
                cache=CacheConfig(**_section(root, "cache", source)),
                pool=ConnectionPoolConfig(**_section(root, "pool", source)),
                security=SecurityConfig(**_section(root, "security", source)),
                logging=logging_config,
                chunk_size=root.get("chunk_size", 8192),
            )
        except (ValueError, TypeError) as e:
            raise ConfigValidationError(f"Invalid config in {source}: {e}")


def _section(root: Dict[str, Any], name: str, source: str) -> Dict[str, Any]:
    section = root.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigValidationError(f"{name} must be a dictionary in {source}")
    return section


def _timeout(value: Any, source: str) -> TimeoutConfig:
    if value is None:
        return TimeoutConfig()
    if isinstance(value, dict):
        return TimeoutConfig(**value)
    if isinstance(value, list) and len(value) == 2:
        return as_timeout_config((value[0], value[1]))
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return as_timeout_config(value)
    raise ConfigValidationError(f"timeout must be a number, [connect, read] or a dictionary in {source}")
