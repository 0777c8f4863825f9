"""
Environment configuration system for Networker.

Load configuration from .env files, environment variables and YAML/JSON files.

Example:
    >>> from networker.core.env_config import load_from_env, ConfigFileLoader
    >>>
    >>> # Load from .env and NETWORKER_* variables
    >>> config = load_from_env()
    >>>
    >>> # Load with overrides
    >>> config = load_from_env(base_url="https://custom.api.com")
    >>>
    >>> # Load from file
    >>> config = ConfigFileLoader.from_file("networker.yaml")
"""

from .loader import load_from_env, settings_to_config, config_summary
from .validator import NetworkerSettings
from .file_loader import ConfigFileLoader, ConfigValidationError, CONFIG_FILE_ENV

__all__ = [
    # Main loader
    "load_from_env",
    "settings_to_config",
    "config_summary",
    # Validators
    "NetworkerSettings",
    # Files
    "ConfigFileLoader",
    "ConfigValidationError",
    "CONFIG_FILE_ENV",
]
