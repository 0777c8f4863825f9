"""
Tests for logging configuration.
"""

import pytest

from networker.core.logging.config import LoggingConfig, LogLevel, LogFormat


class TestLogLevel:

    def test_log_level_values(self):
        assert [level.value for level in LogLevel] == ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    def test_log_level_is_string(self):
        assert isinstance(LogLevel.INFO, str)


class TestLoggingConfig:

    def test_defaults(self):
        config = LoggingConfig()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.TEXT
        assert config.silent is False
        assert config.enable_console is True
        assert config.enable_file is False
        assert config.enable_correlation_id is True
        assert config.body_limit == 1024

    def test_create_from_strings(self):
        config = LoggingConfig.create(level="debug", format="JSON", silent=True)
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.JSON
        assert config.silent is True

    def test_create_rejects_unknown_level(self):
        with pytest.raises(ValueError):
            LoggingConfig.create(level="LOUD")

    def test_file_requires_path(self):
        with pytest.raises(ValueError, match="file_path is required"):
            LoggingConfig(enable_file=True)

    def test_body_limit_validation(self):
        with pytest.raises(ValueError):
            LoggingConfig(body_limit=-1)

    def test_extra_fields(self):
        config = LoggingConfig.create(extra_fields={"service": "api"})
        assert config.extra_fields == {"service": "api"}

    def test_create_passes_options_through(self):
        config = LoggingConfig.create(level=LogLevel.WARNING, body_limit=0, enable_console=False)
        assert config.level is LogLevel.WARNING
        assert config.body_limit == 0
        assert config.enable_console is False

    def test_create_rejects_unknown_option(self):
        with pytest.raises(TypeError):
            LoggingConfig.create(colour=True)

    def test_rotation_validation(self):
        with pytest.raises(ValueError):
            LoggingConfig(max_bytes=0)
        with pytest.raises(ValueError):
            LoggingConfig(backup_count=-1)


def test_numeric_levels():
    assert LogLevel.DEBUG.numeric == 10
    assert LogLevel.ERROR.numeric == 40
