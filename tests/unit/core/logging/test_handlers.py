"""
Tests for log handlers.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler

from networker.core.logging.config import LoggingConfig
from networker.core.logging.filters import ExtraFieldsFilter
from networker.core.logging.formatters import JSONFormatter, TextFormatter
from networker.core.logging.handlers import create_console_handler, create_file_handler, handlers_for


class TestCreateConsoleHandler:

    def test_creates_stderr_handler(self):
        formatter = TextFormatter()
        handler = create_console_handler(logging.INFO, formatter)

        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream is sys.stderr
        assert handler.level == logging.INFO
        assert handler.formatter is formatter

    def test_filters(self):
        log_filter = ExtraFieldsFilter({"a": 1})
        handler = create_console_handler(logging.INFO, TextFormatter(), [log_filter])
        assert log_filter in handler.filters


class TestCreateFileHandler:

    def test_creates_rotating_handler_and_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "networker.log"
        handler = create_file_handler(str(path), logging.DEBUG, TextFormatter(), max_bytes=1000, backup_count=2)
        try:
            assert isinstance(handler, RotatingFileHandler)
            assert handler.maxBytes == 1000
            assert handler.backupCount == 2
            assert path.parent.is_dir()
        finally:
            handler.close()


class TestHandlersFor:

    def test_console_only_by_default(self):
        handlers = handlers_for(LoggingConfig())
        assert len(handlers) == 1
        assert handlers[0].level == logging.INFO

    def test_none_when_disabled(self):
        assert handlers_for(LoggingConfig(enable_console=False)) == []

    def test_console_and_file_share_format(self, tmp_path):
        config = LoggingConfig.create(
            level="ERROR", format="json",
            enable_file=True, file_path=str(tmp_path / "n.log"), max_bytes=500,
        )

        handlers = handlers_for(config)
        try:
            assert [type(h) for h in handlers] == [logging.StreamHandler, RotatingFileHandler]
            assert all(isinstance(h.formatter, JSONFormatter) for h in handlers)
            assert all(h.level == logging.ERROR for h in handlers)
            assert handlers[1].maxBytes == 500
        finally:
            for handler in handlers:
                handler.close()
