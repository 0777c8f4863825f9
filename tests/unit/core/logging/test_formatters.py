"""
Tests for log formatters.
"""

import json
import logging
import sys

import pytest

from networker.core.logging.formatters import (
    ColoredFormatter,
    JSONFormatter,
    TextFormatter,
    extra_fields,
    get_formatter,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="networker",
        level=logging.INFO,
        pathname="test.py",
        lineno=10,
        msg="Request",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_extra_fields_only_custom():
    assert extra_fields(_record(method="GET", attempt=1)) == {"method": "GET", "attempt": 1}


class TestJSONFormatter:

    def test_basic_format(self):
        data = json.loads(JSONFormatter().format(_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "networker"
        assert data["message"] == "Request"
        assert "timestamp" in data

    def test_includes_extra(self):
        data = json.loads(JSONFormatter().format(_record(method="GET", headers={"A": "1"})))
        assert data["method"] == "GET"
        assert data["headers"] == {"A": "1"}

    def test_non_serializable_extra(self):
        data = json.loads(JSONFormatter().format(_record(obj=object())))
        assert data["obj"].startswith("<object object")

    def test_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("networker", logging.ERROR, "t.py", 1, "failed", (), sys.exc_info())
        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: boom" in data["exception"]


class TestTextFormatter:

    def test_format(self):
        output = TextFormatter().format(_record(method="GET"))
        assert "[INFO] [networker] Request" in output
        assert output.endswith("method=GET")


class TestColoredFormatter:

    def test_colors_level_and_restores_record(self):
        record = _record()
        output = ColoredFormatter().format(record)
        assert "\033[32mINFO\033[0m" in output
        assert record.levelname == "INFO"


class TestGetFormatter:

    @pytest.mark.parametrize("name,cls", [("json", JSONFormatter), ("TEXT", TextFormatter),
                                          ("colored", ColoredFormatter)])
    def test_known(self, name, cls):
        assert type(get_formatter(name)) is cls

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown format type"):
            get_formatter("xml")
