"""
Unit tests for structured logging.
"""

import json
import logging
import sys
from types import SimpleNamespace

import pytest

from telemetry.service import JSONFormatter, configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def _record(msg="hello %s", args=("world",), **kwargs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="session.redis_store",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=args,
        exc_info=kwargs.pop("exc_info", None),
        func="store_session",
    )
    for key, value in kwargs.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for JSON log output."""

    def test_base_fields(self):
        output = json.loads(JSONFormatter().format(_record()))

        assert output["message"] == "hello world"
        assert output["level"] == "INFO"
        assert output["logger"] == "session.redis_store"
        assert output["function"] == "store_session"
        assert output["line"] == 10
        assert output["timestamp"].endswith("Z")

    def test_extra_data_is_merged(self):
        record = _record(extra_data={"key": "app:1", "deleted": 3})

        output = json.loads(JSONFormatter().format(record))

        assert output["key"] == "app:1"
        assert output["deleted"] == 3

    def test_exception_is_included(self):
        try:
            raise RuntimeError("bad")
        except RuntimeError:
            record = _record(exc_info=sys.exc_info())

        output = json.loads(JSONFormatter().format(record))

        assert "RuntimeError: bad" in output["exception"]


class TestConfigureLogging:
    """Tests for root logger setup."""

    def test_json_handler_installed(self, restore_root_logger):
        root = configure_logging(SimpleNamespace(log_level="DEBUG", log_json=True))

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_text_handler_installed(self, restore_root_logger):
        root = configure_logging(SimpleNamespace(log_level="WARNING", log_json=False))

        assert root.level == logging.WARNING
        assert not isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_defaults_without_settings(self, restore_root_logger):
        root = configure_logging()

        assert root.level == logging.INFO
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
