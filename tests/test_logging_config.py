"""
Tests for utils/logging_config.py — JSON formatter and handler setup
"""
import json
import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.config import ClientConfig
from utils.logging_config import JsonFormatter, configure_logging


def _record(msg="hello %s", args=("world",), **extra):
    record = logging.LogRecord("collection.controller", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_core_fields(self):
        data = json.loads(JsonFormatter().format(_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "collection.controller"
        assert data["message"] == "hello world"
        assert "timestamp" in data

    def test_known_extras_copied(self):
        data = json.loads(JsonFormatter().format(_record(resource="complaints", epoch=4)))
        assert data["resource"] == "complaints"
        assert data["epoch"] == 4

    def test_unknown_extras_dropped(self):
        data = json.loads(JsonFormatter().format(_record(secret="x")))
        assert "secret" not in data

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()
        data = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: boom" in data["exc_info"]


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_json_format(self, monkeypatch):
        monkeypatch.setenv("PMIS_LOG_FORMAT", "json")
        handler = configure_logging(ClientConfig.from_env())
        assert isinstance(handler.formatter, JsonFormatter)
        assert logging.getLogger().handlers == [handler]

    def test_text_format_and_level(self, monkeypatch):
        monkeypatch.setenv("PMIS_LOG_FORMAT", "text")
        monkeypatch.setenv("PMIS_LOG_LEVEL", "debug")
        handler = configure_logging(ClientConfig.from_env())
        assert not isinstance(handler.formatter, JsonFormatter)
        assert logging.getLogger().level == logging.DEBUG
