# tests/unit/test_logging_config.py
"""Tests for stderr logging setup."""

import json
import logging
import sys

import pytest

from gap_roadmap.logging_config import JsonFormatter, configure_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    @pytest.mark.parametrize("verbosity, level", [
        ("quiet", logging.WARNING),
        ("normal", logging.INFO),
        ("verbose", logging.DEBUG),
        ("bogus", logging.INFO),
    ])
    def test_levels(self, verbosity, level):
        configure_logging(verbosity)
        assert logging.getLogger().level == level

    def test_repeated_calls_do_not_stack(self):
        configure_logging()
        configure_logging(json_logs=True)
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_logs_go_to_stderr(self, capsys):
        configure_logging("normal")
        logging.getLogger("gap_roadmap.test").info("hello")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "hello" in captured.err


class TestJsonFormatter:
    def test_json_line(self):
        record = logging.LogRecord("gap_roadmap.x", logging.WARNING, __file__, 1, "%s gaps", (3,), None)
        data = json.loads(JsonFormatter().format(record))

        assert data["level"] == "WARNING"
        assert data["logger"] == "gap_roadmap.x"
        assert data["msg"] == "3 gaps"
        assert "exc" not in data

    def test_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        data = json.loads(JsonFormatter().format(record))
        assert "ValueError: boom" in data["exc"]
