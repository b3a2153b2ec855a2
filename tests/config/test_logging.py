"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from docnum.config.logging import bind_command, configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    docnum_logger = logging.getLogger("docnum")
    docnum_level = docnum_logger.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    docnum_logger.setLevel(docnum_level)
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True, log_json=False)
        assert logging.getLogger("docnum").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False, log_json=False)
        assert logging.getLogger("docnum").level == logging.WARNING

    def test_json_mode_structlog_event(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        structlog.get_logger("docnum.test").warning("json test", answer=42)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "json test"
        assert parsed["answer"] == 42
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "docnum.test"
        assert "timestamp" in parsed

    def test_stdlib_records_are_structured(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("docnum.services.generator").debug(
            "Generated %s number %s", "invoice", "INV00000001"
        )
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Generated invoice number INV00000001"
        assert parsed["level"] == "debug"
        assert parsed["logger"] == "docnum.services.generator"

    def test_logs_never_reach_stdout(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=False)
        logging.getLogger("docnum.x").warning("to stderr")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "to stderr" in captured.err

    def test_sqlalchemy_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("sqlalchemy.engine").info("SELECT 1")
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        configure_logging(verbose=True, log_json=False)
        configure_logging(verbose=True, log_json=True)
        assert len(logging.getLogger().handlers) == 1


class TestBindCommand:
    def test_command_on_stdlib_records(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        bind_command("next")
        logging.getLogger("docnum.services.generator").warning("Skipped candidates")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["command"] == "next"

    def test_none_clears_context(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        bind_command("next")
        bind_command(None)
        logging.getLogger("docnum.x").warning("plain")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert "command" not in parsed
