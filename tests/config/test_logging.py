"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from structmap.config.logging import (
    LOGGER_NAME,
    configure_logging,
    enable_debug_logging,
    restore_logging_level,
)


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    sm = logging.getLogger(LOGGER_NAME)
    sm_level = sm.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    sm.setLevel(sm_level)


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True, log_json=False)
        assert logging.getLogger(LOGGER_NAME).level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False, log_json=False)
        assert logging.getLogger(LOGGER_NAME).level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        log = structlog.get_logger("structmap.test")
        log.warning("json test", answer=42)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "json test"
        assert parsed["answer"] == 42
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "structmap.test"
        assert "timestamp" in parsed

    def test_stdlib_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("structmap.services.resolver").debug("Resolved example.com/m.User")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Resolved example.com/m.User"
        assert parsed["level"] == "debug"
        assert parsed["logger"] == "structmap.services.resolver"

    def test_debug_suppressed_without_verbose(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=False, log_json=True)
        structlog.get_logger("structmap.assembler").debug("mapping_fields", source="User")
        logging.getLogger("structmap.services.generate").debug("Generated code")
        assert capfd.readouterr().err == ""

    def test_third_party_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("lark").debug("grammar noise")
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        configure_logging(verbose=False)
        configure_logging(verbose=True)
        assert len(logging.getLogger().handlers) == 1


class TestEnableDebugLogging:
    def test_raises_level(self) -> None:
        configure_logging(verbose=False)
        enable_debug_logging()
        assert logging.getLogger(LOGGER_NAME).level == logging.DEBUG

    def test_restore_previous_level(self) -> None:
        configure_logging(verbose=False)
        previous = enable_debug_logging()
        assert previous == logging.WARNING
        restore_logging_level(previous)
        assert logging.getLogger(LOGGER_NAME).level == logging.WARNING
