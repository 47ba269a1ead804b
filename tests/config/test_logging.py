"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from orgtree.config.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    org = logging.getLogger("orgtree")
    org_level = org.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    org.setLevel(org_level)


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True, log_json=False)
        assert logging.getLogger("orgtree").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False, log_json=False)
        assert logging.getLogger("orgtree").level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        structlog.get_logger("orgtree.services.reconcile").warning(
            "reconcile.create_failed", title="Associate"
        )
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "reconcile.create_failed"
        assert parsed["title"] == "Associate"
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "orgtree.services.reconcile"
        assert "timestamp" in parsed

    def test_stdlib_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("orgtree.infrastructure.sql_store").debug("Designation exists")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Designation exists"
        assert parsed["level"] == "debug"

    def test_third_party_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("urllib3").debug("connection noise")
        logging.getLogger("sqlalchemy").debug("engine noise")
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        configure_logging(verbose=True, log_json=False)
        configure_logging(verbose=True, log_json=True)
        assert len(logging.getLogger().handlers) == 1
