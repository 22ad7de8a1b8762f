"""Tests for logging configuration."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pytest
import structlog

from turnweave.core.logging import bind_context, clear_context, configure_logging, get_logger


if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, None, None]:
    """Undo handler and structlog configuration after each test."""
    root = logging.getLogger()
    original_level = root.level
    yield
    for handler in [h for h in root.handlers if h.get_name() == "turnweave"]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(original_level)
    clear_context()
    structlog.reset_defaults()


def _installed_handlers() -> list[logging.Handler]:
    return [h for h in logging.getLogger().handlers if h.get_name() == "turnweave"]


def _read_json_lines(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line]


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_file_receives_json_lines(self, tmp_path: Path) -> None:
        """Test the log file gets one JSON object per event."""
        log_file = tmp_path / "run.log"
        configure_logging(level="INFO", json_format=False, log_file=str(log_file))

        get_logger("turnweave.tests").info("Effect applied", property_name="health")

        entries = _read_json_lines(log_file)
        assert len(entries) == 1
        entry = entries[0]
        assert entry["event"] == "Effect applied"
        assert entry["property_name"] == "health"
        assert entry["level"] == "info"
        assert entry["logger"] == "turnweave.tests"
        assert entry["app"] == "turnweave"
        assert "timestamp" in entry

    def test_level_filters_events(self, tmp_path: Path) -> None:
        """Test events below the configured level are dropped."""
        log_file = tmp_path / "run.log"
        configure_logging(level="WARNING", json_format=True, log_file=str(log_file))
        logger = get_logger("turnweave.tests")

        logger.info("Round started")
        logger.warning("No living units to schedule")

        events = [entry["event"] for entry in _read_json_lines(log_file)]
        assert events == ["No living units to schedule"]

    def test_defaults_come_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test level falls back to TURNWEAVE_LOG_LEVEL."""
        monkeypatch.setenv("TURNWEAVE_LOG_LEVEL", "DEBUG")

        configure_logging()

        assert logging.getLogger().level == logging.DEBUG
        assert [h.level for h in _installed_handlers()] == [logging.DEBUG]

    def test_reconfigure_replaces_handlers(self, tmp_path: Path) -> None:
        """Test calling configure_logging twice does not stack handlers."""
        configure_logging(level="INFO", json_format=True, log_file=str(tmp_path / "a.log"))
        configure_logging(level="INFO", json_format=True)

        assert len(_installed_handlers()) == 1


class TestLoggingContext:
    """Tests for bound context variables."""

    def test_bound_context_is_merged(self, tmp_path: Path) -> None:
        """Test bound values appear on subsequent events."""
        log_file = tmp_path / "run.log"
        configure_logging(level="INFO", json_format=True, log_file=str(log_file))

        bind_context(actor_id="u-1", turn=12)
        get_logger("turnweave.tests").info("Action chosen")

        entry = _read_json_lines(log_file)[0]
        assert entry["actor_id"] == "u-1"
        assert entry["turn"] == 12

    def test_clear_context(self) -> None:
        """Test clear_context removes every bound value."""
        bind_context(actor_id="u-1")

        clear_context()

        assert structlog.contextvars.get_contextvars() == {}
