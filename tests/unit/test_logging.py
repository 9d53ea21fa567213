"""Unit tests for structured logging utilities."""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock

import pytest
import structlog

from meshwarden.utils.logging import bind_phase, get_logger, log_error, setup_logging


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test."""
    logging.root.handlers = []
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    yield
    logging.root.handlers = []
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


class TestSetupLogging:
    """Test setup_logging function."""

    def test_setup_logging_default_parameters(self):
        """Test setup_logging with default parameters."""
        setup_logging()

        assert len(logging.root.handlers) > 0

    def test_json_output(self, capsys):
        """Test JSON lines carry the event and bound phase."""
        setup_logging(level="INFO", format="json", output="stdout")
        bind_phase("reconcile")

        get_logger("test").info("istio_updated", version="1.2.0")

        line = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert line["event"] == "istio_updated"
        assert line["phase"] == "reconcile"
        assert line["version"] == "1.2.0"
        assert line["level"] == "info"

    def test_level_filters(self, capsys):
        """Test messages below the level are dropped."""
        setup_logging(level="WARNING", format="json", output="stderr")

        get_logger("test").info("hidden")
        get_logger("test").warning("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_console_format(self, capsys):
        setup_logging(level="DEBUG", format="console")

        get_logger("test").debug("console_event")

        assert "console_event" in capsys.readouterr().out


def test_bind_phase_replaces_context():
    """Test binding a phase drops the previous phase context."""
    bind_phase("reconcile", attempt=1)
    bind_phase("post-reset")

    context = structlog.contextvars.get_contextvars()
    assert context == {"phase": "post-reset"}


def test_log_error():
    """Test failures are logged as <operation>_failed with the error type."""
    logger = MagicMock()

    log_error(logger, KeyError("missing"), operation="install", version="1.2.0")

    logger.error.assert_called_once_with(
        "install_failed",
        error_type="KeyError",
        error="'missing'",
        version="1.2.0",
    )
