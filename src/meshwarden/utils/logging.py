"""Structured logging for MESHWARDEN.

Every log line carries the reconciliation phase bound by ``bind_phase``, so
the output of one cycle can be filtered per phase.
"""

import logging
import sys
from typing import Any

import structlog

_SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _renderers(format: str) -> list[Any]:
    if format == "json":
        return [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer()]


def setup_logging(level: str = "INFO", format: str = "json", output: str = "stdout") -> None:
    """Configure structlog for the CLI.

    Args:
        level: Log level name; unknown names fall back to INFO
        format: "json" for machine-readable lines, anything else for console
        output: "stdout" or "stderr"
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    stream = sys.stdout if output == "stdout" else sys.stderr

    # istioctl and the kubernetes client log through the standard library
    logging.basicConfig(format="%(message)s", stream=stream, level=log_level)

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, *_renderers(format)],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger, typically for ``__name__``."""
    return structlog.get_logger(name)


def bind_phase(phase: str, **kwargs: Any) -> None:
    """Start a new logging context for a reconciliation phase.

    Context bound by a previous phase is dropped.

    Args:
        phase: Phase name
        **kwargs: Additional context fields
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(phase=phase, **kwargs)


def log_error(
    logger: structlog.BoundLogger,
    error: Exception,
    operation: str,
    **kwargs: Any,
) -> None:
    """Log a failed operation as ``<operation>_failed``.

    Args:
        logger: Logger instance
        error: Exception raised by the operation
        operation: Operation name, e.g. "install"
        **kwargs: Additional context fields
    """
    logger.error(
        f"{operation}_failed",
        error_type=type(error).__name__,
        error=str(error),
        **kwargs,
    )
