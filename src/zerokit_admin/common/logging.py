"""Structured logging setup."""

from __future__ import annotations

import logging
import sys

import structlog


def configure_library_defaults() -> None:
    """
    Route structlog events through stdlib logging without adding handlers.

    Applied on import when the application has not configured structlog, so
    a library user only sees events their own logging setup lets through.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def setup_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Log level name (DEBUG, INFO, ...)
        json_logs: Render JSON lines instead of the console format
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    renderer: structlog.typing.Processor
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Get a structured logger for a module."""
    return structlog.get_logger(name)


if not structlog.is_configured():
    configure_library_defaults()
