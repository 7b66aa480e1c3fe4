"""structlog configuration for applications embedding the client."""

from __future__ import annotations

import sys

import structlog


def configure_logging(json: bool | None = None) -> None:
    """Configure structlog to write to stderr.

    Args:
        json: Force JSON (True) or console (False) rendering. By default the
            console renderer is used when stderr is a terminal.
    """
    if json is None:
        json = not sys.stderr.isatty()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
