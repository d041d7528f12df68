"""structlog setup for the teammatch CLI."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog


def configure_logging(level: str = "INFO", *, stream: TextIO | None = None) -> None:
    """Emit JSON log events (``matching.stage1``, ``agent.tool_dispatched``, ...) at ``level``.

    Events go to ``stream``, stderr by default. Stdout is reserved for the
    match, agent and draft documents the CLI prints.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    target = stream or sys.stderr

    logging.basicConfig(level=log_level, format="%(message)s", stream=target)

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=target),
        cache_logger_on_first_use=True,
    )


__all__ = ["configure_logging"]
