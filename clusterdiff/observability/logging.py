"""Structured logging for clusterdiff runs.

Logs are JSON lines on stderr; stdout is reserved for the diff and
discovery reports.  Each command run binds its command name and selector
so every event of that run carries them.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

import structlog


def setup_logging(level: str = "warning", stream: TextIO | None = None) -> None:
    """Configure structlog once per process."""
    log_level = getattr(logging, level.upper(), logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]


@contextmanager
def run_context(command: str, selector: str) -> Iterator[None]:
    """Tag every event logged inside the block with the command and selector."""
    structlog.contextvars.bind_contextvars(command=command, selector=selector)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars("command", "selector")
