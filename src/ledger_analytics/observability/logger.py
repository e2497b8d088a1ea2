"""Structured logging with run_id support.

Uses structlog for structured output (JSON or console).  Library modules
log through the standard ``logging`` module; records are rendered by the
same structlog processor chain, so every entry carries the run_id of the
analytics run that produced it.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

# Context var for run_id propagation
_run_id: ContextVar[str] = ContextVar("run_id", default="")


def get_run_id() -> str:
    """Get current run ID from context, creating one if unset."""
    rid = _run_id.get()
    if not rid:
        rid = uuid.uuid4().hex[:12]
        _run_id.set(rid)
    return rid


def new_run_id() -> str:
    """Generate and set a new run ID."""
    rid = uuid.uuid4().hex[:12]
    _run_id.set(rid)
    return rid


def _add_run_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: add run_id to every log entry."""
    event_dict["run_id"] = get_run_id()
    return event_dict


def setup_logging(
    level: str = "INFO",
    format: str = "json",
) -> None:
    """Configure structured logging for the engine and the CLI.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format: "json" for machine-readable output, "console" for humans.

    Logs go to stderr so report output on stdout stays parseable.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _add_run_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)
