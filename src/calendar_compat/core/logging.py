"""Structured logging for the bridge.

Uses structlog's ProcessorFormatter so every ``logging.getLogger(__name__)``
call site is rendered through structlog without changes at the call site.

Two output formats:
- ``text``: colored, human-readable console output (default)
- ``json``: JSON lines for log aggregation

The bridge identity comes from a ContextVar; OTel trace and span ids come
from the current span.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

import structlog
from opentelemetry import trace

LOG_FORMATS = ("text", "json")

_bridge_context: ContextVar[str | None] = ContextVar("bridge_name", default=None)


def set_bridge_context(name: str | None) -> None:
    """Set the bridge name for the current async context."""
    _bridge_context.set(name)


def get_bridge_context() -> str | None:
    return _bridge_context.get()


def add_bridge_context(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: dict,
) -> dict:
    """Inject the ``bridge`` key from the ContextVar into the event dict."""
    event_dict["bridge"] = _bridge_context.get()
    return event_dict


def add_otel_context(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: dict,
) -> dict:
    """Inject ``trace_id`` and ``span_id`` from the current OTel span."""
    ctx = trace.get_current_span().get_span_context()
    if ctx and ctx.trace_id:
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    else:
        event_dict["trace_id"] = "0" * 32
        event_dict["span_id"] = "0" * 16
    return event_dict


def _build_processors(time_fmt: str) -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt=time_fmt),
        add_bridge_context,
        add_otel_context,
        structlog.stdlib.ExtraAdder(),
    ]


def configure_logging(
    level: str = "INFO",
    fmt: str = "text",
    bridge_name: str | None = None,
) -> None:
    """Configure structured logging for the process.

    Parameters
    ----------
    level:
        Root log level (e.g. "DEBUG", "INFO", "WARNING").
    fmt:
        ``"text"`` for colored console output, ``"json"`` for JSON lines.
    bridge_name:
        Optional identity stored in the ContextVar and emitted as ``bridge``.
    """
    if bridge_name:
        set_bridge_context(bridge_name)

    if fmt == "json":
        processors = _build_processors(time_fmt="iso")
        renderer = structlog.processors.JSONRenderer()
    else:
        processors = _build_processors(time_fmt="%H:%M:%S")
        renderer = structlog.dev.ConsoleRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=processors,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    # Reconfiguration replaces handlers instead of duplicating output.
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    structlog.configure(
        processors=[
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
