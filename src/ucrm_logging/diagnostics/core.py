"""
Core diagnostics configuration.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Literal, TextIO

import orjson
import structlog
from structlog.typing import EventDict, WrappedLogger

from .formatters import ConsoleFormatter

DiagnosticsFormat = Literal["console", "json"]


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(_name=name or "ucrm_logging")


# =============================================================================
# Structlog Processors
# =============================================================================


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO 8601 timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_logger_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add logger name to log event."""
    event_dict["logger"] = event_dict.pop("_name", "ucrm_logging")
    return event_dict


def rename_event_key(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename 'event' to 'message'."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


class StreamRenderer:
    """Final processor: renders the event and hands the line to the PrintLogger."""

    def __init__(self, fmt: DiagnosticsFormat = "console", stream: Any = None):
        self._fmt = fmt
        self._stream = stream or sys.stderr

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
        if self._fmt == "json":
            return orjson.dumps(event_dict, default=str).decode()
        use_color = bool(getattr(self._stream, "isatty", lambda: False)())
        return ConsoleFormatter.format(event_dict, use_color=use_color)


# =============================================================================
# Configuration Logic
# =============================================================================


def configure_diagnostics(
    *,
    level: str = "WARNING",
    fmt: DiagnosticsFormat = "console",
    stream: TextIO | None = None,
) -> None:
    """
    Configure the diagnostics logger.

    Args:
        level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        fmt: Output format (console, json)
        stream: Destination stream (default: stderr)
    """
    output = stream or sys.stderr
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            add_timestamp,
            add_logger_name,
            rename_event_key,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            StreamRenderer(fmt=fmt, stream=output),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.WARNING)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )
