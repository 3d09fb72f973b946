"""
Exception hierarchy for the logging facade.

Split into infrastructure errors (a sink cannot be opened or written) and
faults that callers explicitly ask for when logging an error.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class LoggingError(Exception):
    """Root of every error raised by ucrm_logging."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


# ================================
# Infrastructure errors
# ================================


class SinkError(LoggingError):
    """Base class for failures of a physical sink."""

    pass


class SinkInitializationError(SinkError):
    """The sink destination cannot be opened.

    Logging is foundational, so this is fatal and must reach the entry point.
    """

    def __init__(self, *, sink: str, reason: str) -> None:
        message = f"Cannot initialize sink '{sink}': {reason}"
        super().__init__(message, code="SINK_INIT", details={"sink": sink, "reason": reason})


class SinkWriteError(SinkError):
    """An entry could not be appended to a sink."""

    def __init__(self, *, sink: str, channel: str, reason: str) -> None:
        message = f"Failed to append to sink '{sink}' for channel '{channel}': {reason}"
        details = {"sink": sink, "channel": channel, "reason": reason}
        super().__init__(message, code="SINK_WRITE", details=details)


class SinkClearError(SinkError):
    """Stored entries could not be removed from a sink."""

    def __init__(self, *, sink: str, reason: str) -> None:
        message = f"Failed to clear sink '{sink}': {reason}"
        super().__init__(message, code="SINK_CLEAR", details={"sink": sink, "reason": reason})


class UnsupportedSinkOperation(SinkError):
    """The sink does not support the requested operation."""

    def __init__(self, *, sink: str, operation: str) -> None:
        message = f"Sink '{sink}' does not support '{operation}'"
        super().__init__(message, code="UNSUPPORTED", details={"sink": sink, "operation": operation})


# ================================
# Opt-in faults
# ================================


class ChannelFault(LoggingError):
    """Raised after an error entry was logged, when the caller asked for it."""

    def __init__(self, message: str, *, channel: Optional[str] = None) -> None:
        super().__init__(message, code="CHANNEL_FAULT", details={"channel": channel} if channel else None)
        self.channel = channel


class HttpFault(ChannelFault):
    """Fault carrying the HTTP status code the host should answer with."""

    def __init__(self, message: str, *, channel: Optional[str] = None, status_code: int = 500) -> None:
        super().__init__(message, channel=channel)
        self.code = "HTTP_FAULT"
        self.status_code = status_code
        self.details["status_code"] = status_code
