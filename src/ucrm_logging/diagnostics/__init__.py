"""
Diagnostics logging for the facade itself.

Operational events (sink failures, schema creation, logger wiring, skipped
blocks) are reported through structlog, separately from the channel entries
the facade persists.

Library: structlog + orjson for JSON rendering.
"""

from .core import configure_diagnostics, get_logger

__all__ = ["configure_diagnostics", "get_logger"]
