"""
ucrm_logging: channel logging for UCRM plugins.

Named channels ("UCRM", "HTTP", "REST", "DATA") persist structured entries to a
plain text log file or to a relational `logs` table, and can be cleared or
queried for their most recent entry.
"""

from .bootstrap import bootstrap
from .channel import ChannelLogger, EmitResult
from .constants import BUILTIN_CHANNELS, DATA, HTTP, REST, UCRM
from .entry import LogEntry
from .exceptions import (
    ChannelFault,
    HttpFault,
    LoggingError,
    SinkClearError,
    SinkError,
    SinkInitializationError,
    SinkWriteError,
    UnsupportedSinkOperation,
)
from .levels import Level
from .parser import parse_entries, scan_blocks
from .registry import LoggerRegistry, new_registry
from .sinks import RelationalSink, Sink, StreamSink

__all__ = [
    "bootstrap",
    "new_registry",
    "LoggerRegistry",
    "ChannelLogger",
    "EmitResult",
    "LogEntry",
    "Level",
    "Sink",
    "RelationalSink",
    "StreamSink",
    "parse_entries",
    "scan_blocks",
    "LoggingError",
    "SinkError",
    "SinkClearError",
    "SinkInitializationError",
    "SinkWriteError",
    "UnsupportedSinkOperation",
    "ChannelFault",
    "HttpFault",
    "UCRM",
    "HTTP",
    "REST",
    "DATA",
    "BUILTIN_CHANNELS",
]
