"""
Logger registry.

Holds the channel loggers of one application. The four built-in channels are
wired lazily on first use: UCRM writes to the plugin log file, HTTP, REST and
DATA share one relational sink partitioned by channel. Sinks are created once
and shared by every logger that needs them.

Usage:
    from ucrm_logging import new_registry

    registry = new_registry()
    registry.info("Webhook received", "HTTP", {"event": "client.add"})
    registry.last_entry("HTTP")
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .channel import ChannelLogger, EmitResult, callsite_processor
from .config import Settings
from .constants import BUILTIN_CHANNELS, FILE_CHANNELS, LOG_FILE_CREATED_MESSAGE, UCRM
from .diagnostics import get_logger
from .entry import LogEntry
from .exceptions import HttpFault
from .levels import Level
from .sinks import RelationalSink, Sink, StreamSink

logger = get_logger("ucrm_logging.registry")


class LoggerRegistry:
    """Named channel loggers with lazily wired canonical sinks.

    Args:
        settings: Configuration used for paths, timezone and levels
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._lock = threading.Lock()
        self._loggers: Dict[str, ChannelLogger] = {}
        self._file_sink: Optional[StreamSink] = None
        self._relational_sink: Optional[RelationalSink] = None
        self._console_sink: Optional[StreamSink] = None

    @property
    def settings(self) -> Settings:
        return self._settings

    # -------------------------------------------------------------------------
    # Shared sinks (callers hold self._lock)
    # -------------------------------------------------------------------------

    def _shared_file_sink(self) -> StreamSink:
        if self._file_sink is None:
            self._file_sink = StreamSink.for_file(self._settings.plugin.log_file)
        return self._file_sink

    def _shared_relational_sink(self) -> RelationalSink:
        if self._relational_sink is None:
            self._relational_sink = RelationalSink(
                self._settings.database_url,
                echo=self._settings.database.echo,
            )
        return self._relational_sink

    def _shared_console_sink(self) -> StreamSink:
        if self._console_sink is None:
            self._console_sink = StreamSink.for_console()
        return self._console_sink

    def _build_canonical(self, name: str) -> ChannelLogger:
        sinks: list[Sink] = []
        if name in FILE_CHANNELS:
            sinks.append(self._shared_file_sink())
        else:
            sinks.append(self._shared_relational_sink())
        if self._settings.logging.console_echo:
            sinks.append(self._shared_console_sink())

        channel_logger = ChannelLogger(
            name,
            sinks,
            level=self._settings.logging.level,
            timezone=self._settings.timezone,
            processors=[callsite_processor()],
        )
        logger.debug("channel_logger_created", channel=name, sinks=[sink.name for sink in sinks])
        return channel_logger

    # -------------------------------------------------------------------------
    # Lookup and registration
    # -------------------------------------------------------------------------

    def logger(self, name: str = UCRM) -> Optional[ChannelLogger]:
        """The logger registered under `name`; built-in channels are created on demand."""
        existing = self._loggers.get(name)
        if existing is not None or name not in BUILTIN_CHANNELS:
            return existing

        with self._lock:
            existing = self._loggers.get(name)
            if existing is None:
                existing = self._loggers[name] = self._build_canonical(name)
            return existing

    def register_logger(self, channel_logger: ChannelLogger) -> ChannelLogger:
        """Add `channel_logger`, replacing any logger with the same name.

        Entries already persisted by the replaced logger are left untouched.
        """
        with self._lock:
            replaced = self._loggers.get(channel_logger.name)
            self._loggers[channel_logger.name] = channel_logger
        if replaced is not None:
            logger.info("channel_logger_replaced", channel=channel_logger.name)
        return channel_logger

    def channels(self) -> list[str]:
        """Names of the loggers created or registered so far."""
        return list(self._loggers)

    # -------------------------------------------------------------------------
    # Channel-scoped operations
    # -------------------------------------------------------------------------

    def emit(
        self,
        level: Level | int | str,
        message: str,
        channel: str = UCRM,
        context: Optional[Mapping[str, Any]] = None,
        extra: Optional[Mapping[str, Any]] = None,
        **kwargs: Any,
    ) -> Optional[EmitResult]:
        """Log to `channel`; None when the channel is unknown or the level filtered out."""
        channel_logger = self.logger(channel)
        if channel_logger is None:
            logger.debug("unknown_channel", channel=channel, operation="emit")
            return None
        return channel_logger.emit(level, message, context, extra, **kwargs)

    def debug(self, message: str, channel: str = UCRM, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.DEBUG, message, channel, context, **kwargs)

    def info(self, message: str, channel: str = UCRM, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.INFO, message, channel, context, **kwargs)

    def notice(self, message: str, channel: str = UCRM, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.NOTICE, message, channel, context, **kwargs)

    def warning(self, message: str, channel: str = UCRM, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.WARNING, message, channel, context, **kwargs)

    def error(self, message: str, channel: str = UCRM, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.ERROR, message, channel, context, **kwargs)

    def critical(self, message: str, channel: str = UCRM, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.CRITICAL, message, channel, context, **kwargs)

    def alert(self, message: str, channel: str = UCRM, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.ALERT, message, channel, context, **kwargs)

    def emergency(self, message: str, channel: str = UCRM, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.EMERGENCY, message, channel, context, **kwargs)

    def http(
        self,
        message: str,
        channel: str = UCRM,
        status_code: int = 500,
        fault: bool = True,
    ) -> Optional[EmitResult]:
        """Log an ALERT for a failed request.

        With `fault` (the default) an HttpFault carrying `status_code` is
        raised afterwards, for the entry point to turn into a response.
        """
        result = self.emit(Level.ALERT, message, channel, {"status_code": status_code})
        if fault and self.logger(channel) is not None:
            raise HttpFault(message, channel=channel, status_code=status_code)
        return result

    def clear(self, message: str = "", channel: str = UCRM) -> int:
        """Clear `channel` in every sink; 0 when the channel is unknown."""
        channel_logger = self.logger(channel)
        if channel_logger is None:
            logger.debug("unknown_channel", channel=channel, operation="clear")
            return 0
        return channel_logger.clear(message)

    def last_entry(self, channel: str = UCRM) -> Optional[LogEntry]:
        """Most recent entry of `channel`; None when the channel is unknown."""
        channel_logger = self.logger(channel)
        if channel_logger is None:
            return None
        return channel_logger.last_entry()

    def plugin_file(self) -> Path:
        """Path of the plugin log file, created (and announced on UCRM) when missing."""
        with self._lock:
            sink = self._shared_file_sink()
        if sink.ensure_exists():
            self.info(LOG_FILE_CREATED_MESSAGE, UCRM)
        return self._settings.plugin.log_file.resolve()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close every sink owned by the registry or its loggers."""
        with self._lock:
            sinks: Dict[int, Sink] = {}
            for channel_logger in self._loggers.values():
                for sink in channel_logger.sinks:
                    sinks[id(sink)] = sink
            for sink in (self._file_sink, self._relational_sink, self._console_sink):
                if sink is not None:
                    sinks[id(sink)] = sink
            for sink in sinks.values():
                sink.close()
            self._loggers.clear()
            self._file_sink = self._relational_sink = self._console_sink = None
        logger.debug("registry_closed", sinks=len(sinks))

    def __enter__(self) -> LoggerRegistry:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def new_registry(settings: Optional[Settings] = None) -> LoggerRegistry:
    """Create the registry an application holds for its lifetime."""
    if settings is None:
        from .config import settings as default_settings

        settings = default_settings
    return LoggerRegistry(settings)
