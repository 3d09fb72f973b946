"""
Channel logger: one named channel fanned out to an ordered list of sinks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence

import structlog
from structlog.processors import CallsiteParameter
from structlog.typing import Processor

from .diagnostics import get_logger
from .entry import LogEntry, TimezoneLike
from .exceptions import ChannelFault, SinkError, SinkWriteError
from .levels import Level
from .sinks import RelationalSink, Sink, StreamSink

logger = get_logger("ucrm_logging.channel")


def callsite_processor() -> Processor:
    """structlog processor adding the caller's filename, function and line to `extra`."""
    return structlog.processors.CallsiteParameterAdder(
        parameters={CallsiteParameter.FILENAME, CallsiteParameter.FUNC_NAME, CallsiteParameter.LINENO},
        additional_ignores=["ucrm_logging"],
    )


@dataclass(frozen=True)
class EmitResult:
    """Outcome of one emit: the entry and the sinks that failed to store it."""

    entry: LogEntry
    failures: Dict[str, SinkWriteError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


class ChannelLogger:
    """Binds a channel name to its sinks and a minimum severity.

    Args:
        name: Channel name, e.g. "HTTP"
        sinks: Destinations in priority order; the first one is the primary
        level: Entries below this severity are dropped
        timezone: Timezone used to stamp entries (UTC when unset)
        processors: structlog processors that build each entry's `extra`
    """

    def __init__(
        self,
        name: str,
        sinks: Sequence[Sink],
        *,
        level: Level | int | str = Level.DEBUG,
        timezone: TimezoneLike = None,
        processors: Sequence[Processor] = (),
    ):
        if not name:
            raise ValueError("ChannelLogger needs a non-empty name")
        if any(char in name for char in "]\r\n"):
            raise ValueError(f"Channel name cannot contain ']' or line breaks: {name!r}")
        self.name = name
        self.level = Level.parse(level)
        self._sinks: tuple[Sink, ...] = tuple(sinks)
        self._timezone = timezone
        self._processors = tuple(processors)

    @property
    def sinks(self) -> tuple[Sink, ...]:
        return self._sinks

    def is_enabled_for(self, level: Level | int | str) -> bool:
        return Level.parse(level) >= self.level

    def __repr__(self) -> str:
        return f"ChannelLogger({self.name!r}, sinks={list(self._sinks)!r}, level={self.level.name})"

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def _build_extra(self, level: Level, extra: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        event_dict: Dict[str, Any] = dict(extra or {})
        for processor in self._processors:
            event_dict = dict(processor(self, level.name.lower(), event_dict))
        return event_dict

    def emit(
        self,
        level: Level | int | str,
        message: str,
        context: Optional[Mapping[str, Any]] = None,
        extra: Optional[Mapping[str, Any]] = None,
        *,
        fault: Optional[type[Exception]] = None,
    ) -> Optional[EmitResult]:
        """Append an entry to every sink, in order.

        A failing sink does not stop the others; its error is reported in the
        returned EmitResult. Returns None when `level` is below the channel's
        minimum. With `fault`, an error-or-worse entry is followed by raising
        `fault(message)`.
        """
        level = Level.parse(level)
        if fault is not None and level < Level.ERROR:
            raise ValueError("Faults can only be raised for ERROR or higher severities")

        result: Optional[EmitResult] = None
        if self.is_enabled_for(level):
            entry = LogEntry.create(
                self.name,
                level,
                message,
                context if context is not None else {},
                self._build_extra(level, extra),
                tz=self._timezone,
            )
            result = EmitResult(entry=entry, failures=self._fan_out(entry))

        if fault is not None:
            if issubclass(fault, ChannelFault):
                raise fault(message, channel=self.name)
            raise fault(message)
        return result

    def _fan_out(self, entry: LogEntry) -> Dict[str, SinkWriteError]:
        failures: Dict[str, SinkWriteError] = {}
        for sink in self._sinks:
            try:
                sink.append(entry)
            except SinkWriteError as exc:
                failures[sink.name] = exc
            except Exception as exc:
                failures[sink.name] = SinkWriteError(sink=sink.name, channel=self.name, reason=repr(exc))
            else:
                continue
            logger.warning("sink_append_failed", channel=self.name, sink=sink.name, reason=failures[sink.name].details["reason"])
        return failures

    def debug(self, message: str, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.DEBUG, message, context, **kwargs)

    def info(self, message: str, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.INFO, message, context, **kwargs)

    def notice(self, message: str, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.NOTICE, message, context, **kwargs)

    def warning(self, message: str, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.WARNING, message, context, **kwargs)

    def error(self, message: str, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.ERROR, message, context, **kwargs)

    def critical(self, message: str, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.CRITICAL, message, context, **kwargs)

    def alert(self, message: str, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.ALERT, message, context, **kwargs)

    def emergency(self, message: str, context: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Optional[EmitResult]:
        return self.emit(Level.EMERGENCY, message, context, **kwargs)

    # -------------------------------------------------------------------------
    # Clearing and reading back
    # -------------------------------------------------------------------------

    def clear(self, message: str = "") -> int:
        """Remove this channel's entries from every sink that supports it.

        Relational sinks delete the channel's rows, file sinks are truncated and
        console sinks are skipped. A sink that fails is reported through
        diagnostics and the others are still cleared. Returns how many sinks
        actually removed records. A non-empty `message` is logged afterwards
        with the per-sink counts in its context.
        """
        removed: Dict[str, int] = {}
        for sink in self._sinks:
            try:
                match sink:
                    case RelationalSink():
                        removed[sink.name] = sink.clear(self.name)
                    case StreamSink() if sink.is_console:
                        continue
                    case StreamSink():
                        removed[sink.name] = sink.clear()
                    case _:
                        raise TypeError(f"Unsupported sink type: {type(sink).__name__}")
            except SinkError as exc:
                logger.warning("sink_clear_failed", channel=self.name, sink=sink.name, reason=str(exc))

        logger.info("channel_cleared", channel=self.name, removed=removed)
        if message:
            self.info(message, {"cleared": removed})
        return sum(1 for count in removed.values() if count > 0)

    def last_entry(self) -> Optional[LogEntry]:
        """Most recent entry from the first sink that has one."""
        for sink in self._sinks:
            match sink:
                case RelationalSink():
                    entry = sink.last_entry(self.name)
                case StreamSink():
                    entry = sink.last_entry(self.name)
                case _:
                    raise TypeError(f"Unsupported sink type: {type(sink).__name__}")
            if entry is not None:
                return entry
        return None
