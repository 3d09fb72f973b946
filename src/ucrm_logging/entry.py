"""
Structured log entry and its two persisted representations.

An entry can be written as a row of the `logs` table or as a three line text
block, and rebuilt from either one. Messages always hold real newlines in
memory; the placeholder token only exists in the persisted forms.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, Mapping, Optional, Union
from zoneinfo import ZoneInfo

import orjson

from .constants import BLOCK_LINE_COUNT, TIMESTAMP_SEPARATOR, TIMESTAMP_TIMESPEC
from .formatting import LineFormatter, encode_mapping, escape_newlines, restore_newlines
from .levels import Level
from .parser import HEADER_PATTERN, block_lines, parse_entries

TimezoneLike = Union[str, tzinfo, None]

_TEXT_FORMATTER = LineFormatter()


def format_timestamp(moment: datetime) -> str:
    """Render a datetime as `Y-m-d H:i:s.uP`; naive values are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.isoformat(sep=TIMESTAMP_SEPARATOR, timespec=TIMESTAMP_TIMESPEC)


def resolve_timezone(tz: TimezoneLike) -> tzinfo:
    if tz is None or tz == "":
        return timezone.utc
    if isinstance(tz, tzinfo):
        return tz
    if tz.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(tz)


def decode_mapping(raw: Any) -> Optional[Dict[str, Any]]:
    """Decode a persisted context/extra value.

    NULL and JSON `null` give None. Anything that is not a JSON object,
    including invalid JSON, degrades to an empty dict instead of failing.
    """
    if raw is None:
        return None
    if isinstance(raw, Mapping):
        return dict(raw)
    try:
        value = orjson.loads(raw)
    except (orjson.JSONDecodeError, TypeError):
        return {}
    if value is None:
        return None
    if isinstance(value, dict):
        return value
    return {}


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    channel: str
    level: Level
    message: str
    context: Optional[Dict[str, Any]] = None
    extra: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        if not self.channel:
            raise ValueError("LogEntry.channel must be a non-empty string")
        object.__setattr__(self, "level", Level.parse(self.level))

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        channel: str,
        level: Level | int | str,
        message: str,
        context: Optional[Mapping[str, Any]] = None,
        extra: Optional[Mapping[str, Any]] = None,
        *,
        tz: TimezoneLike = None,
        now: Optional[datetime] = None,
    ) -> LogEntry:
        """Build a fresh entry stamped with the current time."""
        moment = now or datetime.now(resolve_timezone(tz))
        return cls(
            timestamp=format_timestamp(moment),
            channel=channel,
            level=Level.parse(level),
            message=message,
            context=dict(context) if context is not None else None,
            extra=dict(extra) if extra is not None else None,
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> LogEntry:
        """Rebuild an entry from a `logs` row (the `id` column is ignored).

        Raises ValueError when the row has no usable channel or level.
        """
        data = {key: value for key, value in dict(row).items() if key != "id"}

        level_name = data.get("level_name", data.get("levelName"))
        try:
            level = Level.parse(level_name)
        except ValueError:
            level = Level.parse(data.get("level"))

        return cls(
            timestamp=str(data.get("timestamp") or ""),
            channel=data.get("channel") or "",
            level=level,
            message=restore_newlines(data.get("message") or ""),
            context=decode_mapping(data.get("context")),
            extra=decode_mapping(data.get("extra")),
        )

    @classmethod
    def from_block(cls, block: str, default_channel: Optional[str] = None) -> Optional[LogEntry]:
        """Parse one text block; None when the block is malformed."""
        lines = block_lines(block)
        if len(lines) != BLOCK_LINE_COUNT:
            return None

        header = HEADER_PATTERN.match(lines[0])
        if header is None or not header.group("level_name"):
            return None

        channel = header.group("channel") or default_channel
        if not channel:
            return None

        try:
            level = Level.parse(header.group("level_name"))
        except ValueError:
            return None

        return cls(
            timestamp=header.group("timestamp"),
            channel=channel,
            level=level,
            message=restore_newlines(header.group("message")),
            context=decode_mapping(lines[1]),
            extra=decode_mapping(lines[2]),
        )

    @classmethod
    def from_text(cls, text: str, default_channel: Optional[str] = None) -> list[LogEntry]:
        """Parse every well-formed block of a log file's contents."""
        return list(parse_entries(text, default_channel=default_channel))

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_row(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "channel": self.channel,
            "level": int(self.level),
            "level_name": self.level_name,
            "message": escape_newlines(self.message),
            "context": encode_mapping(self.context),
            "extra": encode_mapping(self.extra),
        }

    def to_text(self) -> str:
        return _TEXT_FORMATTER.format(self)

    def __str__(self) -> str:
        context = encode_mapping(self.context) or ""
        extra = encode_mapping(self.extra) or ""
        return f"[{self.timestamp}] [{self.channel}.{self.level_name}] {self.message}\n{context}\n{extra}\n"

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @property
    def level_name(self) -> str:
        return self.level.name

    @property
    def moment(self) -> datetime:
        return datetime.fromisoformat(self.timestamp)

    def timestamp_local(self, tz: TimezoneLike = None) -> str:
        """The timestamp converted to `tz` (UTC by default)."""
        return format_timestamp(self.moment.astimezone(resolve_timezone(tz)))
