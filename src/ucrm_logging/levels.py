"""
Severity levels.

Ranks follow the Monolog / RFC 5424 ordering used by the persisted logs, so
rows written by older plugin versions keep their meaning.
"""

from __future__ import annotations

from enum import IntEnum


class Level(IntEnum):
    DEBUG = 100
    INFO = 200
    NOTICE = 250
    WARNING = 300
    ERROR = 400
    CRITICAL = 500
    ALERT = 550
    EMERGENCY = 600

    @classmethod
    def parse(cls, value: "Level | int | str") -> "Level":
        """Resolve a member, an integer rank or a (case-insensitive) name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            name = value.strip().upper()
            if name in cls.__members__:
                return cls[name]
            if name.isdigit():
                return cls(int(name))
        raise ValueError(f"Unknown log level: {value!r}")
