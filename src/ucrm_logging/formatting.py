"""
Text block rendering.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Mapping, Optional

import orjson

from .constants import CHANNEL_LINE_TEMPLATE, NEWLINE_PLACEHOLDER

if TYPE_CHECKING:
    from .entry import LogEntry

_PLACEHOLDER = re.compile(r"%\w+%")


def json_dumps(value: Any) -> str:
    """Compact JSON; orjson never escapes unicode or forward slashes."""
    return orjson.dumps(value, default=str, option=orjson.OPT_NON_STR_KEYS).decode()


def escape_newlines(message: str) -> str:
    return message.replace("\n", NEWLINE_PLACEHOLDER)


def restore_newlines(message: str) -> str:
    return message.replace(NEWLINE_PLACEHOLDER, "\n")


def encode_mapping(value: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Encode context/extra for persistence; None stays None."""
    if value is None:
        return None
    return json_dumps(dict(value))


class LineFormatter:
    """Renders entries with a %placeholder% template.

    Supported placeholders: %datetime%, %channel%, %level_name%, %level%,
    %message%, %context% and %extra%. The message is always newline-escaped so
    a rendered entry keeps the template's line count.
    """

    def __init__(self, template: str = CHANNEL_LINE_TEMPLATE):
        self.template = template

    def format(self, entry: LogEntry) -> str:
        values = {
            "%datetime%": entry.timestamp,
            "%channel%": entry.channel,
            "%level_name%": entry.level_name,
            "%level%": str(int(entry.level)),
            "%message%": escape_newlines(entry.message),
            "%context%": encode_mapping(entry.context) or "",
            "%extra%": encode_mapping(entry.extra) or "",
        }
        # Single pass, so placeholders inside the message itself stay literal.
        return _PLACEHOLDER.sub(lambda match: values.get(match.group(0), match.group(0)), self.template)
