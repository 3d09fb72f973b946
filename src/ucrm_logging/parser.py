"""
Text log parser.

A persisted entry spans several lines (header, context, extra), so entry
boundaries cannot be recovered by splitting on newlines. The scanner anchors on
the header pattern instead and treats everything up to the next header as one
block.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterator, Optional

from .diagnostics import get_logger

if TYPE_CHECKING:
    from .entry import LogEntry

logger = get_logger("ucrm_logging.parser")

HEADER_PATTERN = re.compile(
    r"^\[(?P<timestamp>[\w\-]* [\w:.+\-]*)\]"
    r"(?: \[(?:(?P<channel>[^\]\n]+)\.)?(?P<level_name>\w+)\])?"
    r" (?P<message>.*)$",
    re.MULTILINE,
)


def scan_blocks(text: str) -> Iterator[str]:
    """Yield raw blocks, each starting at a header and ending before the next one.

    Text before the first header is ignored. Every call returns a fresh
    generator, so the scan can be restarted at will.
    """
    previous: Optional[int] = None
    for match in HEADER_PATTERN.finditer(text):
        if previous is not None:
            yield text[previous : match.start()]
        previous = match.start()
    if previous is not None:
        yield text[previous:]


def block_lines(block: str) -> list[str]:
    """Split a block into its non-blank lines."""
    lines = (line.rstrip("\r") for line in block.split("\n"))
    return [line for line in lines if line.strip()]


def parse_entries(text: str, default_channel: Optional[str] = None) -> Iterator[LogEntry]:
    """Yield an entry for every well-formed block; malformed blocks are skipped."""
    from .entry import LogEntry

    for index, block in enumerate(scan_blocks(text)):
        entry = LogEntry.from_block(block, default_channel=default_channel)
        if entry is None:
            logger.debug("log_block_skipped", index=index, preview=block[:80])
            continue
        yield entry
