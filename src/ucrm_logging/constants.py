"""
Constants shared by the entry codecs, the sinks and the registry.

Kept in one place so the persisted formats (text blocks and the `logs` table)
are defined once.
"""

from __future__ import annotations


# =============================================================================
# Persisted formats
# =============================================================================

# Placeholder written instead of "\n" inside messages, so a text block always
# spans exactly three lines.
NEWLINE_PLACEHOLDER = "##NEWLINE##"

# Y-m-d H:i:s.uP, e.g. "2024-03-01 09:15:42.123456+00:00"
TIMESTAMP_SEPARATOR = " "
TIMESTAMP_TIMESPEC = "microseconds"

DEFAULT_LINE_TEMPLATE = "[%datetime%] [%level_name%] %message%\n%context%\n%extra%\n"
CHANNEL_LINE_TEMPLATE = "[%datetime%] [%channel%.%level_name%] %message%\n%context%\n%extra%\n"

# Number of non-blank lines in a well-formed text block (header, context, extra)
BLOCK_LINE_COUNT = 3

LOGS_TABLE = "logs"


# =============================================================================
# Built-in channels
# =============================================================================

UCRM = "UCRM"
HTTP = "HTTP"
REST = "REST"
DATA = "DATA"

BUILTIN_CHANNELS = (UCRM, HTTP, REST, DATA)

# Channels persisted to the plugin log file; the rest go to the database.
FILE_CHANNELS = frozenset({UCRM})

LOG_FILE_CREATED_MESSAGE = "Log file created!"
