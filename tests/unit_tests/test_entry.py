"""
LogEntry tests: construction, row and text serialization, JSON decoding policy.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

import pytest

from ucrm_logging.constants import NEWLINE_PLACEHOLDER
from ucrm_logging.entry import LogEntry, decode_mapping, format_timestamp
from ucrm_logging.levels import Level

TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{6}[+-]\d{2}:\d{2}$")


class TestLogEntryCreate:
    """Fresh entries built at emit time"""

    def test_timestamp_has_microseconds_and_offset(self) -> None:
        entry = LogEntry.create("UCRM", "INFO", "hello")
        assert TIMESTAMP_RE.match(entry.timestamp)
        assert entry.timestamp.endswith("+00:00")

    def test_timestamp_uses_requested_timezone(self) -> None:
        tz = timezone(timedelta(hours=-5))
        now = datetime(2024, 3, 1, 4, 0, 0, tzinfo=tz)
        entry = LogEntry.create("UCRM", "INFO", "hello", tz=tz, now=now)
        assert entry.timestamp == "2024-03-01 04:00:00.000000-05:00"

    def test_naive_datetimes_are_treated_as_utc(self) -> None:
        assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02 03:04:05.000000+00:00"

    def test_level_and_level_name_are_consistent(self) -> None:
        entry = LogEntry.create("UCRM", 400, "boom")
        assert entry.level is Level.ERROR
        assert entry.level_name == "ERROR"

    def test_empty_channel_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="channel"):
            LogEntry.create("", "INFO", "hello")

    def test_unknown_level_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            LogEntry.create("UCRM", "LOUD", "hello")

    def test_moment_and_local_timestamp(self, make_entry) -> None:
        entry = make_entry()
        assert entry.moment == datetime(2024, 3, 1, 9, 15, 42, 123456, tzinfo=timezone.utc)
        assert entry.timestamp_local(timezone(timedelta(hours=2))) == "2024-03-01 11:15:42.123456+02:00"


class TestRowSerialization:
    """to_row / from_row"""

    def test_round_trip(self, make_entry) -> None:
        entry = make_entry(
            "line one\nline two",
            context={"user": "José", "url": "https://example.com/a/b", "ids": [1, 2]},
            extra={"lineno": 12},
        )
        assert LogEntry.from_row(entry.to_row()) == entry

    def test_row_escapes_newlines_and_encodes_json(self, make_entry) -> None:
        row = make_entry("a\nb", context={"path": "/x/é"}).to_row()
        assert row["message"] == f"a{NEWLINE_PLACEHOLDER}b"
        assert row["context"] == '{"path":"/x/é"}'
        assert row["level"] == 200
        assert row["level_name"] == "INFO"

    def test_none_mappings_stay_null(self) -> None:
        entry = LogEntry.create("DATA", "DEBUG", "x")
        row = entry.to_row()
        assert row["context"] is None
        assert row["extra"] is None
        assert LogEntry.from_row(row) == entry

    def test_id_column_is_ignored(self, make_entry) -> None:
        entry = make_entry()
        assert LogEntry.from_row({"id": 42, **entry.to_row()}) == entry

    def test_legacy_level_name_key(self, make_entry) -> None:
        row = make_entry().to_row()
        row["levelName"] = row.pop("level_name")
        assert LogEntry.from_row(row).level is Level.INFO

    def test_level_rank_used_without_level_name(self, make_entry) -> None:
        row = make_entry().to_row()
        del row["level_name"]
        row["level"] = 550
        assert LogEntry.from_row(row).level is Level.ALERT

    def test_malformed_json_degrades_to_empty_mapping(self, make_entry) -> None:
        row = make_entry().to_row()
        row["context"] = "not json"
        row["extra"] = "[1, 2]"
        entry = LogEntry.from_row(row)
        assert entry.context == {}
        assert entry.extra == {}


class TestTextSerialization:
    """to_text / from_block / from_text"""

    def test_round_trip(self, make_entry) -> None:
        entry = make_entry("multi\nline", channel="UCRM", level="WARNING", context={"a": {"b": None}}, extra={"k": "v"})
        assert LogEntry.from_block(entry.to_text()) == entry

    @pytest.mark.parametrize("channel", ["my.app", "plugin sync", "UCRM-2"])
    def test_round_trip_with_unusual_channel_names(self, make_entry, channel: str) -> None:
        entry = make_entry("hi", channel=channel)
        assert LogEntry.from_block(entry.to_text()) == entry

    def test_text_layout(self, make_entry) -> None:
        text = make_entry("a\nb", channel="UCRM", context={"x": 1}).to_text()
        assert text == (
            f"[2024-03-01 09:15:42.123456+00:00] [UCRM.INFO] a{NEWLINE_PLACEHOLDER}b\n"
            '{"x":1}\n'
            "{}\n"
        )

    def test_str_shows_real_newlines(self, make_entry) -> None:
        rendered = str(make_entry("a\nb", channel="UCRM"))
        assert rendered.startswith("[2024-03-01 09:15:42.123456+00:00] [UCRM.INFO] a\nb\n")
        assert NEWLINE_PLACEHOLDER not in rendered

    def test_invalid_context_line_gives_empty_mapping(self) -> None:
        block = '[2024-03-01 09:15:42.123456+00:00] [UCRM.INFO] hi\nnot json\n{"k":1}\n'
        entry = LogEntry.from_block(block)
        assert entry is not None
        assert entry.context == {}
        assert entry.extra == {"k": 1}

    def test_null_mappings_render_as_blank_lines_and_are_skipped(self) -> None:
        entry = LogEntry.create("UCRM", "INFO", "hi")
        assert entry.to_text().endswith("hi\n\n\n")
        assert LogEntry.from_block(entry.to_text()) is None

    def test_block_with_wrong_line_count_is_skipped(self) -> None:
        assert LogEntry.from_block("[2024-03-01 09:15:42.123456+00:00] [UCRM.INFO] hi\n{}\n") is None

    def test_block_without_channel_uses_default(self) -> None:
        block = "[2024-03-01 09:15:42.123456+00:00] [INFO] hi\n{}\n{}\n"
        assert LogEntry.from_block(block) is None
        entry = LogEntry.from_block(block, default_channel="UCRM")
        assert entry is not None
        assert entry.channel == "UCRM"

    def test_unknown_level_name_is_skipped(self) -> None:
        assert LogEntry.from_block("[2024-03-01 09:15:42.123456+00:00] [UCRM.LOUD] hi\n{}\n{}\n") is None

    def test_from_text_parses_every_block(self, make_entry) -> None:
        entries = [make_entry(f"m{i}", channel="UCRM", offset=i) for i in range(3)]
        text = "".join(entry.to_text() for entry in entries)
        assert LogEntry.from_text(text) == entries


class TestDecodeMapping:
    """Unified JSON decoding policy"""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, None),
            ("null", None),
            ('{"a":1}', {"a": 1}),
            ("{}", {}),
            ("[]", {}),
            ('"text"', {}),
            ("not json", {}),
            ("", {}),
        ],
    )
    def test_decode(self, raw, expected) -> None:
        assert decode_mapping(raw) == expected
