"""
RelationalSink tests against a SQLite file.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import func, inspect, insert, select

from ucrm_logging.entry import LogEntry
from ucrm_logging.exceptions import SinkClearError, SinkInitializationError
from ucrm_logging.models import LogRecord
from ucrm_logging.sinks import RelationalSink


@pytest.fixture
def db_file(tmp_path: Path) -> Path:
    return tmp_path / "data" / "plugin.db"


@pytest.fixture
def sink(db_file: Path):
    sink = RelationalSink(f"sqlite:///{db_file}")
    yield sink
    sink.close()


def count_rows(sink: RelationalSink) -> int:
    with sink.engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(LogRecord)).scalar_one()


class TestConstruction:
    """Opening a sink"""

    def test_opening_has_no_side_effect_on_store(self, sink: RelationalSink, db_file: Path) -> None:
        assert db_file.parent.is_dir()
        assert not inspect(sink.engine).has_table("logs")

    def test_unusable_destination_is_fatal(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        with pytest.raises(SinkInitializationError) as exc_info:
            RelationalSink(f"sqlite:///{blocker / 'nested' / 'plugin.db'}")
        assert exc_info.value.code == "SINK_INIT"

    def test_in_memory_database_is_checked(self) -> None:
        sink = RelationalSink("sqlite://")
        assert sink.name == "sqlite://"
        sink.close()


class TestAppendAndLast:
    """append / last_entry"""

    def test_last_entry_on_empty_store_is_none(self, sink: RelationalSink) -> None:
        assert sink.last_entry("HTTP") is None

    def test_append_creates_table_lazily(self, sink: RelationalSink, make_entry) -> None:
        sink.append(make_entry())
        assert inspect(sink.engine).has_table("logs")
        assert count_rows(sink) == 1

    def test_last_entry_returns_appended_entry(self, sink: RelationalSink, make_entry) -> None:
        entry = make_entry("line 1\nline 2", context={"user": "ünï", "path": "/a/b"}, extra={"lineno": 3})
        sink.append(entry)
        assert sink.last_entry("HTTP") == entry

    def test_last_entry_is_most_recent_by_timestamp(self, sink: RelationalSink, make_entry) -> None:
        entries = [make_entry(f"m{i}", offset=i) for i in range(4)]
        for entry in reversed(entries[1:]):
            sink.append(entry)
        sink.append(entries[0])
        assert sink.last_entry("HTTP") == entries[-1]

    def test_equal_timestamps_fall_back_to_insertion_order(self, sink: RelationalSink, make_entry) -> None:
        first = make_entry("first")
        second = make_entry("second")
        sink.append(first)
        sink.append(second)
        assert sink.last_entry("HTTP") == second

    def test_last_entry_is_scoped_to_channel(self, sink: RelationalSink, make_entry) -> None:
        http = make_entry("http", channel="HTTP")
        sink.append(http)
        sink.append(make_entry("rest", channel="REST", offset=1))
        assert sink.last_entry("HTTP") == http
        assert sink.last_entry("DATA") is None

    def test_malformed_json_row_degrades(self, sink: RelationalSink, make_entry) -> None:
        sink.append(make_entry())
        row = make_entry("corrupt", offset=1).to_row()
        row["context"] = "not json"
        with sink.engine.begin() as conn:
            conn.execute(insert(LogRecord).values(**row))
        entry = sink.last_entry("HTTP")
        assert entry is not None
        assert entry.message == "corrupt"
        assert entry.context == {}


class TestClear:
    """clear(channel)"""

    def test_clear_without_table_returns_zero(self, sink: RelationalSink) -> None:
        assert sink.clear("HTTP") == 0
        assert not inspect(sink.engine).has_table("logs")

    def test_clear_removes_only_the_channel(self, sink: RelationalSink, make_entry) -> None:
        for i in range(3):
            sink.append(make_entry(f"http {i}", channel="HTTP", offset=i))
        sink.append(make_entry("rest", channel="REST"))
        assert sink.clear("HTTP") == 3
        assert sink.last_entry("HTTP") is None
        assert sink.last_entry("REST") is not None

    def test_clear_of_empty_channel_returns_zero(self, sink: RelationalSink, make_entry) -> None:
        sink.append(make_entry(channel="REST"))
        assert sink.clear("HTTP") == 0

    def test_channel_value_is_bound_not_interpolated(self, sink: RelationalSink, make_entry) -> None:
        sink.append(make_entry(channel="HTTP"))
        sink.append(make_entry(channel="REST"))
        assert sink.clear("HTTP' OR '1'='1") == 0
        assert count_rows(sink) == 2


class TestMixedOffsets:
    """Ordering across a daylight saving change"""

    def test_most_recent_instant_wins_over_text_order(self, sink: RelationalSink) -> None:
        # 01:10-05:00 is 06:10 UTC, later than 01:30-04:00 (05:30 UTC).
        later = LogEntry.create(
            "HTTP", "INFO", "after fall back", {}, {}, now=datetime(2024, 11, 3, 1, 10, tzinfo=timezone(timedelta(hours=-5)))
        )
        earlier = LogEntry.create(
            "HTTP", "INFO", "before fall back", {}, {}, now=datetime(2024, 11, 3, 1, 30, tzinfo=timezone(timedelta(hours=-4)))
        )
        sink.append(later)
        sink.append(earlier)
        assert sink.last_entry("HTTP") == later


class TestClearFailure:
    def test_database_error_raises_clear_error(self, sink: RelationalSink, make_entry) -> None:
        sink.append(make_entry())
        LogRecord.__table__.drop(sink.engine)
        with pytest.raises(SinkClearError) as exc_info:
            sink.clear("HTTP")
        assert exc_info.value.code == "SINK_CLEAR"
