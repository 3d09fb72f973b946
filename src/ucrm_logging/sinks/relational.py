"""
Relational sink: entries stored as rows of the `logs` table.
"""

from __future__ import annotations

import os
import threading
from typing import Optional

from sqlalchemy import Engine, delete, func, insert, inspect, select
from sqlalchemy.exc import SQLAlchemyError

from ucrm_logging.constants import LOGS_TABLE
from ucrm_logging.db import create_log_engine, create_session_factory, sqlite_file
from ucrm_logging.diagnostics import get_logger
from ucrm_logging.entry import LogEntry
from ucrm_logging.exceptions import SinkClearError, SinkInitializationError, SinkWriteError
from ucrm_logging.models import Base, LogRecord

from .base import BaseSink

logger = get_logger("ucrm_logging.sinks.relational")


class RelationalSink(BaseSink):
    """Append-only row store partitioned by the `channel` column.

    The table is created on first write, so opening the sink leaves the store
    untouched. Every value reaches the database as a bound parameter.
    """

    def __init__(self, url: str, *, echo: bool = False, engine: Optional[Engine] = None):
        self._url = url
        self._engine = engine or create_log_engine(url, echo=echo)
        self._session_factory = create_session_factory(self._engine)
        self._schema_ready = False
        self._schema_lock = threading.Lock()
        self._verify_destination()

    @property
    def name(self) -> str:
        return self._engine.url.render_as_string(hide_password=True)

    @property
    def engine(self) -> Engine:
        return self._engine

    def _verify_destination(self) -> None:
        path = sqlite_file(self._url)
        if path is not None:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise SinkInitializationError(sink=self.name, reason=str(exc)) from exc
            if not os.access(path.parent, os.W_OK):
                raise SinkInitializationError(sink=self.name, reason=f"directory '{path.parent}' is not writable")
            return

        try:
            with self._engine.connect():
                pass
        except SQLAlchemyError as exc:
            raise SinkInitializationError(sink=self.name, reason=str(exc)) from exc

    # -------------------------------------------------------------------------
    # Schema
    # -------------------------------------------------------------------------

    def ensure_schema(self) -> None:
        """Create the `logs` table if it does not exist yet (idempotent)."""
        if self._schema_ready:
            return
        with self._schema_lock:
            if self._schema_ready:
                return
            Base.metadata.create_all(self._engine, tables=[LogRecord.__table__])
            self._schema_ready = True
            logger.debug("relational_sink_schema_ready", sink=self.name, table=LOGS_TABLE)

    def _has_table(self) -> bool:
        if not self._schema_ready and inspect(self._engine).has_table(LOGS_TABLE):
            self._schema_ready = True
        return self._schema_ready

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def append(self, entry: LogEntry) -> None:
        try:
            self.ensure_schema()
            with self._session_factory() as db:
                db.execute(insert(LogRecord).values(**entry.to_row()))
                db.commit()
        except SQLAlchemyError as exc:
            raise SinkWriteError(sink=self.name, channel=entry.channel, reason=str(exc)) from exc

    def clear(self, channel: str) -> int:
        """Delete every row of `channel`; returns the number of rows removed."""
        try:
            if not self._has_table():
                return 0
            with self._session_factory() as db:
                stmt = (
                    delete(LogRecord)
                    .where(LogRecord.channel == channel)
                    .execution_options(synchronize_session=False)
                )
                result = db.execute(stmt)
                db.commit()
                return max(result.rowcount or 0, 0)
        except SQLAlchemyError as exc:
            raise SinkClearError(sink=self.name, reason=str(exc)) from exc

    def last_entry(self, channel: str) -> Optional[LogEntry]:
        """Most recent entry of `channel`, or None."""
        if not self._has_table():
            return None
        order = [LogRecord.timestamp.desc(), LogRecord.id.desc()]
        if self._engine.dialect.name == "sqlite":
            # julianday() applies the UTC offset, so mixed offsets still sort by instant.
            order.insert(0, func.julianday(LogRecord.timestamp).desc())
        with self._session_factory() as db:
            stmt = select(LogRecord).where(LogRecord.channel == channel).order_by(*order).limit(1)
            record = db.execute(stmt).scalar_one_or_none()
            if record is None:
                return None
            return LogEntry.from_row(record.to_dict())

    def close(self) -> None:
        self._engine.dispose()
