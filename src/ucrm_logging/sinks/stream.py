"""
Stream sink: entries rendered as text blocks into a file or a console stream.
"""

from __future__ import annotations

import fcntl
import os
import sys
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, Iterator, Optional

from ucrm_logging.diagnostics import get_logger
from ucrm_logging.entry import LogEntry
from ucrm_logging.exceptions import (
    SinkClearError,
    SinkInitializationError,
    SinkWriteError,
    UnsupportedSinkOperation,
)
from ucrm_logging.formatting import LineFormatter
from ucrm_logging.parser import parse_entries, scan_blocks

from .base import BaseSink

logger = get_logger("ucrm_logging.sinks.stream")


class StreamSink(BaseSink):
    """Append-only text destination.

    File destinations are written under an in-process lock plus an exclusive
    `flock`, so concurrent appenders never interleave partial blocks. Console
    destinations can only be appended to.

    Args:
        path: Log file path (mutually exclusive with `stream`)
        stream: Console stream such as sys.stdout
        formatter: Block renderer (default: channel line template)
    """

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        stream: Any = None,
        formatter: Optional[LineFormatter] = None,
        encoding: str = "utf-8",
    ):
        if (path is None) == (stream is None):
            raise ValueError("StreamSink needs exactly one of 'path' or 'stream'")
        self._path = Path(path) if path is not None else None
        self._stream = stream
        self._formatter = formatter or LineFormatter()
        self._encoding = encoding
        self._lock = threading.Lock()
        if self._path is not None:
            self._prepare_directory(self._path)

    @classmethod
    def for_file(cls, path: str | Path, formatter: Optional[LineFormatter] = None) -> StreamSink:
        return cls(path, formatter=formatter)

    @classmethod
    def for_console(cls, stream: Any = None, formatter: Optional[LineFormatter] = None) -> StreamSink:
        return cls(stream=stream if stream is not None else sys.stdout, formatter=formatter)

    @property
    def name(self) -> str:
        if self._path is not None:
            return str(self._path)
        return str(getattr(self._stream, "name", "<stream>"))

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def is_console(self) -> bool:
        return self._path is None

    def _prepare_directory(self, path: Path) -> None:
        if path.is_dir():
            raise SinkInitializationError(sink=self.name, reason="path is a directory")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SinkInitializationError(sink=self.name, reason=str(exc)) from exc
        if not os.access(path.parent, os.W_OK):
            raise SinkInitializationError(sink=self.name, reason=f"directory '{path.parent}' is not writable")

    def _open(self, path: Path, mode: str) -> IO[str]:
        # newline="" keeps "\r" inside messages; undecodable bytes are replaced, never raised.
        return open(path, mode, encoding=self._encoding, errors="replace", newline="")

    @contextmanager
    def _locked(self, path: Path, mode: str, operation: int = fcntl.LOCK_EX) -> Iterator[IO[str]]:
        """Open the file and hold both the thread lock and an advisory lock."""
        with self._lock, self._open(path, mode) as handle:
            fcntl.flock(handle.fileno(), operation)
            try:
                yield handle
            finally:
                handle.flush()
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def ensure_exists(self) -> bool:
        """Create the file when missing; returns True if it was created."""
        if self._path is None:
            return False
        try:
            with self._lock, self._open(self._path, "x"):
                pass
        except FileExistsError:
            return False
        except OSError as exc:
            raise SinkInitializationError(sink=self.name, reason=str(exc)) from exc
        logger.debug("stream_sink_file_created", sink=self.name)
        return True

    def append(self, entry: LogEntry) -> None:
        text = self._formatter.format(entry)
        try:
            if self._path is None:
                with self._lock:
                    self._stream.write(text)
                    self._stream.flush()
                return
            with self._locked(self._path, "a") as handle:
                handle.write(text)
        except (OSError, ValueError) as exc:
            raise SinkWriteError(sink=self.name, channel=entry.channel, reason=str(exc)) from exc

    def clear(self) -> int:
        """Truncate the file; returns the number of blocks removed.

        Missing or empty files are a no-op. Console streams cannot be cleared.
        """
        if self._path is None:
            raise UnsupportedSinkOperation(sink=self.name, operation="clear")
        if not self._path.exists():
            return 0
        try:
            with self._locked(self._path, "r+") as handle:
                removed = sum(1 for _ in scan_blocks(handle.read()))
                handle.seek(0)
                handle.truncate()
        except OSError as exc:
            raise SinkClearError(sink=self.name, reason=str(exc)) from exc
        return removed

    def read_text(self) -> str:
        if self._path is None or not self._path.exists():
            return ""
        with self._locked(self._path, "r", fcntl.LOCK_SH) as handle:
            return handle.read()

    def read_entries(self, channel: Optional[str] = None) -> list[LogEntry]:
        """Every parsable entry in file order, optionally only those of `channel`."""
        entries = parse_entries(self.read_text(), default_channel=channel)
        return [entry for entry in entries if channel is None or entry.channel == channel]

    def last_entry(self, channel: Optional[str] = None) -> Optional[LogEntry]:
        """Last parsable entry; the whole file is read since records have no index."""
        entries = self.read_entries(channel)
        return entries[-1] if entries else None

    def close(self) -> None:
        if self._stream is not None:
            self._stream.flush()
