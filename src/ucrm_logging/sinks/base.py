"""
Sink abstraction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ucrm_logging.entry import LogEntry


class BaseSink(ABC):
    """Physical persistence backing shared by one or more channel loggers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable identifier of the destination."""
        ...

    @abstractmethod
    def append(self, entry: LogEntry) -> None:
        """Persist one entry; raises SinkWriteError on failure."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release resources held by the sink."""
        ...

    def __enter__(self) -> BaseSink:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
