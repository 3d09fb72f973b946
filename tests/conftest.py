from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Iterator

import pytest
import structlog

from ucrm_logging.config import Settings
from ucrm_logging.entry import LogEntry
from ucrm_logging.registry import LoggerRegistry, new_registry

BASE_MOMENT = datetime(2024, 3, 1, 9, 15, 42, 123456, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Undo configure_diagnostics() calls made by a test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def data_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Plugin data directory isolated per test (not created up front)."""
    path = tmp_path / "data"
    monkeypatch.setenv("UCRM_PLUGIN_DATA_PATH", str(path))
    for name in ("UCRM_PLUGIN_TIMEZONE", "UCRM_DB_URL", "UCRM_LOG_LEVEL", "UCRM_LOG_CONSOLE_ECHO"):
        monkeypatch.delenv(name, raising=False)
    return path


@pytest.fixture
def settings(data_path: Path) -> Settings:
    return Settings()


@pytest.fixture
def registry(settings: Settings) -> Iterator[LoggerRegistry]:
    registry = new_registry(settings)
    yield registry
    registry.close()


@pytest.fixture
def make_entry() -> Callable[..., LogEntry]:
    """Entries with deterministic timestamps: the n-th entry is n seconds after BASE_MOMENT."""

    def _make(
        message: str = "hello",
        *,
        channel: str = "HTTP",
        level: Any = "INFO",
        context: Any = None,
        extra: Any = None,
        offset: int = 0,
    ) -> LogEntry:
        return LogEntry.create(
            channel,
            level,
            message,
            {} if context is None else context,
            {} if extra is None else extra,
            now=BASE_MOMENT + timedelta(seconds=offset),
        )

    return _make
