"""
Plugin Configuration.

Answers the two questions the host plugin runtime is normally asked:
where the writable data directory is and which timezone to display.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PluginSettings(BaseSettings):
    """Data directory and display timezone."""

    model_config = SettingsConfigDict(
        env_prefix="UCRM_PLUGIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_path: Path = Field(default=Path("data"), description="Writable directory for log files and databases")
    timezone: Optional[str] = Field(default=None, description="IANA timezone for timestamps, UTC when unset")
    log_file_name: str = Field(default="plugin.log", description="Text log file for file-backed channels")
    database_file_name: str = Field(default="plugin.db", description="SQLite file for database-backed channels")

    @property
    def log_file(self) -> Path:
        return self.data_path / self.log_file_name

    @property
    def database_file(self) -> Path:
        return self.data_path / self.database_file_name
