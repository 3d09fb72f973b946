"""
Configuration Module.

Nested settings: each concern is an independent sub-settings class with its
own environment variable prefix.

Usage:
    from ucrm_logging.config import settings

    settings.plugin.data_path       # UCRM_PLUGIN_DATA_PATH
    settings.database.url           # UCRM_DB_URL
    settings.logging.console_echo   # UCRM_LOG_CONSOLE_ECHO
"""

from functools import cached_property
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .database import DatabaseSettings
from .logging import DiagnosticsFormat, LoggingSettings
from .plugin import PluginSettings


class Settings(BaseSettings):
    """Composite settings aggregating the plugin, database and logging domains."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @cached_property
    def plugin(self) -> PluginSettings:
        return PluginSettings()

    @cached_property
    def database(self) -> DatabaseSettings:
        return DatabaseSettings()

    @cached_property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()

    @property
    def database_url(self) -> str:
        """Configured URL, or the SQLite file inside the data path."""
        return self.database.url or f"sqlite:///{self.plugin.database_file}"

    @property
    def timezone(self) -> Optional[str]:
        return self.plugin.timezone


# Singleton instance
settings = Settings()

__all__ = [
    "Settings",
    "settings",
    "PluginSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "DiagnosticsFormat",
]
