"""
Logging Configuration.
"""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DiagnosticsFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


class LoggingSettings(BaseSettings):
    """Channel and diagnostics logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="UCRM_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    level: str = Field(default="DEBUG", description="Minimum level persisted by the built-in channels")
    console_echo: bool = Field(default=False, description="Mirror built-in channels to stdout")
    diagnostics_level: str = Field(default="WARNING", description="Minimum level of internal diagnostics")
    diagnostics_format: DiagnosticsFormat = Field(default=DiagnosticsFormat.CONSOLE, description="Diagnostics output format")
