"""
Database Configuration.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Relational sink connection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="UCRM_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: Optional[str] = Field(
        default=None,
        description="SQLAlchemy URL; defaults to the SQLite file in the plugin data path",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")
