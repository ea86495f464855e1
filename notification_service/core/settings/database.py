"""Database settings for the notification job store."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """SQLAlchemy async engine configuration.

    Environment variables use DB_ prefix.
    Example: DB_DATABASE_URL=postgresql+asyncpg://..., DB_ECHO=true

    Any async SQLAlchemy DSN works; the default points at a local SQLite file
    through aiosqlite so the service runs without external infrastructure.
    """

    enabled: bool = Field(
        default=True,
        description="Enable the durable job store (disables /jobs endpoints and the drain scheduler when false)",
    )
    database_url: str = Field(
        default="sqlite+aiosqlite:///./notifications.db",
        min_length=1,
        description="Async SQLAlchemy database URL",
    )
    echo: bool = Field(default=False, description="Log emitted SQL statements")
    pool_pre_ping: bool = Field(
        default=True, description="Test connections for liveness before use"
    )
    create_tables: bool = Field(
        default=True,
        description="Create missing tables on startup (for environments without migrations)",
    )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def is_configured(self) -> bool:
        """Check whether the job store should be used."""
        return self.enabled and bool(self.database_url)

    @property
    def is_sqlite(self) -> bool:
        """Check whether the configured backend is SQLite."""
        return self.database_url.startswith("sqlite")


__all__ = ["DatabaseSettings"]
