"""Database session management for the notification job store.

The engine is created on first use from ``DatabaseSettings`` so importing
this module never touches the database.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from notification_service.core.settings import get_db_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Return the process-wide async engine, creating it on first call."""
    global _engine
    if _engine is None:
        db_settings = get_db_settings()
        _engine = create_async_engine(
            db_settings.database_url,
            echo=db_settings.echo,
            pool_pre_ping=db_settings.pool_pre_ping,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory bound to the process-wide engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Get async database session.

    Yields:
        Database session that is automatically closed.

    Example:
        async with get_async_session() as session:
            jobs = await repo.find_by_status(session, JobStatus.PENDING)
    """
    async with get_session_factory()() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_database() -> None:
    """Verify connectivity and create missing tables when configured to.

    Raises:
        SQLAlchemyError: If the database cannot be reached.
    """
    from notification_service.core.database.base import Base
    from notification_service.features.jobs import models  # noqa: F401  (register tables)

    db_settings = get_db_settings()
    engine = get_engine()

    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        if db_settings.create_tables:
            await conn.run_sync(Base.metadata.create_all)

    logger.info(
        "Database connection established successfully",
        extra={
            "url": engine.url.render_as_string(hide_password=True),
            "create_tables": db_settings.create_tables,
        },
    )


async def close_database() -> None:
    """Dispose of the engine (application shutdown)."""
    global _engine, _session_factory

    if _engine is None:
        return

    logger.info("Closing database connection")
    await _engine.dispose()
    _engine = None
    _session_factory = None


__all__ = [
    "close_database",
    "get_async_session",
    "get_engine",
    "get_session_factory",
    "init_database",
]
