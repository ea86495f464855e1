"""Database dependencies for FastAPI route handlers.

Two session getters exist:

1. ``get_db_session()`` (this module): FastAPI dependency, lifecycle tied
   to the HTTP request. Use with ``Depends(get_db_session)``.
2. ``get_async_session()`` (infra.database): framework-agnostic context
   manager for the CLI and the scheduled drain.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from notification_service.core.exceptions import StorageError
from notification_service.core.settings import get_db_settings
from notification_service.infra.database import get_async_session


def require_job_store() -> None:
    """Raise ``StorageError`` when the job store is disabled."""
    if not get_db_settings().is_configured:
        raise StorageError(detail="Job store is disabled")


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency for database session.

    Yields:
        Database session that is automatically closed after request.

    Raises:
        StorageError: If the job store is disabled.
    """
    require_job_store()
    async with get_async_session() as session:
        yield session
