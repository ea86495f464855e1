"""FastAPI dependencies for the jobs feature."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notification_service.core.dependencies.database import require_job_store
from notification_service.features.delivery.dependencies import get_dispatcher
from notification_service.features.delivery.dispatcher import NotificationDispatcher
from notification_service.features.jobs.drainer import PendingJobDrainer
from notification_service.infra.database import get_session_factory


def get_job_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory used by drain passes (one session per job step)."""
    require_job_store()
    return get_session_factory()


def get_drainer(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_job_session_factory),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> PendingJobDrainer:
    return PendingJobDrainer(session_factory, dispatcher)


__all__ = ["get_drainer", "get_job_session_factory"]
