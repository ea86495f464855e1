"""API router for the pending-job queue."""

from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notification_service.core.dependencies.database import get_db_session
from notification_service.core.exceptions import StorageError
from notification_service.features.delivery.dependencies import get_cancel_event
from notification_service.features.jobs.dependencies import get_drainer
from notification_service.features.jobs.drainer import PendingJobDrainer
from notification_service.features.jobs.repository import (
    NotificationJobRepository,
    get_job_repository,
)
from notification_service.features.jobs.schemas import DrainResult, JobCreate, JobRead, JobStatus
from notification_service.infra.logging import get_lazy_logger

router = APIRouter(prefix="/notifications/jobs", tags=["jobs"])

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


@router.post(
    "",
    response_model=JobRead,
    status_code=status.HTTP_201_CREATED,
    summary="Enqueue a notification job",
    description="Store an event for delivery by a later drain pass.",
)
async def enqueue_job(
    payload: JobCreate,
    session: AsyncSession = Depends(get_db_session),
    repo: NotificationJobRepository = Depends(get_job_repository),
) -> JobRead:
    """Create a pending job.

    Raises:
        StorageError: If the job cannot be stored
    """
    try:
        job = await repo.enqueue(session, payload.event_type, payload.event_data)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise StorageError(detail=f"Failed to enqueue job: {exc}") from exc
    return JobRead.model_validate(job)


@router.get(
    "",
    response_model=list[JobRead],
    summary="List notification jobs",
    description="List jobs oldest first, optionally filtered by status.",
)
async def list_jobs(
    status_filter: JobStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=1000),
    session: AsyncSession = Depends(get_db_session),
    repo: NotificationJobRepository = Depends(get_job_repository),
) -> list[JobRead]:
    try:
        jobs = await repo.find_by_status(session, status_filter, limit=limit)
    except SQLAlchemyError as exc:
        raise StorageError(detail=f"Failed to list jobs: {exc}") from exc
    return [JobRead.model_validate(job) for job in jobs]


@router.get(
    "/{job_id}",
    response_model=JobRead,
    summary="Get a notification job",
    responses={404: {"description": "Job not found"}},
)
async def get_job(
    job_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    repo: NotificationJobRepository = Depends(get_job_repository),
) -> JobRead:
    try:
        job = await repo.get_or_raise(session, job_id)
    except SQLAlchemyError as exc:
        raise StorageError(detail=f"Failed to load job: {exc}") from exc
    return JobRead.model_validate(job)


@router.post(
    "/drain",
    response_model=DrainResult,
    summary="Drain pending jobs",
    description="Dispatch every pending job once, oldest first.",
    responses={503: {"description": "Job store unavailable"}},
)
async def drain_jobs(
    drainer: PendingJobDrainer = Depends(get_drainer),
    cancel: asyncio.Event | None = Depends(get_cancel_event),
) -> DrainResult:
    """Run one drain pass.

    Returns:
        Processed count and per-job results
    """
    lazy_logger.debug(lambda: "router.drain_jobs: drain requested")
    return await drainer.drain_pending(cancel=cancel)
