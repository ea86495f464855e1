"""Repository for the pending-job queue."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import select, update

from notification_service.core.database.repository import BaseRepository
from notification_service.features.jobs.models import NotificationJob
from notification_service.features.jobs.schemas import JobStatus, ensure_transition

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession


class NotificationJobRepository(BaseRepository[NotificationJob]):
    """Repository for NotificationJob model.

    Inherits from BaseRepository:
        - get(session, id) -> NotificationJob | None
        - get_or_raise(session, id) -> NotificationJob
        - create(session, instance) -> NotificationJob

    Status changes go through conditional UPDATEs so two concurrent drains
    can never both own the same job.
    """

    def __init__(self) -> None:
        """Initialize with NotificationJob model."""
        super().__init__(NotificationJob)

    async def enqueue(
        self,
        session: AsyncSession,
        event_type: str,
        payload: dict[str, Any] | None = None,
    ) -> NotificationJob:
        """Create a pending job."""
        job = NotificationJob(
            event_type=event_type,
            payload=payload or {},
            status=JobStatus.PENDING.value,
        )
        return await self.create(session, job)

    async def find_by_status(
        self,
        session: AsyncSession,
        status: JobStatus | str | None = None,
        *,
        limit: int | None = None,
    ) -> Sequence[NotificationJob]:
        """Find jobs, oldest first.

        Args:
            session: Database session
            status: Only jobs with this status (all jobs when None)
            limit: Maximum results

        Returns:
            Jobs ordered by created_at ascending
        """
        stmt = select(NotificationJob).order_by(
            NotificationJob.created_at.asc(), NotificationJob.id.asc()
        )
        if status is not None:
            stmt = stmt.where(NotificationJob.status == str(status))
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await session.execute(stmt)
        items = result.scalars().all()

        self._lazy.debug(
            lambda: f"db.find_by_status: NotificationJob(status={status}) -> {len(items)} items"
        )
        return items

    async def claim(self, session: AsyncSession, job_id: UUID) -> bool:
        """Atomically move a job from pending to processing.

        Returns:
            True if this caller now owns the job, False if another drain
            claimed it first or it is no longer pending.
        """
        stmt = (
            update(NotificationJob)
            .where(
                NotificationJob.id == job_id,
                NotificationJob.status == JobStatus.PENDING.value,
            )
            .values(status=JobStatus.PROCESSING.value, updated_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        claimed = result.rowcount == 1

        self._lazy.debug(lambda: f"db.claim: NotificationJob({job_id}) -> {claimed}")
        return claimed

    async def complete(
        self,
        session: AsyncSession,
        job_id: UUID,
        status: JobStatus,
        error_message: str | None = None,
    ) -> bool:
        """Move a processing job to a terminal status.

        Raises:
            InvalidJobTransition: If ``status`` is not sent or failed.
        """
        ensure_transition(JobStatus.PROCESSING, status)
        stmt = (
            update(NotificationJob)
            .where(
                NotificationJob.id == job_id,
                NotificationJob.status == JobStatus.PROCESSING.value,
            )
            .values(
                status=status.value,
                error_message=error_message,
                updated_at=datetime.now(UTC),
            )
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        updated = result.rowcount == 1

        self._logger.info(
            "Job completed",
            extra={
                "job_id": str(job_id),
                "status": status.value,
                "updated": updated,
                "operation": "db.complete",
            },
        )
        return updated


def get_job_repository() -> NotificationJobRepository:
    """Get a NotificationJobRepository instance.

    Usage in FastAPI routes:
        from notification_service.features.jobs.repository import get_job_repository

        @router.get("/jobs")
        async def list_jobs(
            session: AsyncSession = Depends(get_db_session),
            repo: NotificationJobRepository = Depends(get_job_repository),
        ):
            return await repo.find_by_status(session, "pending")
    """
    return NotificationJobRepository()


__all__ = ["NotificationJobRepository", "get_job_repository"]
