"""Drain pending notification jobs through the dispatcher."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from notification_service.core.exceptions import InputError, StorageError
from notification_service.features.delivery.metrics import jobs_drained_total
from notification_service.features.delivery.schemas import Event, SummaryCounts
from notification_service.features.jobs.repository import NotificationJobRepository
from notification_service.features.jobs.schemas import DrainJobResult, DrainResult, JobStatus
from notification_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    import asyncio
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from notification_service.features.delivery.dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class PendingJobDrainer:
    """Process every pending job once, oldest first.

    Each job is claimed with a conditional update and committed before it
    is dispatched, so a concurrent drain skips it. A job whose dispatch
    fails or raises is marked failed; only storage failures abort the pass.
    Once ``cancel`` is set no further jobs are claimed, so the rest stay
    pending for the next pass.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dispatcher: NotificationDispatcher,
        repository: NotificationJobRepository | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.dispatcher = dispatcher
        self.repository = repository or NotificationJobRepository()

    async def drain_pending(self, *, cancel: asyncio.Event | None = None) -> DrainResult:
        """Run one drain pass.

        Returns:
            Per-job results for the jobs this pass claimed

        Raises:
            StorageError: If the job store cannot be read or updated.
        """
        try:
            async with self.session_factory() as session:
                jobs = await self.repository.find_by_status(session, JobStatus.PENDING)
                pending = [(job.id, job.event_type, dict(job.payload or {})) for job in jobs]
        except SQLAlchemyError as exc:
            raise self._storage_error("read pending jobs", exc) from exc

        logger.info(
            "Drain started",
            extra={"pending_count": len(pending), "operation": "drainer.drain_pending"},
        )

        result = DrainResult()
        for job_id, event_type, payload in pending:
            if cancel is not None and cancel.is_set():
                logger.info(
                    "Drain cancelled, leaving remaining jobs pending",
                    extra={
                        "processed": result.processed,
                        "operation": "drainer.drain_pending",
                    },
                )
                break
            job_result = await self._process(job_id, event_type, payload, cancel)
            if job_result is None:
                jobs_drained_total.labels(status="skipped").inc()
                continue
            jobs_drained_total.labels(status=job_result.status.value).inc()
            result.results.append(job_result)
            result.processed += 1

        logger.info(
            "Drain completed",
            extra={
                "processed": result.processed,
                "failed": sum(1 for r in result.results if r.status is JobStatus.FAILED),
                "operation": "drainer.drain_pending",
            },
        )
        return result

    async def _process(
        self,
        job_id: UUID,
        event_type: str,
        payload: dict,
        cancel: asyncio.Event | None,
    ) -> DrainJobResult | None:
        try:
            async with self.session_factory() as session:
                claimed = await self.repository.claim(session, job_id)
                await session.commit()
        except SQLAlchemyError as exc:
            raise self._storage_error("claim job", exc, job_id=job_id) from exc

        if not claimed:
            lazy_logger.debug(lambda: f"drainer.claim: job {job_id} already claimed, skipping")
            return None

        summary_counts = None
        try:
            summary = await self.dispatcher.dispatch(
                Event(event_type=event_type, payload=payload),
                cancel=cancel,
            )
        except InputError as exc:
            status, error = JobStatus.FAILED, exc.detail
            logger.warning(
                "Job rejected by dispatcher",
                extra={"job_id": str(job_id), "error": exc.detail, "operation": "drainer.process"},
            )
        except Exception as exc:
            status, error = JobStatus.FAILED, f"Dispatch error: {exc!r}"
            logger.error(
                "Job dispatch raised",
                extra={"job_id": str(job_id), "error": repr(exc), "operation": "drainer.process"},
                exc_info=True,
            )
        else:
            summary_counts = SummaryCounts(
                total=summary.total,
                successful=summary.successful,
                failed=summary.failed,
            )
            if summary.failed == 0:
                status, error = JobStatus.SENT, None
            else:
                status, error = JobStatus.FAILED, summary.first_error

        try:
            async with self.session_factory() as session:
                await self.repository.complete(session, job_id, status, error)
                await session.commit()
        except SQLAlchemyError as exc:
            raise self._storage_error("complete job", exc, job_id=job_id) from exc

        return DrainJobResult(
            job_id=job_id,
            event_type=event_type,
            status=status,
            error=error,
            summary=summary_counts,
        )

    def _storage_error(
        self,
        action: str,
        exc: SQLAlchemyError,
        *,
        job_id: UUID | None = None,
    ) -> StorageError:
        logger.error(
            "Job store failure",
            extra={
                "action": action,
                "job_id": str(job_id) if job_id else None,
                "error": str(exc),
                "operation": "drainer.drain_pending",
            },
        )
        return StorageError(
            detail=f"Failed to {action}: {exc}",
            extra={"job_id": str(job_id)} if job_id else None,
        )


__all__ = ["PendingJobDrainer"]
