"""APScheduler integration for the periodic pending-job drain.

The scheduler runs in the API process. When ``DRAIN_SCHEDULER_ENABLED`` is
true a single interval job drains pending notification jobs; ``coalesce``
and ``max_instances=1`` keep drain passes from overlapping.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from notification_service.core.exceptions import StorageError

if TYPE_CHECKING:
    from notification_service.core.settings import DrainSettings
    from notification_service.features.jobs.drainer import PendingJobDrainer

logger = logging.getLogger(__name__)

DRAIN_JOB_ID = "drain_pending_jobs"

scheduler = AsyncIOScheduler(
    timezone="UTC",
    job_defaults={
        "coalesce": True,  # Combine missed runs into one
        "max_instances": 1,  # Never overlap drain passes
        "misfire_grace_time": 60,
    },
)


async def run_scheduled_drain(
    drainer: PendingJobDrainer,
    cancel: asyncio.Event | None = None,
) -> None:
    """Run one drain pass from the scheduler.

    Storage failures are logged and the next interval retries.
    """
    try:
        result = await drainer.drain_pending(cancel=cancel)
    except StorageError as exc:
        logger.error(
            "Scheduled drain aborted",
            extra={"error": exc.detail, "operation": "scheduler.drain"},
        )
        return
    logger.info(
        "Scheduled drain finished",
        extra={"processed": result.processed, "operation": "scheduler.drain"},
    )


def setup_scheduled_jobs(
    drainer: PendingJobDrainer,
    settings: DrainSettings,
    cancel: asyncio.Event | None = None,
) -> None:
    """Register the drain job with APScheduler.

    Call during application startup, before ``start_scheduler()``.
    """
    if not settings.scheduler_enabled:
        logger.info("Drain scheduler disabled, skipping job scheduling")
        return

    scheduler.add_job(
        func=run_scheduled_drain,
        trigger=IntervalTrigger(seconds=settings.interval_seconds),
        args=(drainer, cancel),
        id=DRAIN_JOB_ID,
        name="Drain pending notification jobs",
        misfire_grace_time=settings.misfire_grace_seconds,
        replace_existing=True,
    )
    logger.info(
        f"Scheduled {len(scheduler.get_jobs())} jobs",
        extra={"interval_seconds": settings.interval_seconds},
    )


async def start_scheduler() -> None:
    """Start the APScheduler if any job is registered."""
    if not scheduler.get_jobs():
        logger.debug("No scheduled jobs registered, scheduler not started")
        return
    if not scheduler.running:
        logger.info("Starting APScheduler")
        scheduler.start()
        logger.info(f"APScheduler started with {len(scheduler.get_jobs())} jobs")
    else:
        logger.warning("APScheduler is already running")


async def stop_scheduler() -> None:
    """Stop the APScheduler gracefully."""
    if scheduler.running:
        logger.info("Stopping APScheduler")
        scheduler.shutdown(wait=True)
        logger.info("APScheduler stopped")
    else:
        logger.debug("APScheduler is not running")


__all__ = [
    "DRAIN_JOB_ID",
    "run_scheduled_drain",
    "scheduler",
    "setup_scheduled_jobs",
    "start_scheduler",
    "stop_scheduler",
]
