"""Durable pending-job queue drained through the dispatcher."""

from notification_service.features.jobs.drainer import PendingJobDrainer
from notification_service.features.jobs.models import NotificationJob
from notification_service.features.jobs.repository import (
    NotificationJobRepository,
    get_job_repository,
)
from notification_service.features.jobs.schemas import (
    DrainJobResult,
    DrainResult,
    JobCreate,
    JobRead,
    JobStatus,
)

__all__ = [
    "DrainJobResult",
    "DrainResult",
    "JobCreate",
    "JobRead",
    "JobStatus",
    "NotificationJob",
    "NotificationJobRepository",
    "PendingJobDrainer",
    "get_job_repository",
]
