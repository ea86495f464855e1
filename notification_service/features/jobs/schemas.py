"""Schemas and status graph for notification jobs."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from notification_service.core.exceptions import InvalidJobTransition
from notification_service.features.delivery.schemas import SummaryCounts


class JobStatus(StrEnum):
    """Lifecycle of a queued notification job."""

    PENDING = "pending"
    PROCESSING = "processing"
    SENT = "sent"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SENT, JobStatus.FAILED)


ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING}),
    JobStatus.PROCESSING: frozenset({JobStatus.SENT, JobStatus.FAILED}),
    JobStatus.SENT: frozenset(),
    JobStatus.FAILED: frozenset(),
}


def ensure_transition(current: str, target: str) -> None:
    """Raise ``InvalidJobTransition`` unless ``current -> target`` is allowed."""
    try:
        allowed = JobStatus(target) in ALLOWED_TRANSITIONS[JobStatus(current)]
    except ValueError:
        allowed = False
    if not allowed:
        raise InvalidJobTransition(current, target)


class JobCreate(BaseModel):
    """Body of ``POST /notifications/jobs``."""

    model_config = ConfigDict(populate_by_name=True)

    event_type: str = Field(..., min_length=1, max_length=100, alias="eventType")
    event_data: dict[str, Any] = Field(default_factory=dict, alias="eventData")


class JobRead(BaseModel):
    """Notification job as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_type: str
    payload: dict[str, Any]
    status: JobStatus
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime


class DrainJobResult(BaseModel):
    """Result of processing one job during a drain pass."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: UUID = Field(..., alias="jobId")
    event_type: str = Field(..., alias="eventType")
    status: JobStatus
    error: str | None = None
    summary: SummaryCounts | None = None


class DrainResult(BaseModel):
    """Result of one drain pass; ``processed`` counts jobs this pass claimed."""

    processed: int = 0
    results: list[DrainJobResult] = Field(default_factory=list)


__all__ = [
    "ALLOWED_TRANSITIONS",
    "DrainJobResult",
    "DrainResult",
    "JobCreate",
    "JobRead",
    "JobStatus",
    "ensure_transition",
]
