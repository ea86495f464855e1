"""SQLAlchemy models for the pending-job queue."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from notification_service.core.database import Base, TimestampMixin, UUIDPKMixin


class NotificationJob(Base, UUIDPKMixin, TimestampMixin):
    """A durable request to dispatch an event later.

    Status moves ``pending -> processing -> sent | failed``. The move to
    ``processing`` is a conditional update so only one drain can own a job.
    """

    __tablename__ = "notification_jobs"

    event_type: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True, comment="Type of event to dispatch"
    )
    payload: Mapped[dict[str, Any]] = mapped_column(
        JSONB().with_variant(JSON(), "sqlite"),
        nullable=False,
        default=dict,
        comment="Event payload data",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
        index=True,
        comment="Job status: pending, processing, sent, failed",
    )
    error_message: Mapped[str | None] = mapped_column(
        Text(), nullable=True, comment="First failing integration error"
    )

    def __repr__(self) -> str:
        return f"<NotificationJob(id={self.id}, event_type={self.event_type}, status={self.status})>"
