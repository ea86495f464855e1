"""create notification_jobs

Revision ID: a3f1c9e2b7d4
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a3f1c9e2b7d4"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the pending-job queue table."""
    op.create_table(
        "notification_jobs",
        sa.Column("id", sa.Uuid(), nullable=False, comment="UUID v4 primary key"),
        sa.Column(
            "event_type",
            sa.String(length=100),
            nullable=False,
            comment="Type of event to dispatch",
        ),
        sa.Column(
            "payload",
            postgresql.JSONB(astext_type=sa.Text()).with_variant(sa.JSON(), "sqlite"),
            nullable=False,
            comment="Event payload data",
        ),
        sa.Column(
            "status",
            sa.String(length=20),
            nullable=False,
            comment="Job status: pending, processing, sent, failed",
        ),
        sa.Column(
            "error_message",
            sa.Text(),
            nullable=True,
            comment="First failing integration error",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
            comment="Timestamp of record creation",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
            comment="Timestamp of last update",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_notification_jobs")),
    )
    op.create_index(
        op.f("ix_notification_jobs_event_type"),
        "notification_jobs",
        ["event_type"],
        unique=False,
    )
    op.create_index(
        op.f("ix_notification_jobs_status"),
        "notification_jobs",
        ["status"],
        unique=False,
    )


def downgrade() -> None:
    """Drop the pending-job queue table."""
    op.drop_index(op.f("ix_notification_jobs_status"), table_name="notification_jobs")
    op.drop_index(op.f("ix_notification_jobs_event_type"), table_name="notification_jobs")
    op.drop_table("notification_jobs")
