"""Tests for the job repository and status graph."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from notification_service.core.exceptions import InvalidJobTransition
from notification_service.features.jobs import (
    JobStatus,
    NotificationJob,
    NotificationJobRepository,
)
from notification_service.features.jobs.schemas import ensure_transition


@pytest.fixture
def repo() -> NotificationJobRepository:
    return NotificationJobRepository()


async def test_enqueue_creates_pending_job(db_session, repo) -> None:
    job = await repo.enqueue(db_session, "signup", {"userName": "Ana"})

    assert job.id is not None
    assert job.status == JobStatus.PENDING
    assert job.payload == {"userName": "Ana"}
    assert job.error_message is None
    assert job.created_at is not None


async def test_find_by_status_is_oldest_first(db_session, repo) -> None:
    now = datetime.now(UTC)
    for offset, event_type in ((2, "newest"), (0, "oldest"), (1, "middle")):
        await repo.create(
            db_session,
            NotificationJob(
                event_type=event_type,
                payload={},
                status=JobStatus.PENDING.value,
                created_at=now + timedelta(seconds=offset),
            ),
        )
    await repo.create(
        db_session,
        NotificationJob(event_type="done", payload={}, status=JobStatus.SENT.value),
    )

    pending = await repo.find_by_status(db_session, JobStatus.PENDING)
    everything = await repo.find_by_status(db_session)
    limited = await repo.find_by_status(db_session, "pending", limit=2)

    assert [j.event_type for j in pending] == ["oldest", "middle", "newest"]
    assert len(everything) == 4
    assert [j.event_type for j in limited] == ["oldest", "middle"]


async def test_claim_is_exclusive(session_factory, repo) -> None:
    async with session_factory() as session:
        job = await repo.enqueue(session, "signup")
        await session.commit()

    async with session_factory() as first:
        assert await repo.claim(first, job.id) is True
        await first.commit()

    async with session_factory() as second:
        assert await repo.claim(second, job.id) is False
        await second.commit()

    async with session_factory() as session:
        stored = await repo.get(session, job.id)
        assert stored.status == JobStatus.PROCESSING


async def test_complete_moves_processing_job_to_terminal(session_factory, repo) -> None:
    async with session_factory() as session:
        job = await repo.enqueue(session, "signup")
        await repo.claim(session, job.id)
        updated = await repo.complete(session, job.id, JobStatus.FAILED, "HTTP 500: down")
        await session.commit()

    assert updated is True
    async with session_factory() as session:
        stored = await repo.get(session, job.id)
        assert stored.status == JobStatus.FAILED
        assert stored.error_message == "HTTP 500: down"


async def test_complete_ignores_job_that_was_never_claimed(db_session, repo) -> None:
    job = await repo.enqueue(db_session, "signup")

    assert await repo.complete(db_session, job.id, JobStatus.SENT) is False


async def test_complete_rejects_non_terminal_target(db_session, repo) -> None:
    job = await repo.enqueue(db_session, "signup")

    with pytest.raises(InvalidJobTransition):
        await repo.complete(db_session, job.id, JobStatus.PENDING)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        ("pending", "processing"),
        ("processing", "sent"),
        ("processing", "failed"),
    ],
)
def test_allowed_transitions(current: str, target: str) -> None:
    ensure_transition(current, target)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        ("pending", "sent"),
        ("sent", "pending"),
        ("failed", "processing"),
        ("processing", "pending"),
        ("pending", "archived"),
    ],
)
def test_disallowed_transitions(current: str, target: str) -> None:
    with pytest.raises(InvalidJobTransition) as exc_info:
        ensure_transition(current, target)

    assert exc_info.value.status_code == 409
    assert exc_info.value.detail == f"Invalid job status transition: {current} -> {target}"


def test_terminal_statuses() -> None:
    assert JobStatus.SENT.is_terminal
    assert JobStatus.FAILED.is_terminal
    assert not JobStatus.PENDING.is_terminal
