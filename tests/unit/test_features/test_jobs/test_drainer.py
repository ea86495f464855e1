"""Tests for draining pending jobs through the dispatcher."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
import json

import httpx
import pytest

from notification_service.core.database.base import Base
from notification_service.core.exceptions import StorageError
from notification_service.features.delivery import NotificationDispatcher
from notification_service.features.integrations import IntegrationRegistry
from notification_service.features.jobs import (
    JobStatus,
    NotificationJobRepository,
    PendingJobDrainer,
)


def _fail_flagged(request: httpx.Request) -> httpx.Response:
    if json.loads(request.content)["data"].get("fail"):
        return httpx.Response(500, text="upstream down")
    return httpx.Response(200, text="ok")


async def _enqueue(session_factory, *payloads: dict) -> list:
    repo = NotificationJobRepository()
    start = datetime(2026, 10, 18, 9, 0, tzinfo=UTC)
    jobs = []
    async with session_factory() as session:
        for offset, payload in enumerate(payloads):
            job = await repo.enqueue(session, "signup", payload)
            job.created_at = start + timedelta(seconds=offset)
            jobs.append(job)
        await session.commit()
    return [job.id for job in jobs]


async def _statuses(session_factory) -> dict:
    async with session_factory() as session:
        jobs = await NotificationJobRepository().find_by_status(session)
        return {job.id: (job.status, job.error_message) for job in jobs}


async def test_drain_marks_each_job_sent_or_failed(
    session_factory, http_factory, make_integration, delivery_settings
) -> None:
    ana_id, rui_id, bad_id = await _enqueue(
        session_factory, {"userName": "Ana"}, {"userName": "Rui"}, {"fail": True}
    )
    client, _ = http_factory(_fail_flagged)
    dispatcher = NotificationDispatcher(
        IntegrationRegistry([make_integration("crm")]), delivery_settings, client=client
    )

    result = await PendingJobDrainer(session_factory, dispatcher).drain_pending()

    assert result.processed == 3
    assert [r.job_id for r in result.results] == [ana_id, rui_id, bad_id]
    assert [r.status for r in result.results] == [JobStatus.SENT, JobStatus.SENT, JobStatus.FAILED]
    assert result.results[0].summary.successful == 1
    assert result.results[2].error == "HTTP 500: upstream down"

    statuses = await _statuses(session_factory)
    assert statuses[ana_id] == (JobStatus.SENT, None)
    assert statuses[rui_id] == (JobStatus.SENT, None)
    assert statuses[bad_id] == (JobStatus.FAILED, "HTTP 500: upstream down")


async def test_second_drain_finds_nothing(
    session_factory, http_factory, make_integration, delivery_settings
) -> None:
    await _enqueue(session_factory, {"userName": "Ana"})
    client, transport = http_factory(lambda r: httpx.Response(200))
    dispatcher = NotificationDispatcher(
        IntegrationRegistry([make_integration("crm")]), delivery_settings, client=client
    )
    drainer = PendingJobDrainer(session_factory, dispatcher)

    first = await drainer.drain_pending()
    second = await drainer.drain_pending()

    assert first.processed == 1
    assert second.processed == 0
    assert second.results == []
    assert len(transport.requests) == 1


async def test_job_claimed_elsewhere_is_skipped(
    session_factory, http_factory, make_integration, delivery_settings
) -> None:
    taken_id, free_id = await _enqueue(session_factory, {"n": 1}, {"n": 2})

    class RacingRepository(NotificationJobRepository):
        async def claim(self, session, job_id):
            if job_id == taken_id:
                # Another drain wins the race for this job
                async with session_factory() as other:
                    await NotificationJobRepository.claim(self, other, job_id)
                    await other.commit()
            return await super().claim(session, job_id)

    client, transport = http_factory(lambda r: httpx.Response(200))
    dispatcher = NotificationDispatcher(
        IntegrationRegistry([make_integration("crm")]), delivery_settings, client=client
    )

    result = await PendingJobDrainer(
        session_factory, dispatcher, repository=RacingRepository()
    ).drain_pending()

    assert result.processed == 1
    assert [r.job_id for r in result.results] == [free_id]
    assert len(transport.requests) == 1
    statuses = await _statuses(session_factory)
    assert statuses[taken_id][0] == JobStatus.PROCESSING


async def test_invalid_integration_marks_job_failed(
    session_factory, http_factory, make_integration, delivery_settings
) -> None:
    [job_id] = await _enqueue(session_factory, {"userName": "Ana"})
    client, transport = http_factory(lambda r: httpx.Response(200))
    registry = IntegrationRegistry(
        [make_integration("wa", channel="whatsapp", config={"phone_numbers": ["123"]})]
    )
    dispatcher = NotificationDispatcher(registry, delivery_settings, client=client)

    result = await PendingJobDrainer(session_factory, dispatcher).drain_pending()

    assert result.results[0].status is JobStatus.FAILED
    assert result.results[0].error == "WhatsApp API token and instance ID are required"
    assert result.results[0].summary is None
    assert transport.requests == []
    statuses = await _statuses(session_factory)
    assert statuses[job_id][0] == JobStatus.FAILED


async def test_unreadable_store_raises_storage_error(
    db_engine, session_factory, delivery_settings
) -> None:
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    dispatcher = NotificationDispatcher(IntegrationRegistry(), delivery_settings)

    with pytest.raises(StorageError) as exc_info:
        await PendingJobDrainer(session_factory, dispatcher).drain_pending()

    assert exc_info.value.status_code == 503
    assert exc_info.value.detail.startswith("Failed to read pending jobs")


async def test_cancelled_drain_leaves_jobs_pending(
    session_factory, http_factory, make_integration, delivery_settings
) -> None:
    job_ids = await _enqueue(session_factory, {"n": 1}, {"n": 2}, {"n": 3})
    client, transport = http_factory(lambda r: httpx.Response(200))
    dispatcher = NotificationDispatcher(
        IntegrationRegistry([make_integration("crm")]), delivery_settings, client=client
    )
    cancel = asyncio.Event()
    cancel.set()

    result = await PendingJobDrainer(session_factory, dispatcher).drain_pending(cancel=cancel)

    assert result.processed == 0
    assert result.results == []
    assert transport.requests == []
    statuses = await _statuses(session_factory)
    assert [statuses[job_id] for job_id in job_ids] == [(JobStatus.PENDING, None)] * 3


async def test_unexpected_dispatch_error_fails_job_and_continues(
    session_factory, http_factory, make_integration, delivery_settings
) -> None:
    broken_id, ok_id = await _enqueue(session_factory, {"boom": True}, {"userName": "Ana"})

    class ExplodingDispatcher(NotificationDispatcher):
        async def dispatch(self, event, policy=None, **kwargs):
            if event.payload.get("boom"):
                raise RuntimeError("renderer exploded")
            return await super().dispatch(event, policy, **kwargs)

    client, transport = http_factory(lambda r: httpx.Response(200))
    dispatcher = ExplodingDispatcher(
        IntegrationRegistry([make_integration("crm")]), delivery_settings, client=client
    )

    result = await PendingJobDrainer(session_factory, dispatcher).drain_pending()

    assert result.processed == 2
    assert [r.status for r in result.results] == [JobStatus.FAILED, JobStatus.SENT]
    assert result.results[0].error == "Dispatch error: RuntimeError('renderer exploded')"
    assert result.results[0].summary is None
    assert len(transport.requests) == 1
    statuses = await _statuses(session_factory)
    assert statuses[broken_id] == (JobStatus.FAILED, "Dispatch error: RuntimeError('renderer exploded')")
    assert statuses[ok_id] == (JobStatus.SENT, None)
