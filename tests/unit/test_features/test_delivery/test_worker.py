"""Unit tests for the per-integration retry loop."""

from __future__ import annotations

import asyncio

import httpx

from notification_service.features.delivery import RetryPolicy
from notification_service.features.delivery.channels import build_adapters
from notification_service.features.delivery.schemas import AttemptOutcome, DeliveryAttempt
from notification_service.features.delivery.worker import CANCELLED_ERROR, DeliveryWorker
from notification_service.features.integrations import ChannelType


class ScriptedChannel:
    """Adapter returning a fixed sequence of outcomes."""

    channel = ChannelType.WEBHOOK

    def __init__(self, outcomes: list[AttemptOutcome]) -> None:
        self.outcomes = outcomes
        self.calls = 0

    def validate(self, integration, event) -> None:
        pass

    async def attempt(self, integration, event, attempt_number: int) -> DeliveryAttempt:
        self.calls += 1
        outcome = self.outcomes[min(attempt_number, len(self.outcomes)) - 1]
        return DeliveryAttempt(
            integration_id=integration.id,
            attempt_number=attempt_number,
            outcome=outcome,
            status_code=200 if outcome is AttemptOutcome.SUCCESS else 503,
            error=None if outcome is AttemptOutcome.SUCCESS else f"failure {attempt_number}",
            response_excerpt="ok" if outcome is AttemptOutcome.SUCCESS else None,
        )


async def test_permanent_http_error_exhausts_attempts(
    http_factory, make_integration, sample_event, delivery_settings
) -> None:
    client, transport = http_factory(lambda r: httpx.Response(500, text="internal"))
    worker = DeliveryWorker(build_adapters(client, delivery_settings))

    outcome = await worker.deliver(
        make_integration("crm", name="CRM"),
        sample_event,
        RetryPolicy(max_retries=2, retry_delay_seconds=0),
    )

    assert outcome.success is False
    assert outcome.attempts == 3
    assert len(transport.requests) == 3
    assert [a.outcome for a in outcome.attempt_log] == [AttemptOutcome.HTTP_ERROR] * 3
    assert [a.attempt_number for a in outcome.attempt_log] == [1, 2, 3]
    assert outcome.last_error == "HTTP 500: internal"


async def test_success_on_third_attempt_stops_retrying(make_integration, sample_event) -> None:
    adapter = ScriptedChannel(
        [AttemptOutcome.TRANSPORT_ERROR, AttemptOutcome.HTTP_ERROR, AttemptOutcome.SUCCESS]
    )
    worker = DeliveryWorker({ChannelType.WEBHOOK: adapter})

    outcome = await worker.deliver(
        make_integration(), sample_event, RetryPolicy(max_retries=3, retry_delay_seconds=0)
    )

    assert outcome.success is True
    assert outcome.attempts == 3
    assert adapter.calls == 3
    assert outcome.last_error is None
    assert outcome.response == "ok"


async def test_zero_retries_makes_single_attempt(make_integration, sample_event) -> None:
    adapter = ScriptedChannel([AttemptOutcome.HTTP_ERROR])
    worker = DeliveryWorker({ChannelType.WEBHOOK: adapter})

    outcome = await worker.deliver(
        make_integration(), sample_event, RetryPolicy(max_retries=0, retry_delay_seconds=0)
    )

    assert outcome.attempts == 1
    assert outcome.success is False
    assert outcome.last_error == "failure 1"


async def test_cancel_during_backoff_keeps_completed_attempts(
    make_integration, sample_event
) -> None:
    cancel = asyncio.Event()
    adapter = ScriptedChannel([AttemptOutcome.HTTP_ERROR])
    worker = DeliveryWorker({ChannelType.WEBHOOK: adapter})
    log: list[DeliveryAttempt] = []

    async def _cancel_soon() -> None:
        await asyncio.sleep(0.05)
        cancel.set()

    canceller = asyncio.create_task(_cancel_soon())
    outcome = await asyncio.wait_for(
        worker.deliver(
            make_integration(),
            sample_event,
            RetryPolicy(max_retries=5, retry_delay_seconds=30),
            log=log,
            cancel=cancel,
        ),
        timeout=5,
    )
    await canceller

    assert outcome.success is False
    assert outcome.last_error == CANCELLED_ERROR
    assert outcome.attempts == 1
    assert len(log) == 1
    assert adapter.calls == 1


async def test_already_cancelled_makes_no_attempt(make_integration, sample_event) -> None:
    cancel = asyncio.Event()
    cancel.set()
    adapter = ScriptedChannel([AttemptOutcome.SUCCESS])
    worker = DeliveryWorker({ChannelType.WEBHOOK: adapter})

    outcome = await worker.deliver(
        make_integration(), sample_event, RetryPolicy(), cancel=cancel
    )

    assert adapter.calls == 0
    assert outcome.attempts == 0
    assert outcome.last_error == CANCELLED_ERROR


class FaultyChannel(ScriptedChannel):
    """Adapter whose request building blows up."""

    async def attempt(self, integration, event, attempt_number: int) -> DeliveryAttempt:
        self.calls += 1
        raise KeyError("first_name")


async def test_adapter_exception_becomes_transport_error_attempt(
    make_integration, sample_event
) -> None:
    adapter = FaultyChannel([])
    worker = DeliveryWorker({ChannelType.WEBHOOK: adapter})

    outcome = await worker.deliver(
        make_integration(), sample_event, RetryPolicy(max_retries=1, retry_delay_seconds=0)
    )

    assert outcome.success is False
    assert outcome.attempts == 2
    assert adapter.calls == 2
    assert [a.outcome for a in outcome.attempt_log] == [AttemptOutcome.TRANSPORT_ERROR] * 2
    assert outcome.last_error == "Unexpected error: KeyError('first_name')"
