"""Per-integration retry loop with fixed-delay backoff."""

from __future__ import annotations

import asyncio
from enum import StrEnum
import logging
from typing import TYPE_CHECKING

from notification_service.features.delivery.aggregator import build_outcome
from notification_service.features.delivery.metrics import (
    delivery_attempts_total,
    delivery_outcomes_total,
    delivery_retries_total,
)
from notification_service.features.delivery.schemas import AttemptOutcome, DeliveryAttempt
from notification_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from notification_service.features.delivery.channels import ChannelAdapter
    from notification_service.features.delivery.schemas import DeliveryOutcome, Event, RetryPolicy
    from notification_service.features.integrations.schemas import ChannelType, Integration

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)

CANCELLED_ERROR = "dispatch cancelled"


class WorkerState(StrEnum):
    ATTEMPTING = "attempting"
    RETRYING = "retrying"
    DONE = "done"


class DeliveryWorker:
    """Drive one integration to a terminal outcome.

    State machine::

        attempting --success--> done
        attempting --failure, attempts <= max_retries--> retrying --> attempting
        attempting --failure, attempts > max_retries--> done

    At most ``policy.max_retries + 1`` attempts are made. Attempts are
    appended to ``log`` as they complete so a caller holding the list sees
    them even when the dispatch is cancelled.
    """

    def __init__(self, adapters: Mapping[ChannelType, ChannelAdapter]) -> None:
        self.adapters = adapters

    async def _wait(self, delay: float, cancel: asyncio.Event | None) -> bool:
        """Sleep for ``delay``; return False if cancelled first."""
        if cancel is None:
            await asyncio.sleep(delay)
            return True
        try:
            await asyncio.wait_for(cancel.wait(), timeout=delay)
        except TimeoutError:
            return True
        return False

    async def deliver(
        self,
        integration: Integration,
        event: Event,
        policy: RetryPolicy,
        *,
        log: list[DeliveryAttempt] | None = None,
        cancel: asyncio.Event | None = None,
    ) -> DeliveryOutcome:
        adapter = self.adapters[integration.channel]
        channel = str(integration.channel)
        attempts: list[DeliveryAttempt] = log if log is not None else []
        count = 0
        state = WorkerState.ATTEMPTING

        while state is not WorkerState.DONE:
            if cancel is not None and cancel.is_set():
                return self._cancelled(integration, attempts)

            if state is WorkerState.RETRYING:
                delivery_retries_total.labels(channel=channel).inc()
                lazy_logger.debug(
                    lambda: f"worker.retry: integration_id={integration.id}, "
                    f"next_attempt={count + 1}, delay={policy.retry_delay_seconds}s"
                )
                if not await self._wait(policy.retry_delay_seconds, cancel):
                    return self._cancelled(integration, attempts)
                state = WorkerState.ATTEMPTING
                continue

            count += 1
            attempt = await self._attempt(adapter, integration, event, count)
            attempts.append(attempt)
            delivery_attempts_total.labels(channel=channel, outcome=str(attempt.outcome)).inc()

            if attempt.succeeded:
                state = WorkerState.DONE
            elif count <= policy.max_retries:
                logger.warning(
                    "Delivery attempt failed, retrying",
                    extra={
                        "integration_id": integration.id,
                        "attempt_number": count,
                        "outcome": str(attempt.outcome),
                        "status_code": attempt.status_code,
                        "error": attempt.error,
                        "operation": "worker.deliver",
                    },
                )
                state = WorkerState.RETRYING
            else:
                state = WorkerState.DONE

        outcome = build_outcome(integration, attempts)
        delivery_outcomes_total.labels(
            channel=channel, status="delivered" if outcome.success else "failed"
        ).inc()
        if outcome.success:
            logger.info(
                "Integration delivered",
                extra={
                    "integration_id": integration.id,
                    "attempts": outcome.attempts,
                    "operation": "worker.deliver",
                },
            )
        else:
            logger.warning(
                "Integration delivery failed",
                extra={
                    "integration_id": integration.id,
                    "attempts": outcome.attempts,
                    "error": outcome.last_error,
                    "operation": "worker.deliver",
                },
            )
        return outcome

    async def _attempt(
        self,
        adapter: ChannelAdapter,
        integration: Integration,
        event: Event,
        attempt_number: int,
    ) -> DeliveryAttempt:
        """Run one adapter attempt; an adapter fault is recorded, not raised."""
        try:
            return await adapter.attempt(integration, event, attempt_number)
        except Exception as exc:
            logger.error(
                "Channel adapter raised",
                extra={
                    "integration_id": integration.id,
                    "attempt_number": attempt_number,
                    "error": repr(exc),
                    "operation": "worker.deliver",
                },
                exc_info=True,
            )
            return DeliveryAttempt(
                integration_id=integration.id,
                attempt_number=attempt_number,
                outcome=AttemptOutcome.TRANSPORT_ERROR,
                error=f"Unexpected error: {exc!r}",
            )

    def _cancelled(
        self,
        integration: Integration,
        attempts: list[DeliveryAttempt],
    ) -> DeliveryOutcome:
        delivery_outcomes_total.labels(channel=str(integration.channel), status="cancelled").inc()
        logger.info(
            "Integration delivery cancelled",
            extra={
                "integration_id": integration.id,
                "attempts": len(attempts),
                "operation": "worker.deliver",
            },
        )
        return build_outcome(integration, attempts, error=CANCELLED_ERROR)


__all__ = ["CANCELLED_ERROR", "DeliveryWorker", "WorkerState"]
