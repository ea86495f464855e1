"""Fan-out dispatcher: one concurrent delivery worker per selected integration."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

import httpx

from notification_service.features.delivery.aggregator import summarize
from notification_service.features.delivery.channels import build_adapters
from notification_service.features.delivery.metrics import notification_dispatches_total
from notification_service.features.delivery.schemas import RetryPolicy
from notification_service.features.delivery.worker import DeliveryWorker
from notification_service.infra.logging import (
    get_lazy_logger,
    remove_from_log_context,
    set_log_context,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from notification_service.core.settings import DeliverySettings
    from notification_service.features.delivery.schemas import DispatchSummary, Event
    from notification_service.features.integrations.registry import IntegrationRegistry

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class NotificationDispatcher:
    """Dispatch events to every subscribed integration.

    Per-integration failures never propagate: they are reported in the
    returned summary. Only ``InputError`` (raised while validating the
    selected integrations, before any attempt) escapes ``dispatch``.

    The HTTP client is shared by all adapters. When none is injected, a
    client is opened for the duration of each dispatch.

    Example:
        dispatcher = NotificationDispatcher(registry, get_delivery_settings())
        summary = await dispatcher.dispatch(Event("signup", {"userName": "Ana"}))
    """

    def __init__(
        self,
        registry: IntegrationRegistry,
        settings: DeliverySettings,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.registry = registry
        self.settings = settings
        self.client = client

    @property
    def default_policy(self) -> RetryPolicy:
        return RetryPolicy.from_settings(self.settings)

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.client is not None:
            yield self.client
            return
        async with httpx.AsyncClient(follow_redirects=True) as client:
            yield client

    async def dispatch(
        self,
        event: Event,
        policy: RetryPolicy | None = None,
        *,
        registry: IntegrationRegistry | None = None,
        cancel: asyncio.Event | None = None,
    ) -> DispatchSummary:
        """Deliver ``event`` to all selected integrations concurrently.

        Args:
            event: Event to deliver
            policy: Retry policy (defaults to ``DeliverySettings``)
            registry: Registry override, e.g. inline integrations from a request
            cancel: Once set, workers stop retrying and report ``dispatch cancelled``

        Returns:
            Summary with outcomes in registry selection order

        Raises:
            InputError: If a selected integration lacks required configuration.
        """
        policy = policy or self.default_policy
        registry = registry if registry is not None else self.registry
        selected = registry.select(event.event_type)
        notification_dispatches_total.labels(event_type=event.event_type).inc()
        set_log_context(event_type=event.event_type)

        try:
            async with self._client() as client:
                adapters = build_adapters(client, self.settings)
                for integration in selected:
                    adapters[integration.channel].validate(integration, event)

                logger.info(
                    "Dispatch started",
                    extra={
                        "integration_count": len(selected),
                        "max_retries": policy.max_retries,
                        "operation": "dispatcher.dispatch",
                    },
                )
                lazy_logger.debug(
                    lambda: f"dispatcher.dispatch: selected={[i.id for i in selected]}"
                )

                worker = DeliveryWorker(adapters)
                outcomes = await asyncio.gather(
                    *(
                        worker.deliver(integration, event, policy, cancel=cancel)
                        for integration in selected
                    )
                )

            summary = summarize(event.event_type, outcomes)
            logger.info(
                "Dispatch completed",
                extra={
                    "total": summary.total,
                    "successful": summary.successful,
                    "failed": summary.failed,
                    "operation": "dispatcher.dispatch",
                },
            )
            return summary
        finally:
            remove_from_log_context("event_type")


__all__ = ["NotificationDispatcher"]
