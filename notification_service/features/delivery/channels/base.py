"""Base protocol and shared HTTP handling for channel adapters."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Protocol

import httpx

from notification_service.features.delivery.metrics import delivery_request_duration_seconds
from notification_service.features.delivery.schemas import (
    AttemptOutcome,
    DeliveryAttempt,
    DestinationResult,
)
from notification_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from notification_service.features.delivery.schemas import Event
    from notification_service.features.integrations.schemas import ChannelType, Integration

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class ChannelAdapter(Protocol):
    """Uniform capability implemented by every delivery channel.

    ``validate`` raises ``InputError`` for configuration that can never
    succeed; the dispatcher calls it for every selected integration before
    any attempt is made. ``attempt`` never raises: every failure comes back
    as a ``DeliveryAttempt``.
    """

    channel: ClassVar[ChannelType]

    def validate(self, integration: Integration, event: Event) -> None:
        """Reject unusable integration configuration.

        Raises:
            InputError: If required credentials or destinations are missing.
        """
        ...

    async def attempt(
        self,
        integration: Integration,
        event: Event,
        attempt_number: int,
    ) -> DeliveryAttempt:
        """Make one delivery attempt and classify the result."""
        ...


@dataclass(frozen=True, slots=True)
class HttpResult:
    """Classified result of one outbound HTTP request."""

    outcome: AttemptOutcome
    status_code: int | None = None
    excerpt: str | None = None
    error: str | None = None


def first_value(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first non-empty value found under ``keys``."""
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return default


def member_fields(event: Event) -> dict[str, Any]:
    """Common member fields used by the human-readable templates.

    Accepts both camelCase and snake_case payload keys.
    """
    payload = event.payload
    return {
        "name": first_value(payload, "userName", "user_name", "memberName", "name", default="Unknown"),
        "email": first_value(payload, "userEmail", "user_email", "email", default="-"),
        "phone": first_value(payload, "userPhone", "user_phone", "phone", default="-"),
        "date": first_value(
            payload,
            "registrationDate",
            "registration_date",
            default=event.created_at.strftime("%Y-%m-%d %H:%M:%S UTC"),
        ),
    }


class HttpChannelAdapter:
    """Shared request execution and response classification.

    Subclasses build the channel-specific request and call ``_send``;
    transport failures, non-2xx statuses and unexpected errors are all
    turned into ``HttpResult`` values here.
    """

    channel: ClassVar[ChannelType]

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout_seconds: float = 10.0,
        excerpt_chars: int = 500,
        user_agent: str = "notification-service/0.1",
    ) -> None:
        """Initialize adapter.

        Args:
            client: Shared HTTP client (owned by the caller)
            timeout_seconds: Per-request timeout
            excerpt_chars: Maximum response characters kept
            user_agent: User-Agent header value
        """
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.excerpt_chars = excerpt_chars
        self.user_agent = user_agent

    def validate(self, integration: Integration, event: Event) -> None:
        """Accept any integration by default."""

    def _excerpt(self, text: str | None) -> str:
        return (text or "")[: self.excerpt_chars]

    def _headers(self, *overrides: Mapping[str, str] | None) -> httpx.Headers:
        """Build headers; later mappings override earlier ones case-insensitively."""
        headers = httpx.Headers(
            {"Content-Type": "application/json", "User-Agent": self.user_agent}
        )
        for mapping in overrides:
            if mapping:
                headers.update(mapping)
        return headers

    async def _send(
        self,
        method: str,
        url: str,
        *,
        headers: httpx.Headers,
        json: Any = None,
        content: str | bytes | None = None,
        integration_id: str,
    ) -> HttpResult:
        start_time = time.perf_counter()

        try:
            lazy_logger.debug(
                lambda: f"{self.channel}.send: integration_id={integration_id}, {method} {url}"
            )
            response = await self.client.request(
                method,
                url,
                headers=headers,
                json=json,
                content=content,
                timeout=self.timeout_seconds,
            )
        except httpx.TimeoutException:
            error = f"Request timeout after {self.timeout_seconds}s"
            logger.warning(
                "Channel request timeout",
                extra={
                    "integration_id": integration_id,
                    "channel": str(self.channel),
                    "timeout_seconds": self.timeout_seconds,
                    "operation": "channel.send",
                },
            )
            return HttpResult(outcome=AttemptOutcome.TRANSPORT_ERROR, error=error)
        except httpx.RequestError as exc:
            error = f"Request error: {exc or type(exc).__name__}"
            logger.warning(
                "Channel request error",
                extra={
                    "integration_id": integration_id,
                    "channel": str(self.channel),
                    "error": str(exc),
                    "operation": "channel.send",
                },
            )
            return HttpResult(outcome=AttemptOutcome.TRANSPORT_ERROR, error=error)
        except Exception as exc:
            logger.error(
                "Channel request unexpected error",
                extra={
                    "integration_id": integration_id,
                    "channel": str(self.channel),
                    "error": str(exc),
                    "operation": "channel.send",
                },
                exc_info=True,
            )
            return HttpResult(
                outcome=AttemptOutcome.TRANSPORT_ERROR,
                error=f"Unexpected error: {exc}",
            )
        finally:
            delivery_request_duration_seconds.labels(channel=str(self.channel)).observe(
                time.perf_counter() - start_time
            )

        excerpt = self._excerpt(response.text)
        if response.is_success:
            return HttpResult(
                outcome=AttemptOutcome.SUCCESS,
                status_code=response.status_code,
                excerpt=excerpt,
            )

        logger.warning(
            "Channel request failed with non-2xx status",
            extra={
                "integration_id": integration_id,
                "channel": str(self.channel),
                "status_code": response.status_code,
                "operation": "channel.send",
            },
        )
        return HttpResult(
            outcome=AttemptOutcome.HTTP_ERROR,
            status_code=response.status_code,
            excerpt=excerpt,
            error=f"HTTP {response.status_code}: {excerpt}",
        )

    def _to_attempt(
        self,
        integration: Integration,
        attempt_number: int,
        result: HttpResult,
    ) -> DeliveryAttempt:
        return DeliveryAttempt(
            integration_id=integration.id,
            attempt_number=attempt_number,
            outcome=result.outcome,
            status_code=result.status_code,
            error=result.error,
            response_excerpt=result.excerpt,
        )

    def _fold(
        self,
        integration: Integration,
        attempt_number: int,
        results: Sequence[tuple[str, HttpResult]],
        *,
        noun: str,
    ) -> DeliveryAttempt:
        """Fold per-destination results into one attempt.

        The attempt succeeds only when every destination succeeded. On
        failure the outcome, status code and error come from the first
        failing destination and the error text lists every failure.
        """
        destinations = tuple(
            DestinationResult(
                destination=destination,
                outcome=result.outcome,
                status_code=result.status_code,
                error=result.error,
            )
            for destination, result in results
        )
        failures = [d for d in destinations if d.outcome is not AttemptOutcome.SUCCESS]
        sent = len(destinations) - len(failures)

        if not failures:
            return DeliveryAttempt(
                integration_id=integration.id,
                attempt_number=attempt_number,
                outcome=AttemptOutcome.SUCCESS,
                status_code=destinations[-1].status_code if destinations else None,
                response_excerpt=self._excerpt(f"Sent to {sent}/{len(destinations)} {noun}"),
                destinations=destinations,
            )

        first = failures[0]
        return DeliveryAttempt(
            integration_id=integration.id,
            attempt_number=attempt_number,
            outcome=first.outcome,
            status_code=first.status_code,
            error="; ".join(f"{d.destination}: {d.error}" for d in failures),
            response_excerpt=self._excerpt(f"Sent to {sent}/{len(destinations)} {noun}"),
            destinations=destinations,
        )
