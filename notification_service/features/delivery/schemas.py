"""Delivery records and API schemas.

Domain records (``Event``, ``DeliveryAttempt``, ``DeliveryOutcome``,
``DispatchSummary``, ``RetryPolicy``) are frozen dataclasses: they are created
once and passed between concurrent tasks without copying. API models use the
camelCase field names external callers send (``eventType``, ``retryConfig``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from notification_service.core.settings import DeliverySettings


class AttemptOutcome(StrEnum):
    """Classification of a single delivery attempt."""

    SUCCESS = "success"
    HTTP_ERROR = "http_error"
    TRANSPORT_ERROR = "transport_error"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Event:
    """A domain event to fan out (e.g. ``signup`` with member details)."""

    event_type: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Fixed-delay retry policy: up to ``max_retries + 1`` attempts."""

    max_retries: int = 3
    retry_delay_seconds: float = 5.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.retry_delay_seconds < 0:
            raise ValueError("retry_delay_seconds must be >= 0")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    @classmethod
    def from_settings(cls, settings: DeliverySettings) -> RetryPolicy:
        return cls(
            max_retries=settings.max_retries,
            retry_delay_seconds=settings.retry_delay_seconds,
        )


@dataclass(frozen=True, slots=True)
class DestinationResult:
    """Per-recipient result inside one email or WhatsApp attempt."""

    destination: str
    outcome: AttemptOutcome
    status_code: int | None = None
    error: str | None = None


@dataclass(frozen=True, slots=True)
class DeliveryAttempt:
    """One call (or one fan-out round) against an integration."""

    integration_id: str
    attempt_number: int
    outcome: AttemptOutcome
    status_code: int | None = None
    error: str | None = None
    response_excerpt: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)
    destinations: tuple[DestinationResult, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.outcome is AttemptOutcome.SUCCESS


@dataclass(frozen=True, slots=True)
class DeliveryOutcome:
    """Final result for one integration, derived from its attempt log."""

    integration_id: str
    integration_name: str
    success: bool
    attempts: int
    last_error: str | None = None
    response: str | None = None
    attempt_log: tuple[DeliveryAttempt, ...] = ()


@dataclass(frozen=True, slots=True)
class DispatchSummary:
    """Outcomes of one dispatch in registry selection order."""

    event_type: str
    outcomes: tuple[DeliveryOutcome, ...]
    total: int
    successful: int
    failed: int

    @property
    def first_error(self) -> str | None:
        """Error text of the first failing outcome, if any."""
        for outcome in self.outcomes:
            if not outcome.success:
                return outcome.last_error
        return None


# ──────────────────────────────────────────────────────────────
# API models
# ──────────────────────────────────────────────────────────────


class RetryConfig(BaseModel):
    """Per-request retry override."""

    model_config = ConfigDict(populate_by_name=True)

    max_retries: int = Field(default=3, ge=0, le=20, alias="maxRetries")
    retry_delay: float = Field(default=5.0, ge=0.0, le=3600.0, alias="retryDelay")

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy(max_retries=self.max_retries, retry_delay_seconds=self.retry_delay)


class DispatchRequest(BaseModel):
    """Body of ``POST /notifications/dispatch``.

    When ``integrations`` is omitted the configured registry is used.
    """

    model_config = ConfigDict(populate_by_name=True)

    event_type: str = Field(..., min_length=1, max_length=100, alias="eventType")
    event_data: dict[str, Any] = Field(default_factory=dict, alias="eventData")
    integrations: list[dict[str, Any]] | None = Field(
        default=None,
        description="Inline integration definitions (overrides the configured registry)",
    )
    retry_config: RetryConfig | None = Field(default=None, alias="retryConfig")

    def to_event(self) -> Event:
        return Event(event_type=self.event_type, payload=self.event_data)


class IntegrationResult(BaseModel):
    """Per-integration entry of a dispatch response."""

    integration: str
    success: bool
    attempts: int
    response: str | None = None
    error: str | None = None

    @classmethod
    def from_outcome(cls, outcome: DeliveryOutcome) -> IntegrationResult:
        return cls(
            integration=outcome.integration_name,
            success=outcome.success,
            attempts=outcome.attempts,
            response=outcome.response if outcome.success else None,
            error=None if outcome.success else outcome.last_error,
        )


class SummaryCounts(BaseModel):
    total: int
    successful: int
    failed: int


class DispatchResponse(BaseModel):
    """Structured dispatch result, returned even under partial failure."""

    success: bool = True
    message: str
    results: list[IntegrationResult]
    summary: SummaryCounts

    @classmethod
    def from_summary(cls, summary: DispatchSummary) -> DispatchResponse:
        return cls(
            success=True,
            message=(
                f"Processed {summary.total} integrations: "
                f"{summary.successful} successful, {summary.failed} failed"
            ),
            results=[IntegrationResult.from_outcome(o) for o in summary.outcomes],
            summary=SummaryCounts(
                total=summary.total,
                successful=summary.successful,
                failed=summary.failed,
            ),
        )


__all__ = [
    "AttemptOutcome",
    "DeliveryAttempt",
    "DeliveryOutcome",
    "DestinationResult",
    "DispatchRequest",
    "DispatchResponse",
    "DispatchSummary",
    "Event",
    "IntegrationResult",
    "RetryConfig",
    "RetryPolicy",
    "SummaryCounts",
]
