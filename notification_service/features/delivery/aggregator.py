"""Derive per-integration outcomes and dispatch summaries from attempt logs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from notification_service.features.delivery.schemas import DeliveryOutcome, DispatchSummary

if TYPE_CHECKING:
    from collections.abc import Sequence

    from notification_service.features.delivery.schemas import DeliveryAttempt
    from notification_service.features.integrations.schemas import Integration


def build_outcome(
    integration: Integration,
    attempts: Sequence[DeliveryAttempt],
    *,
    error: str | None = None,
) -> DeliveryOutcome:
    """Build the outcome for one integration.

    Success means the last attempt succeeded. ``error`` overrides the last
    attempt's error text (used for cancellation).
    """
    last = attempts[-1] if attempts else None
    success = error is None and last is not None and last.succeeded
    return DeliveryOutcome(
        integration_id=integration.id,
        integration_name=integration.name,
        success=success,
        attempts=len(attempts),
        last_error=None if success else (error or (last.error if last else None)),
        response=last.response_excerpt if success and last else None,
        attempt_log=tuple(attempts),
    )


def summarize(event_type: str, outcomes: Sequence[DeliveryOutcome]) -> DispatchSummary:
    """Count outcomes; ``total == successful + failed`` always holds."""
    successful = sum(1 for o in outcomes if o.success)
    return DispatchSummary(
        event_type=event_type,
        outcomes=tuple(outcomes),
        total=len(outcomes),
        successful=successful,
        failed=len(outcomes) - successful,
    )


__all__ = ["build_outcome", "summarize"]
