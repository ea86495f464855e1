"""Notification delivery: channel adapters, retry worker and fan-out dispatcher."""

from notification_service.features.delivery.dispatcher import NotificationDispatcher
from notification_service.features.delivery.schemas import (
    AttemptOutcome,
    DeliveryAttempt,
    DeliveryOutcome,
    DispatchRequest,
    DispatchResponse,
    DispatchSummary,
    Event,
    RetryPolicy,
)
from notification_service.features.delivery.worker import DeliveryWorker

__all__ = [
    "AttemptOutcome",
    "DeliveryAttempt",
    "DeliveryOutcome",
    "DeliveryWorker",
    "DispatchRequest",
    "DispatchResponse",
    "DispatchSummary",
    "Event",
    "NotificationDispatcher",
    "RetryPolicy",
]
