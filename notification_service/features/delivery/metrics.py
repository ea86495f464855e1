"""Prometheus metrics for notification delivery.

Usage:
    from notification_service.features.delivery.metrics import delivery_attempts_total

    delivery_attempts_total.labels(channel="webhook", outcome="http_error").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

notification_dispatches_total = Counter(
    "notification_dispatches_total",
    "Total number of dispatch calls by event type",
    labelnames=["event_type"],
)
"""
Labels:
    event_type: Domain event type (signup, booking, ...)
"""

delivery_attempts_total = Counter(
    "notification_delivery_attempts_total",
    "Total delivery attempts by channel and attempt outcome",
    labelnames=["channel", "outcome"],
)
"""
Labels:
    channel: webhook, push, email, whatsapp
    outcome: success, http_error, transport_error
"""

delivery_outcomes_total = Counter(
    "notification_delivery_outcomes_total",
    "Final per-integration delivery results",
    labelnames=["channel", "status"],
)
"""
Labels:
    channel: webhook, push, email, whatsapp
    status: delivered, failed, cancelled
"""

delivery_request_duration_seconds = Histogram(
    "notification_delivery_request_duration_seconds",
    "Duration of outbound channel HTTP requests",
    labelnames=["channel"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

delivery_retries_total = Counter(
    "notification_delivery_retries_total",
    "Retry waits started after a failed attempt",
    labelnames=["channel"],
)

jobs_drained_total = Counter(
    "notification_jobs_drained_total",
    "Pending jobs processed by drain passes by terminal status",
    labelnames=["status"],
)
"""
Labels:
    status: sent, failed, skipped (claim lost to another drain)
"""
