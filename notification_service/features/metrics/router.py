"""Prometheus metrics endpoint for observability.

Endpoints:
    GET /metrics - Prometheus scrape endpoint

Metrics Exposed:
    - notification_dispatches_total - Dispatch calls by event type
    - notification_delivery_attempts_total - Attempts by channel and outcome
    - notification_delivery_outcomes_total - Final results by channel and status
    - notification_delivery_request_duration_seconds - Outbound request latency
    - notification_delivery_retries_total - Retry waits by channel
    - notification_jobs_drained_total - Drained jobs by terminal status
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics")
async def metrics() -> Response:
    """Expose Prometheus metrics in text exposition format."""
    data = generate_latest(REGISTRY)
    return Response(
        content=data,
        media_type=CONTENT_TYPE_LATEST,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
