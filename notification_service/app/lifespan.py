"""Application lifespan management.

Startup Order:
1. Core (logging) - always runs first
2. Database (job store) - conditional on configuration
3. Delivery (integration registry, shared HTTP client, dispatcher)
4. Background drain (APScheduler) - conditional on DRAIN_SCHEDULER_ENABLED

Shutdown Order: Reverse of startup. The process-wide cancel event is set
first so in-flight dispatches stop retrying instead of holding shutdown.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

import httpx

from notification_service.core.settings import (
    get_app_settings,
    get_db_settings,
    get_delivery_settings,
    get_drain_settings,
    get_logging_settings,
)
from notification_service.infra.logging.config import setup_logging
from notification_service.infra.logging.config import shutdown as shutdown_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


async def _startup_core() -> None:
    """Initialize logging."""
    app = get_app_settings()
    setup_logging(log_settings=get_logging_settings(), force=True)
    logger.info(
        "Application starting",
        extra={"service": app.service_name, "environment": app.environment},
    )


async def _startup_database() -> bool:
    """Initialize the job store connection."""
    from notification_service.infra.database.session import init_database

    db = get_db_settings()
    if not db.is_configured:
        logger.info("Database disabled, job queue endpoints unavailable")
        return False

    await init_database()
    logger.info("Database connection initialized")
    return True


async def _startup_delivery(app: FastAPI) -> None:
    """Load the integration registry and build the shared dispatcher."""
    from notification_service.features.delivery.dispatcher import NotificationDispatcher
    from notification_service.features.integrations import get_integration_registry

    settings = get_delivery_settings()
    registry = get_integration_registry()

    app.state.cancel_event = asyncio.Event()
    app.state.http_client = httpx.AsyncClient(follow_redirects=True)
    app.state.dispatcher = NotificationDispatcher(
        registry,
        settings,
        client=app.state.http_client,
    )
    logger.info(
        "Delivery initialized",
        extra={
            "integration_count": len(registry),
            "max_retries": settings.max_retries,
            "retry_delay_seconds": settings.retry_delay_seconds,
            "attempt_timeout_seconds": settings.attempt_timeout_seconds,
        },
    )


async def _startup_tasks(app: FastAPI) -> None:
    """Register and start the periodic drain."""
    from notification_service.features.jobs.drainer import PendingJobDrainer
    from notification_service.infra.database import get_session_factory
    from notification_service.tasks.scheduler import setup_scheduled_jobs, start_scheduler

    drain = get_drain_settings()
    if not drain.scheduler_enabled:
        return

    drainer = PendingJobDrainer(get_session_factory(), app.state.dispatcher)
    setup_scheduled_jobs(drainer, drain, cancel=app.state.cancel_event)
    await start_scheduler()


async def _shutdown_tasks() -> None:
    from notification_service.tasks.scheduler import stop_scheduler

    await stop_scheduler()


async def _shutdown_delivery(app: FastAPI) -> None:
    client: httpx.AsyncClient | None = getattr(app.state, "http_client", None)
    if client is not None:
        await client.aclose()
        logger.info("Delivery HTTP client closed")


async def _shutdown_database() -> None:
    from notification_service.infra.database.session import close_database

    await close_database()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    await _startup_core()
    database_enabled = await _startup_database()
    await _startup_delivery(app)
    if database_enabled:
        await _startup_tasks(app)

    app_settings = get_app_settings()
    logger.info(
        "Application startup complete",
        extra={
            "service": app_settings.service_name,
            "environment": app_settings.environment,
            "database_enabled": database_enabled,
            "drain_scheduler_enabled": database_enabled and get_drain_settings().scheduler_enabled,
            "host": app_settings.host,
            "port": app_settings.port,
        },
    )

    yield

    logger.info("Application shutting down", extra={"service": app_settings.service_name})

    app.state.cancel_event.set()
    await _shutdown_tasks()
    await _shutdown_delivery(app)
    if database_enabled:
        await _shutdown_database()

    logger.info("Application shutdown complete")
    shutdown_logging()


__all__ = ["lifespan"]
