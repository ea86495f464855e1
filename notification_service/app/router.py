"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from notification_service.core.settings import get_app_settings
from notification_service.features.delivery.router import router as delivery_router
from notification_service.features.health.router import router as health_router
from notification_service.features.integrations.router import router as integrations_router
from notification_service.features.jobs.router import router as jobs_router
from notification_service.features.metrics.router import router as metrics_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from notification_service.core.settings.app import AppSettings

logger = logging.getLogger(__name__)


def setup_routers(app: FastAPI, app_settings: AppSettings | None = None) -> None:
    """Register all feature routers with the application.

    Args:
        app: FastAPI application instance.
        app_settings: Optional application settings override for the API prefix.
    """
    app_settings = app_settings or get_app_settings()
    api_prefix = app_settings.api_prefix

    # Unprefixed: /health and /metrics
    app.include_router(health_router)
    app.include_router(metrics_router)

    app.include_router(delivery_router, prefix=api_prefix)
    app.include_router(jobs_router, prefix=api_prefix)
    app.include_router(integrations_router, prefix=api_prefix)

    logger.debug("Routers configured", extra={"api_prefix": api_prefix})
