"""FastAPI dependencies for the delivery feature."""

from __future__ import annotations

import asyncio

from fastapi import Request

from notification_service.core.settings import get_delivery_settings
from notification_service.features.delivery.dispatcher import NotificationDispatcher
from notification_service.features.integrations import get_integration_registry


def get_dispatcher(request: Request) -> NotificationDispatcher:
    """Return the application dispatcher created at startup.

    Falls back to a dispatcher over the configured registry when the
    lifespan has not run (e.g. routers mounted on a bare app).
    """
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        dispatcher = NotificationDispatcher(get_integration_registry(), get_delivery_settings())
    return dispatcher


def get_cancel_event(request: Request) -> asyncio.Event | None:
    """Process-wide cancel event, set when the application shuts down."""
    return getattr(request.app.state, "cancel_event", None)


__all__ = ["get_cancel_event", "get_dispatcher"]
