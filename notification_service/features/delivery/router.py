"""API router for notification dispatch."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, status

from notification_service.features.delivery.dependencies import get_cancel_event, get_dispatcher
from notification_service.features.delivery.dispatcher import NotificationDispatcher
from notification_service.features.delivery.schemas import DispatchRequest, DispatchResponse
from notification_service.features.integrations import IntegrationRegistry
from notification_service.infra.logging import get_lazy_logger

router = APIRouter(prefix="/notifications", tags=["notifications"])

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


@router.post(
    "/dispatch",
    response_model=DispatchResponse,
    status_code=status.HTTP_200_OK,
    summary="Dispatch an event",
    description=(
        "Deliver an event to every subscribed integration with retries. "
        "Returns per-integration results even when some deliveries fail."
    ),
    responses={
        400: {"description": "Missing or invalid integration configuration"},
        422: {"description": "Malformed request body"},
    },
)
async def dispatch_event(
    payload: DispatchRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    cancel: asyncio.Event | None = Depends(get_cancel_event),
) -> DispatchResponse:
    """Dispatch an event.

    Args:
        payload: Event type, event data and optional inline integrations
        dispatcher: Application dispatcher
        cancel: Shutdown cancel event

    Returns:
        Dispatch summary

    Raises:
        InputError: If an inline or configured integration is unusable
    """
    registry = (
        IntegrationRegistry.from_mappings(payload.integrations)
        if payload.integrations is not None
        else None
    )
    policy = payload.retry_config.to_policy() if payload.retry_config else None

    lazy_logger.debug(
        lambda: f"router.dispatch: event_type={payload.event_type}, "
        f"inline_integrations={payload.integrations is not None}"
    )

    summary = await dispatcher.dispatch(
        payload.to_event(),
        policy,
        registry=registry,
        cancel=cancel,
    )
    return DispatchResponse.from_summary(summary)
