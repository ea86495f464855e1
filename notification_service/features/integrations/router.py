"""API router exposing the configured integrations (secrets omitted)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from notification_service.features.integrations.registry import (
    IntegrationRegistry,
    get_integration_registry,
)
from notification_service.features.integrations.schemas import IntegrationRead

router = APIRouter(prefix="/notifications/integrations", tags=["integrations"])


@router.get(
    "",
    response_model=list[IntegrationRead],
    summary="List integrations",
    description="List configured integrations, optionally only those selected for an event type.",
)
async def list_integrations(
    event_type: str | None = Query(default=None, alias="eventType"),
    registry: IntegrationRegistry = Depends(get_integration_registry),
) -> list[IntegrationRead]:
    integrations = registry.select(event_type) if event_type else list(registry)
    return [IntegrationRead.model_validate(i) for i in integrations]
