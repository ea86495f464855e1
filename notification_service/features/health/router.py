"""Health check API endpoint."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter
from pydantic import BaseModel

from notification_service.core.settings import get_app_settings

router = APIRouter(tags=["health"])


class LivenessResponse(BaseModel):
    status: str = "ok"
    service: str
    version: str
    timestamp: datetime


@router.get(
    "/health",
    response_model=LivenessResponse,
    summary="Liveness probe",
    description="Returns 200 while the process is able to serve requests",
)
async def health() -> LivenessResponse:
    settings = get_app_settings()
    return LivenessResponse(
        service=settings.service_name,
        version=settings.version,
        timestamp=datetime.now(UTC),
    )
