"""Tests for application exception handlers."""

from __future__ import annotations

import json

from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest
from starlette.requests import Request

from notification_service.app.exception_handlers import (
    app_exception_handler,
    configure_exception_handlers,
    generic_exception_handler,
    not_found_error_handler,
)
from notification_service.core.database.exceptions import NotFoundError
from notification_service.core.exceptions import (
    AppException,
    InputError,
    InvalidJobTransition,
    StorageError,
)


def _build_request(path: str = "/test") -> Request:
    """Create a minimal ASGI request for handler tests."""
    scope = {
        "type": "http",
        "method": "POST",
        "path": path,
        "headers": [],
        "query_string": b"",
        "client": ("test", 1234),
        "server": ("test", 80),
    }
    return Request(scope, lambda: None)


@pytest.mark.parametrize(
    ("exc", "status", "type_"),
    [
        (InputError(detail="At least one phone number is required"), 400, "input-error"),
        (StorageError(detail="Failed to claim job: locked"), 503, "storage-error"),
        (InvalidJobTransition("sent", "pending"), 409, "invalid-job-transition"),
    ],
)
async def test_app_exception_handler_produces_problem_details(
    exc: AppException, status: int, type_: str
) -> None:
    response = await app_exception_handler(_build_request("/api/v1/x"), exc)
    body = json.loads(response.body)

    assert response.status_code == status
    assert body["status"] == status
    assert body["type"] == type_
    assert body["success"] is False
    assert body["error"] == body["detail"] == exc.detail
    assert body["instance"] == "/api/v1/x"


async def test_not_found_handler_hides_identifier() -> None:
    exc = NotFoundError("NotificationJob", {"id": "abc"})

    response = await not_found_error_handler(_build_request("/api/v1/notifications/jobs/abc"), exc)
    body = json.loads(response.body)

    assert response.status_code == 404
    assert body["type"] == "not-found"
    assert body["title"] == "Not Found"
    assert body["error"] == "NotificationJob not found"
    assert "abc" not in body["detail"]


async def test_extra_context_never_overrides_standard_members() -> None:
    exc = InputError(detail="bad", extra={"status": 999, "integration_id": "wa"})

    response = await app_exception_handler(_build_request(), exc)
    body = json.loads(response.body)

    assert body["status"] == 400
    assert body["integration_id"] == "wa"


async def test_generic_handler_hides_internal_details() -> None:
    response = await generic_exception_handler(_build_request(), RuntimeError("secret path"))
    body = json.loads(response.body)

    assert response.status_code == 500
    assert body["type"] == "internal-error"
    assert body["success"] is False
    assert "secret path" not in body["error"]


def test_unhandled_exception_becomes_500() -> None:
    app = FastAPI()
    configure_exception_handlers(app)

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("boom")

    response = TestClient(app, raise_server_exceptions=False).get("/boom")

    assert response.status_code == 500
    assert response.json()["error"] == "An unexpected error occurred while processing your request"
