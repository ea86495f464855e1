"""Tests for FastAPI application lifespan management."""

from __future__ import annotations

from fastapi import FastAPI

from notification_service.app.lifespan import lifespan
from notification_service.features.delivery import NotificationDispatcher


async def test_lifespan_builds_dispatcher_and_cancels_on_shutdown(monkeypatch) -> None:
    monkeypatch.setenv(
        "INTEGRATIONS_ITEMS",
        '[{"id": "crm", "name": "CRM", "endpoint": "https://crm.example.com", "events": ["signup"]}]',
    )
    app = FastAPI()

    async with lifespan(app):
        assert isinstance(app.state.dispatcher, NotificationDispatcher)
        assert [i.id for i in app.state.dispatcher.registry] == ["crm"]
        assert app.state.dispatcher.client is app.state.http_client
        assert not app.state.cancel_event.is_set()

    assert app.state.cancel_event.is_set()
    assert app.state.http_client.is_closed


async def test_lifespan_with_job_store(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("DB_ENABLED", "true")
    monkeypatch.setenv("DB_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'jobs.db'}")
    app = FastAPI()

    async with lifespan(app):
        from notification_service.infra.database import session

        assert session._engine is not None

    assert session._engine is None
