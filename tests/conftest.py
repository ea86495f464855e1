"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: cache resets and fast delivery settings
    - Integration Fixtures: integration factory and registries
    - HTTP Fixtures: httpx clients backed by MockTransport
    - Database Fixtures: in-memory aiosqlite engine, session and factory
    - Application Fixtures: FastAPI app and ASGI client
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Callable, Iterator
from typing import TYPE_CHECKING, Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

# Ensure tests run without external infrastructure or local config files
os.environ.setdefault("DB_ENABLED", "false")
os.environ.setdefault("CONFIG_DIR", "/nonexistent-notification-service-conf")
os.environ.setdefault("INTEGRATIONS_CONFIG_DIR", "/nonexistent-notification-service-conf")
os.environ.setdefault("DELIVERY_CONFIG_DIR", "/nonexistent-notification-service-conf")
os.environ.setdefault("DELIVERY_RETRY_DELAY_SECONDS", "0")
os.environ.setdefault("DRAIN_SCHEDULER_ENABLED", "false")


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_caches() -> Iterator[None]:
    """Clear cached settings and the cached registry around every test."""
    from notification_service.core.settings import clear_all_settings_caches
    from notification_service.features.integrations import get_integration_registry

    clear_all_settings_caches()
    get_integration_registry.cache_clear()
    yield
    clear_all_settings_caches()
    get_integration_registry.cache_clear()


@pytest.fixture
def delivery_settings():
    """Delivery settings with no retry delay and a short attempt timeout."""
    from notification_service.core.settings import DeliverySettings

    return DeliverySettings(
        max_retries=3,
        retry_delay_seconds=0,
        attempt_timeout_seconds=2.0,
        response_excerpt_chars=500,
    )


# ============================================================================
# Integration Fixtures
# ============================================================================


@pytest.fixture
def make_integration() -> Callable[..., Any]:
    """Factory for ``Integration`` models with sensible webhook defaults.

    Example:
        def test_select(make_integration):
            hook = make_integration("crm", events=["signup"])
    """
    from notification_service.features.integrations import Integration

    def _make(integration_id: str = "hook-1", **overrides: Any) -> Integration:
        data: dict[str, Any] = {
            "id": integration_id,
            "name": overrides.pop("name", integration_id.replace("-", " ").title()),
            "endpoint": f"https://hooks.example.com/{integration_id}",
            "events": ["signup"],
        }
        data.update(overrides)
        return Integration.model_validate(data)

    return _make


@pytest.fixture
def sample_event():
    from notification_service.features.delivery import Event

    return Event(
        event_type="signup",
        payload={
            "userName": "Ana Souza",
            "userEmail": "ana@example.com",
            "registrationDate": "2026-10-18 09:30:00",
        },
    )


# ============================================================================
# HTTP Fixtures
# ============================================================================


class RecordingTransport(httpx.MockTransport):
    """MockTransport that records every request it receives."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture
async def http_factory() -> AsyncGenerator[Callable[..., tuple[httpx.AsyncClient, RecordingTransport]]]:
    """Build httpx clients whose traffic is answered by ``handler``.

    Example:
        async def test_send(http_factory):
            client, transport = http_factory(lambda r: httpx.Response(200, text="ok"))
    """
    clients: list[httpx.AsyncClient] = []

    def _factory(
        handler: Callable[[httpx.Request], httpx.Response],
    ) -> tuple[httpx.AsyncClient, RecordingTransport]:
        transport = RecordingTransport(handler)
        client = httpx.AsyncClient(transport=transport)
        clients.append(client)
        return client, transport

    yield _factory

    for client in clients:
        await client.aclose()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory SQLite engine with the job tables.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    from notification_service.core.database.base import Base
    from notification_service.features.jobs import models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Provide a session; uncommitted work is rolled back after the test."""
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
async def app():
    """Create FastAPI application for testing.

    ASGITransport does not run the lifespan, so tests override the
    dispatcher and database dependencies they need.
    """
    from notification_service.app.main import create_app

    return create_app()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
