"""CLI tests using click's CliRunner."""

from __future__ import annotations

import functools
import json

from click.testing import CliRunner
import httpx
import pytest

from notification_service import __version__
from notification_service.cli.main import cli

WEBHOOKS = [
    {"id": "crm", "name": "CRM", "endpoint": "https://crm.example.com/hook", "events": ["signup"]},
    {
        "id": "legacy",
        "name": "Legacy",
        "endpoint": "https://legacy.example.com/hook",
        "events": ["signup"],
        "enabled": False,
    },
]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def mock_upstream(monkeypatch):
    """Route every client the dispatcher opens through a MockTransport."""
    requests: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if "legacy" in request.url.host or request.url.path.endswith("/fail"):
            return httpx.Response(503, text="unavailable")
        return httpx.Response(200, text="ok")

    monkeypatch.setattr(
        "notification_service.features.delivery.dispatcher.httpx.AsyncClient",
        functools.partial(httpx.AsyncClient, transport=httpx.MockTransport(_handler)),
    )
    return requests


def test_version(runner) -> None:
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_integrations_list_empty(runner) -> None:
    result = runner.invoke(cli, ["integrations", "list"])

    assert result.exit_code == 0
    assert "No integrations found" in result.output


def test_integrations_list_filters_by_event(runner, monkeypatch) -> None:
    monkeypatch.setenv("INTEGRATIONS_ITEMS", json.dumps(WEBHOOKS))

    everything = runner.invoke(cli, ["integrations", "list"])
    selected = runner.invoke(cli, ["integrations", "list", "--event-type", "signup"])

    assert "legacy" in everything.output
    assert "Total: 2" in everything.output
    assert "crm" in selected.output
    assert "legacy" not in selected.output


def test_dispatch_with_no_subscribers(runner) -> None:
    result = runner.invoke(cli, ["dispatch", "signup", "--data", '{"userName": "Ana"}'])

    assert result.exit_code == 0
    assert "No integrations subscribed" in result.output


def test_dispatch_delivers_and_reports(runner, monkeypatch, mock_upstream) -> None:
    monkeypatch.setenv("INTEGRATIONS_ITEMS", json.dumps(WEBHOOKS))

    result = runner.invoke(cli, ["dispatch", "signup", "--data", '{"userName": "Ana"}'])

    assert result.exit_code == 0, result.output
    assert "CRM (1 attempt)" in result.output
    assert "1 successful, 0 failed" in result.output
    assert len(mock_upstream) == 1


def test_dispatch_failure_exits_2(runner, monkeypatch, mock_upstream) -> None:
    failing = [{**WEBHOOKS[0], "endpoint": "https://crm.example.com/fail"}]
    monkeypatch.setenv("INTEGRATIONS_ITEMS", json.dumps(failing))

    result = runner.invoke(
        cli, ["dispatch", "signup", "--max-retries", "1", "--retry-delay", "0"]
    )

    assert result.exit_code == 2
    assert "CRM (2 attempts): HTTP 503: unavailable" in result.output
    assert len(mock_upstream) == 2


def test_dispatch_missing_credentials_exits_1(runner, monkeypatch, mock_upstream) -> None:
    monkeypatch.setenv(
        "INTEGRATIONS_ITEMS",
        json.dumps([{"id": "wa", "name": "WhatsApp", "channel": "whatsapp", "events": ["signup"]}]),
    )

    result = runner.invoke(cli, ["dispatch", "signup"])

    assert result.exit_code == 1
    assert "WhatsApp API token and instance ID are required" in result.output
    assert mock_upstream == []


def test_dispatch_rejects_non_object_data(runner) -> None:
    result = runner.invoke(cli, ["dispatch", "signup", "--data", "[1, 2]"])

    assert result.exit_code == 2
    assert "must be a JSON object" in result.output


def test_jobs_enqueue_list_and_drain(runner, monkeypatch, tmp_path, mock_upstream) -> None:
    monkeypatch.setenv("DB_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'jobs.db'}")
    monkeypatch.setenv("INTEGRATIONS_ITEMS", json.dumps(WEBHOOKS[:1]))

    enqueued = runner.invoke(cli, ["jobs", "enqueue", "signup", "--data", '{"userName": "Ana"}'])
    pending = runner.invoke(cli, ["jobs", "list", "--status", "pending"])
    drained = runner.invoke(cli, ["drain"])
    sent = runner.invoke(cli, ["jobs", "list", "--status", "sent"])
    again = runner.invoke(cli, ["drain"])

    assert enqueued.exit_code == 0, enqueued.output
    assert "Queued job" in enqueued.output
    assert "Total: 1" in pending.output
    assert drained.exit_code == 0, drained.output
    assert "Processed 1 jobs" in drained.output
    assert "Total: 1" in sent.output
    assert "No pending jobs" in again.output
    assert len(mock_upstream) == 1
