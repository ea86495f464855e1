"""Unit tests for modular Pydantic Settings v2."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from notification_service.core.settings import (
    AppSettings,
    DatabaseSettings,
    DeliverySettings,
    DrainSettings,
    IntegrationSettings,
    LoggingSettings,
    get_delivery_settings,
    get_integration_settings,
)


@pytest.mark.unit
class TestAppSettings:
    """Test suite for AppSettings."""

    def test_defaults(self):
        settings = AppSettings()

        assert settings.service_name == "notification-service"
        assert settings.api_prefix == "/api/v1"
        assert settings.cors_origins == ["*"]
        assert "content-type" in settings.cors_allow_headers

    def test_frozen(self):
        settings = AppSettings()

        with pytest.raises(ValidationError):
            settings.debug = True

    def test_openapi_url_respects_disable_docs(self):
        assert AppSettings(disable_docs=False).get_openapi_url() == "/openapi.json"
        assert AppSettings(disable_docs=True).get_openapi_url() is None


@pytest.mark.unit
class TestLoggingSettings:
    def test_env_level_is_normalized(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_JSON", "false")

        settings = LoggingSettings()

        assert settings.to_logging_kwargs() == {
            "service_name": "notification-service",
            "log_level": "DEBUG",
            "json_logs": False,
        }


@pytest.mark.unit
class TestDeliverySettings:
    """Test suite for DeliverySettings."""

    def test_defaults(self):
        settings = DeliverySettings(retry_delay_seconds=5.0)

        assert settings.max_retries == 3
        assert settings.retry_delay_seconds == 5.0
        assert settings.attempt_timeout_seconds == 10.0

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("DELIVERY_MAX_RETRIES", "5")
        monkeypatch.setenv("DELIVERY_ATTEMPT_TIMEOUT_SECONDS", "2.5")

        settings = get_delivery_settings()

        assert settings.max_retries == 5
        assert settings.attempt_timeout_seconds == 2.5

    def test_rejects_negative_retries(self):
        with pytest.raises(ValidationError):
            DeliverySettings(max_retries=-1)

    def test_rejects_zero_timeout(self):
        with pytest.raises(ValidationError):
            DeliverySettings(attempt_timeout_seconds=0)

    def test_loader_is_cached(self):
        assert get_delivery_settings() is get_delivery_settings()


@pytest.mark.unit
class TestDrainSettings:
    def test_disabled_by_default(self, monkeypatch):
        monkeypatch.delenv("DRAIN_SCHEDULER_ENABLED", raising=False)

        assert DrainSettings().scheduler_enabled is False
        assert DrainSettings().interval_seconds == 60


@pytest.mark.unit
class TestDatabaseSettings:
    def test_disabled_store_is_not_configured(self):
        assert DatabaseSettings(enabled=False).is_configured is False
        assert DatabaseSettings(enabled=True).is_configured is True

    def test_sqlite_detection(self):
        assert DatabaseSettings().is_sqlite is True
        assert DatabaseSettings(database_url="postgresql+asyncpg://db/app").is_sqlite is False


@pytest.mark.unit
class TestIntegrationSettings:
    """Test suite for IntegrationSettings sources."""

    def test_items_from_env_json(self, monkeypatch):
        monkeypatch.setenv(
            "INTEGRATIONS_ITEMS",
            '[{"id": "crm", "name": "CRM", "events": ["signup"]}]',
        )

        settings = get_integration_settings()

        assert settings.items == [{"id": "crm", "name": "CRM", "events": ["signup"]}]

    def test_items_from_yaml_and_confd(self, monkeypatch, tmp_path):
        (tmp_path / "integrations.yaml").write_text(
            "items:\n"
            "  - id: crm\n"
            "    name: CRM\n"
            "    endpoint: https://crm.example.com/hook\n"
            "    events: [signup]\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("INTEGRATIONS_CONFIG_DIR", str(tmp_path))

        settings = IntegrationSettings()

        assert [item["id"] for item in settings.items] == ["crm"]

    def test_empty_without_configuration(self):
        assert IntegrationSettings().items == []
