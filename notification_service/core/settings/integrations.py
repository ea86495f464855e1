"""Outbound integration definitions.

Integrations are read from ``conf/integrations.yaml`` (plus
``conf/integrations.d/*.yaml``) or from ``INTEGRATIONS_ITEMS`` as a JSON
array. Entries stay as raw mappings here; the integration registry
validates them into ``Integration`` models.

Example conf/integrations.yaml:

    items:
      - id: crm-hook
        name: CRM webhook
        endpoint: https://crm.example.com/hooks/gym
        events: [signup]
        headers:
          X-Api-Key: secret
"""

from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_integrations_yaml_source


class IntegrationSettings(BaseSettings):
    """Configured integration list (order is registry order)."""

    items: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Integration definitions in registry order",
    )

    model_config = SettingsConfigDict(
        env_prefix="INTEGRATIONS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Customize settings source precedence: init > yaml > env > dotenv > secrets."""
        return (
            init_settings,
            create_integrations_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )


__all__ = ["IntegrationSettings"]
