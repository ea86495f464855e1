"""Notification delivery configuration settings.

Provides default retry policy, per-attempt timeout and drain scheduling
for outbound integrations (webhook, push, email, WhatsApp).
"""

from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_sources import create_delivery_yaml_source


class DeliverySettings(BaseSettings):
    """Configuration for the delivery worker and channel adapters.

    Controls HTTP timeouts and the fixed-delay retry behavior used when a
    dispatch request does not carry its own retry configuration.
    """

    # Retry policy defaults
    max_retries: int = Field(
        default=3,
        ge=0,
        le=20,
        description="Retries after the first failed attempt (attempts = max_retries + 1)",
    )
    retry_delay_seconds: float = Field(
        default=5.0,
        ge=0.0,
        le=3600.0,
        description="Fixed delay between attempts (seconds)",
    )

    # HTTP delivery settings
    attempt_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        le=300.0,
        description="Timeout for a single outbound HTTP request (seconds)",
    )
    response_excerpt_chars: int = Field(
        default=500,
        ge=0,
        le=100_000,
        description="Maximum characters of a response body kept in attempt records",
    )
    user_agent: str = Field(
        default="notification-service/0.1",
        description="User-Agent header sent with outbound requests",
    )

    model_config = SettingsConfigDict(
        env_prefix="DELIVERY_",
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
            create_delivery_yaml_source(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )


class DrainSettings(BaseSettings):
    """Periodic pending-job drain configuration.

    Environment variables use DRAIN_ prefix.
    Example: DRAIN_SCHEDULER_ENABLED=true, DRAIN_INTERVAL_SECONDS=30
    """

    scheduler_enabled: bool = Field(
        default=False,
        description="Run a periodic drain of pending jobs inside the API process",
    )
    interval_seconds: int = Field(
        default=60,
        ge=1,
        le=86400,
        description="Seconds between scheduled drain passes",
    )
    misfire_grace_seconds: int = Field(
        default=60,
        ge=1,
        description="Allowed lateness before a scheduled drain is skipped",
    )

    model_config = SettingsConfigDict(
        env_prefix="DRAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )


__all__ = ["DeliverySettings", "DrainSettings"]
