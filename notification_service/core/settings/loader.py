"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the process.

Usage:
    from notification_service.core.settings.loader import get_delivery_settings

    settings = get_delivery_settings()  # First call: loads and validates
    settings = get_delivery_settings()  # Subsequent calls: returns cached instance

Testing:
    In tests, clear the cache to force reload:
    get_delivery_settings.cache_clear()
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .database import DatabaseSettings
from .delivery import DeliverySettings, DrainSettings
from .integrations import IntegrationSettings
from .logs import LoggingSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings.

    Returns:
        Validated and frozen AppSettings instance.
    """
    return AppSettings()


@lru_cache(maxsize=1)
def get_db_settings() -> DatabaseSettings:
    """Get cached database settings.

    Returns:
        Validated and frozen DatabaseSettings instance.
    """
    return DatabaseSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_delivery_settings() -> DeliverySettings:
    """Get cached delivery settings.

    Returns:
        Validated and frozen DeliverySettings instance.
    """
    return DeliverySettings()


@lru_cache(maxsize=1)
def get_drain_settings() -> DrainSettings:
    """Get cached drain scheduler settings.

    Returns:
        Validated and frozen DrainSettings instance.
    """
    return DrainSettings()


@lru_cache(maxsize=1)
def get_integration_settings() -> IntegrationSettings:
    """Get cached integration definitions.

    Returns:
        Validated and frozen IntegrationSettings instance.
    """
    return IntegrationSettings()


def clear_all_settings_caches() -> None:
    """Clear every cached settings instance (tests and config reloads)."""
    get_app_settings.cache_clear()
    get_db_settings.cache_clear()
    get_logging_settings.cache_clear()
    get_delivery_settings.cache_clear()
    get_drain_settings.cache_clear()
    get_integration_settings.cache_clear()
