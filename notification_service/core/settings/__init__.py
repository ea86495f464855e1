"""Modular Pydantic Settings v2 configuration.

Settings are split by domain (app/db/logging/delivery/drain/integrations),
frozen, and loaded through LRU-cached loaders:

    from notification_service.core.settings import get_delivery_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. YAML/conf.d files (optional)
    3. Environment variables
    4. .env file
    5. secrets_dir
"""

from __future__ import annotations

from .app import AppSettings
from .database import DatabaseSettings
from .delivery import DeliverySettings, DrainSettings
from .integrations import IntegrationSettings
from .loader import (
    clear_all_settings_caches,
    get_app_settings,
    get_db_settings,
    get_delivery_settings,
    get_drain_settings,
    get_integration_settings,
    get_logging_settings,
)
from .logs import LoggingSettings

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "DeliverySettings",
    "DrainSettings",
    "IntegrationSettings",
    "LoggingSettings",
    "clear_all_settings_caches",
    "get_app_settings",
    "get_db_settings",
    "get_delivery_settings",
    "get_drain_settings",
    "get_integration_settings",
    "get_logging_settings",
]
