"""Integration definitions and the registry that selects them per event."""

from notification_service.features.integrations.registry import (
    IntegrationRegistry,
    get_integration_registry,
    load_registry,
)
from notification_service.features.integrations.schemas import (
    ChannelType,
    Integration,
    IntegrationRead,
)

__all__ = [
    "ChannelType",
    "Integration",
    "IntegrationRead",
    "IntegrationRegistry",
    "get_integration_registry",
    "load_registry",
]
