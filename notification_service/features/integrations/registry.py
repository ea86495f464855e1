"""Integration registry: ordered lookup of configured integrations."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from notification_service.core.exceptions import InputError
from notification_service.features.integrations.schemas import Integration
from notification_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

    from notification_service.core.settings import IntegrationSettings

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class IntegrationRegistry:
    """Read-only, insertion-ordered collection of integrations.

    ``select`` has no side effects, so one registry can be shared by any
    number of concurrent dispatches.
    """

    __slots__ = ("_integrations",)

    def __init__(self, integrations: Iterable[Integration] = ()) -> None:
        ordered: dict[str, Integration] = {}
        for integration in integrations:
            if integration.id in ordered:
                raise InputError(
                    detail=f"Duplicate integration id: {integration.id}",
                    extra={"integration_id": integration.id},
                )
            ordered[integration.id] = integration
        self._integrations = ordered

    @classmethod
    def from_mappings(cls, items: Iterable[Mapping[str, Any]]) -> IntegrationRegistry:
        """Build a registry from raw mappings (config files, request bodies).

        Raises:
            InputError: If an entry is malformed or ids collide.
        """
        integrations = []
        for index, item in enumerate(items):
            try:
                integrations.append(Integration.model_validate(item))
            except ValidationError as exc:
                raise InputError(
                    detail=f"Invalid integration at index {index}: {exc.errors()[0]['msg']}",
                    extra={"index": index},
                ) from exc
        return cls(integrations)

    def select(self, event_type: str) -> list[Integration]:
        """Return enabled integrations subscribed to ``event_type``, in registry order."""
        selected = [i for i in self._integrations.values() if i.subscribes_to(event_type)]
        lazy_logger.debug(
            lambda: f"registry.select: event_type={event_type} -> {[i.id for i in selected]}"
        )
        return selected

    def get(self, integration_id: str) -> Integration | None:
        """Look up an integration by id."""
        return self._integrations.get(integration_id)

    def __iter__(self) -> Iterator[Integration]:
        return iter(self._integrations.values())

    def __len__(self) -> int:
        return len(self._integrations)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({list(self._integrations)})"


def load_registry(settings: IntegrationSettings) -> IntegrationRegistry:
    """Build the registry from configured integration definitions."""
    registry = IntegrationRegistry.from_mappings(settings.items)
    logger.info(
        "Integration registry loaded",
        extra={
            "integration_count": len(registry),
            "enabled_count": sum(1 for i in registry if i.enabled),
            "operation": "registry.load",
        },
    )
    return registry


@lru_cache(maxsize=1)
def get_integration_registry() -> IntegrationRegistry:
    """Get the process-wide registry built from ``IntegrationSettings``."""
    from notification_service.core.settings import get_integration_settings

    return load_registry(get_integration_settings())


__all__ = ["IntegrationRegistry", "get_integration_registry", "load_registry"]
