"""Pydantic schemas for outbound integrations."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class ChannelType(StrEnum):
    """Delivery mechanism used by an integration."""

    WEBHOOK = "webhook"
    PUSH = "push"
    EMAIL = "email"
    WHATSAPP = "whatsapp"


class Integration(BaseModel):
    """One configured outbound target.

    Immutable: a registry hands the same instances to every concurrent
    dispatch, so ``headers`` and ``config`` are read-only mappings.
    ``config`` carries channel-specific settings and secrets (credentials,
    recipient lists, phone numbers, template ids).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1, max_length=200, description="Stable integration identifier")
    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    endpoint: str = Field(default="", max_length=2000, description="Target URI")
    method: str = Field(default="POST", description="HTTP method for webhook delivery")
    headers: Mapping[str, str] = Field(default_factory=dict, description="Extra request headers")
    enabled: bool = Field(default=True, description="Disabled integrations are never selected")
    events: tuple[str, ...] = Field(default=(), description="Subscribed event types")
    channel: ChannelType = Field(default=ChannelType.WEBHOOK, description="Delivery channel")
    config: Mapping[str, Any] = Field(default_factory=dict, description="Channel-specific settings")

    @field_validator("method")
    @classmethod
    def normalize_method(cls, v: str) -> str:
        """Upper-case the HTTP method."""
        method = v.strip().upper()
        if not method:
            raise ValueError("method must not be empty")
        return method

    @field_validator("events", mode="before")
    @classmethod
    def coerce_events(cls, v: Any) -> Any:
        """Accept a single event type string as well as a list."""
        if isinstance(v, str):
            return (v,)
        return v

    @field_validator("headers", "config")
    @classmethod
    def freeze_mapping(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(v))

    @field_serializer("headers", "config")
    def serialize_mapping(self, v: Mapping[str, Any]) -> dict[str, Any]:
        return dict(v)

    def subscribes_to(self, event_type: str) -> bool:
        """Check whether this integration should receive ``event_type``."""
        return self.enabled and event_type in self.events


class IntegrationRead(BaseModel):
    """Integration as exposed over the API (config secrets omitted)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    endpoint: str
    method: str
    enabled: bool
    events: list[str]
    channel: ChannelType


__all__ = ["ChannelType", "Integration", "IntegrationRead"]
