"""Channel adapters, one per delivery mechanism."""

from __future__ import annotations

from typing import TYPE_CHECKING

from notification_service.features.delivery.channels.base import (
    ChannelAdapter,
    HttpChannelAdapter,
    HttpResult,
    member_fields,
)
from notification_service.features.delivery.channels.email import EmailChannel
from notification_service.features.delivery.channels.push import PushChannel
from notification_service.features.delivery.channels.webhook import WebhookChannel
from notification_service.features.delivery.channels.whatsapp import WhatsAppChannel
from notification_service.features.integrations.schemas import ChannelType

if TYPE_CHECKING:
    import httpx

    from notification_service.core.settings import DeliverySettings

ADAPTER_TYPES: dict[ChannelType, type[HttpChannelAdapter]] = {
    ChannelType.WEBHOOK: WebhookChannel,
    ChannelType.PUSH: PushChannel,
    ChannelType.EMAIL: EmailChannel,
    ChannelType.WHATSAPP: WhatsAppChannel,
}


def build_adapters(
    client: httpx.AsyncClient,
    settings: DeliverySettings,
) -> dict[ChannelType, ChannelAdapter]:
    """Instantiate one adapter per channel sharing ``client``."""
    return {
        channel: adapter_type(
            client,
            timeout_seconds=settings.attempt_timeout_seconds,
            excerpt_chars=settings.response_excerpt_chars,
            user_agent=settings.user_agent,
        )
        for channel, adapter_type in ADAPTER_TYPES.items()
    }


__all__ = [
    "ADAPTER_TYPES",
    "ChannelAdapter",
    "EmailChannel",
    "HttpChannelAdapter",
    "HttpResult",
    "PushChannel",
    "WebhookChannel",
    "WhatsAppChannel",
    "build_adapters",
    "member_fields",
]
