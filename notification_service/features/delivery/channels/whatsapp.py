"""WhatsApp channel: text message to each configured staff phone number."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, ClassVar

from notification_service.core.exceptions import InputError
from notification_service.features.delivery.channels.base import (
    HttpChannelAdapter,
    HttpResult,
    member_fields,
)
from notification_service.features.integrations.schemas import ChannelType

if TYPE_CHECKING:
    from notification_service.features.delivery.schemas import DeliveryAttempt, Event
    from notification_service.features.integrations.schemas import Integration

DEFAULT_ENDPOINT = "https://api.whatsapp.com/send"

SIGNUP_MESSAGE = (
    "🏋️ New Gym Registration Alert!\n\n"
    "👤 Name: {name}\n"
    "📧 Email: {email}\n"
    "📅 Date: {date}\n\n"
    "Please welcome our new member! 💪"
)
GENERIC_MESSAGE = "🔔 {event_type}\n\n👤 Name: {name}\n📧 Email: {email}\n📅 Date: {date}"

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(phone: str) -> str:
    """Strip everything except digits."""
    return _NON_DIGITS.sub("", phone)


def phone_numbers_of(integration: Integration) -> list[str]:
    raw = integration.config.get("phone_numbers") or []
    if isinstance(raw, str):
        raw = raw.split(",")
    return [n for n in (normalize_phone(str(p)) for p in raw) if n]


class WhatsAppChannel(HttpChannelAdapter):
    """Send one message per phone number and fold the results.

    ``integration.endpoint`` may contain ``{instance_id}`` and ``{phone}``
    placeholders for providers that route per instance.
    """

    channel: ClassVar[ChannelType] = ChannelType.WHATSAPP

    def validate(self, integration: Integration, event: Event) -> None:
        config = integration.config
        if not config.get("api_token") or not config.get("instance_id"):
            raise InputError(
                detail="WhatsApp API token and instance ID are required",
                extra={"integration_id": integration.id},
            )
        if not phone_numbers_of(integration):
            raise InputError(
                detail="At least one phone number is required",
                extra={"integration_id": integration.id},
            )
        try:
            self.build_message(integration, event)
            self.build_endpoint(integration, "0")
        except (AttributeError, KeyError, IndexError, ValueError) as exc:
            raise InputError(
                detail=f"Invalid WhatsApp template or endpoint: {exc!r}",
                extra={"integration_id": integration.id},
            ) from exc

    def build_message(self, integration: Integration, event: Event) -> str:
        template = integration.config.get("message_template")
        if not template:
            template = SIGNUP_MESSAGE if event.event_type == "signup" else GENERIC_MESSAGE
        return template.format(event_type=event.event_type, **member_fields(event))

    def build_endpoint(self, integration: Integration, phone: str) -> str:
        endpoint = integration.endpoint or DEFAULT_ENDPOINT
        return endpoint.format(instance_id=integration.config["instance_id"], phone=phone)

    async def attempt(
        self,
        integration: Integration,
        event: Event,
        attempt_number: int,
    ) -> DeliveryAttempt:
        config = integration.config
        message = self.build_message(integration, event)
        headers = self._headers(
            {"Authorization": f"Bearer {config['api_token']}"}, integration.headers
        )
        results: list[tuple[str, HttpResult]] = []
        for phone in phone_numbers_of(integration):
            result = await self._send(
                "POST",
                self.build_endpoint(integration, phone),
                headers=headers,
                json={
                    "messaging_product": "whatsapp",
                    "to": phone,
                    "type": "text",
                    "text": {"body": message},
                },
                integration_id=integration.id,
            )
            results.append((phone, result))

        return self._fold(integration, attempt_number, results, noun="phone numbers")
