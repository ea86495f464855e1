"""Push channel: NotificationAPI-style push notification service."""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Any, ClassVar

from notification_service.core.exceptions import InputError
from notification_service.features.delivery.channels.base import (
    HttpChannelAdapter,
    first_value,
    member_fields,
)
from notification_service.features.integrations.schemas import ChannelType

if TYPE_CHECKING:
    from notification_service.features.delivery.schemas import DeliveryAttempt, Event
    from notification_service.features.integrations.schemas import Integration

PRODUCTION_URL = "https://api.notificationapi.com/notifications"
DEFAULT_NOTIFICATION_ID = "gym_notification"


def push_url(environment: str) -> str:
    """Resolve the push API URL for an environment name."""
    if environment == "production":
        return PRODUCTION_URL
    return f"https://{environment}.api.notificationapi.com/notifications"


class PushChannel(HttpChannelAdapter):
    """Send one push notification per attempt.

    Credentials (``client_id``/``client_secret``) come from the integration
    config, falling back to the event payload. The target user comes from
    the payload (``userId`` or the member email).
    """

    channel: ClassVar[ChannelType] = ChannelType.PUSH

    def _credentials(self, integration: Integration, event: Event) -> tuple[Any, Any]:
        client_id = first_value(integration.config, "client_id", "clientId") or first_value(
            event.payload, "client_id", "clientId"
        )
        client_secret = first_value(
            integration.config, "client_secret", "clientSecret"
        ) or first_value(event.payload, "client_secret", "clientSecret")
        return client_id, client_secret

    def _user(self, event: Event) -> dict[str, Any]:
        payload = event.payload
        email = first_value(payload, "userEmail", "user_email", "email")
        user_id = first_value(payload, "userId", "user_id", default=email)
        user: dict[str, Any] = {"id": user_id}
        if email:
            user["email"] = email
        return user

    def validate(self, integration: Integration, event: Event) -> None:
        client_id, client_secret = self._credentials(integration, event)
        if not client_id or not client_secret:
            raise InputError(
                detail="Push client ID and client secret are required",
                extra={"integration_id": integration.id},
            )
        if not self._user(event)["id"]:
            raise InputError(
                detail="Push notifications require a user id or email",
                extra={"integration_id": integration.id},
            )

    def build_payload(self, integration: Integration, event: Event) -> dict[str, Any]:
        config = integration.config
        fields = member_fields(event)
        title = first_value(event.payload, "title", default=None) or config.get(
            "title", f"New {event.event_type} notification"
        )
        body = first_value(event.payload, "body", "message", default=None) or config.get(
            "body", f"{fields['name']} ({fields['email']})"
        )
        return {
            "notificationId": config.get("notification_id", DEFAULT_NOTIFICATION_ID),
            "user": self._user(event),
            "mergeTags": {
                "title": title,
                "body": body,
                "redirect_url": first_value(
                    event.payload, "redirect_url", "redirectUrl", default=config.get("redirect_url", "")
                ),
            },
        }

    async def attempt(
        self,
        integration: Integration,
        event: Event,
        attempt_number: int,
    ) -> DeliveryAttempt:
        client_id, client_secret = self._credentials(integration, event)
        token = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode()
        url = integration.endpoint or push_url(
            integration.config.get("environment", "production")
        )

        result = await self._send(
            "POST",
            url,
            headers=self._headers({"Authorization": f"Basic {token}"}, integration.headers),
            json=self.build_payload(integration, event),
            integration_id=integration.id,
        )
        return self._to_attempt(integration, attempt_number, result)
