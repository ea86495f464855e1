"""Webhook channel: JSON envelope sent to an arbitrary HTTP endpoint."""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING, ClassVar

from notification_service.core.exceptions import InputError
from notification_service.features.delivery.channels.base import HttpChannelAdapter
from notification_service.features.integrations.schemas import ChannelType

if TYPE_CHECKING:
    from notification_service.features.delivery.schemas import DeliveryAttempt, Event
    from notification_service.features.integrations.schemas import Integration


class WebhookChannel(HttpChannelAdapter):
    """Deliver events as signed JSON envelopes.

    Envelope::

        {"event": ..., "timestamp": ..., "data": {...},
         "integration": {"id": ..., "name": ...}}

    When ``config["secret"]`` is set the body is signed with HMAC-SHA256
    over ``"{timestamp}.{body}"``.
    """

    channel: ClassVar[ChannelType] = ChannelType.WEBHOOK

    def validate(self, integration: Integration, event: Event) -> None:
        if not integration.endpoint:
            raise InputError(
                detail=f"Webhook endpoint is required for integration {integration.id}",
                extra={"integration_id": integration.id},
            )

    def _generate_signature(self, secret: str, timestamp: str, payload: str) -> str:
        """Generate HMAC-SHA256 signature for webhook payload.

        Args:
            secret: HMAC secret key
            timestamp: ISO format timestamp
            payload: JSON payload string

        Returns:
            Hex-encoded HMAC signature
        """
        message = f"{timestamp}.{payload}"
        return hmac.new(
            secret.encode("utf-8"),
            message.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def build_envelope(self, integration: Integration, event: Event) -> dict:
        return {
            "event": event.event_type,
            "timestamp": datetime.now(UTC).isoformat(),
            "data": dict(event.payload),
            "integration": {"id": integration.id, "name": integration.name},
        }

    async def attempt(
        self,
        integration: Integration,
        event: Event,
        attempt_number: int,
    ) -> DeliveryAttempt:
        payload_str = json.dumps(
            self.build_envelope(integration, event),
            separators=(",", ":"),
            default=str,
        )

        signing = {}
        secret = integration.config.get("secret")
        if secret:
            timestamp = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
            signing = {
                "X-Webhook-Signature": self._generate_signature(secret, timestamp, payload_str),
                "X-Webhook-Timestamp": timestamp,
            }

        result = await self._send(
            integration.method,
            integration.endpoint,
            headers=self._headers(signing, integration.headers),
            content=payload_str,
            integration_id=integration.id,
        )
        return self._to_attempt(integration, attempt_number, result)
