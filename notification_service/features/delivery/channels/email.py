"""Email channel: transactional email through a Resend-compatible HTTP API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from jinja2 import TemplateSyntaxError

from notification_service.core.exceptions import InputError
from notification_service.features.delivery.channels.base import (
    HttpChannelAdapter,
    HttpResult,
    member_fields,
)
from notification_service.features.delivery.schemas import AttemptOutcome, DeliveryAttempt
from notification_service.features.delivery.templates import (
    EmailTemplateRenderer,
    get_email_renderer,
)
from notification_service.features.integrations.schemas import ChannelType

if TYPE_CHECKING:
    import httpx

    from notification_service.features.delivery.schemas import Event
    from notification_service.features.integrations.schemas import Integration

DEFAULT_ENDPOINT = "https://api.resend.com/emails"
DEFAULT_FROM = "Notifications <onboarding@resend.dev>"


def recipients_of(integration: Integration) -> list[str]:
    """Configured recipient addresses with blanks removed."""
    raw = integration.config.get("recipients") or []
    if isinstance(raw, str):
        raw = raw.split(",")
    return [r.strip() for r in raw if r and r.strip()]


class EmailChannel(HttpChannelAdapter):
    """Send one rendered email per recipient and fold the results.

    An integration without recipients succeeds without sending anything.
    """

    channel: ClassVar[ChannelType] = ChannelType.EMAIL

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        renderer: EmailTemplateRenderer | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(client, **kwargs)
        self.renderer = renderer or get_email_renderer()

    def validate(self, integration: Integration, event: Event) -> None:
        if recipients_of(integration) and not integration.config.get("api_key"):
            raise InputError(
                detail="Email API key is required when recipients are configured",
                extra={"integration_id": integration.id},
            )
        try:
            self.renderer.compile_subject(event.event_type, integration.config.get("subject"))
        except TemplateSyntaxError as exc:
            raise InputError(
                detail=f"Invalid email subject template: {exc.message}",
                extra={"integration_id": integration.id},
            ) from exc

    async def attempt(
        self,
        integration: Integration,
        event: Event,
        attempt_number: int,
    ) -> DeliveryAttempt:
        recipients = recipients_of(integration)
        if not recipients:
            return DeliveryAttempt(
                integration_id=integration.id,
                attempt_number=attempt_number,
                outcome=AttemptOutcome.SUCCESS,
                response_excerpt="no recipients configured",
            )

        config = integration.config
        subject, html = self.renderer.render(
            event.event_type,
            subject_template=config.get("subject"),
            data=dict(event.payload),
            **member_fields(event),
        )
        headers = self._headers(
            {"Authorization": f"Bearer {config['api_key']}"}, integration.headers
        )
        url = integration.endpoint or DEFAULT_ENDPOINT

        results: list[tuple[str, HttpResult]] = []
        for recipient in recipients:
            result = await self._send(
                "POST",
                url,
                headers=headers,
                json={
                    "from": config.get("from_address", DEFAULT_FROM),
                    "to": [recipient],
                    "subject": subject,
                    "html": html,
                },
                integration_id=integration.id,
            )
            results.append((recipient, result))

        return self._fold(integration, attempt_number, results, noun="recipients")
