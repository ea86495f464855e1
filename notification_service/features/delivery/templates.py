"""Email template rendering with Jinja2.

Templates live in ``notification_service/templates/email`` and are named
after the event type (``signup.html``). Events without a dedicated template
fall back to ``generic.html``.
"""

from __future__ import annotations

from functools import lru_cache
import logging
from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    Template,
    TemplateNotFound,
    select_autoescape,
)

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).parent.parent.parent / "templates" / "email"
FALLBACK_TEMPLATE = "generic"

DEFAULT_SUBJECTS = {
    "signup": "New User Registration - {{ name }}",
    "booking": "New Class Booking - {{ name }}",
    "cancellation": (
        "Class Booking Cancelled - "
        "{{ (data.cancellationDetails or {}).className | default('Unknown Class', true) }}"
    ),
    "session_request": "Session Balance Request - {{ name }}",
    "session_request_approved": "Session Balance Request Approved",
}
GENERIC_SUBJECT = "Notification: {{ event_type }}"


class EmailTemplateRenderer:
    """Jinja2-based email template renderer.

    Example:
        renderer = EmailTemplateRenderer()
        subject, html = renderer.render(
            "signup",
            subject_template=None,
            name="Ana",
            email="ana@example.com",
        )
    """

    def __init__(self, template_dir: Path | str = DEFAULT_TEMPLATE_DIR) -> None:
        self.template_dir = Path(template_dir)
        # Subjects are plain text headers, never HTML
        self.subject_env = Environment(autoescape=False)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        logger.debug(
            "Email template renderer initialized",
            extra={"template_dir": str(self.template_dir)},
        )

    def render(
        self,
        event_type: str,
        subject_template: str | None = None,
        **context: Any,
    ) -> tuple[str, str]:
        """Render subject and HTML body for an event.

        Args:
            event_type: Event type, used to pick the template.
            subject_template: Optional Jinja2 subject override.
            **context: Variables passed to both templates.

        Returns:
            Tuple of (subject, html_content).
        """
        full_context = {"event_type": event_type, **context}

        try:
            template = self.env.get_template(f"{event_type}.html")
        except TemplateNotFound:
            logger.debug(f"No HTML template found for: {event_type}")
            template = self.env.get_template(f"{FALLBACK_TEMPLATE}.html")
        html_content = template.render(**full_context)

        subject = self.compile_subject(event_type, subject_template).render(**full_context)
        return subject.strip(), html_content

    def compile_subject(self, event_type: str, subject_template: str | None = None) -> Template:
        """Compile the subject template for ``event_type``.

        Raises:
            TemplateSyntaxError: If ``subject_template`` is not valid Jinja2.
        """
        source = subject_template or DEFAULT_SUBJECTS.get(event_type, GENERIC_SUBJECT)
        return self.subject_env.from_string(source)


@lru_cache(maxsize=1)
def get_email_renderer() -> EmailTemplateRenderer:
    """Get the shared renderer for the packaged templates."""
    return EmailTemplateRenderer()


__all__ = ["EmailTemplateRenderer", "get_email_renderer"]
