"""
Email sending via Twilio SendGrid.

Emails are secondary side effects: routes schedule ``send`` as a background
task after the response, and a failure is logged and otherwise ignored.
"""

from __future__ import annotations

from functools import lru_cache
from html import escape

import structlog
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from teamboard.core.config import Settings, get_settings

log = structlog.get_logger()

TEMPLATES: dict[str, str] = {
    "verification": (
        "<p>Welcome to Teamboard!</p>"
        "<p>Please confirm your email address by opening the link below. "
        "It expires in {ttl_hours} hours.</p>"
        '<p><a href="{verification_url}">{verification_url}</a></p>'
    ),
    "team_invite": (
        "<p>{sender_name} invited you to join their team on Teamboard.</p>"
        "<p><em>{custom_message}</em></p>"
        '<p><a href="{invite_link}">Accept the invitation</a></p>'
        "<p>If the button doesn't work, paste this link into your browser: {invite_link}</p>"
        "<p>If you didn't expect this invitation, you can safely ignore this email.</p>"
    ),
    "password_reset": (
        "<p>We received a request to reset your Teamboard password.</p>"
        '<p><a href="{reset_url}">{reset_url}</a></p>'
        "<p>The link expires in {ttl_minutes} minutes. "
        "If you didn't ask for this, ignore this email.</p>"
    ),
}


def render(template: str, variables: dict) -> str:
    """Fill a template with HTML-escaped variables."""
    body = TEMPLATES[template]
    return body.format(**{k: escape(str(v)) for k, v in variables.items()})


class EmailSender:
    """Sends templated emails. Disabled when no SendGrid key is configured."""

    def __init__(self, settings: Settings):
        self.from_email = (settings.email_from_address, settings.email_from_name)
        self.client = SendGridAPIClient(settings.sendgrid_api_key) if settings.sendgrid_api_key else None
        if self.client is None:
            log.warning("email.disabled", reason="TB_SENDGRID_API_KEY not configured")

    def send(self, recipient: str, subject: str, template: str, variables: dict) -> bool:
        """Send one email. Returns False instead of raising on any failure."""
        if self.client is None:
            log.info("email.skipped", recipient=recipient, template=template)
            return False
        try:
            message = Mail(
                from_email=self.from_email,
                to_emails=recipient,
                subject=subject,
                html_content=render(template, variables),
            )
            response = self.client.send(message)
        except Exception:
            log.exception("email.failed", recipient=recipient, template=template)
            return False
        if response.status_code >= 300:
            log.warning(
                "email.rejected",
                recipient=recipient,
                template=template,
                status=response.status_code,
            )
            return False
        log.info("email.sent", recipient=recipient, template=template)
        return True


@lru_cache
def get_email_sender() -> EmailSender:
    return EmailSender(get_settings())
