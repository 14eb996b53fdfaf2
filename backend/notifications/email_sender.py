"""
Email sending via Resend API for the daily GitHub digest.

Renders the digest as plain text and HTML and hands one message per
recipient to Resend. Failures are reported to the caller, never retried here.
"""

import html
from typing import Any, cast
from urllib.parse import urlencode

import resend

from config.settings import Settings
from notifications.digest_formatter import digest_lines
from notifications.unsubscribe_tokens import generate_unsubscribe_token
from shared.errors import DeliveryError
from shared.logging import get_logger

logger = get_logger(__name__)

DIGEST_SUBJECT = "Your Daily GitHub Updates"
GITHUB_URL = "https://github.com"


class EmailDispatcher:
    """Sends a rendered digest to one recipient at a time."""

    def __init__(self, settings: Settings):
        self.settings = settings
        resend.api_key = settings.resend_api_key

    @property
    def sender(self) -> str:
        return f"{self.settings.notification_from_name} <{self.settings.notification_from_email}>"

    def send_digest(self, recipient: str, digest_text: str) -> str:
        """
        Send the digest email to one recipient.

        Args:
            recipient: Recipient email address
            digest_text: Output of format_digest()

        Returns:
            Resend email id

        Raises:
            DeliveryError: If Resend rejects the message or cannot be reached
        """
        unsubscribe_url = _build_unsubscribe_url(self.settings, recipient)

        params: dict[str, Any] = {
            "from": self.sender,
            "to": [recipient],
            "subject": DIGEST_SUBJECT,
            "html": _build_digest_html(digest_text, unsubscribe_url),
            "text": _build_digest_text(digest_text, unsubscribe_url),
        }
        if unsubscribe_url:
            params["headers"] = {"List-Unsubscribe": f"<{unsubscribe_url}>"}

        try:
            response = resend.Emails.send(cast(Any, params))
        except Exception as e:
            raise DeliveryError(recipient, str(e)) from e

        email_id = _response_id(response)
        if not email_id:
            raise DeliveryError(recipient, "Resend returned no email id")

        logger.info("Email sent successfully to %s: %s", recipient, email_id)
        return email_id


def _response_id(response: Any) -> str | None:
    if isinstance(response, dict):
        return response.get("id")
    return getattr(response, "id", None)


def _build_unsubscribe_url(settings: Settings, email: str) -> str | None:
    """One-click unsubscribe link, or None when signing is not configured."""
    if not settings.unsubscribe_secret_key:
        return None

    token = generate_unsubscribe_token(email, settings.unsubscribe_secret_key)
    return f"{settings.api_base_url}/api/unsubscribe?{urlencode({'token': token})}"


def _build_digest_html(digest_text: str, unsubscribe_url: str | None) -> str:
    """
    Build HTML email body: a styled wrap with one paragraph per digest line.

    Args:
        digest_text: Digest as produced by format_digest()
        unsubscribe_url: Signed unsubscribe link, if available

    Returns:
        HTML string
    """
    paragraphs = "".join(
        f'<p style="margin: 8px 0; color: #334155; font-size: 14px; line-height: 1.5;">'
        f"{html.escape(line)}</p>"
        for line in digest_lines(digest_text)
    )

    if unsubscribe_url:
        unsubscribe_link = (
            f'<a href="{html.escape(unsubscribe_url)}" '
            f'style="color: #667eea; text-decoration: none;">Unsubscribe</a> | '
        )
    else:
        unsubscribe_link = ""

    return f"""
<div style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif; max-width: 600px; margin: 0 auto; background-color: #ffffff;">
    <div style="background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); padding: 30px; text-align: center; border-radius: 10px 10px 0 0;">
        <h1 style="color: #ffffff; margin: 0; font-size: 28px; font-weight: 600;">GitHub Updates</h1>
        <p style="color: #e0e7ff; margin: 10px 0 0 0; font-size: 16px;">Latest activities from the developer community</p>
    </div>
    <div style="padding: 30px; background-color: #ffffff;">
        <div style="background: #f8fafc; padding: 20px; border-radius: 8px; border-left: 4px solid #667eea;">
            {paragraphs}
        </div>
        <div style="margin-top: 30px; padding-top: 20px; border-top: 1px solid #e2e8f0; text-align: center;">
            <p style="color: #64748b; font-size: 12px; margin: 0;">
                You're receiving this because you subscribed to GitHub updates.<br>
                {unsubscribe_link}<a href="{GITHUB_URL}" style="color: #667eea; text-decoration: none;">Visit GitHub</a>
            </p>
        </div>
    </div>
</div>
"""


def _build_digest_text(digest_text: str, unsubscribe_url: str | None) -> str:
    """Build plain text email body: the digest verbatim plus a footer."""
    text = f"""{digest_text}

---
You're receiving this because you subscribed to GitHub updates.
"""
    if unsubscribe_url:
        text += f"Unsubscribe: {unsubscribe_url}\n"
    return text
