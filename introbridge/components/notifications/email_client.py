"""
Resend email delivery for in-app notifications that also warrant an email.
"""

import logging

import resend

from ...platform.brand import BRAND_NAME, brand_email_from
from .templates import notification_html

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending transactional emails through Resend."""

    def __init__(self, api_key: str, from_email: str = brand_email_from()):
        resend.api_key = api_key
        self.from_email = from_email

    def send_notification(self, to_email: str, title: str, body: str, action_link: str | None = None) -> dict:
        try:
            logger.info("Sending notification email to %s (%s)", to_email, title)
            email = resend.Emails.send({
                "from": self.from_email,
                "to": [to_email],
                "subject": f"{BRAND_NAME}: {title}",
                "html": notification_html(title=title, body=body, action_link=action_link),
            })
            email_id = email.get("id", "") if isinstance(email, dict) else str(email)
            logger.info("Notification email sent (email_id=%s, to=%s)", email_id, to_email)
            return {"success": True, "email_id": email_id}
        except Exception as e:
            logger.error("Failed to send notification email to %s: %s", to_email, str(e))
            return {"success": False, "email_id": ""}
