import logging

from .celery_app import celery_app
from ..components.notifications.email_client import EmailService
from ..platform.config import settings

logger = logging.getLogger(__name__)


@celery_app.task(
    name="introbridge.tasks.notification_tasks.send_notification_email",
    bind=True,
    max_retries=3,
    default_retry_delay=60,
)
def send_notification_email(self, to_email: str, title: str, body: str, action_link: str | None = None):
    email_svc = EmailService(api_key=settings.RESEND_API_KEY, from_email=settings.EMAIL_FROM)
    result = email_svc.send_notification(to_email=to_email, title=title, body=body, action_link=action_link)
    if not result.get("success"):
        logger.warning("Notification email to %s failed, retrying", to_email)
        raise self.retry()
    return result
