from .celery_app import celery_app
from .introduction_tasks import expire_stale_introductions
from .notification_tasks import send_notification_email

__all__ = [
    "celery_app",
    "expire_stale_introductions",
    "send_notification_email",
]
