"""Best-effort notification side channel.

Engine operations emit notifications only after their own transaction has
committed. Emission failures are logged and swallowed; they never fail or roll
back the operation that triggered them.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models.notification import Notification
from ...platform.config import settings
from .email_client import EmailService

logger = logging.getLogger("introbridge.notifications")


class NotificationType(str, enum.Enum):
    INTRO_REQUEST = "INTRO_REQUEST"
    INTRO_ACCEPTED = "INTRO_ACCEPTED"
    INTRO_DECLINED = "INTRO_DECLINED"
    INTRO_WITHDRAWN = "INTRO_WITHDRAWN"
    INTRO_EXPIRED = "INTRO_EXPIRED"
    ROLE_NO_LONGER_OPEN = "ROLE_NO_LONGER_OPEN"


@dataclass(frozen=True)
class NotificationEvent:
    user_id: int
    type: NotificationType
    title: str
    body: str
    related_entity_type: str | None = None
    related_entity_id: int | None = None
    link: str | None = None
    dedupe_key: str | None = None
    email_to: str | None = None


class NotificationSink(Protocol):
    def emit(self, db: Session, event: NotificationEvent) -> bool:
        """Record ``event``. Returns False when dropped (duplicate or failure)."""


class DatabaseNotificationSink:
    """Writes in-app notification rows; optionally mirrors them to email."""

    def emit(self, db: Session, event: NotificationEvent) -> bool:
        try:
            if event.dedupe_key and (
                db.query(Notification.id).filter(Notification.dedupe_key == event.dedupe_key).first()
            ):
                return False
            db.add(
                Notification(
                    user_id=event.user_id,
                    notification_type=event.type.value,
                    title=event.title,
                    body=event.body,
                    related_entity_type=event.related_entity_type,
                    related_entity_id=event.related_entity_id,
                    link=event.link,
                    channel="IN_APP",
                    dedupe_key=event.dedupe_key,
                )
            )
            db.commit()
        except IntegrityError:
            # Lost a race against a replay carrying the same dedupe key
            db.rollback()
            return False
        except Exception:
            db.rollback()
            logger.exception("Failed to record %s notification for user %s", event.type.value, event.user_id)
            return False

        if event.email_to:
            deliver_email(event)
        return True


def deliver_email(event: NotificationEvent) -> None:
    key = (settings.RESEND_API_KEY or "").strip()
    if not key or key.lower() == "skip":
        return
    link = f"{settings.FRONTEND_URL}{event.link}" if event.link else None
    try:
        if settings.DISABLE_CELERY:
            EmailService(api_key=key, from_email=settings.EMAIL_FROM).send_notification(
                to_email=event.email_to,
                title=event.title,
                body=event.body,
                action_link=link,
            )
        else:
            from ...tasks.notification_tasks import send_notification_email

            send_notification_email.delay(event.email_to, event.title, event.body, link)
    except Exception:
        logger.exception("Failed to dispatch notification email to %s", event.email_to)
