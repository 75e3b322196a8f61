from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...deps import get_current_user
from ...models.notification import Notification
from ...models.user import User
from ...platform.database import get_db, transaction
from ...platform.errors import NotFound
from ...schemas.notification import NotificationResponse
from ...shared.utils import utcnow

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=list[NotificationResponse])
def list_notifications(
    unread_only: bool = Query(default=False, alias="unreadOnly"),
    limit: int = Query(default=50, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Notification).filter(Notification.user_id == current_user.id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    items = query.order_by(Notification.id.desc()).limit(limit).all()
    return [NotificationResponse.model_validate(n) for n in items]


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    with transaction(db):
        notification = (
            db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == current_user.id)
            .first()
        )
        if notification is None:
            raise NotFound("Notification not found")
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utcnow()
    return NotificationResponse.model_validate(notification)
