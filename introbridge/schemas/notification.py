from datetime import datetime
from typing import Optional

from .base import ApiModel


class NotificationResponse(ApiModel):
    id: int
    notification_type: str
    title: str
    body: str
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[int] = None
    link: Optional[str] = None
    is_read: bool = False
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
