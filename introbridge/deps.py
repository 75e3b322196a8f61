"""
Shared dependencies: the authenticated user and the actor it resolves to.
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from .api.v1.users_fastapi import current_active_user as get_current_user
from .components.auth.actors import Actor, AdminActor, ProfessionalActor, SponsorActor, resolve_actor
from .components.notifications.sink import DatabaseNotificationSink, NotificationSink
from .models.candidate import Candidate
from .models.sponsor import Sponsor
from .models.user import User
from .platform.database import get_db
from .platform.errors import Forbidden


def get_current_actor(
    x_acting_as: Optional[str] = Header(default=None, alias="X-Acting-As"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Actor:
    sponsor = db.query(Sponsor).filter(Sponsor.user_id == current_user.id).first()
    candidate = db.query(Candidate).filter(Candidate.user_id == current_user.id).first()
    actor = resolve_actor(current_user, sponsor=sponsor, candidate=candidate, acting_as=x_acting_as)
    if actor is None:
        if x_acting_as:
            raise Forbidden(f"You cannot act as {x_acting_as.strip().lower()}")
        raise Forbidden("No sponsor membership or candidate profile for this account")
    return actor


def require_sponsor(actor: Actor = Depends(get_current_actor)) -> SponsorActor:
    if not isinstance(actor, SponsorActor):
        raise Forbidden("Sponsor access required")
    return actor


def require_professional(actor: Actor = Depends(get_current_actor)) -> ProfessionalActor:
    if not isinstance(actor, ProfessionalActor):
        raise Forbidden("Candidate profile required")
    return actor


def require_admin(current_user: User = Depends(get_current_user)) -> AdminActor:
    if not current_user.is_superuser:
        raise Forbidden("Admin access required")
    return AdminActor(user_id=current_user.id)


def get_notifier() -> NotificationSink:
    return DatabaseNotificationSink()


__all__ = [
    "get_current_user",
    "get_current_actor",
    "require_sponsor",
    "require_professional",
    "require_admin",
    "get_notifier",
]
