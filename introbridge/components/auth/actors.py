"""Closed set of acting identities, resolved once at the authentication boundary.

Handlers receive one of these and never look at raw user flags again.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

PROFESSIONAL = "professional"
SPONSOR = "sponsor"
ADMIN = "admin"


@dataclass(frozen=True)
class ProfessionalActor:
    user_id: int
    candidate_id: int
    kind: str = PROFESSIONAL


@dataclass(frozen=True)
class SponsorActor:
    user_id: int
    sponsor_id: int
    organization_id: int
    can_send_introductions: bool = True
    can_create_roles: bool = True
    kind: str = SPONSOR


@dataclass(frozen=True)
class AdminActor:
    user_id: int
    kind: str = ADMIN


Actor = Union[ProfessionalActor, SponsorActor, AdminActor]


def resolve_actor(user, *, sponsor=None, candidate=None, acting_as: str | None = None) -> Actor | None:
    """Pick the identity a request acts under.

    ``acting_as`` ("professional" / "sponsor") only matters for dual-role users;
    without it a sponsor membership wins over a candidate profile.
    """
    requested = (acting_as or "").strip().lower()
    professional = (
        ProfessionalActor(user_id=user.id, candidate_id=candidate.id) if candidate is not None else None
    )
    sponsor_actor = (
        SponsorActor(
            user_id=user.id,
            sponsor_id=sponsor.id,
            organization_id=sponsor.organization_id,
            can_send_introductions=bool(sponsor.can_send_introductions),
            can_create_roles=bool(sponsor.can_create_roles),
        )
        if sponsor is not None
        else None
    )

    if requested == PROFESSIONAL:
        return professional
    if requested == SPONSOR:
        return sponsor_actor
    if requested == ADMIN:
        return AdminActor(user_id=user.id) if getattr(user, "is_superuser", False) else None
    if getattr(user, "is_superuser", False) and sponsor_actor is None and professional is None:
        return AdminActor(user_id=user.id)
    return sponsor_actor or professional
