"""Candidate profiles: onboarding, self-edits and per-organization views.

Every candidate returned to a sponsor goes through ``visibility.engine.project``;
this module only resolves its inputs (blocked set and relationship).
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session, joinedload

from ...models.candidate import Candidate, VerificationStatus
from ...models.privacy_firewall_event import FirewallEventType
from ...models.sponsor import Sponsor
from ...platform.database import transaction
from ...platform.errors import Conflict, NotFound, ValidationFailed
from ...shared.utils import ensure_utc, utcnow
from ..auth.actors import ProfessionalActor, SponsorActor
from ..firewall.store import PrivacyFirewallStore
from ..introductions.lifecycle import IntroductionLifecycle
from ..visibility.engine import CandidateProfile, CandidateView, Relationship, project

logger = logging.getLogger("introbridge.candidates")

DUAL_ROLE_REASON = "dual_role"

_EDITABLE_FIELDS = (
    "first_name",
    "last_name",
    "headline",
    "summary",
    "current_title",
    "current_employer",
    "location_city",
    "location_country",
    "years_of_experience",
    "linkedin_url",
    "portfolio_url",
    "employment_history",
    "skills",
    "open_to_opportunities",
    "confidential_search",
)

_NON_NULL_FIELDS = ("first_name", "last_name", "open_to_opportunities", "confidential_search")


class CandidateProfiles:
    def __init__(self, db: Session, *, firewall: PrivacyFirewallStore | None = None):
        self.db = db
        self.firewall = firewall or PrivacyFirewallStore(db)

    def create_for_user(self, user_id: int, data: dict[str, Any], *, now: datetime | None = None) -> Candidate:
        """Create the caller's profile.

        A user who is also a sponsor member is blocked from their own
        employer straight away.
        """
        if self.db.query(Candidate.id).filter(Candidate.user_id == user_id).first():
            raise Conflict("ProfileExists", "A candidate profile already exists for this account")

        values = {key: data[key] for key in _EDITABLE_FIELDS if key in data}
        with transaction(self.db):
            candidate = Candidate(
                user_id=user_id,
                verification_status=VerificationStatus.UNVERIFIED.value,
                hide_from_org_ids=[],
                **values,
            )
            self.db.add(candidate)
            self.db.flush()

            sponsor = self.db.query(Sponsor).filter(Sponsor.user_id == user_id).first()
            if sponsor is not None:
                self.firewall.append(
                    candidate.id,
                    sponsor.organization_id,
                    FirewallEventType.BLOCK,
                    reason=DUAL_ROLE_REASON,
                    now=now,
                )
        self.db.refresh(candidate)
        logger.info("Candidate profile created", extra={"candidate_id": candidate.id})
        return candidate

    def get_own(self, actor: ProfessionalActor) -> Candidate:
        candidate = self.db.get(Candidate, actor.candidate_id)
        if candidate is None:
            raise NotFound("Candidate not found")
        return candidate

    def update_own(self, actor: ProfessionalActor, changes: dict[str, Any]) -> Candidate:
        for key in _NON_NULL_FIELDS:
            if key in changes and changes[key] is None:
                raise ValidationFailed(f"{key} may not be null", field=key)
        with transaction(self.db):
            candidate = self.get_own(actor)
            for key in _EDITABLE_FIELDS:
                if key in changes:
                    setattr(candidate, key, changes[key])
        self.db.refresh(candidate)
        return candidate

    def view_for(self, candidate_id: int, actor: SponsorActor, *, now: datetime | None = None) -> CandidateView:
        candidate = self.db.get(Candidate, candidate_id)
        if candidate is None:
            raise NotFound("Candidate not found")
        return self._project(candidate, actor.organization_id, now)

    def list_for(
        self,
        actor: SponsorActor,
        *,
        limit: int = 50,
        offset: int = 0,
        now: datetime | None = None,
    ) -> tuple[list[CandidateView], int]:
        """Open candidates who have not hidden from the sponsor's organization."""
        query = self.db.query(Candidate).filter(Candidate.open_to_opportunities.is_(True))
        hidden = self.firewall.candidates_blocking(actor.organization_id)
        if hidden:
            query = query.filter(Candidate.id.not_in(sorted(hidden)))
        total = query.count()
        page = (
            query.options(joinedload(Candidate.user))
            .order_by(Candidate.created_at.desc(), Candidate.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return self.views_for(page, actor.organization_id, now=now), total

    def views_for(
        self, candidates: list[Candidate], organization_id: int, *, now: datetime | None = None
    ) -> list[CandidateView]:
        """Project several candidates with one firewall read and one introduction read."""
        now = ensure_utc(now) or utcnow()
        ids = [candidate.id for candidate in candidates]
        blocked = self.firewall.blocked_orgs_for(ids)
        relationships = IntroductionLifecycle(self.db, firewall=self.firewall).relationships(
            ids, organization_id, now=now
        )
        return [
            project(
                CandidateProfile.from_model(candidate, blocked_org_ids=blocked.get(candidate.id, frozenset())),
                organization_id,
                relationships.get(candidate.id, Relationship.NONE),
            )
            for candidate in candidates
        ]

    def _project(self, candidate: Candidate, organization_id: int, now: datetime | None) -> CandidateView:
        now = ensure_utc(now) or utcnow()
        profile = CandidateProfile.from_model(candidate, blocked_org_ids=self.firewall.blocked_orgs(candidate.id))
        relationship = IntroductionLifecycle(self.db, firewall=self.firewall).relationship(
            candidate.id, organization_id, now=now
        )
        return project(profile, organization_id, relationship)
