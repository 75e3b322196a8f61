from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from ...models.candidate import Candidate
from ...models.organization import Organization
from ...models.privacy_firewall_event import FirewallEventType, PrivacyFirewallEvent
from ...platform.database import transaction
from ...platform.errors import NotFound
from ...shared.utils import ensure_utc, utcnow

logger = logging.getLogger("introbridge.firewall")


def fold_blocked_orgs(events: Iterable[PrivacyFirewallEvent]) -> frozenset[int]:
    """Organizations whose latest event is a BLOCK.

    ``events`` must already be in log order (``occurred_at``, then ``id``).
    """
    latest: dict[int, str] = {}
    for event in events:
        latest[int(event.organization_id)] = event.event_type
    return frozenset(org_id for org_id, kind in latest.items() if kind == FirewallEventType.BLOCK.value)


class PrivacyFirewallStore:
    """Append-only log of organizations a candidate has hidden from.

    Appends for one candidate are serialized by locking the candidate row, and
    the blocked set is recomputed from the full log after each append, so two
    racing block/unblock calls can never leave a state the log disagrees with.
    """

    def __init__(self, db: Session):
        self.db = db

    def block(self, candidate_id: int, organization_id: int, *, reason: str = "candidate", now: datetime | None = None) -> PrivacyFirewallEvent:
        with transaction(self.db):
            return self.append(candidate_id, organization_id, FirewallEventType.BLOCK, reason=reason, now=now)

    def unblock(self, candidate_id: int, organization_id: int, *, now: datetime | None = None) -> PrivacyFirewallEvent:
        with transaction(self.db):
            return self.append(candidate_id, organization_id, FirewallEventType.UNBLOCK, now=now)

    def append(
        self,
        candidate_id: int,
        organization_id: int,
        event_type: FirewallEventType,
        *,
        reason: str = "candidate",
        now: datetime | None = None,
    ) -> PrivacyFirewallEvent:
        """Append inside the caller's transaction."""
        candidate = self.db.execute(
            select(Candidate).where(Candidate.id == candidate_id).with_for_update()
        ).scalar_one_or_none()
        if candidate is None:
            raise NotFound("Candidate not found")
        if self.db.get(Organization, organization_id) is None:
            raise NotFound("Organization not found")

        occurred_at = ensure_utc(now) or utcnow()
        last = self.last_event(candidate_id)
        # Keep the log monotonic so "latest" never depends on clock skew
        if last is not None and ensure_utc(last.occurred_at) > occurred_at:
            occurred_at = ensure_utc(last.occurred_at)

        event = PrivacyFirewallEvent(
            candidate_id=candidate_id,
            organization_id=organization_id,
            event_type=event_type.value,
            reason=reason,
            occurred_at=occurred_at,
        )
        self.db.add(event)
        self.db.flush()

        blocked = self.blocked_orgs(candidate_id)
        candidate.hide_from_org_ids = sorted(blocked)
        logger.info(
            "Firewall %s (reason=%s) blocked_count=%d",
            event_type.value,
            reason,
            len(blocked),
            extra={"candidate_id": candidate_id, "organization_id": organization_id},
        )
        return event

    def events(self, candidate_id: int) -> list[PrivacyFirewallEvent]:
        return (
            self.db.query(PrivacyFirewallEvent)
            .filter(PrivacyFirewallEvent.candidate_id == candidate_id)
            .order_by(PrivacyFirewallEvent.occurred_at.asc(), PrivacyFirewallEvent.id.asc())
            .all()
        )

    def blocked_orgs(self, candidate_id: int) -> frozenset[int]:
        return fold_blocked_orgs(self.events(candidate_id))

    def is_blocked(self, candidate_id: int, organization_id: int) -> bool:
        return organization_id in self.blocked_orgs(candidate_id)

    def last_event(self, candidate_id: int) -> PrivacyFirewallEvent | None:
        return (
            self.db.query(PrivacyFirewallEvent)
            .filter(PrivacyFirewallEvent.candidate_id == candidate_id)
            .order_by(PrivacyFirewallEvent.occurred_at.desc(), PrivacyFirewallEvent.id.desc())
            .first()
        )

    def blocked_orgs_for(self, candidate_ids: Iterable[int]) -> dict[int, frozenset[int]]:
        """Blocked sets for several candidates from a single read of the log."""
        ids = sorted(set(candidate_ids))
        if not ids:
            return {}
        by_candidate: dict[int, list[PrivacyFirewallEvent]] = {candidate_id: [] for candidate_id in ids}
        events = (
            self.db.query(PrivacyFirewallEvent)
            .filter(PrivacyFirewallEvent.candidate_id.in_(ids))
            .order_by(PrivacyFirewallEvent.occurred_at.asc(), PrivacyFirewallEvent.id.asc())
            .all()
        )
        for event in events:
            by_candidate[int(event.candidate_id)].append(event)
        return {candidate_id: fold_blocked_orgs(log) for candidate_id, log in by_candidate.items()}

    def candidates_blocking(self, organization_id: int) -> frozenset[int]:
        """Candidates whose latest event for ``organization_id`` is a BLOCK."""
        latest: dict[int, str] = {}
        events = (
            self.db.query(PrivacyFirewallEvent)
            .filter(PrivacyFirewallEvent.organization_id == organization_id)
            .order_by(PrivacyFirewallEvent.occurred_at.asc(), PrivacyFirewallEvent.id.asc())
        )
        for event in events:
            latest[int(event.candidate_id)] = event.event_type
        return frozenset(
            candidate_id for candidate_id, kind in latest.items() if kind == FirewallEventType.BLOCK.value
        )
