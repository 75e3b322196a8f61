"""Introduction request state machine.

PENDING is the only non-terminal state. Expiry is evaluated lazily: a stored
PENDING request whose ``expires_at`` has passed reads as EXPIRED everywhere and
cannot be responded to or withdrawn, whether or not the sweep has persisted it
yet.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from ...models.candidate import Candidate
from ...models.introduction_request import (
    ACTIVE_INTRODUCTION_STATUSES,
    IntroductionRequest,
    IntroductionStatus,
)
from ...models.job_role import JobRole, JobRoleStatus
from ...models.organization import Organization
from ...models.sponsor import Sponsor
from ...platform.config import settings
from ...platform.database import transaction
from ...platform.errors import (
    Conflict,
    Forbidden,
    InsufficientCredits,
    InvalidState,
    NotFound,
    ValidationFailed,
)
from ...shared.utils import ensure_utc, utcnow
from ..auth.actors import ProfessionalActor, SponsorActor
from ..credits.ledger import CreditLedger
from ..firewall.store import PrivacyFirewallStore
from ..notifications.sink import DatabaseNotificationSink, NotificationEvent, NotificationSink, NotificationType
from ..visibility.engine import Relationship, most_advanced

logger = logging.getLogger("introbridge.introductions")

_DECISIONS = {
    "ACCEPT": IntroductionStatus.ACCEPTED,
    "ACCEPTED": IntroductionStatus.ACCEPTED,
    "DECLINE": IntroductionStatus.DECLINED,
    "DECLINED": IntroductionStatus.DECLINED,
}


def is_lazily_expired(intro: IntroductionRequest, now: datetime) -> bool:
    return (
        intro.status == IntroductionStatus.PENDING.value
        and intro.expires_at is not None
        and ensure_utc(intro.expires_at) <= ensure_utc(now)
    )


def effective_status(intro: IntroductionRequest, now: datetime) -> str:
    if is_lazily_expired(intro, now):
        return IntroductionStatus.EXPIRED.value
    return intro.status


def relationship_of(intro: IntroductionRequest, now: datetime) -> Relationship:
    status = effective_status(intro, now)
    if status == IntroductionStatus.ACCEPTED.value:
        return Relationship.ACCEPTED
    if status == IntroductionStatus.PENDING.value:
        return Relationship.PENDING
    return Relationship.NONE


def fold_relationship(intros: Iterable[IntroductionRequest], now: datetime) -> Relationship:
    """Most advanced relationship across every role an organization has used."""
    return most_advanced(relationship_of(intro, now) for intro in intros)


class IntroductionLifecycle:
    def __init__(
        self,
        db: Session,
        *,
        notifier: NotificationSink | None = None,
        ledger: CreditLedger | None = None,
        firewall: PrivacyFirewallStore | None = None,
    ):
        self.db = db
        self.notifier = notifier or DatabaseNotificationSink()
        self.ledger = ledger or CreditLedger(db)
        self.firewall = firewall or PrivacyFirewallStore(db)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def send(
        self,
        actor: SponsorActor,
        *,
        job_role_id: int,
        candidate_id: int,
        message: str,
        now: datetime | None = None,
    ) -> IntroductionRequest:
        now = ensure_utc(now) or utcnow()
        if not actor.can_send_introductions:
            logger.warning(
                "Sponsor %s lacks permission to send introductions",
                actor.sponsor_id,
                extra={"organization_id": actor.organization_id},
            )
            raise Forbidden("You do not have permission to send introductions")

        message = self._validate_message(message)

        candidate = self.db.get(Candidate, candidate_id)
        if candidate is None or self.firewall.is_blocked(candidate.id, actor.organization_id):
            raise NotFound("Candidate not found")
        if not candidate.open_to_opportunities:
            raise InvalidState("Candidate is not open to opportunities", current="NOT_OPEN_TO_OPPORTUNITIES")

        role = (
            self.db.query(JobRole)
            .filter(JobRole.id == job_role_id, JobRole.organization_id == actor.organization_id)
            .first()
        )
        if role is None:
            raise NotFound("Job role not found")
        if role.status != JobRoleStatus.ACTIVE.value:
            raise InvalidState(
                f"Job role is {role.status}; introductions need an ACTIVE role",
                current=role.status,
                required=JobRoleStatus.ACTIVE.value,
            )

        cost = int(settings.INTRODUCTION_CREDIT_COST)
        with transaction(self.db):
            # The conditional debit also takes the organization row lock, which
            # serializes the duplicate check below for this organization.
            debit = self.ledger.try_debit(
                actor.organization_id,
                cost,
                reason="introduction_sent",
                metadata={"candidate_id": candidate.id, "job_role_id": role.id},
            )
            if not debit.ok:
                raise InsufficientCredits(balance=debit.remaining, required=cost)

            if settings.ENFORCE_SINGLE_ACTIVE_INTRODUCTION:
                self._ensure_no_active_duplicate(candidate.id, role.id, now)

            intro = IntroductionRequest(
                job_role_id=role.id,
                organization_id=actor.organization_id,
                sent_by_sponsor_id=actor.sponsor_id,
                candidate_id=candidate.id,
                status=IntroductionStatus.PENDING.value,
                message=message,
                sent_at=now,
                expires_at=now + timedelta(days=settings.INTRODUCTION_EXPIRY_DAYS),
                viewed_by_candidate=False,
            )
            self.db.add(intro)
            self.db.flush()
            debit.entry.introduction_id = intro.id

        logger.info(
            "Introduction sent (credits remaining=%s)",
            debit.remaining,
            extra={
                "introduction_id": intro.id,
                "organization_id": actor.organization_id,
                "candidate_id": candidate.id,
                "job_role_id": role.id,
            },
        )
        org = self.db.get(Organization, actor.organization_id)
        self.notifier.emit(
            self.db,
            NotificationEvent(
                user_id=candidate.user_id,
                type=NotificationType.INTRO_REQUEST,
                title="New Introduction Request",
                body=f"You have received an introduction request for {role.title} from {org.name if org else 'a company'}",
                related_entity_type="introduction_request",
                related_entity_id=intro.id,
                link=f"/introductions/{intro.id}",
                dedupe_key=f"introduction:{intro.id}:sent",
                email_to=candidate.email,
            ),
        )
        return intro

    def respond(
        self,
        request_id: int,
        actor: ProfessionalActor,
        decision: str,
        *,
        now: datetime | None = None,
    ) -> IntroductionRequest:
        now = ensure_utc(now) or utcnow()
        target = _DECISIONS.get(str(decision or "").strip().upper())
        if target is None:
            raise ValidationFailed("Decision must be ACCEPT or DECLINE", field="status")

        with transaction(self.db):
            intro = self._lock(request_id)
            if intro is None or intro.candidate_id != actor.candidate_id:
                raise NotFound("Introduction request not found")
            self._ensure_pending(intro, now)
            intro.status = target.value
            intro.responded_at = now
            self._apply_refund_policy(intro)

        logger.info(
            "Introduction %s by candidate",
            target.value.lower(),
            extra={"introduction_id": intro.id, "candidate_id": intro.candidate_id},
        )
        self._notify_sponsor_of_response(intro)
        return intro

    def withdraw(self, request_id: int, actor: SponsorActor, *, now: datetime | None = None) -> IntroductionRequest:
        now = ensure_utc(now) or utcnow()
        with transaction(self.db):
            intro = self._lock(request_id)
            if intro is None or intro.organization_id != actor.organization_id:
                raise NotFound("Introduction request not found")
            self._ensure_pending(intro, now)
            intro.status = IntroductionStatus.WITHDRAWN.value
            intro.withdrawn_at = now
            self._apply_refund_policy(intro)

        logger.info(
            "Introduction withdrawn by sponsor %s",
            actor.sponsor_id,
            extra={"introduction_id": intro.id, "organization_id": intro.organization_id},
        )
        candidate = self.db.get(Candidate, intro.candidate_id)
        if candidate is not None:
            self.notifier.emit(
                self.db,
                NotificationEvent(
                    user_id=candidate.user_id,
                    type=NotificationType.INTRO_WITHDRAWN,
                    title="Introduction request withdrawn",
                    body=f"The introduction request for {intro.job_role.title} has been withdrawn.",
                    related_entity_type="introduction_request",
                    related_entity_id=intro.id,
                    link=f"/introductions/{intro.id}",
                    dedupe_key=f"introduction:{intro.id}:withdrawn",
                ),
            )
        return intro

    def mark_viewed(self, request_id: int, actor: ProfessionalActor, *, now: datetime | None = None) -> IntroductionRequest:
        now = ensure_utc(now) or utcnow()
        with transaction(self.db):
            intro = self.db.get(IntroductionRequest, request_id)
            if intro is None or intro.candidate_id != actor.candidate_id:
                raise NotFound("Introduction request not found")
            if not intro.viewed_by_candidate:
                intro.viewed_by_candidate = True
                intro.viewed_at = now
        return intro

    def expire_stale(self, *, now: datetime | None = None, limit: int = 500) -> int:
        """Persist EXPIRED for stored-PENDING requests past ``expires_at``.

        Safe to re-run: already persisted requests no longer match.
        """
        now = ensure_utc(now) or utcnow()
        with transaction(self.db):
            stale = (
                self.db.execute(
                    select(IntroductionRequest)
                    .where(
                        IntroductionRequest.status == IntroductionStatus.PENDING.value,
                        IntroductionRequest.expires_at <= now,
                    )
                    .order_by(IntroductionRequest.id.asc())
                    .limit(limit)
                    .with_for_update(skip_locked=True)
                )
                .scalars()
                .all()
            )
            for intro in stale:
                intro.status = IntroductionStatus.EXPIRED.value
                self._apply_refund_policy(intro)

        for intro in stale:
            sponsor = self.db.get(Sponsor, intro.sent_by_sponsor_id)
            if sponsor is None:
                continue
            self.notifier.emit(
                self.db,
                NotificationEvent(
                    user_id=sponsor.user_id,
                    type=NotificationType.INTRO_EXPIRED,
                    title="Introduction request expired",
                    body=f"Your introduction request for {intro.job_role.title} expired without a response.",
                    related_entity_type="introduction_request",
                    related_entity_id=intro.id,
                    link=f"/introductions/{intro.id}",
                    dedupe_key=f"introduction:{intro.id}:expired",
                ),
            )
        if stale:
            logger.info("Expiry sweep persisted %d introduction(s)", len(stale))
        return len(stale)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def relationship(self, candidate_id: int, organization_id: int, *, now: datetime | None = None) -> Relationship:
        now = ensure_utc(now) or utcnow()
        intros = (
            self.db.query(IntroductionRequest)
            .filter(
                IntroductionRequest.candidate_id == candidate_id,
                IntroductionRequest.organization_id == organization_id,
                IntroductionRequest.status.in_(ACTIVE_INTRODUCTION_STATUSES),
            )
            .all()
        )
        return fold_relationship(intros, now)

    def relationships(
        self, candidate_ids: Iterable[int], organization_id: int, *, now: datetime | None = None
    ) -> dict[int, Relationship]:
        now = ensure_utc(now) or utcnow()
        ids = sorted(set(candidate_ids))
        if not ids:
            return {}
        grouped: dict[int, list[IntroductionRequest]] = {candidate_id: [] for candidate_id in ids}
        intros = (
            self.db.query(IntroductionRequest)
            .filter(
                IntroductionRequest.candidate_id.in_(ids),
                IntroductionRequest.organization_id == organization_id,
                IntroductionRequest.status.in_(ACTIVE_INTRODUCTION_STATUSES),
            )
            .all()
        )
        for intro in intros:
            grouped[int(intro.candidate_id)].append(intro)
        return {candidate_id: fold_relationship(group, now) for candidate_id, group in grouped.items()}

    def list_for_role(
        self,
        role: JobRole,
        *,
        status: str | None = None,
        now: datetime | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[IntroductionRequest]:
        """Introductions sent for one role; ownership is checked by the caller."""
        query = (
            self.db.query(IntroductionRequest)
            .options(joinedload(IntroductionRequest.candidate).joinedload(Candidate.user))
            .filter(IntroductionRequest.job_role_id == role.id)
        )
        return self._filter_by_effective_status(query, status, now, limit, offset)

    def get_for_sponsor(self, request_id: int, actor: SponsorActor) -> IntroductionRequest:
        intro = self.db.get(IntroductionRequest, request_id)
        if intro is None or intro.organization_id != actor.organization_id:
            raise NotFound("Introduction request not found")
        return intro

    def get_for_candidate(self, request_id: int, actor: ProfessionalActor) -> IntroductionRequest:
        intro = self.db.get(IntroductionRequest, request_id)
        if intro is None or intro.candidate_id != actor.candidate_id:
            raise NotFound("Introduction request not found")
        return intro

    def list_sent(
        self,
        actor: SponsorActor,
        *,
        status: str | None = None,
        now: datetime | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[IntroductionRequest]:
        query = self.db.query(IntroductionRequest).filter(
            IntroductionRequest.organization_id == actor.organization_id
        )
        return self._filter_by_effective_status(query, status, now, limit, offset)

    def list_received(
        self,
        actor: ProfessionalActor,
        *,
        status: str | None = None,
        now: datetime | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[IntroductionRequest]:
        query = self.db.query(IntroductionRequest).filter(
            IntroductionRequest.candidate_id == actor.candidate_id
        )
        return self._filter_by_effective_status(query, status, now, limit, offset)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _filter_by_effective_status(self, query, status, now, limit, offset) -> list[IntroductionRequest]:
        now = ensure_utc(now) or utcnow()
        wanted = (status or "").strip().upper() or None
        if wanted == IntroductionStatus.PENDING.value:
            query = query.filter(
                IntroductionRequest.status == IntroductionStatus.PENDING.value,
                IntroductionRequest.expires_at > now,
            )
        elif wanted == IntroductionStatus.EXPIRED.value:
            query = query.filter(
                (IntroductionRequest.status == IntroductionStatus.EXPIRED.value)
                | (
                    (IntroductionRequest.status == IntroductionStatus.PENDING.value)
                    & (IntroductionRequest.expires_at <= now)
                )
            )
        elif wanted:
            query = query.filter(IntroductionRequest.status == wanted)
        return (
            query.order_by(IntroductionRequest.sent_at.desc(), IntroductionRequest.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def _validate_message(self, message: str) -> str:
        text = (message or "").strip()
        low = settings.INTRODUCTION_MESSAGE_MIN_CHARS
        high = settings.INTRODUCTION_MESSAGE_MAX_CHARS
        if not low <= len(text) <= high:
            raise ValidationFailed(
                f"Message must be between {low} and {high} characters",
                field="message",
            )
        return text

    def _ensure_no_active_duplicate(self, candidate_id: int, job_role_id: int, now: datetime) -> None:
        existing = (
            self.db.query(IntroductionRequest)
            .filter(
                IntroductionRequest.candidate_id == candidate_id,
                IntroductionRequest.job_role_id == job_role_id,
                IntroductionRequest.status.in_(ACTIVE_INTRODUCTION_STATUSES),
            )
            .all()
        )
        if any(relationship_of(intro, now) != Relationship.NONE for intro in existing):
            raise Conflict(
                "DuplicateIntroduction",
                "An active introduction request already exists for this candidate and role",
            )

    def _lock(self, request_id: int) -> IntroductionRequest | None:
        return self.db.execute(
            select(IntroductionRequest).where(IntroductionRequest.id == request_id).with_for_update()
        ).scalar_one_or_none()

    def _ensure_pending(self, intro: IntroductionRequest, now: datetime) -> None:
        if is_lazily_expired(intro, now):
            raise Conflict("AlreadyExpired", "Introduction request has expired", current=IntroductionStatus.EXPIRED.value)
        if intro.status != IntroductionStatus.PENDING.value:
            raise Conflict("AlreadyResolved", f"Introduction request is already {intro.status}", current=intro.status)

    def _apply_refund_policy(self, intro: IntroductionRequest) -> None:
        if intro.credits_refunded or not settings.refund_policy.refunds(intro.status):
            return
        self.ledger.credit(
            intro.organization_id,
            int(settings.INTRODUCTION_CREDIT_COST),
            reason=f"introduction_{intro.status.lower()}_refund",
            external_ref=f"refund:introduction:{intro.id}",
            introduction_id=intro.id,
        )
        intro.credits_refunded = True

    def _notify_sponsor_of_response(self, intro: IntroductionRequest) -> None:
        sponsor = self.db.get(Sponsor, intro.sent_by_sponsor_id)
        if sponsor is None:
            return
        accepted = intro.status == IntroductionStatus.ACCEPTED.value
        verb = "accepted" if accepted else "declined"
        self.notifier.emit(
            self.db,
            NotificationEvent(
                user_id=sponsor.user_id,
                type=NotificationType.INTRO_ACCEPTED if accepted else NotificationType.INTRO_DECLINED,
                title=f"Introduction request {verb}",
                body=f"Your introduction request for \"{intro.job_role.title}\" has been {verb}.",
                related_entity_type="introduction_request",
                related_entity_id=intro.id,
                link=f"/introductions/{intro.id}",
                dedupe_key=f"introduction:{intro.id}:{verb}",
            ),
        )
