"""Hiring-role state machine and its notify-only cascade.

Moving a role into FILLED or CLOSED never changes the introductions attached
to it; candidates with a still-pending request are told the role is no longer
open, once per (role, terminal status, request).
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from ...models.candidate import Candidate
from ...models.introduction_request import IntroductionRequest, IntroductionStatus
from ...models.job_role import JobRole, JobRoleStatus
from ...models.organization import Organization
from ...platform.database import transaction
from ...platform.errors import Forbidden, InvalidTransition, NotFound, ValidationFailed
from ...shared.utils import ensure_utc, utcnow
from ..auth.actors import SponsorActor
from ..introductions.lifecycle import is_lazily_expired
from ..notifications.sink import DatabaseNotificationSink, NotificationEvent, NotificationSink, NotificationType

logger = logging.getLogger("introbridge.job_roles")

ALLOWED_TRANSITIONS: dict[JobRoleStatus, frozenset[JobRoleStatus]] = {
    JobRoleStatus.DRAFT: frozenset({JobRoleStatus.ACTIVE, JobRoleStatus.CLOSED}),
    JobRoleStatus.ACTIVE: frozenset({JobRoleStatus.PAUSED, JobRoleStatus.FILLED, JobRoleStatus.CLOSED}),
    JobRoleStatus.PAUSED: frozenset({JobRoleStatus.ACTIVE, JobRoleStatus.CLOSED}),
    JobRoleStatus.FILLED: frozenset({JobRoleStatus.CLOSED}),
    JobRoleStatus.CLOSED: frozenset(),
}

CASCADE_STATUSES = frozenset({JobRoleStatus.FILLED, JobRoleStatus.CLOSED})


def _coerce(status: str | JobRoleStatus) -> JobRoleStatus:
    try:
        return JobRoleStatus(str(getattr(status, "value", status)).strip().upper())
    except ValueError:
        raise ValidationFailed(f"Unknown job role status: {status}", field="status")


def check_transition(from_status: str | JobRoleStatus, to_status: str | JobRoleStatus) -> JobRoleStatus:
    """Return the target status, or raise ``InvalidTransition``."""
    source = _coerce(from_status)
    target = _coerce(to_status)
    if target not in ALLOWED_TRANSITIONS[source]:
        raise InvalidTransition(source.value, target.value)
    return target


class JobRoleLifecycle:
    def __init__(self, db: Session, *, notifier: NotificationSink | None = None):
        self.db = db
        self.notifier = notifier or DatabaseNotificationSink()
        self.last_cascade_count = 0

    def create(
        self,
        actor: SponsorActor,
        *,
        title: str,
        description: str | None = None,
        location: str | None = None,
        is_confidential: bool = False,
    ) -> JobRole:
        if not actor.can_create_roles:
            logger.warning(
                "Sponsor %s lacks permission to create roles",
                actor.sponsor_id,
                extra={"organization_id": actor.organization_id},
            )
            raise Forbidden("You do not have permission to create job roles")
        title = (title or "").strip()
        if not title:
            raise ValidationFailed("Title is required", field="title")
        role = JobRole(
            organization_id=actor.organization_id,
            created_by_sponsor_id=actor.sponsor_id,
            title=title,
            description=description or None,
            location=location or None,
            is_confidential=bool(is_confidential),
            status=JobRoleStatus.DRAFT.value,
        )
        with transaction(self.db):
            self.db.add(role)
        self.db.refresh(role)
        return role

    def get(self, role_id: int, actor: SponsorActor) -> JobRole:
        role = (
            self.db.query(JobRole)
            .filter(JobRole.id == role_id, JobRole.organization_id == actor.organization_id)
            .first()
        )
        if role is None:
            raise NotFound("Job role not found")
        return role

    def list_for(self, actor: SponsorActor, *, status: str | None = None) -> list[JobRole]:
        query = self.db.query(JobRole).filter(JobRole.organization_id == actor.organization_id)
        if status:
            query = query.filter(JobRole.status == _coerce(status).value)
        return query.order_by(JobRole.created_at.desc(), JobRole.id.desc()).all()

    def transition(
        self,
        role_id: int,
        actor: SponsorActor,
        to_status: str | JobRoleStatus,
        *,
        now: datetime | None = None,
    ) -> JobRole:
        now = ensure_utc(now) or utcnow()
        with transaction(self.db):
            role = self.db.execute(
                select(JobRole)
                .where(JobRole.id == role_id, JobRole.organization_id == actor.organization_id)
                .with_for_update()
            ).scalar_one_or_none()
            if role is None:
                raise NotFound("Job role not found")
            source = _coerce(role.status)
            target = check_transition(source, to_status)

            role.status = target.value
            if source == JobRoleStatus.DRAFT and target == JobRoleStatus.ACTIVE:
                role.published_at = now
            if target == JobRoleStatus.FILLED:
                role.filled_at = now
            if target == JobRoleStatus.CLOSED:
                role.closed_at = now

        logger.info(
            "Job role %s -> %s",
            source.value,
            target.value,
            extra={"job_role_id": role.id, "organization_id": role.organization_id},
        )
        self.last_cascade_count = 0
        if target in CASCADE_STATUSES:
            self.last_cascade_count = self.notify_role_no_longer_open(role, now=now)
        return role

    def notify_role_no_longer_open(self, role: JobRole, *, now: datetime | None = None) -> int:
        """Tell candidates with a pending request that ``role`` closed.

        Re-running for the same role and status sends nothing new. Returns the
        number of notifications actually recorded.
        """
        now = ensure_utc(now) or utcnow()
        status = _coerce(role.status)
        if status not in CASCADE_STATUSES:
            return 0

        pending = (
            self.db.query(IntroductionRequest)
            .filter(
                IntroductionRequest.job_role_id == role.id,
                IntroductionRequest.status == IntroductionStatus.PENDING.value,
            )
            .order_by(IntroductionRequest.id.asc())
            .all()
        )
        org = self.db.get(Organization, role.organization_id)
        company = org.name if org else "the company"
        verb = status.value.lower()

        sent = 0
        for intro in pending:
            if is_lazily_expired(intro, now):
                continue
            candidate = self.db.get(Candidate, intro.candidate_id)
            if candidate is None:
                continue
            recorded = self.notifier.emit(
                self.db,
                NotificationEvent(
                    user_id=candidate.user_id,
                    type=NotificationType.ROLE_NO_LONGER_OPEN,
                    title=f"Job role {verb}: {role.title}",
                    body=f"The job role \"{role.title}\" at {company} has been {verb}. Thank you for your interest.",
                    related_entity_type="job_role",
                    related_entity_id=role.id,
                    link=f"/introductions/{intro.id}",
                    dedupe_key=f"job_role:{role.id}:{status.value}:introduction:{intro.id}",
                ),
            )
            if recorded:
                sent += 1
        if sent:
            logger.info("Notified %d candidate(s) that the role is %s", sent, verb, extra={"job_role_id": role.id})
        return sent
