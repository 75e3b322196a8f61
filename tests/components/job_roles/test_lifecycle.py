"""Tests for the job role transition table and its notify-only cascade."""

from datetime import datetime, timedelta, timezone

import pytest

from introbridge.components.introductions.lifecycle import IntroductionLifecycle
from introbridge.components.job_roles.lifecycle import ALLOWED_TRANSITIONS, JobRoleLifecycle, check_transition
from introbridge.components.notifications.sink import DatabaseNotificationSink, NotificationType
from introbridge.models.introduction_request import IntroductionRequest
from introbridge.models.job_role import JobRoleStatus
from introbridge.models.notification import Notification
from introbridge.platform.errors import Forbidden, InvalidTransition, NotFound, ValidationFailed
from tests.conftest import (
    VALID_MESSAGE,
    RecordingNotificationSink,
    professional_actor,
    seed_candidate,
    seed_job_role,
    seed_organization,
    seed_sponsor,
    sponsor_actor,
)

NOW = datetime(2026, 6, 1, 8, 0, tzinfo=timezone.utc)

VALID = {(src, dst) for src, targets in ALLOWED_TRANSITIONS.items() for dst in targets}
ALL_PAIRS = [(src, dst) for src in JobRoleStatus for dst in JobRoleStatus]


class TestTransitionTable:

    @pytest.mark.parametrize("src,dst", sorted(VALID))
    def test_allowed(self, src, dst):
        assert check_transition(src, dst) == dst

    @pytest.mark.parametrize("src,dst", [pair for pair in ALL_PAIRS if pair not in VALID])
    def test_rejected(self, src, dst):
        with pytest.raises(InvalidTransition) as exc:
            check_transition(src, dst)
        assert exc.value.details == {"from": src.value, "to": dst.value}

    def test_closed_is_terminal(self):
        assert ALLOWED_TRANSITIONS[JobRoleStatus.CLOSED] == frozenset()
        with pytest.raises(InvalidTransition):
            check_transition("CLOSED", "ACTIVE")

    def test_unknown_status(self):
        with pytest.raises(ValidationFailed):
            check_transition("DRAFT", "ARCHIVED")

    def test_status_names_are_case_insensitive(self):
        assert check_transition("draft", "active") == JobRoleStatus.ACTIVE


class TestJobRoleLifecycle:

    def test_create_starts_in_draft(self, db):
        org = seed_organization(db)
        actor = sponsor_actor(seed_sponsor(db, org))
        role = JobRoleLifecycle(db).create(actor, title="  Staff Engineer ", is_confidential=True)
        assert role.status == "DRAFT"
        assert role.title == "Staff Engineer"
        assert role.is_confidential is True
        assert role.published_at is None

    def test_create_requires_permission(self, db):
        org = seed_organization(db)
        actor = sponsor_actor(seed_sponsor(db, org, can_create_roles=False))
        with pytest.raises(Forbidden):
            JobRoleLifecycle(db).create(actor, title="Staff Engineer")

    def test_publish_stamps_timestamp(self, db):
        org = seed_organization(db)
        actor = sponsor_actor(seed_sponsor(db, org))
        lifecycle = JobRoleLifecycle(db)
        role = lifecycle.create(actor, title="Staff Engineer")

        lifecycle.transition(role.id, actor, "ACTIVE", now=NOW)

        assert role.status == "ACTIVE"
        assert role.published_at.replace(tzinfo=timezone.utc) == NOW

    def test_fill_and_close_stamp_timestamps(self, db):
        org = seed_organization(db)
        actor = sponsor_actor(seed_sponsor(db, org))
        lifecycle = JobRoleLifecycle(db)
        role = seed_job_role(db, org)

        lifecycle.transition(role.id, actor, "FILLED", now=NOW)
        lifecycle.transition(role.id, actor, "CLOSED", now=NOW + timedelta(days=1))

        assert role.filled_at is not None
        assert role.closed_at is not None

    def test_invalid_transition_leaves_role_unchanged(self, db):
        org = seed_organization(db)
        actor = sponsor_actor(seed_sponsor(db, org))
        role = seed_job_role(db, org, status=JobRoleStatus.CLOSED)

        with pytest.raises(InvalidTransition):
            JobRoleLifecycle(db).transition(role.id, actor, "ACTIVE")

        db.expire_all()
        assert role.status == "CLOSED"

    def test_other_org_role_is_not_found(self, db):
        role = seed_job_role(db, seed_organization(db))
        outsider = sponsor_actor(seed_sponsor(db, seed_organization(db)))
        with pytest.raises(NotFound):
            JobRoleLifecycle(db).transition(role.id, outsider, "PAUSED")


class TestRoleClosedCascade:

    def _setup(self, db):
        org = seed_organization(db, credits=10)
        sponsor = seed_sponsor(db, org)
        actor = sponsor_actor(sponsor)
        role = seed_job_role(db, org)
        intros = IntroductionLifecycle(db, notifier=RecordingNotificationSink())
        pending_a = intros.send(actor, job_role_id=role.id, candidate_id=seed_candidate(db).id, message=VALID_MESSAGE, now=NOW)
        pending_b = intros.send(actor, job_role_id=role.id, candidate_id=seed_candidate(db).id, message=VALID_MESSAGE, now=NOW)
        answered_candidate = seed_candidate(db)
        answered = intros.send(actor, job_role_id=role.id, candidate_id=answered_candidate.id, message=VALID_MESSAGE, now=NOW)
        intros.respond(answered.id, professional_actor(answered_candidate), "DECLINED", now=NOW)
        return actor, role, [pending_a, pending_b], answered

    def test_fill_notifies_pending_candidates_without_changing_status(self, db):
        actor, role, pending, answered = self._setup(db)
        sink = RecordingNotificationSink()
        lifecycle = JobRoleLifecycle(db, notifier=sink)

        lifecycle.transition(role.id, actor, "FILLED", now=NOW + timedelta(hours=1))

        notices = sink.of_type(NotificationType.ROLE_NO_LONGER_OPEN)
        assert sorted(n.user_id for n in notices) == sorted(p.candidate.user_id for p in pending)
        assert lifecycle.last_cascade_count == 2
        db.expire_all()
        assert {db.get(IntroductionRequest, p.id).status for p in pending} == {"PENDING"}
        assert db.get(IntroductionRequest, answered.id).status == "DECLINED"

    def test_cascade_replay_is_idempotent(self, db):
        actor, role, pending, _ = self._setup(db)
        lifecycle = JobRoleLifecycle(db, notifier=DatabaseNotificationSink())

        lifecycle.transition(role.id, actor, "FILLED", now=NOW + timedelta(hours=1))
        assert lifecycle.notify_role_no_longer_open(role, now=NOW + timedelta(hours=2)) == 0

        notices = db.query(Notification).filter(Notification.notification_type == NotificationType.ROLE_NO_LONGER_OPEN.value).all()
        assert len(notices) == len(pending)

    def test_close_after_fill_notifies_again(self, db):
        actor, role, pending, _ = self._setup(db)
        sink = RecordingNotificationSink()
        lifecycle = JobRoleLifecycle(db, notifier=sink)

        lifecycle.transition(role.id, actor, "FILLED", now=NOW + timedelta(hours=1))
        lifecycle.transition(role.id, actor, "CLOSED", now=NOW + timedelta(hours=2))

        assert len(sink.of_type(NotificationType.ROLE_NO_LONGER_OPEN)) == 2 * len(pending)

    def test_expired_requests_are_skipped(self, db):
        actor, role, _, _ = self._setup(db)
        sink = RecordingNotificationSink()

        JobRoleLifecycle(db, notifier=sink).transition(role.id, actor, "CLOSED", now=NOW + timedelta(days=10))

        assert sink.of_type(NotificationType.ROLE_NO_LONGER_OPEN) == []

    def test_pause_does_not_cascade(self, db):
        actor, role, _, _ = self._setup(db)
        sink = RecordingNotificationSink()
        JobRoleLifecycle(db, notifier=sink).transition(role.id, actor, "PAUSED", now=NOW)
        assert sink.events == []
