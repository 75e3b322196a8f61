"""Celery task bodies, called directly without a broker."""

from datetime import timedelta

import pytest
from celery.exceptions import Retry

from introbridge.components.introductions.lifecycle import IntroductionLifecycle
from introbridge.models.introduction_request import IntroductionRequest
from introbridge.models.notification import Notification
from introbridge.shared.utils import utcnow
from introbridge.tasks import notification_tasks
from introbridge.tasks.introduction_tasks import expire_stale_introductions
from tests.conftest import (
    VALID_MESSAGE,
    RecordingNotificationSink,
    seed_candidate,
    seed_job_role,
    seed_organization,
    seed_sponsor,
    sponsor_actor,
)


def test_expiry_sweep_persists_and_notifies_sponsor(db):
    org = seed_organization(db, credits=3)
    sponsor = seed_sponsor(db, org)
    role = seed_job_role(db, org)
    lifecycle = IntroductionLifecycle(db, notifier=RecordingNotificationSink())
    stale = lifecycle.send(
        sponsor_actor(sponsor),
        job_role_id=role.id,
        candidate_id=seed_candidate(db).id,
        message=VALID_MESSAGE,
        now=utcnow() - timedelta(days=8),
    )
    fresh = lifecycle.send(
        sponsor_actor(sponsor),
        job_role_id=role.id,
        candidate_id=seed_candidate(db).id,
        message=VALID_MESSAGE,
    )

    assert expire_stale_introductions() == {"status": "ok", "expired": 1}
    assert expire_stale_introductions() == {"status": "ok", "expired": 0}

    db.expire_all()
    assert db.get(IntroductionRequest, stale.id).status == "EXPIRED"
    assert db.get(IntroductionRequest, fresh.id).status == "PENDING"
    notices = db.query(Notification).filter(Notification.user_id == sponsor.user_id).all()
    assert [n.notification_type for n in notices] == ["INTRO_EXPIRED"]


class _FakeEmailService:
    outcome = {"success": True, "email_id": "em_1"}
    sent = []

    def __init__(self, api_key, from_email):
        pass

    def send_notification(self, **kwargs):
        self.sent.append(kwargs)
        return self.outcome


def test_send_notification_email(monkeypatch):
    _FakeEmailService.sent = []
    monkeypatch.setattr(notification_tasks, "EmailService", _FakeEmailService)

    result = notification_tasks.send_notification_email("jane@example.com", "Hello", "Body", "http://x/1")

    assert result["success"] is True
    assert _FakeEmailService.sent == [
        {"to_email": "jane@example.com", "title": "Hello", "body": "Body", "action_link": "http://x/1"}
    ]


def test_send_notification_email_retries_on_failure(monkeypatch):
    monkeypatch.setattr(_FakeEmailService, "outcome", {"success": False, "error": "rejected"})
    monkeypatch.setattr(notification_tasks, "EmailService", _FakeEmailService)

    with pytest.raises(Retry):
        notification_tasks.send_notification_email("jane@example.com", "Hello", "Body")
