from introbridge.components.notifications import sink as sink_module
from introbridge.components.notifications.sink import DatabaseNotificationSink, NotificationEvent, NotificationType
from introbridge.models.notification import Notification
from introbridge.platform.config import settings
from tests.conftest import seed_user


def _event(user_id, **overrides):
    values = dict(
        user_id=user_id,
        type=NotificationType.INTRO_REQUEST,
        title="New Introduction Request",
        body="You have received an introduction request.",
        related_entity_type="introduction_request",
        related_entity_id=1,
        link="/introductions/1",
        dedupe_key="introduction:1:sent",
    )
    values.update(overrides)
    return NotificationEvent(**values)


def test_writes_in_app_notification(db):
    user = seed_user(db)
    assert DatabaseNotificationSink().emit(db, _event(user.id)) is True

    row = db.query(Notification).one()
    assert row.user_id == user.id
    assert row.notification_type == "INTRO_REQUEST"
    assert row.channel == "IN_APP"
    assert row.is_read is False


def test_replay_with_same_dedupe_key_is_dropped(db):
    user = seed_user(db)
    sink = DatabaseNotificationSink()
    assert sink.emit(db, _event(user.id)) is True
    assert sink.emit(db, _event(user.id, title="again")) is False
    assert db.query(Notification).count() == 1


def test_email_skipped_without_api_key(db, monkeypatch):
    user = seed_user(db)
    sent = []
    monkeypatch.setattr(settings, "RESEND_API_KEY", "")
    monkeypatch.setattr(sink_module.EmailService, "send_notification", lambda self, **kw: sent.append(kw))

    DatabaseNotificationSink().emit(db, _event(user.id, email_to=user.email))

    assert sent == []


def test_email_sent_inline_when_celery_disabled(db, monkeypatch):
    user = seed_user(db)
    sent = []
    monkeypatch.setattr(settings, "RESEND_API_KEY", "re_test_key")
    monkeypatch.setattr(settings, "DISABLE_CELERY", True)
    monkeypatch.setattr(
        sink_module.EmailService,
        "send_notification",
        lambda self, **kw: sent.append(kw) or {"success": True, "email_id": "e1"},
    )

    DatabaseNotificationSink().emit(db, _event(user.id, email_to=user.email))

    assert len(sent) == 1
    assert sent[0]["to_email"] == user.email
    assert sent[0]["action_link"] == f"{settings.FRONTEND_URL}/introductions/1"


def test_email_failure_is_swallowed(db, monkeypatch):
    user = seed_user(db)
    monkeypatch.setattr(settings, "RESEND_API_KEY", "re_test_key")
    monkeypatch.setattr(settings, "DISABLE_CELERY", True)

    def boom(self, **kw):
        raise RuntimeError("resend unavailable")

    monkeypatch.setattr(sink_module.EmailService, "send_notification", boom)

    assert DatabaseNotificationSink().emit(db, _event(user.id, email_to=user.email)) is True
    assert db.query(Notification).count() == 1
