from datetime import datetime, timedelta, timezone

from introbridge.components.introductions.lifecycle import IntroductionLifecycle
from introbridge.components.introductions.stats import introduction_stats
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

NOW = datetime(2026, 4, 20, 12, 0, tzinfo=timezone.utc)


def test_stats_count_effective_statuses(db):
    org = seed_organization(db, credits=10)
    actor = sponsor_actor(seed_sponsor(db, org))
    role = seed_job_role(db, org)
    lifecycle = IntroductionLifecycle(db, notifier=RecordingNotificationSink())

    def send(when):
        candidate = seed_candidate(db)
        intro = lifecycle.send(actor, job_role_id=role.id, candidate_id=candidate.id, message=VALID_MESSAGE, now=when)
        return intro, professional_actor(candidate)

    accepted, accepter = send(NOW - timedelta(days=2))
    lifecycle.respond(accepted.id, accepter, "ACCEPTED", now=NOW - timedelta(days=2) + timedelta(hours=4))
    declined, decliner = send(NOW - timedelta(days=1))
    lifecycle.respond(declined.id, decliner, "DECLINED", now=NOW - timedelta(days=1) + timedelta(hours=2))
    send(NOW - timedelta(hours=1))
    send(NOW - timedelta(days=30))  # last month, lazily expired
    withdrawn, _ = send(NOW - timedelta(hours=2))
    lifecycle.withdraw(withdrawn.id, actor, now=NOW)

    stats = introduction_stats(db, org.id, now=NOW)

    assert stats["total_sent"] == 5
    assert stats["pending"] == 1
    assert stats["accepted"] == 1
    assert stats["declined"] == 1
    assert stats["expired"] == 1
    assert stats["withdrawn"] == 1
    assert stats["acceptance_rate"] == 50.0
    assert stats["average_response_time_hours"] == 3.0
    assert stats["this_month"] == 4
    assert stats["last_month"] == 1
    assert stats["trend"] == "up"


def test_stats_for_empty_org(db):
    org = seed_organization(db)
    stats = introduction_stats(db, org.id, now=NOW)
    assert stats["total_sent"] == 0
    assert stats["acceptance_rate"] == 0.0
    assert stats["average_response_time_hours"] is None
    assert stats["trend"] == "stable"
