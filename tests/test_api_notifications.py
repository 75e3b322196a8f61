"""API tests for in-app notifications."""

from tests.conftest import (
    auth_headers,
    candidate_headers,
    create_active_role_via_api,
    send_introduction_via_api,
    set_credits,
    sponsor_org_id,
)


def _candidate_with_request(client):
    sponsor, email = auth_headers(client)
    set_credits(sponsor_org_id(email), 5)
    role = create_active_role_via_api(client, sponsor)
    candidate_auth, candidate = candidate_headers(client)
    intro = send_introduction_via_api(client, sponsor, role["id"], candidate["id"]).json()
    return sponsor, candidate_auth, intro


def test_candidate_is_notified_of_new_request(client):
    _, candidate_auth, intro = _candidate_with_request(client)

    items = client.get("/api/v1/notifications", headers=candidate_auth).json()

    assert len(items) == 1
    assert items[0]["notificationType"] == "INTRO_REQUEST"
    assert items[0]["relatedEntityId"] == intro["id"]
    assert items[0]["isRead"] is False


def test_sponsor_is_notified_of_acceptance(client):
    sponsor, candidate_auth, intro = _candidate_with_request(client)
    client.patch(f"/api/v1/introductions/{intro['id']}/status", json={"status": "ACCEPT"}, headers=candidate_auth)

    items = client.get("/api/v1/notifications", headers=sponsor).json()

    assert [n["notificationType"] for n in items] == ["INTRO_ACCEPTED"]


def test_mark_read_and_unread_filter(client):
    _, candidate_auth, _ = _candidate_with_request(client)
    notification = client.get("/api/v1/notifications", headers=candidate_auth).json()[0]

    resp = client.post(f"/api/v1/notifications/{notification['id']}/read", headers=candidate_auth)

    assert resp.status_code == 200
    assert resp.json()["isRead"] is True
    assert resp.json()["readAt"] is not None
    assert client.get("/api/v1/notifications?unreadOnly=true", headers=candidate_auth).json() == []


def test_cannot_read_someone_elses_notification(client):
    sponsor, candidate_auth, _ = _candidate_with_request(client)
    notification = client.get("/api/v1/notifications", headers=candidate_auth).json()[0]

    resp = client.post(f"/api/v1/notifications/{notification['id']}/read", headers=sponsor)

    assert resp.status_code == 404
