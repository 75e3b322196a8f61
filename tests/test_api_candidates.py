"""API tests for candidate profiles and the sponsor-facing projection."""

from tests.conftest import (
    auth_headers,
    candidate_headers,
    sponsor_org_id,
)


def test_create_and_read_own_profile(client):
    headers, candidate = candidate_headers(client, confidentialSearch=True)

    assert candidate["verificationStatus"] == "UNVERIFIED"
    assert candidate["hideFromOrgIds"] == []
    own = client.get("/api/v1/candidates/me", headers=headers).json()
    # Candidates always see their own profile unredacted
    assert own["currentEmployer"] == "Globex"
    assert own["lastName"] == "Doe"


def test_second_profile_conflicts(client):
    headers, _ = candidate_headers(client)
    resp = client.post("/api/v1/candidates/me", json={"firstName": "Jane", "lastName": "Doe"}, headers=headers)
    assert resp.status_code == 409
    assert resp.json()["detail"]["reason"] == "ProfileExists"


def test_profile_requires_names(client):
    headers, _ = auth_headers(client, organization_name=None)
    resp = client.post("/api/v1/candidates/me", json={"firstName": ""}, headers=headers)
    assert resp.status_code == 400
    fields = {f["field"] for f in resp.json()["detail"]["fields"]}
    assert {"firstName", "lastName"} <= fields


def test_update_rejects_null_for_required_fields(client):
    headers, _ = candidate_headers(client)

    for payload, field in (
        ({"firstName": None}, "firstName"),
        ({"lastName": None}, "lastName"),
        ({"openToOpportunities": None}, "openToOpportunities"),
        ({"confidentialSearch": None}, "confidentialSearch"),
    ):
        resp = client.patch("/api/v1/candidates/me", json=payload, headers=headers)
        assert resp.status_code == 400, resp.text
        assert resp.json()["detail"]["code"] == "ValidationError"
        assert field in {f["field"] for f in resp.json()["detail"]["fields"]}

    own = client.get("/api/v1/candidates/me", headers=headers).json()
    assert own["firstName"] == "Jane"
    assert own["openToOpportunities"] is True


def test_update_allows_clearing_optional_fields(client):
    headers, _ = candidate_headers(client)
    resp = client.patch("/api/v1/candidates/me", json={"headline": None}, headers=headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["headline"] is None


def test_update_profile(client):
    headers, _ = candidate_headers(client)
    resp = client.patch("/api/v1/candidates/me", json={"confidentialSearch": True, "headline": "Principal"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["confidentialSearch"] is True
    assert resp.json()["headline"] == "Principal"
    assert resp.json()["currentEmployer"] == "Globex"


def test_sponsor_view_of_open_candidate(client):
    sponsor, _ = auth_headers(client)
    _, candidate = candidate_headers(client)

    view = client.get(f"/api/v1/candidates/{candidate['id']}", headers=sponsor).json()

    assert view["displayName"] == "Jane Doe"
    assert view["currentEmployer"] == "Globex"
    assert view["linkedinUrl"] == "https://linkedin.com/in/janedoe"
    assert view["email"] is None
    assert view["relationship"] == "none"


def test_sponsor_view_of_confidential_candidate(client):
    sponsor, _ = auth_headers(client)
    _, candidate = candidate_headers(client, confidentialSearch=True)

    view = client.get(f"/api/v1/candidates/{candidate['id']}", headers=sponsor).json()

    assert view["displayName"] == "Jane D."
    assert view["currentEmployer"] == "Confidential"
    assert view["linkedinUrl"] is None
    assert [e["company"] for e in view["employmentHistory"]] == ["Confidential"]
    assert view["headline"] == "Staff Engineer"


def test_blocked_organization_sees_stub_and_listing_omits_candidate(client):
    sponsor, email = auth_headers(client)
    candidate_auth, candidate = candidate_headers(client)
    client.post("/api/v1/privacy/block", json={"organizationId": sponsor_org_id(email)}, headers=candidate_auth)

    view = client.get(f"/api/v1/candidates/{candidate['id']}", headers=sponsor).json()
    assert view["isRestricted"] is True
    assert view["displayName"] == "J. D."
    assert view["headline"] is None
    assert view["currentEmployer"] is None

    listing = client.get("/api/v1/candidates", headers=sponsor).json()
    assert candidate["id"] not in [item["id"] for item in listing["items"]]


def test_listing_is_projected(client):
    sponsor, _ = auth_headers(client)
    _, candidate = candidate_headers(client, confidentialSearch=True)

    listing = client.get("/api/v1/candidates", headers=sponsor).json()

    assert listing["total"] == 1
    item = listing["items"][0]
    assert item["id"] == candidate["id"]
    assert item["currentEmployer"] == "Confidential"
    assert item["email"] is None


def test_unknown_candidate_is_404(client):
    sponsor, _ = auth_headers(client)
    assert client.get("/api/v1/candidates/999999", headers=sponsor).status_code == 404


def test_professional_cannot_browse_candidates(client):
    headers, _ = candidate_headers(client)
    assert client.get("/api/v1/candidates", headers=headers).status_code == 403
