import os
# Override DATABASE_URL before any app imports to avoid PostgreSQL driver requirement
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
# Keep external integrations disabled by default for unit/API tests. Individual
# tests can opt-in by monkeypatching settings.
os.environ["DISABLE_CELERY"] = "true"
os.environ["RESEND_API_KEY"] = ""
os.environ["FRONTEND_URL"] = "http://localhost:5173"

import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from introbridge.platform.database import Base, get_db
from introbridge.main import app
from introbridge.platform.middleware import _rate_limit_store
from introbridge.models.candidate import Candidate
from introbridge.models.job_role import JobRole, JobRoleStatus
from introbridge.models.organization import Organization
from introbridge.models.sponsor import Sponsor
from introbridge.models.user import User

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False, "timeout": 30})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Enable foreign key support for SQLite
@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

def write_locking_engine():
    """Engine whose transactions take the SQLite write lock on BEGIN.

    SQLite has no row locks, so threaded tests use this to serialize
    concurrent writers the way row locks do on Postgres.
    """
    locking = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False, "timeout": 30})

    @event.listens_for(locking, "connect")
    def _autocommit_driver(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(locking, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return locking

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    Base.metadata.create_all(bind=engine)
    # Clear in-memory rate limit state between tests to prevent 429 bleed-through
    _rate_limit_store.clear()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    _rate_limit_store.clear()
    Base.metadata.drop_all(bind=engine)


# ---------------------------------------------------------------------------
# Notification sink that keeps events in memory
# ---------------------------------------------------------------------------

class RecordingNotificationSink:
    """Collects emitted events; drops replays of a dedupe key like the real sink."""

    def __init__(self):
        self.events = []
        self._keys = set()

    def emit(self, db, event) -> bool:
        if event.dedupe_key and event.dedupe_key in self._keys:
            return False
        if event.dedupe_key:
            self._keys.add(event.dedupe_key)
        self.events.append(event)
        return True

    def of_type(self, notification_type):
        return [e for e in self.events if e.type == notification_type]


# ---------------------------------------------------------------------------
# Factory helpers - create test entities quickly and consistently
# ---------------------------------------------------------------------------

_counter = 0

def _unique_id() -> str:
    global _counter
    _counter += 1
    return f"{_counter}-{uuid.uuid4().hex[:8]}"


VALID_MESSAGE = (
    "Hi! We are building a platform team and your background in distributed "
    "systems looks like a great fit for this role."
)


def register_user(client, email=None, password="TestPass123!", full_name="Test User", organization_name=None):
    """Register a user via the API. Returns the response."""
    email = email or f"user-{_unique_id()}@test.com"
    payload = {
        "email": email,
        "password": password,
        "full_name": full_name,
    }
    if organization_name is not None:
        payload["organization_name"] = organization_name
    resp = client.post("/api/v1/auth/register", json=payload)
    return resp


def login_user(client, email, password="TestPass123!"):
    """Log in a user via the API (FastAPI-Users JWT). Returns the response."""
    return client.post(
        "/api/v1/auth/jwt/login",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )


def auth_headers(client, email=None, password="TestPass123!", full_name="Test User", organization_name="TestOrg"):
    """Register and log in a user and return Authorization headers + email.

    With ``organization_name`` (the default) the user is a sponsor of a new
    organization; pass ``None`` for a bare account.
    Returns (headers_dict, email) tuple.
    """
    email = email or f"user-{_unique_id()}@test.com"
    reg = register_user(client, email=email, password=password, full_name=full_name, organization_name=organization_name)
    assert reg.status_code == 201, f"Registration failed: {reg.text}"
    login_resp = login_user(client, email, password)
    assert login_resp.status_code == 200, f"Login failed: {login_resp.text}"
    token = login_resp.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}, email


def candidate_headers(client, **profile):
    """Register a bare account and create its candidate profile.

    Returns (headers_dict, candidate_json) tuple.
    """
    headers, _ = auth_headers(client, organization_name=None)
    payload = {
        "firstName": "Jane",
        "lastName": "Doe",
        "headline": "Staff Engineer",
        "currentTitle": "Staff Engineer",
        "currentEmployer": "Globex",
        "linkedinUrl": "https://linkedin.com/in/janedoe",
        "employmentHistory": [{"company": "Globex", "title": "Staff Engineer", "startDate": "2020-01"}],
        "skills": ["python", "postgres"],
    }
    payload.update(profile)
    resp = client.post("/api/v1/candidates/me", json=payload, headers=headers)
    assert resp.status_code == 201, f"Profile creation failed: {resp.text}"
    return headers, resp.json()


def sponsor_org_id(email) -> int:
    session = TestingSessionLocal()
    try:
        user = session.query(User).filter(User.email == email).one()
        return session.query(Sponsor).filter(Sponsor.user_id == user.id).one().organization_id
    finally:
        session.close()


def set_credits(organization_id: int, balance: int) -> None:
    session = TestingSessionLocal()
    try:
        org = session.get(Organization, organization_id)
        org.introduction_credit_balance = balance
        session.commit()
    finally:
        session.close()


def make_superuser(email: str) -> None:
    session = TestingSessionLocal()
    try:
        user = session.query(User).filter(User.email == email).one()
        user.is_superuser = True
        session.commit()
    finally:
        session.close()


def create_active_role_via_api(client, headers, title="Platform Engineer"):
    resp = client.post("/api/v1/job-roles", json={"title": title}, headers=headers)
    assert resp.status_code == 201, resp.text
    role = resp.json()
    publish = client.patch(f"/api/v1/job-roles/{role['id']}/status", json={"status": "ACTIVE"}, headers=headers)
    assert publish.status_code == 200, publish.text
    return publish.json()


def send_introduction_via_api(client, headers, job_role_id, candidate_id, message=VALID_MESSAGE):
    return client.post(
        "/api/v1/introductions",
        json={"jobRoleId": job_role_id, "candidateId": candidate_id, "message": message},
        headers=headers,
    )


# ---------------------------------------------------------------------------
# ORM seeding for service-level tests
# ---------------------------------------------------------------------------

def seed_user(db, email=None, **fields) -> User:
    user = User(
        email=email or f"user-{_unique_id()}@test.com",
        hashed_password="not-a-real-hash",
        is_active=True,
        is_superuser=False,
        is_verified=True,
        **fields,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def seed_organization(db, name=None, credits=5) -> Organization:
    name = name or f"Org {_unique_id()}"
    org = Organization(name=name, slug=name.lower().replace(" ", "-"), introduction_credit_balance=credits)
    db.add(org)
    db.commit()
    db.refresh(org)
    return org


def seed_sponsor(db, organization, *, can_send_introductions=True, can_create_roles=True, user=None) -> Sponsor:
    user = user or seed_user(db)
    sponsor = Sponsor(
        user_id=user.id,
        organization_id=organization.id,
        can_send_introductions=can_send_introductions,
        can_create_roles=can_create_roles,
    )
    db.add(sponsor)
    db.commit()
    db.refresh(sponsor)
    return sponsor


def seed_candidate(db, *, user=None, **fields) -> Candidate:
    user = user or seed_user(db)
    values = {
        "first_name": "Jane",
        "last_name": "Doe",
        "headline": "Staff Engineer",
        "current_title": "Staff Engineer",
        "current_employer": "Globex",
        "linkedin_url": "https://linkedin.com/in/janedoe",
        "employment_history": [{"company": "Globex", "title": "Staff Engineer"}],
        "skills": ["python"],
        "open_to_opportunities": True,
        "confidential_search": False,
        "hide_from_org_ids": [],
    }
    values.update(fields)
    candidate = Candidate(user_id=user.id, **values)
    db.add(candidate)
    db.commit()
    db.refresh(candidate)
    return candidate


def seed_job_role(db, organization, *, status=JobRoleStatus.ACTIVE, title="Platform Engineer") -> JobRole:
    role = JobRole(
        organization_id=organization.id,
        title=title,
        status=status.value,
        published_at=datetime.now(timezone.utc) if status != JobRoleStatus.DRAFT else None,
    )
    db.add(role)
    db.commit()
    db.refresh(role)
    return role


def sponsor_actor(sponsor):
    from introbridge.components.auth.actors import SponsorActor

    return SponsorActor(
        user_id=sponsor.user_id,
        sponsor_id=sponsor.id,
        organization_id=sponsor.organization_id,
        can_send_introductions=sponsor.can_send_introductions,
        can_create_roles=sponsor.can_create_roles,
    )


def professional_actor(candidate):
    from introbridge.components.auth.actors import ProfessionalActor

    return ProfessionalActor(user_id=candidate.user_id, candidate_id=candidate.id)
