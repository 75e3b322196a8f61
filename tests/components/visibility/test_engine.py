"""Unit tests for the per-organization candidate projection (no database)."""

import pytest

from introbridge.components.visibility.engine import (
    CONFIDENTIAL,
    CandidateProfile,
    EmploymentEntry,
    Relationship,
    display_name,
    initials,
    most_advanced,
    project,
)

VIEWER_ORG = 7
OTHER_ORG = 8


def _profile(**overrides) -> CandidateProfile:
    values = dict(
        id=1,
        first_name="Jane",
        last_name="Doe",
        email="jane@example.com",
        headline="Staff Engineer",
        summary="Builds data platforms.",
        current_title="Staff Engineer",
        current_employer="Globex",
        location_city="Berlin",
        location_country="Germany",
        years_of_experience=12,
        linkedin_url="https://linkedin.com/in/janedoe",
        portfolio_url="https://jane.dev",
        employment_history=(EmploymentEntry(company="Globex", title="Staff Engineer"),),
        skills=("python", "postgres"),
    )
    values.update(overrides)
    return CandidateProfile(**values)


class TestFirewallOverride:

    @pytest.mark.parametrize("relationship", list(Relationship))
    def test_blocked_viewer_gets_stub_whatever_the_relationship(self, relationship):
        profile = _profile(blocked_org_ids=frozenset({VIEWER_ORG}))
        view = project(profile, VIEWER_ORG, relationship)

        assert view.is_restricted is True
        assert view.display_name == "J. D."
        assert view.headline is None
        assert view.current_employer is None
        assert view.email is None
        assert view.employment_history == ()
        assert view.can_view_contact_info is False

    def test_block_only_hides_from_that_organization(self):
        profile = _profile(blocked_org_ids=frozenset({OTHER_ORG}))
        view = project(profile, VIEWER_ORG, Relationship.NONE)
        assert view.is_restricted is False
        assert view.current_employer == "Globex"


class TestOpenProfile:

    def test_everything_but_email_without_acceptance(self):
        view = project(_profile(), VIEWER_ORG, Relationship.PENDING)
        assert view.display_name == "Jane Doe"
        assert view.current_employer == "Globex"
        assert view.linkedin_url == "https://linkedin.com/in/janedoe"
        assert view.employment_history[0].company == "Globex"
        assert view.location == "Berlin, Germany"
        assert view.email is None
        assert view.can_view_contact_info is False

    def test_email_revealed_after_acceptance(self):
        view = project(_profile(), VIEWER_ORG, Relationship.ACCEPTED)
        assert view.email == "jane@example.com"
        assert view.can_view_contact_info is True


class TestConfidentialSearch:

    def test_redacted_without_acceptance(self):
        view = project(_profile(confidential_search=True), VIEWER_ORG, Relationship.NONE)
        assert view.email is None
        assert view.employer == CONFIDENTIAL
        assert view.linkedin_url is None
        assert view.portfolio_url is None
        assert [e.company for e in view.employment_history] == [CONFIDENTIAL]
        assert view.display_name == "Jane D."

    def test_pending_is_still_redacted(self):
        view = project(_profile(confidential_search=True), VIEWER_ORG, Relationship.PENDING)
        assert view.employer == CONFIDENTIAL
        assert view.email is None

    def test_revealed_after_acceptance_except_last_name(self):
        view = project(_profile(confidential_search=True), VIEWER_ORG, Relationship.ACCEPTED)
        assert view.email == "jane@example.com"
        assert view.employer == "Globex"
        assert view.linkedin_url == "https://linkedin.com/in/janedoe"
        assert view.employment_history[0].company == "Globex"
        assert view.display_name == "Jane D."

    def test_projection_does_not_mutate_input(self):
        profile = _profile(confidential_search=True)
        project(profile, VIEWER_ORG, Relationship.NONE)
        assert profile.current_employer == "Globex"
        assert profile.employment_history[0].company == "Globex"


def test_verification_flag():
    assert project(_profile(), VIEWER_ORG, Relationship.NONE).is_verified is False
    assert project(_profile(verification_status="FULL"), VIEWER_ORG, Relationship.NONE).is_verified is True


def test_most_advanced_relationship():
    assert most_advanced([]) == Relationship.NONE
    assert most_advanced([Relationship.PENDING, Relationship.NONE]) == Relationship.PENDING
    assert most_advanced([Relationship.PENDING, Relationship.ACCEPTED, Relationship.NONE]) == Relationship.ACCEPTED


def test_name_helpers():
    assert initials("jane", "doe") == "J. D."
    assert initials("Jane", "") == "J."
    assert display_name("Jane", "Doe", confidential=False) == "Jane Doe"
    assert display_name("Jane", "Doe", confidential=True) == "Jane D."
