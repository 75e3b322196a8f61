"""Viewer-specific projection of a candidate profile.

``project`` is the single place that decides which candidate fields an
organization may see. It takes an immutable snapshot of the candidate (with
the firewall's blocked set already resolved), the viewing organization and the
relationship between the two, and does no I/O.

Rules, first match wins for the firewall; the rest compose:

1. viewer organization is blocked by the candidate -> minimal stub (initials only)
2. confidential search off -> everything except email
3. confidential search on -> employer, external profile URLs and employment
   history companies are redacted unless the relationship is ``accepted``
4. email only ever appears for an ``accepted`` relationship
5. confidential search truncates the last name to an initial, whatever the
   relationship
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Any, Iterable

CONFIDENTIAL = "Confidential"


class Relationship(str, enum.Enum):
    NONE = "none"
    PENDING = "pending"
    ACCEPTED = "accepted"

    @property
    def rank(self) -> int:
        return _RELATIONSHIP_RANK[self]


_RELATIONSHIP_RANK = {Relationship.NONE: 0, Relationship.PENDING: 1, Relationship.ACCEPTED: 2}


def most_advanced(relationships: Iterable[Relationship]) -> Relationship:
    best = Relationship.NONE
    for rel in relationships:
        if rel.rank > best.rank:
            best = rel
    return best


@dataclass(frozen=True)
class EmploymentEntry:
    company: str | None
    title: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    description: str | None = None

    @classmethod
    def from_raw(cls, raw: Any) -> "EmploymentEntry":
        data = raw if isinstance(raw, dict) else {}
        return cls(
            company=data.get("company"),
            title=data.get("title"),
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class CandidateProfile:
    """Everything ``project`` needs to know about a candidate."""

    id: int
    first_name: str
    last_name: str
    email: str | None = None
    headline: str | None = None
    summary: str | None = None
    current_title: str | None = None
    current_employer: str | None = None
    location_city: str | None = None
    location_country: str | None = None
    years_of_experience: int | None = None
    linkedin_url: str | None = None
    portfolio_url: str | None = None
    open_to_opportunities: bool = True
    confidential_search: bool = False
    verification_status: str = "UNVERIFIED"
    employment_history: tuple[EmploymentEntry, ...] = ()
    skills: tuple[str, ...] = ()
    blocked_org_ids: frozenset[int] = field(default_factory=frozenset)

    @classmethod
    def from_model(cls, candidate: Any, *, blocked_org_ids: Iterable[int] = ()) -> "CandidateProfile":
        return cls(
            id=candidate.id,
            first_name=candidate.first_name or "",
            last_name=candidate.last_name or "",
            email=candidate.email,
            headline=candidate.headline,
            summary=candidate.summary,
            current_title=candidate.current_title,
            current_employer=candidate.current_employer,
            location_city=candidate.location_city,
            location_country=candidate.location_country,
            years_of_experience=candidate.years_of_experience,
            linkedin_url=candidate.linkedin_url,
            portfolio_url=candidate.portfolio_url,
            open_to_opportunities=bool(candidate.open_to_opportunities),
            confidential_search=bool(candidate.confidential_search),
            verification_status=candidate.verification_status or "UNVERIFIED",
            employment_history=tuple(EmploymentEntry.from_raw(e) for e in (candidate.employment_history or [])),
            skills=tuple(str(s) for s in (candidate.skills or [])),
            blocked_org_ids=frozenset(int(o) for o in blocked_org_ids),
        )


@dataclass(frozen=True)
class CandidateView:
    id: int
    display_name: str
    is_restricted: bool = False
    headline: str | None = None
    summary: str | None = None
    current_title: str | None = None
    current_employer: str | None = None
    location: str | None = None
    years_of_experience: int | None = None
    verification_status: str | None = None
    is_verified: bool = False
    email: str | None = None
    linkedin_url: str | None = None
    portfolio_url: str | None = None
    employment_history: tuple[EmploymentEntry, ...] = ()
    skills: tuple[str, ...] = ()
    relationship: Relationship = Relationship.NONE
    can_view_contact_info: bool = False

    @property
    def employer(self) -> str | None:
        return self.current_employer


def _initial(value: str) -> str:
    value = (value or "").strip()
    return f"{value[0].upper()}." if value else ""


def initials(first_name: str, last_name: str) -> str:
    return " ".join(part for part in (_initial(first_name), _initial(last_name)) if part)


def display_name(first_name: str, last_name: str, *, confidential: bool) -> str:
    first = (first_name or "").strip()
    last = (last_name or "").strip()
    if confidential:
        last = _initial(last)
    return " ".join(part for part in (first, last) if part)


def _location(profile: CandidateProfile) -> str | None:
    city = (profile.location_city or "").strip()
    country = (profile.location_country or "").strip()
    if city and country:
        return f"{city}, {country}"
    return city or country or None


def stub(profile: CandidateProfile) -> CandidateView:
    return CandidateView(
        id=profile.id,
        display_name=initials(profile.first_name, profile.last_name),
        is_restricted=True,
    )


def project(profile: CandidateProfile, viewer_org_id: int | None, relationship: Relationship) -> CandidateView:
    if viewer_org_id is not None and viewer_org_id in profile.blocked_org_ids:
        return stub(profile)

    accepted = relationship == Relationship.ACCEPTED
    redact = profile.confidential_search and not accepted

    history = profile.employment_history
    if redact:
        history = tuple(replace(entry, company=CONFIDENTIAL) for entry in history)

    return CandidateView(
        id=profile.id,
        display_name=display_name(profile.first_name, profile.last_name, confidential=profile.confidential_search),
        headline=profile.headline,
        summary=profile.summary,
        current_title=profile.current_title,
        current_employer=CONFIDENTIAL if redact else profile.current_employer,
        location=_location(profile),
        years_of_experience=profile.years_of_experience,
        verification_status=profile.verification_status,
        is_verified=profile.verification_status != "UNVERIFIED",
        email=profile.email if accepted else None,
        linkedin_url=None if redact else profile.linkedin_url,
        portfolio_url=None if redact else profile.portfolio_url,
        employment_history=history,
        skills=profile.skills,
        relationship=relationship,
        can_view_contact_info=accepted,
    )
