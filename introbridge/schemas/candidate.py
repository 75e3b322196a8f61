from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from .base import ApiModel


class EmploymentEntrySchema(ApiModel):
    company: Optional[str] = Field(default=None, max_length=200)
    title: Optional[str] = Field(default=None, max_length=200)
    start_date: Optional[str] = Field(default=None, max_length=20)
    end_date: Optional[str] = Field(default=None, max_length=20)
    description: Optional[str] = Field(default=None, max_length=4000)


class CandidateProfileCreate(ApiModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    headline: Optional[str] = Field(default=None, max_length=200)
    summary: Optional[str] = Field(default=None, max_length=4000)
    current_title: Optional[str] = Field(default=None, max_length=200)
    current_employer: Optional[str] = Field(default=None, max_length=200)
    location_city: Optional[str] = Field(default=None, max_length=100)
    location_country: Optional[str] = Field(default=None, max_length=100)
    years_of_experience: Optional[int] = Field(default=None, ge=0, le=80)
    linkedin_url: Optional[str] = Field(default=None, max_length=500)
    portfolio_url: Optional[str] = Field(default=None, max_length=500)
    employment_history: list[EmploymentEntrySchema] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    open_to_opportunities: bool = True
    confidential_search: bool = False


class CandidateProfileUpdate(ApiModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    headline: Optional[str] = Field(default=None, max_length=200)
    summary: Optional[str] = Field(default=None, max_length=4000)
    current_title: Optional[str] = Field(default=None, max_length=200)
    current_employer: Optional[str] = Field(default=None, max_length=200)
    location_city: Optional[str] = Field(default=None, max_length=100)
    location_country: Optional[str] = Field(default=None, max_length=100)
    years_of_experience: Optional[int] = Field(default=None, ge=0, le=80)
    linkedin_url: Optional[str] = Field(default=None, max_length=500)
    portfolio_url: Optional[str] = Field(default=None, max_length=500)
    employment_history: Optional[list[EmploymentEntrySchema]] = None
    skills: Optional[list[str]] = None
    open_to_opportunities: Optional[bool] = None
    confidential_search: Optional[bool] = None

    @field_validator("first_name", "last_name", "open_to_opportunities", "confidential_search")
    @classmethod
    def reject_null(cls, v):
        # Omit the field to leave it unchanged; these columns cannot be cleared
        if v is None:
            raise ValueError("may not be null")
        return v


class CandidateProfileResponse(ApiModel):
    """The candidate's own, unredacted profile."""

    id: int
    user_id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    headline: Optional[str] = None
    summary: Optional[str] = None
    current_title: Optional[str] = None
    current_employer: Optional[str] = None
    location_city: Optional[str] = None
    location_country: Optional[str] = None
    years_of_experience: Optional[int] = None
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    employment_history: list[EmploymentEntrySchema] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    open_to_opportunities: bool = True
    confidential_search: bool = False
    verification_status: str
    hide_from_org_ids: list[int] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CandidateViewResponse(ApiModel):
    """A candidate as one viewing organization is allowed to see them."""

    id: int
    display_name: str
    is_restricted: bool = False
    headline: Optional[str] = None
    summary: Optional[str] = None
    current_title: Optional[str] = None
    current_employer: Optional[str] = None
    location: Optional[str] = None
    years_of_experience: Optional[int] = None
    verification_status: Optional[str] = None
    is_verified: bool = False
    email: Optional[str] = None
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    employment_history: list[EmploymentEntrySchema] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    relationship: str = "none"
    can_view_contact_info: bool = False

    @classmethod
    def from_view(cls, view) -> "CandidateViewResponse":
        return cls(
            id=view.id,
            display_name=view.display_name,
            is_restricted=view.is_restricted,
            headline=view.headline,
            summary=view.summary,
            current_title=view.current_title,
            current_employer=view.current_employer,
            location=view.location,
            years_of_experience=view.years_of_experience,
            verification_status=view.verification_status,
            is_verified=view.is_verified,
            email=view.email,
            linkedin_url=view.linkedin_url,
            portfolio_url=view.portfolio_url,
            employment_history=[EmploymentEntrySchema.model_validate(entry) for entry in view.employment_history],
            skills=list(view.skills),
            relationship=view.relationship.value,
            can_view_contact_info=view.can_view_contact_info,
        )
