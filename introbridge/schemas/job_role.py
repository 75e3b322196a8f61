from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import ApiModel
from .candidate import CandidateViewResponse
from .introduction import IntroductionResponse


class JobRoleCreate(ApiModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=4000)
    location: Optional[str] = Field(default=None, max_length=200)
    is_confidential: bool = False


class JobRoleStatusUpdate(ApiModel):
    status: str = Field(min_length=1, max_length=20)


class JobRoleResponse(ApiModel):
    id: int
    organization_id: int
    created_by_sponsor_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    is_confidential: bool = False
    status: str
    published_at: Optional[datetime] = None
    filled_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class JobRoleStatusResponse(JobRoleResponse):
    notifications_sent: int = 0


class ApplicantResponse(ApiModel):
    """An introduction sent for a role, with the candidate as the organization may see them."""

    introduction: IntroductionResponse
    candidate: CandidateViewResponse
