from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import ApiModel


class IntroductionCreate(ApiModel):
    job_role_id: int = Field(gt=0)
    candidate_id: int = Field(gt=0)
    message: str


class IntroductionStatusUpdate(ApiModel):
    status: str = Field(min_length=1, max_length=20)


class IntroductionResponse(ApiModel):
    id: int
    job_role_id: int
    job_role_title: Optional[str] = None
    organization_id: int
    organization_name: Optional[str] = None
    sent_by_sponsor_id: int
    candidate_id: int
    status: str
    message: str
    sent_at: datetime
    expires_at: datetime
    responded_at: Optional[datetime] = None
    withdrawn_at: Optional[datetime] = None
    viewed_by_candidate: bool = False
    viewed_at: Optional[datetime] = None
    credits_refunded: bool = False

    @classmethod
    def from_model(cls, intro, *, status: str) -> "IntroductionResponse":
        return cls(
            id=intro.id,
            job_role_id=intro.job_role_id,
            job_role_title=intro.job_role.title if intro.job_role else None,
            organization_id=intro.organization_id,
            organization_name=intro.organization.name if intro.organization else None,
            sent_by_sponsor_id=intro.sent_by_sponsor_id,
            candidate_id=intro.candidate_id,
            status=status,
            message=intro.message,
            sent_at=intro.sent_at,
            expires_at=intro.expires_at,
            responded_at=intro.responded_at,
            withdrawn_at=intro.withdrawn_at,
            viewed_by_candidate=bool(intro.viewed_by_candidate),
            viewed_at=intro.viewed_at,
            credits_refunded=bool(intro.credits_refunded),
        )


class IntroductionSendResponse(IntroductionResponse):
    credits_remaining: int


class IntroductionStatsResponse(ApiModel):
    total_sent: int
    pending: int
    accepted: int
    declined: int
    expired: int
    withdrawn: int
    acceptance_rate: float
    average_response_time_hours: Optional[float] = None
    this_month: int
    last_month: int
    trend: str
