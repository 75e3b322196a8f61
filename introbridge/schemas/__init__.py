from .base import ApiModel
from .candidate import CandidateProfileCreate, CandidateProfileResponse, CandidateProfileUpdate, CandidateViewResponse
from .introduction import (
    IntroductionCreate,
    IntroductionResponse,
    IntroductionSendResponse,
    IntroductionStatsResponse,
    IntroductionStatusUpdate,
)
from .job_role import JobRoleCreate, JobRoleResponse, JobRoleStatusResponse, JobRoleStatusUpdate
from .notification import NotificationResponse
from .organization import CreditGrantRequest, CreditGrantResponse, CreditLedgerEntryResponse, OrgResponse
from .privacy import FirewallEventResponse, FirewallRequest, PrivacyStatusResponse

__all__ = [
    "ApiModel",
    "CandidateProfileCreate",
    "CandidateProfileResponse",
    "CandidateProfileUpdate",
    "CandidateViewResponse",
    "IntroductionCreate",
    "IntroductionResponse",
    "IntroductionSendResponse",
    "IntroductionStatsResponse",
    "IntroductionStatusUpdate",
    "JobRoleCreate",
    "JobRoleResponse",
    "JobRoleStatusResponse",
    "JobRoleStatusUpdate",
    "NotificationResponse",
    "CreditGrantRequest",
    "CreditGrantResponse",
    "CreditLedgerEntryResponse",
    "OrgResponse",
    "FirewallEventResponse",
    "FirewallRequest",
    "PrivacyStatusResponse",
]
