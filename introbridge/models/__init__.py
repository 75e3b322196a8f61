from .user import User
from .organization import Organization
from .sponsor import Sponsor
from .candidate import Candidate, VerificationStatus
from .job_role import JobRole, JobRoleStatus
from .introduction_request import ACTIVE_INTRODUCTION_STATUSES, IntroductionRequest, IntroductionStatus
from .privacy_firewall_event import FirewallEventType, PrivacyFirewallEvent
from .credit_ledger import CreditLedgerEntry
from .notification import Notification

__all__ = [
    "User",
    "Organization",
    "Sponsor",
    "Candidate",
    "VerificationStatus",
    "JobRole",
    "JobRoleStatus",
    "ACTIVE_INTRODUCTION_STATUSES",
    "IntroductionRequest",
    "IntroductionStatus",
    "FirewallEventType",
    "PrivacyFirewallEvent",
    "CreditLedgerEntry",
    "Notification",
]
