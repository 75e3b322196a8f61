from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import ApiModel


class FirewallRequest(ApiModel):
    organization_id: int = Field(gt=0)


class FirewallEventResponse(ApiModel):
    id: int
    candidate_id: int
    organization_id: int
    event_type: str
    reason: str
    occurred_at: datetime


class PrivacyStatusResponse(ApiModel):
    blocked_organizations_count: int
    blocked_organization_ids: list[int] = Field(default_factory=list)
    last_firewall_event: Optional[datetime] = None
    last_event_type: Optional[str] = None
    confidential_search: bool = False
    open_to_opportunities: bool = True
