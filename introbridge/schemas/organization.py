from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from .base import ApiModel


class OrgResponse(ApiModel):
    id: int
    name: str
    slug: Optional[str] = None
    introduction_credit_balance: int = 0
    subscription_expires_at: Optional[datetime] = None
    subscription_active: bool = True
    created_at: Optional[datetime] = None


class CreditLedgerEntryResponse(ApiModel):
    id: int
    organization_id: int
    delta: int
    balance_after: int
    reason: str
    external_ref: Optional[str] = None
    introduction_id: Optional[int] = None
    metadata: Optional[dict[str, Any]] = Field(default=None, validation_alias="entry_metadata")
    created_at: Optional[datetime] = None


class CreditGrantRequest(ApiModel):
    amount: int = Field(gt=0, le=100000)
    reason: str = Field(default="admin_grant", min_length=1, max_length=100)
    external_ref: Optional[str] = Field(default=None, min_length=1, max_length=200)


class CreditGrantResponse(ApiModel):
    organization_id: int
    balance: int
    created: bool
    entry: CreditLedgerEntryResponse
