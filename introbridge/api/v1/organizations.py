from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...components.auth.actors import AdminActor, SponsorActor
from ...components.credits.ledger import CreditLedger
from ...deps import require_admin, require_sponsor
from ...models.organization import Organization
from ...platform.database import get_db, transaction
from ...platform.errors import NotFound
from ...schemas.organization import (
    CreditGrantRequest,
    CreditGrantResponse,
    CreditLedgerEntryResponse,
    OrgResponse,
)

router = APIRouter(prefix="/organizations", tags=["Organizations"])
admin_router = APIRouter(prefix="/admin/organizations", tags=["Admin"])


@router.get("/me", response_model=OrgResponse)
def get_my_org(
    db: Session = Depends(get_db),
    actor: SponsorActor = Depends(require_sponsor),
):
    org = db.get(Organization, actor.organization_id)
    if org is None:
        raise NotFound("Organization not found")
    return OrgResponse.model_validate(org)


@router.get("/me/credits/ledger", response_model=list[CreditLedgerEntryResponse])
def list_my_credit_ledger(
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    actor: SponsorActor = Depends(require_sponsor),
):
    entries = CreditLedger(db).entries(actor.organization_id, limit=limit)
    return [CreditLedgerEntryResponse.model_validate(entry) for entry in entries]


@admin_router.post("/{organization_id}/credits", response_model=CreditGrantResponse, status_code=status.HTTP_201_CREATED)
def grant_credits(
    organization_id: int,
    data: CreditGrantRequest,
    db: Session = Depends(get_db),
    actor: AdminActor = Depends(require_admin),
):
    """Top up an organization's balance. Replays with the same ``externalRef`` change nothing."""
    ledger = CreditLedger(db)
    with transaction(db):
        entry, created = ledger.credit(
            organization_id,
            data.amount,
            reason=data.reason,
            external_ref=data.external_ref,
            metadata={"granted_by_user_id": actor.user_id},
        )
    return CreditGrantResponse(
        organization_id=organization_id,
        balance=ledger.balance(organization_id),
        created=created,
        entry=CreditLedgerEntryResponse.model_validate(entry),
    )
