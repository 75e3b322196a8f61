from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...components.auth.actors import ProfessionalActor
from ...components.candidates.profiles import CandidateProfiles
from ...components.firewall.store import PrivacyFirewallStore
from ...deps import require_professional
from ...platform.database import get_db
from ...schemas.privacy import FirewallEventResponse, FirewallRequest, PrivacyStatusResponse

router = APIRouter(prefix="/privacy", tags=["Privacy"])


@router.post("/block", response_model=FirewallEventResponse)
def block_organization(
    data: FirewallRequest,
    db: Session = Depends(get_db),
    actor: ProfessionalActor = Depends(require_professional),
):
    event = PrivacyFirewallStore(db).block(actor.candidate_id, data.organization_id)
    return FirewallEventResponse.model_validate(event)


@router.post("/unblock", response_model=FirewallEventResponse)
def unblock_organization(
    data: FirewallRequest,
    db: Session = Depends(get_db),
    actor: ProfessionalActor = Depends(require_professional),
):
    event = PrivacyFirewallStore(db).unblock(actor.candidate_id, data.organization_id)
    return FirewallEventResponse.model_validate(event)


@router.get("/events", response_model=list[FirewallEventResponse])
def list_firewall_events(
    db: Session = Depends(get_db),
    actor: ProfessionalActor = Depends(require_professional),
):
    return [FirewallEventResponse.model_validate(e) for e in PrivacyFirewallStore(db).events(actor.candidate_id)]


@router.get("/status", response_model=PrivacyStatusResponse)
def get_privacy_status(
    db: Session = Depends(get_db),
    actor: ProfessionalActor = Depends(require_professional),
):
    store = PrivacyFirewallStore(db)
    candidate = CandidateProfiles(db, firewall=store).get_own(actor)
    blocked = store.blocked_orgs(actor.candidate_id)
    last = store.last_event(actor.candidate_id)
    return PrivacyStatusResponse(
        blocked_organizations_count=len(blocked),
        blocked_organization_ids=sorted(blocked),
        last_firewall_event=last.occurred_at if last else None,
        last_event_type=last.event_type if last else None,
        confidential_search=bool(candidate.confidential_search),
        open_to_opportunities=bool(candidate.open_to_opportunities),
    )
