from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...components.auth.actors import ProfessionalActor, SponsorActor
from ...components.candidates.profiles import CandidateProfiles
from ...deps import get_current_user, require_professional, require_sponsor
from ...models.user import User
from ...platform.database import get_db
from ...schemas.candidate import (
    CandidateProfileCreate,
    CandidateProfileResponse,
    CandidateProfileUpdate,
    CandidateViewResponse,
)

router = APIRouter(prefix="/candidates", tags=["Candidates"])


def _profile_to_response(candidate) -> CandidateProfileResponse:
    return CandidateProfileResponse.model_validate(
        {
            "id": candidate.id,
            "user_id": candidate.user_id,
            "first_name": candidate.first_name,
            "last_name": candidate.last_name,
            "email": candidate.email,
            "headline": candidate.headline,
            "summary": candidate.summary,
            "current_title": candidate.current_title,
            "current_employer": candidate.current_employer,
            "location_city": candidate.location_city,
            "location_country": candidate.location_country,
            "years_of_experience": candidate.years_of_experience,
            "linkedin_url": candidate.linkedin_url,
            "portfolio_url": candidate.portfolio_url,
            "employment_history": candidate.employment_history or [],
            "skills": candidate.skills or [],
            "open_to_opportunities": bool(candidate.open_to_opportunities),
            "confidential_search": bool(candidate.confidential_search),
            "verification_status": candidate.verification_status,
            "hide_from_org_ids": candidate.hide_from_org_ids or [],
            "created_at": candidate.created_at,
            "updated_at": candidate.updated_at,
        }
    )


@router.post("/me", response_model=CandidateProfileResponse, status_code=status.HTTP_201_CREATED)
def create_my_profile(
    data: CandidateProfileCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    candidate = CandidateProfiles(db).create_for_user(current_user.id, data.model_dump())
    return _profile_to_response(candidate)


@router.get("/me", response_model=CandidateProfileResponse)
def get_my_profile(
    db: Session = Depends(get_db),
    actor: ProfessionalActor = Depends(require_professional),
):
    return _profile_to_response(CandidateProfiles(db).get_own(actor))


@router.patch("/me", response_model=CandidateProfileResponse)
def update_my_profile(
    data: CandidateProfileUpdate,
    db: Session = Depends(get_db),
    actor: ProfessionalActor = Depends(require_professional),
):
    candidate = CandidateProfiles(db).update_own(actor, data.model_dump(exclude_unset=True))
    return _profile_to_response(candidate)


@router.get("")
def list_candidates(
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: SponsorActor = Depends(require_sponsor),
):
    views, total = CandidateProfiles(db).list_for(actor, limit=limit, offset=offset)
    return {
        "items": [CandidateViewResponse.from_view(view).model_dump(by_alias=True) for view in views],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


@router.get("/{candidate_id}", response_model=CandidateViewResponse)
def get_candidate(
    candidate_id: int,
    db: Session = Depends(get_db),
    actor: SponsorActor = Depends(require_sponsor),
):
    return CandidateViewResponse.from_view(CandidateProfiles(db).view_for(candidate_id, actor))
