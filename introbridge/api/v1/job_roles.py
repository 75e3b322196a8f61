from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...components.auth.actors import SponsorActor
from ...components.candidates.profiles import CandidateProfiles
from ...components.introductions.lifecycle import IntroductionLifecycle, effective_status
from ...components.job_roles.lifecycle import JobRoleLifecycle
from ...components.notifications.sink import NotificationSink
from ...deps import get_notifier, require_sponsor
from ...platform.database import get_db
from ...schemas.candidate import CandidateViewResponse
from ...schemas.introduction import IntroductionResponse
from ...schemas.job_role import (
    ApplicantResponse,
    JobRoleCreate,
    JobRoleResponse,
    JobRoleStatusResponse,
    JobRoleStatusUpdate,
)
from ...shared.utils import utcnow

router = APIRouter(prefix="/job-roles", tags=["Job Roles"])


@router.post("", response_model=JobRoleResponse, status_code=status.HTTP_201_CREATED)
def create_job_role(
    data: JobRoleCreate,
    db: Session = Depends(get_db),
    actor: SponsorActor = Depends(require_sponsor),
):
    role = JobRoleLifecycle(db).create(
        actor,
        title=data.title,
        description=data.description,
        location=data.location,
        is_confidential=data.is_confidential,
    )
    return JobRoleResponse.model_validate(role)


@router.get("", response_model=list[JobRoleResponse])
def list_job_roles(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    actor: SponsorActor = Depends(require_sponsor),
):
    return [JobRoleResponse.model_validate(role) for role in JobRoleLifecycle(db).list_for(actor, status=status_filter)]


@router.get("/{job_role_id}", response_model=JobRoleResponse)
def get_job_role(
    job_role_id: int,
    db: Session = Depends(get_db),
    actor: SponsorActor = Depends(require_sponsor),
):
    return JobRoleResponse.model_validate(JobRoleLifecycle(db).get(job_role_id, actor))


@router.patch("/{job_role_id}/status", response_model=JobRoleStatusResponse)
def update_job_role_status(
    job_role_id: int,
    data: JobRoleStatusUpdate,
    db: Session = Depends(get_db),
    actor: SponsorActor = Depends(require_sponsor),
    notifier: NotificationSink = Depends(get_notifier),
):
    """Move a role through DRAFT -> ACTIVE -> PAUSED/FILLED -> CLOSED.

    Pending introductions on a role that becomes FILLED or CLOSED keep their
    status; their candidates are notified once.
    """
    lifecycle = JobRoleLifecycle(db, notifier=notifier)
    role = lifecycle.transition(job_role_id, actor, data.status)
    payload = JobRoleResponse.model_validate(role).model_dump()
    return JobRoleStatusResponse(**payload, notifications_sent=lifecycle.last_cascade_count)


@router.get("/{job_role_id}/applicants", response_model=list[ApplicantResponse])
def list_job_role_applicants(
    job_role_id: int,
    status_filter: Optional[str] = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: SponsorActor = Depends(require_sponsor),
):
    """Introductions sent for one of the caller's roles.

    Each candidate is projected for the caller's organization, so a
    confidential candidate stays redacted until they accept.
    """
    now = utcnow()
    role = JobRoleLifecycle(db).get(job_role_id, actor)
    intros = IntroductionLifecycle(db).list_for_role(role, status=status_filter, now=now, limit=limit, offset=offset)
    views = CandidateProfiles(db).views_for([intro.candidate for intro in intros], actor.organization_id, now=now)
    return [
        ApplicantResponse(
            introduction=IntroductionResponse.from_model(intro, status=effective_status(intro, now)),
            candidate=CandidateViewResponse.from_view(view),
        )
        for intro, view in zip(intros, views)
    ]
