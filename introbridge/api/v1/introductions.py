"""Introduction API routes: thin handlers over ``IntroductionLifecycle``."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...components.auth.actors import Actor, ProfessionalActor, SponsorActor
from ...components.credits.ledger import CreditLedger
from ...components.introductions.lifecycle import IntroductionLifecycle, effective_status
from ...components.introductions.stats import introduction_stats
from ...components.notifications.sink import NotificationSink
from ...deps import get_current_actor, get_notifier, require_professional, require_sponsor
from ...models.introduction_request import IntroductionRequest
from ...platform.database import get_db
from ...platform.errors import NotFound
from ...schemas.introduction import (
    IntroductionCreate,
    IntroductionResponse,
    IntroductionSendResponse,
    IntroductionStatsResponse,
    IntroductionStatusUpdate,
)
from ...shared.utils import utcnow

router = APIRouter(prefix="/introductions", tags=["Introductions"])


def _introduction_to_response(intro: IntroductionRequest) -> IntroductionResponse:
    return IntroductionResponse.from_model(intro, status=effective_status(intro, utcnow()))


@router.post("", response_model=IntroductionSendResponse, status_code=status.HTTP_201_CREATED)
def send_introduction(
    data: IntroductionCreate,
    db: Session = Depends(get_db),
    actor: SponsorActor = Depends(require_sponsor),
    notifier: NotificationSink = Depends(get_notifier),
):
    intro = IntroductionLifecycle(db, notifier=notifier).send(
        actor,
        job_role_id=data.job_role_id,
        candidate_id=data.candidate_id,
        message=data.message,
    )
    payload = _introduction_to_response(intro).model_dump()
    return IntroductionSendResponse(**payload, credits_remaining=CreditLedger(db).balance(actor.organization_id))


@router.get("/sent", response_model=list[IntroductionResponse])
def list_sent_introductions(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: SponsorActor = Depends(require_sponsor),
):
    intros = IntroductionLifecycle(db).list_sent(actor, status=status_filter, limit=limit, offset=offset)
    return [_introduction_to_response(intro) for intro in intros]


@router.get("/received", response_model=list[IntroductionResponse])
def list_received_introductions(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: ProfessionalActor = Depends(require_professional),
):
    intros = IntroductionLifecycle(db).list_received(actor, status=status_filter, limit=limit, offset=offset)
    return [_introduction_to_response(intro) for intro in intros]


@router.get("/stats", response_model=IntroductionStatsResponse)
def get_introduction_stats(
    db: Session = Depends(get_db),
    actor: SponsorActor = Depends(require_sponsor),
):
    return IntroductionStatsResponse(**introduction_stats(db, actor.organization_id))


@router.get("/{introduction_id}", response_model=IntroductionResponse)
def get_introduction(
    introduction_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    lifecycle = IntroductionLifecycle(db)
    if isinstance(actor, SponsorActor):
        return _introduction_to_response(lifecycle.get_for_sponsor(introduction_id, actor))
    if isinstance(actor, ProfessionalActor):
        return _introduction_to_response(lifecycle.get_for_candidate(introduction_id, actor))
    raise NotFound("Introduction request not found")


@router.patch("/{introduction_id}/status", response_model=IntroductionResponse)
def respond_to_introduction(
    introduction_id: int,
    data: IntroductionStatusUpdate,
    db: Session = Depends(get_db),
    actor: ProfessionalActor = Depends(require_professional),
    notifier: NotificationSink = Depends(get_notifier),
):
    intro = IntroductionLifecycle(db, notifier=notifier).respond(introduction_id, actor, data.status)
    return _introduction_to_response(intro)


@router.post("/{introduction_id}/withdraw", response_model=IntroductionResponse)
def withdraw_introduction(
    introduction_id: int,
    db: Session = Depends(get_db),
    actor: SponsorActor = Depends(require_sponsor),
    notifier: NotificationSink = Depends(get_notifier),
):
    intro = IntroductionLifecycle(db, notifier=notifier).withdraw(introduction_id, actor)
    return _introduction_to_response(intro)


@router.post("/{introduction_id}/view", response_model=IntroductionResponse)
def mark_introduction_viewed(
    introduction_id: int,
    db: Session = Depends(get_db),
    actor: ProfessionalActor = Depends(require_professional),
):
    return _introduction_to_response(IntroductionLifecycle(db).mark_viewed(introduction_id, actor))
