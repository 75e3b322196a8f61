"""Sent-introduction statistics for an organization's dashboard."""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from ...models.introduction_request import IntroductionRequest, IntroductionStatus
from ...shared.utils import ensure_utc, month_start, previous_month_start, utcnow
from .lifecycle import effective_status


def introduction_stats(db: Session, organization_id: int, *, now: datetime | None = None) -> dict[str, Any]:
    now = ensure_utc(now) or utcnow()
    intros = (
        db.query(IntroductionRequest)
        .filter(IntroductionRequest.organization_id == organization_id)
        .all()
    )

    counts = Counter(effective_status(intro, now) for intro in intros)
    accepted = counts[IntroductionStatus.ACCEPTED.value]
    declined = counts[IntroductionStatus.DECLINED.value]
    responded = accepted + declined
    acceptance_rate = round(accepted / responded * 100, 1) if responded else 0.0

    response_hours = [
        (ensure_utc(intro.responded_at) - ensure_utc(intro.sent_at)).total_seconds() / 3600
        for intro in intros
        if intro.responded_at is not None and intro.sent_at is not None
    ]
    average_response = round(sum(response_hours) / len(response_hours), 1) if response_hours else None

    this_month_start = month_start(now)
    last_month_start = previous_month_start(now)
    this_month = sum(1 for intro in intros if ensure_utc(intro.sent_at) >= this_month_start)
    last_month = sum(
        1 for intro in intros if last_month_start <= ensure_utc(intro.sent_at) < this_month_start
    )
    if this_month > last_month:
        trend = "up"
    elif this_month < last_month:
        trend = "down"
    else:
        trend = "stable"

    return {
        "total_sent": len(intros),
        "pending": counts[IntroductionStatus.PENDING.value],
        "accepted": accepted,
        "declined": declined,
        "expired": counts[IntroductionStatus.EXPIRED.value],
        "withdrawn": counts[IntroductionStatus.WITHDRAWN.value],
        "acceptance_rate": acceptance_rate,
        "average_response_time_hours": average_response,
        "this_month": this_month,
        "last_month": last_month,
        "trend": trend,
    }
