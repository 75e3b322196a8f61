import logging

from .celery_app import celery_app
from ..components.introductions.lifecycle import IntroductionLifecycle
from ..platform.database import SessionLocal

logger = logging.getLogger(__name__)


@celery_app.task(name="introbridge.tasks.introduction_tasks.expire_stale_introductions")
def expire_stale_introductions(batch_size: int = 500):
    """Persist EXPIRED for PENDING introductions past their deadline.

    Reads already treat them as expired; this makes storage, refunds and
    sponsor notifications catch up.
    """
    db = SessionLocal()
    try:
        total = 0
        while True:
            expired = IntroductionLifecycle(db).expire_stale(limit=batch_size)
            total += expired
            if expired < batch_size:
                break
        logger.info("Expiry sweep finished: %d introduction(s) expired", total)
        return {"status": "ok", "expired": total}
    finally:
        db.close()
