from celery import Celery
from ..platform.config import settings

celery_app = Celery(
    "introbridge",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    beat_schedule={
        "expire-stale-introductions": {
            "task": "introbridge.tasks.introduction_tasks.expire_stale_introductions",
            "schedule": settings.EXPIRY_SWEEP_INTERVAL_SECONDS,
        },
    },
)

# Auto-discover tasks
celery_app.autodiscover_tasks(["introbridge.tasks"])
