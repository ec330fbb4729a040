"""Celery worker configuration.

Run worker: celery -A encore.worker worker -l info -Q imports,maintenance
Run beat: celery -A encore.worker beat -l info
"""
from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging as celery_setup_logging

from encore.config import settings
from encore.logging_config import setup_logging

celery_app = Celery(
    "encore",
    broker=settings.redis_url or "redis://localhost:6379/0",
    backend=settings.redis_url or "redis://localhost:6379/0",
    include=[
        "encore.tasks.imports",
        "encore.tasks.maintenance",
    ]
)

# Celery configuration
celery_app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task routing
    task_routes={
        "encore.tasks.imports.*": {"queue": "imports"},
        "encore.tasks.maintenance.*": {"queue": "maintenance"},
    },

    # Task execution settings
    task_acks_late=True,  # Acknowledge after task completes
    task_reject_on_worker_lost=True,

    # Worker settings
    worker_prefetch_multiplier=1,

    # Result settings
    result_expires=3600,  # Results expire after 1 hour

    # Beat schedule - periodic tasks
    beat_schedule={
        # Report split songs weekly on Sunday at 4 AM
        "report-split-songs": {
            "task": "encore.tasks.maintenance.report_split_songs",
            "schedule": crontab(day_of_week=0, hour=4, minute=0),
            "options": {"queue": "maintenance"}
        },
    }
)


@celery_setup_logging.connect
def configure_worker_logging(**kwargs):
    """Use Encore's handlers instead of Celery's own root logger setup."""
    setup_logging()
