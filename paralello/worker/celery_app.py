"""Celery application configuration."""

import logging

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging

from paralello.config import settings
from paralello.logging_setup import configure_logging

logger = logging.getLogger(__name__)

celery_app = Celery(
    "paralello_automation",
    broker=settings.redis_url,
    backend=settings.redis_url,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.timezone,
    enable_utc=True,
    task_track_started=True,
    task_time_limit=1800,  # 30 minutes
    task_soft_time_limit=1500,  # 25 minutes
    imports=("paralello.worker.tasks",),
)


@setup_logging.connect
def _configure_worker_logging(**kwargs):
    configure_logging()


# Celery Beat schedule
celery_app.conf.beat_schedule = {
    "generate-suggestions": {
        "task": "paralello.worker.tasks.generate_suggestions_job",
        "schedule": crontab(minute=settings.suggestion_cron_minute),
    },
    "process-automation": {
        "task": "paralello.worker.tasks.process_automation_job",
        "schedule": crontab(minute=f"*/{settings.dispatch_interval_minutes}"),
    },
}

from paralello.worker import tasks  # noqa: E402, F401
