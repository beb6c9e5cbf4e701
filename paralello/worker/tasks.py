"""Celery tasks for suggestion generation and the send pipeline."""

import logging
from typing import List

from sqlalchemy.orm import Session

from paralello.core.dispatch import process_automation
from paralello.core.suggestions import run_suggestion_batch
from paralello.database import SessionLocal
from paralello.providers.webhook import AutomationWebhookRelay
from paralello.worker.celery_app import celery_app

logger = logging.getLogger(__name__)


def get_db() -> Session:
    """Get database session."""
    return SessionLocal()


@celery_app.task
def generate_suggestions_job() -> List[str]:
    """Generate today's AI check-in suggestions."""
    logger.info("Starting suggestion generation job")
    db = get_db()
    try:
        return run_suggestion_batch(db)
    finally:
        db.close()


@celery_app.task
def process_automation_job() -> List[str]:
    """Send due dispatches, due reports and approved suggestions."""
    logger.info("Starting automation processing job")
    db = get_db()
    try:
        return process_automation(db, AutomationWebhookRelay())
    finally:
        db.close()
