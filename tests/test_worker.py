"""Tests for the Celery tasks and beat schedule."""

import pytest

from paralello.core.errors import ConfigurationError
from paralello.core.suggestions import run_suggestion_batch
from paralello.models import ActiveSuggestion, SystemSetting
from paralello.worker import tasks
from paralello.worker.celery_app import celery_app

from tests.conftest import FakeLLM


def test_beat_schedule():
    schedule = celery_app.conf.beat_schedule
    assert schedule["generate-suggestions"]["task"] == "paralello.worker.tasks.generate_suggestions_job"
    assert schedule["process-automation"]["task"] == "paralello.worker.tasks.process_automation_job"


def test_generate_suggestions_job(db, session_factory, make_automation, monkeypatch):
    """The job opens its own session and returns the batch log."""
    make_automation("Acme")
    db.add(SystemSetting(key="openai_api_key", value="sk-test"))
    db.commit()

    monkeypatch.setattr(tasks, "get_db", session_factory)
    monkeypatch.setattr(
        tasks,
        "run_suggestion_batch",
        lambda session: run_suggestion_batch(session, llm_factory=lambda api_key: FakeLLM()),
    )
    assert tasks.generate_suggestions_job() == ["Generated 3 suggestion(s) for Acme"]
    assert db.query(ActiveSuggestion).count() == 1


def test_generate_suggestions_job_without_key(session_factory, monkeypatch):
    monkeypatch.setattr(tasks, "get_db", session_factory)
    with pytest.raises(ConfigurationError):
        tasks.generate_suggestions_job()


def test_process_job_requires_webhook(session_factory, monkeypatch):
    monkeypatch.setattr(tasks, "get_db", session_factory)
    with pytest.raises(ConfigurationError):
        tasks.process_automation_job()
