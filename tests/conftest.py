"""Pytest configuration and fixtures.

Every test gets a fresh in-memory SQLite database; nothing is shared between
tests.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENAI_API_KEY"] = ""
os.environ["AUTOMATION_DISPATCH_WEBHOOK"] = ""

from datetime import datetime, timezone  # noqa: E402
from typing import Dict, List, Optional  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from paralello.core.errors import ExternalServiceError  # noqa: E402
from paralello.database import Base  # noqa: E402
from paralello.models import ActiveAutomation, Client, Organization  # noqa: E402
from paralello.providers.base import ChatCompletionProvider, MessageRelay  # noqa: E402

# Monday
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FakeLLM(ChatCompletionProvider):
    """Language model returning canned text and recording prompts."""

    def __init__(self, response: str = '["Olá 1", "Olá 2", "Olá 3"]', error: Optional[Exception] = None):
        super().__init__("fake")
        self.response = response
        self.error = error
        self.prompts: List[str] = []

    def complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        self.prompts.append(user_prompt)
        if self.error:
            raise self.error
        return self.response


class FakeRelay(MessageRelay):
    """Relay recording deliveries; fails for the given target numbers."""

    def __init__(self, fail_targets=()):
        super().__init__("fake")
        self.fail_targets = set(fail_targets)
        self.sent: List[Dict] = []

    def dispatch(self, kind: str, payload: Dict) -> Optional[str]:
        if payload.get("target_number") in self.fail_targets:
            raise ExternalServiceError("Webhook Error: 503 Service Unavailable")
        self.sent.append({"type": kind, **payload})
        return f"provider-{len(self.sent)}"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def organization(db):
    org = Organization(name="Agência Paralello")
    db.add(org)
    db.commit()
    return org


@pytest.fixture
def make_client(db, organization):
    def _make(name: str = "Acme", whatsapp: Optional[str] = "5511999990000", group_id: Optional[str] = None):
        client = Client(
            organization_id=organization.id,
            name=name,
            whatsapp=whatsapp,
            whatsapp_group_id=group_id,
        )
        db.add(client)
        db.commit()
        return client

    return _make


@pytest.fixture
def make_automation(db, make_client):
    def _make(client_name: str = "Acme", weekdays=None, **fields):
        client = make_client(client_name)
        automation = ActiveAutomation(
            organization_id=client.organization_id,
            client_id=client.id,
            name=f"Check-in {client_name}",
            weekdays=list(range(7)) if weekdays is None else weekdays,
            time_of_day="09:00",
            context_days=fields.pop("context_days", 7),
            is_active=fields.pop("is_active", True),
            **fields,
        )
        db.add(automation)
        db.commit()
        return automation

    return _make
