"""Tests for the HTTP API."""

from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from paralello.api.deps import get_llm_factory, get_relay_factory, get_whatsapp_relay_factory
from paralello.api.main import app
from paralello.core.errors import ExternalServiceError
from paralello.database import get_db
from paralello.models import (
    ActiveSuggestion,
    AIConversation,
    ScheduledReport,
    SuggestionStatus,
    SystemSetting,
    Template,
)

from tests.conftest import FakeLLM, FakeRelay


@pytest.fixture
def relay():
    return FakeRelay()


@pytest.fixture
def client(session_factory, relay):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm_factory] = lambda: (lambda api_key: FakeLLM())
    app.dependency_overrides[get_relay_factory] = lambda: (lambda: relay)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_generate_suggestions_without_key(client, make_automation):
    """Missing credentials abort the batch with a 500 error body."""
    make_automation("Acme")
    response = client.post("/api/automations/generate-suggestions")
    assert response.status_code == 500
    assert response.json() == {"error": "OPENAI_API_KEY is not defined in System Settings or Env"}


def test_generate_suggestions_success(client, db, make_automation):
    make_automation("Acme")
    db.add(SystemSetting(key="openai_api_key", value="sk-test"))
    db.commit()

    response = client.post("/api/automations/generate-suggestions")
    assert response.status_code == 200
    assert response.json() == {"success": True, "logs": ["Generated 3 suggestion(s) for Acme"]}

    response = client.post("/api/automations/generate-suggestions")
    assert response.json()["logs"] == ["Skipping Acme: Suggestion already exists for today."]


def test_process_endpoint(client, make_client, relay):
    acme = make_client("Acme")
    response = client.post(
        "/api/dispatches/",
        json={
            "organization_id": acme.organization_id,
            "client_ids": [acme.id],
            "scheduled_at": (datetime.utcnow() + timedelta(days=1)).isoformat() + "Z",
            "message": "Lembrete de pagamento",
            "category": "payment",
        },
    )
    assert response.status_code == 200

    response = client.post("/api/automations/process")
    assert response.status_code == 200
    assert response.json() == {"success": True, "processed": []}
    assert relay.sent == []


def test_process_endpoint_reports_configuration_error(client):
    app.dependency_overrides.pop(get_relay_factory)
    response = client.post("/api/automations/process")
    assert response.status_code == 500
    assert response.json() == {"error": "AUTOMATION_DISPATCH_WEBHOOK is not defined"}


def test_automation_validation(client, make_client):
    acme = make_client("Acme")
    payload = {
        "organization_id": acme.organization_id,
        "client_id": acme.id,
        "name": "Check-in",
        "weekdays": [5, 1, 1],
        "time_of_day": "9:30",
    }
    response = client.post("/api/automations/", json=payload)
    assert response.status_code == 200
    assert response.json()["weekdays"] == [1, 5]
    assert response.json()["time_of_day"] == "09:30"

    response = client.post("/api/automations/", json={**payload, "weekdays": [7]})
    assert response.status_code == 422

    response = client.post("/api/automations/", json={**payload, "weekdays": []})
    assert response.status_code == 422


def test_report_lifecycle(client, make_client):
    acme = make_client("Acme")
    response = client.post(
        "/api/reports/",
        json={
            "organization_id": acme.organization_id,
            "client_id": acme.id,
            "name": "Mensal",
            "frequency": "monthly",
            "day_of_month": 31,
            "time_of_day": "08:00",
            "metrics": ["leads", "cpl"],
        },
    )
    assert response.status_code == 200
    report = response.json()
    assert report["next_run"].endswith("Z")
    assert datetime.fromisoformat(report["next_run"][:-1]) > datetime.utcnow()

    response = client.put(f"/api/reports/{report['id']}", json={"frequency": "weekly", "weekday": 3})
    assert response.status_code == 200
    updated = response.json()
    assert updated["day_of_month"] is None
    assert updated["weekday"] == 3

    response = client.delete(f"/api/reports/{report['id']}")
    assert response.json() == {"message": "Report deactivated"}
    assert client.get("/api/reports/").json() == []
    assert len(client.get("/api/reports/", params={"include_inactive": True}).json()) == 1
    assert client.get(f"/api/reports/{report['id']}/executions").json() == []


def test_report_invalid_cadence(client, make_client):
    acme = make_client("Acme")
    response = client.post(
        "/api/reports/",
        json={
            "organization_id": acme.organization_id,
            "client_id": acme.id,
            "name": "Semanal",
            "frequency": "weekly",
            "weekday": 9,
            "time_of_day": "08:00",
        },
    )
    assert response.status_code == 422


def test_dispatch_in_past_rejected(client, make_client):
    acme = make_client("Acme")
    response = client.post(
        "/api/dispatches/",
        json={
            "organization_id": acme.organization_id,
            "client_ids": [acme.id],
            "scheduled_at": "2020-01-01T10:00:00Z",
            "message": "Feliz ano novo",
        },
    )
    assert response.status_code == 422


def test_dispatch_cancel(client, make_client):
    acme = make_client("Acme")
    other = make_client("Other")
    response = client.post(
        "/api/dispatches/",
        json={
            "organization_id": acme.organization_id,
            "client_ids": [acme.id, other.id],
            "scheduled_at": (datetime.utcnow() + timedelta(days=2)).isoformat() + "Z",
            "message": "Reunião amanhã",
            "category": "meeting",
        },
    )
    created = response.json()
    assert len(created) == 2
    assert {row["status"] for row in created} == {"pending"}

    dispatch_id = created[0]["id"]
    response = client.post(f"/api/dispatches/{dispatch_id}/cancel")
    assert response.json()["status"] == "cancelled"

    response = client.post(f"/api/dispatches/{dispatch_id}/cancel")
    assert response.status_code == 409
    response = client.put(f"/api/dispatches/{dispatch_id}", json={"message": "outra"})
    assert response.status_code == 409

    pending = client.get("/api/dispatches/", params={"status": "pending"}).json()
    assert [row["client_id"] for row in pending] == [other.id]


def test_suggestion_review_flow(client, db, make_automation):
    automation = make_automation("Acme")
    suggestion = ActiveSuggestion(
        automation_id=automation.id,
        client_id=automation.client_id,
        suggestion_date=date(2026, 10, 19),
        suggested_options=["A", "B"],
        suggested_message="A",
    )
    db.add(suggestion)
    db.commit()
    suggestion_id = suggestion.id

    listed = client.get("/api/suggestions/").json()
    assert [row["id"] for row in listed] == [suggestion_id]
    assert listed[0]["client_name"] == "Acme"

    response = client.post(f"/api/suggestions/{suggestion_id}/choose", json={"index": 5})
    assert response.status_code == 422

    response = client.post(f"/api/suggestions/{suggestion_id}/choose", json={"index": 1})
    assert response.json()["suggested_message"] == "B"

    response = client.post(f"/api/suggestions/{suggestion_id}/approve", json={"approved_by": 3})
    assert response.json()["status"] == "approved"

    response = client.post(f"/api/suggestions/{suggestion_id}/reject")
    assert response.status_code == 409

    db.expire_all()
    assert db.get(ActiveSuggestion, suggestion_id).status == SuggestionStatus.APPROVED


def test_conversation_override_flow(client, db):
    payload = {"contact_identifier": "5511977776666", "status": "active", "messages": [{"role": "user", "content": "Oi"}]}
    response = client.post("/api/conversations/agents/4", json=payload)
    conversation_id = response.json()["conversation_id"]

    response = client.put(f"/api/conversations/{conversation_id}/override", json={"enabled": True})
    assert response.json() == {"id": conversation_id, "is_manual_override": True}

    response = client.post("/api/conversations/agents/4", json={**payload, "status": "resolved"})
    assert response.json()["skipped"] is True

    db.expire_all()
    assert db.get(AIConversation, conversation_id).status == "active"


def test_templates(client, db, organization):
    db.add(Template(name="Feriado", category="holiday", content="Olá {{client_nome}}!", is_default=True))
    db.commit()

    response = client.post(
        "/api/templates/",
        json={"organization_id": organization.id, "name": "Cobrança", "category": "payment",
              "content": "Valor: {{revenue}}"},
    )
    own = response.json()
    assert own["placeholders"] == ["revenue"]

    listed = client.get("/api/templates/", params={"organization_id": organization.id}).json()
    assert [t["name"] for t in listed] == ["Feriado", "Cobrança"]

    default_id = listed[0]["id"]
    assert client.delete(f"/api/templates/{default_id}").status_code == 409
    assert client.delete(f"/api/templates/{own['id']}").json() == {"message": "Template deleted"}


def test_send_client_message_relay_error(client, make_client):
    class FailingRelay:
        def send_text(self, **kwargs):
            raise ExternalServiceError("WhatsApp relay error: timeout")

    acme = make_client("Acme")
    app.dependency_overrides[get_whatsapp_relay_factory] = lambda: FailingRelay
    response = client.post(f"/api/clients/{acme.id}/messages", json={"content": "Olá"})
    assert response.status_code == 502

    messages = client.get(f"/api/clients/{acme.id}/messages").json()
    assert len(messages) == 1
    assert messages[0]["delivery_status"] == "failed"


@pytest.mark.parametrize(
    "cadence",
    [
        {"frequency": "daily", "day_of_month": 5},
        {"frequency": "weekly", "weekday": 2, "day_of_month": 5},
        {"frequency": "monthly", "day_of_month": 5, "weekday": 2},
    ],
)
def test_report_conflicting_cadence_rejected(client, db, make_client, cadence):
    """A weekday or day of month that does not match the frequency is a 422, not silently dropped."""
    acme = make_client("Acme")
    response = client.post(
        "/api/reports/",
        json={
            "organization_id": acme.organization_id,
            "client_id": acme.id,
            "name": "Conflito",
            "time_of_day": "08:00",
            **cadence,
        },
    )
    assert response.status_code == 422
    db.expire_all()
    assert db.query(ScheduledReport).count() == 0


def test_report_update_conflicting_field_rejected(client, make_client):
    acme = make_client("Acme")
    report = client.post(
        "/api/reports/",
        json={
            "organization_id": acme.organization_id,
            "client_id": acme.id,
            "name": "Semanal",
            "frequency": "weekly",
            "weekday": 1,
            "time_of_day": "08:00",
        },
    ).json()

    response = client.put(f"/api/reports/{report['id']}", json={"day_of_month": 10})
    assert response.status_code == 422

    response = client.put(f"/api/reports/{report['id']}", json={"frequency": "daily"})
    assert response.status_code == 200
    assert response.json()["weekday"] is None
    assert response.json()["frequency"] == "daily"
