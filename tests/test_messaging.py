"""Tests for staff messages and the HTTP relays."""

import json

import httpx
import pytest

from paralello.core.context import FeedContext
from paralello.core.errors import ConfigurationError, ExternalServiceError, ValidationError
from paralello.core.messaging import post_task_comment, record_message, send_client_message
from paralello.models import Message, Task
from paralello.providers.webhook import AutomationWebhookRelay, WhatsAppRelay


def mock_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_record_message_in_feed(db, make_client):
    client = make_client()
    message = record_message(db, client.organization_id, FeedContext(client.id), "  Bom dia!  ")
    assert message.id is not None
    assert message.content == "Bom dia!"
    assert message.context == FeedContext(client.id)


def test_record_message_rejects_empty(db, make_client):
    client = make_client()
    with pytest.raises(ValidationError):
        record_message(db, client.organization_id, FeedContext(client.id), "   ")
    assert db.query(Message).count() == 0


def test_post_task_comment(db, make_client):
    client = make_client()
    task = Task(organization_id=client.organization_id, client_id=client.id, title="Criativos")
    db.add(task)
    db.commit()
    comment = post_task_comment(db, client.organization_id, task.id, "Aprovado")
    assert comment.task_id == task.id
    assert comment.client_id is None
    assert comment.sender_type == "member"


def test_send_client_message_records_provider_id(db, make_client):
    client = make_client()
    requests = []

    def handler(request):
        requests.append(json.loads(request.content))
        return httpx.Response(200, json={"uazapiId": "abc123"})

    relay = WhatsAppRelay(url="http://relay.test/send", client=mock_client(handler))
    message = send_client_message(db, relay, client, "Olá!")

    assert message.delivery_status == "sent"
    assert message.provider_message_id == "abc123"
    assert requests[0]["action"] == "send_text"
    assert requests[0]["message_id"] == message.id
    assert requests[0]["text"] == "Olá!"


def test_send_client_message_failure_keeps_row(db, make_client):
    client = make_client()
    relay = WhatsAppRelay(
        url="http://relay.test/send",
        client=mock_client(lambda request: httpx.Response(500)),
    )
    with pytest.raises(ExternalServiceError):
        send_client_message(db, relay, client, "Olá!")

    message = db.query(Message).one()
    assert message.delivery_status == "failed"


def test_webhook_relay_envelope():
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"ok": True})

    relay = AutomationWebhookRelay(url="http://hook.test", client=mock_client(handler))
    assert relay.dispatch("report", {"content": "x"}) is None
    assert bodies == [{"source": "paralello_automation", "type": "report", "payload": {"content": "x"}}]


def test_webhook_relay_http_error():
    relay = AutomationWebhookRelay(
        url="http://hook.test",
        client=mock_client(lambda request: httpx.Response(503)),
    )
    with pytest.raises(ExternalServiceError) as exc_info:
        relay.dispatch("message", {})
    assert "503" in str(exc_info.value)


def test_webhook_relay_requires_url():
    with pytest.raises(ConfigurationError):
        AutomationWebhookRelay(url="")
