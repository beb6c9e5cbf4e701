"""Tests for message context variants."""

import pytest

from paralello.core.context import (
    DMContext,
    FeedContext,
    TaskContext,
    context_from_columns,
    context_to_columns,
)
from paralello.core.errors import ValidationError
from paralello.models import Message


def test_context_to_columns():
    assert context_to_columns(FeedContext(3)) == {"client_id": 3, "task_id": None, "channel_id": None}
    assert context_to_columns(TaskContext(8)) == {"client_id": None, "task_id": 8, "channel_id": None}
    assert context_to_columns(DMContext(5)) == {"client_id": None, "task_id": None, "channel_id": 5}


def test_context_from_columns():
    assert context_from_columns({"client_id": None, "task_id": 4, "channel_id": None}) == TaskContext(4)
    assert context_from_columns({"channel_id": 9}) == DMContext(9)


def test_context_requires_exactly_one_column():
    with pytest.raises(ValidationError):
        context_from_columns({"client_id": None, "task_id": None, "channel_id": None})
    with pytest.raises(ValidationError):
        context_from_columns({"client_id": 1, "task_id": 2, "channel_id": None})


def test_unknown_context_rejected():
    with pytest.raises(ValidationError):
        context_to_columns("feed")


def test_message_for_context():
    """Model rows carry exactly one context column."""
    message = Message.for_context(TaskContext(12), organization_id=1, content="ok")
    assert message.task_id == 12
    assert message.client_id is None
    assert message.channel_id is None
    assert message.context == TaskContext(12)
    assert message.context.kind == "task"
