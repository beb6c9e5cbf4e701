"""Message context variant.

A message row belongs to exactly one of a client feed, a task thread or a
direct-message channel. Storage keeps three nullable columns; application code
works with the variant below.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Union

from paralello.core.errors import ValidationError


@dataclass(frozen=True)
class FeedContext:
    client_id: int
    kind: str = "feed"


@dataclass(frozen=True)
class TaskContext:
    task_id: int
    kind: str = "task"


@dataclass(frozen=True)
class DMContext:
    channel_id: int
    kind: str = "dm"


MessageContext = Union[FeedContext, TaskContext, DMContext]

_COLUMNS = ("client_id", "task_id", "channel_id")


def context_to_columns(context: MessageContext) -> Dict[str, Optional[int]]:
    """Nullable-column form of ``context``, suitable for a model constructor."""
    columns = dict.fromkeys(_COLUMNS)
    if isinstance(context, FeedContext):
        columns["client_id"] = context.client_id
    elif isinstance(context, TaskContext):
        columns["task_id"] = context.task_id
    elif isinstance(context, DMContext):
        columns["channel_id"] = context.channel_id
    else:
        raise ValidationError(f"Unknown message context {context!r}")
    return columns


def context_from_columns(row) -> MessageContext:
    """Read the variant back from a row (or mapping) with the nullable columns."""
    get = row.get if isinstance(row, dict) else lambda name: getattr(row, name, None)
    present = [name for name in _COLUMNS if get(name) is not None]
    if len(present) != 1:
        raise ValidationError(f"Message must have exactly one context, found {present or 'none'}")
    name = present[0]
    if name == "client_id":
        return FeedContext(get(name))
    if name == "task_id":
        return TaskContext(get(name))
    return DMContext(get(name))
