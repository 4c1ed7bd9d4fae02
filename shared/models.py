"""
shared/models.py

Common data models used across the command pipeline.

- `Message` is the immutable unit stored in the conversation. Its identifier combines a
  millisecond timestamp with a process-wide sequence number, so two messages created in
  the same tick never collide.
- `ReplyEnvelope` is the only valid shape returned by a reply source:
  {"message": str, "metadata": dict}.
- `HistoryItem` / `CompletionRequest` describe the JSON body of the completion proxy.
"""

import datetime
import itertools
import time
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field

from agent_api.base import QueuedAction

_MESSAGE_SEQUENCE = itertools.count(1)


def generate_message_id() -> str:
    """
    Generate a process-unique, creation-ordered message identifier.

    Returns:
        str: "<epoch milliseconds>-<sequence>", e.g. "1729325400123-42". The sequence
        part strictly increases for the lifetime of the process.
    """
    return f"{time.time_ns() // 1_000_000}-{next(_MESSAGE_SEQUENCE)}"


def utc_now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


class MessageRole(Enum):
    """Who authored a conversation message."""
    USER = "user"
    AGENT = "agent"


@dataclass(frozen=True)
class Message:
    """
    One entry of the conversation log.

    Messages are immutable once created: the dataclass is frozen, queued actions are
    stored as a tuple and metadata as a read-only mapping. Use `Message.create()` to
    build one with a fresh id and timestamp.
    """
    id: str
    role: MessageRole
    content: str
    created_at: str
    queued_actions: Tuple[QueuedAction, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)
    is_error: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "queued_actions", tuple(self.queued_actions))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @classmethod
    def create(
        cls,
        role: MessageRole,
        content: str,
        *,
        queued_actions: Iterable[QueuedAction] = (),
        metadata: Optional[Mapping[str, Any]] = None,
        is_error: bool = False,
    ) -> "Message":
        return cls(
            id=generate_message_id(),
            role=role,
            content=content,
            created_at=utc_now_iso(),
            queued_actions=tuple(queued_actions),
            metadata=metadata or {},
            is_error=is_error,
        )

    @property
    def action_count(self) -> int:
        return len(self.queued_actions)

    def to_history_item(self) -> Dict[str, str]:
        """Render the message as a completion-request history item ({type, content})."""
        return {"type": self.role.value, "content": self.content}

    def to_dict(self) -> Dict[str, Any]:
        """
        Render the message in the JSON shape served by the HTTP API.

        Returns:
            Dict[str, Any]: camelCase keys `id`, `type`, `content`, `timestamp`, `actions`,
            `actionCount`, `metadata` and `isError`.
        """
        return {
            "id": self.id,
            "type": self.role.value,
            "content": self.content,
            "timestamp": self.created_at,
            "actions": [action.to_dict() for action in self.queued_actions],
            "actionCount": self.action_count,
            "metadata": dict(self.metadata),
            "isError": self.is_error,
        }


class ReplyEnvelope(BaseModel):
    """
    Validate the reply produced by any reply source or returned by the completion proxy.

    A source either produces exactly this shape or fails; the remote tier relies on this
    model to reject malformed proxy responses.
    """
    message: str = Field(..., description="Natural-language reply text")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Provenance and flags, e.g. source")

    @property
    def is_error(self) -> bool:
        return bool(self.metadata.get("error"))


class HistoryItem(BaseModel):
    """One prior conversation turn as sent to the completion proxy."""
    type: str = Field(..., description="'user' for operator turns; anything else is treated as assistant")
    content: str


class CompletionRequest(BaseModel):
    """Request body of POST /api/chat."""
    command: str
    conversationHistory: List[HistoryItem] = Field(default_factory=list)
