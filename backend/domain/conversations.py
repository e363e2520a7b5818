"""Domain entities for chat conversations."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(slots=True)
class ChatMessage:
    """One turn of a conversation.

    ``visualization`` holds the serialised visualization result of an agent
    turn and is ``None`` for user turns and for turns without charts.
    """

    message_id: str
    role: str
    content: str
    status: str = "completed"
    files: list[str] = field(default_factory=list)
    visualization: dict[str, Any] | None = None
    error: str | None = None
    created_at: str = field(default_factory=_now)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.message_id,
            "role": self.role,
            "content": self.content,
            "status": self.status,
            "createdAt": self.created_at,
        }
        if self.files:
            payload["files"] = list(self.files)
        if self.visualization is not None:
            payload["visualization"] = self.visualization
        if self.error:
            payload["error"] = self.error
        return payload


@dataclass(slots=True)
class Conversation:
    """All turns exchanged within one agent session."""

    session_id: str
    messages: list[ChatMessage] = field(default_factory=list)
    created_at: str = field(default_factory=_now)
