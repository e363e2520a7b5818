"""Infrastructure layer for conversation persistence."""
from __future__ import annotations

from typing import Protocol

from backend.domain import ChatMessage, Conversation


class ConversationRepository(Protocol):
    """Persistence contract for chat conversations."""

    def get_or_create(self, session_id: str) -> Conversation: ...

    def get(self, session_id: str) -> Conversation | None: ...

    def append_message(self, session_id: str, message: ChatMessage) -> None: ...

    def next_message_id(self) -> str: ...

    def list_sessions(self) -> list[dict[str, object]]: ...

    def reset(self) -> None: ...


class InMemoryConversationRepository:
    """Simple in-memory repository for fast iteration and tests."""

    def __init__(self) -> None:
        self._conversations: dict[str, Conversation] = {}
        self._message_counter = 0

    def get_or_create(self, session_id: str) -> Conversation:
        conversation = self._conversations.get(session_id)
        if conversation is None:
            conversation = Conversation(session_id=session_id)
            self._conversations[session_id] = conversation
        return conversation

    def get(self, session_id: str) -> Conversation | None:
        return self._conversations.get(session_id)

    def append_message(self, session_id: str, message: ChatMessage) -> None:
        self.get_or_create(session_id).messages.append(message)

    def next_message_id(self) -> str:
        self._message_counter += 1
        return f"msg-{self._message_counter:05d}"

    def list_sessions(self) -> list[dict[str, object]]:
        summaries = [
            {
                "sessionId": conversation.session_id,
                "messages": len(conversation.messages),
                "createdAt": conversation.created_at,
            }
            for conversation in self._conversations.values()
        ]
        summaries.sort(key=lambda item: item["createdAt"], reverse=True)
        return summaries

    def reset(self) -> None:
        self._conversations.clear()
        self._message_counter = 0
