"""Application service for CFO agent conversations."""
from __future__ import annotations

import logging
from typing import Any, Iterable

from backend.domain import ChatMessage
from backend.infrastructure import (
    AgentClient,
    AgentServiceError,
    ConversationRepository,
    InMemoryConversationRepository,
    get_agent_client,
)
from backend.workers.pipeline import VisualizationPipeline, get_visualization_pipeline

log = logging.getLogger(__name__)

ERROR_REPLY = "Sorry, I couldn't reach the CFO agent. Please try again."


class ChatService:
    """Coordinates a chat turn: agent call, visualization and history."""

    def __init__(
        self,
        repository: ConversationRepository,
        *,
        agent: AgentClient | None = None,
        pipeline: VisualizationPipeline | None = None,
    ) -> None:
        self._repository = repository
        self._agent = agent
        self._pipeline = pipeline

    @property
    def agent(self) -> AgentClient:
        return self._agent or get_agent_client()

    @property
    def pipeline(self) -> VisualizationPipeline:
        return self._pipeline or get_visualization_pipeline()

    def _record(self, session_id: str, role: str, content: str, **extra: Any) -> ChatMessage:
        message = ChatMessage(
            message_id=self._repository.next_message_id(),
            role=role,
            content=content,
            **extra,
        )
        self._repository.append_message(session_id, message)
        return message

    async def send_message(self, session_id: str, message: str, files: Iterable[str] | None = None) -> ChatMessage:
        """Run one conversation turn and return the recorded agent message.

        Agent failures are not raised; they come back as an agent message
        with ``status="error"``.
        """

        message = (message or "").strip()
        file_names = [name for name in (files or []) if name]
        if not message and not file_names:
            raise ValueError("Message or files required")

        self._record(session_id, "user", message, files=file_names)

        try:
            reply = await self.agent.send_message(message, session_id, file_names)
        except AgentServiceError as exc:
            log.exception("Agent call failed for session %s", session_id)
            return self._record(session_id, "agent", ERROR_REPLY, status="error", error=str(exc))

        result = await self.pipeline.process(reply.to_payload())
        visualization = result.to_payload() if result.has_visualization() else None
        return self._record(session_id, "agent", reply.text, visualization=visualization)

    def get_messages(self, session_id: str) -> list[dict[str, Any]] | None:
        conversation = self._repository.get(session_id)
        if conversation is None:
            return None
        return [message.to_payload() for message in conversation.messages]

    def list_sessions(self) -> list[dict[str, object]]:
        return self._repository.list_sessions()

    def reset(self) -> None:
        self._repository.reset()


_repository = InMemoryConversationRepository()
_service = ChatService(_repository)


def get_chat_service() -> ChatService:
    """Return the singleton chat service for the process."""

    return _service


def reset_chat_state() -> None:
    """Reset the in-memory conversations (used in tests)."""

    _service.reset()
