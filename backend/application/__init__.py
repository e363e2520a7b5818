"""Application services."""

from .chat import ChatService, get_chat_service, reset_chat_state

__all__ = [
    "ChatService",
    "get_chat_service",
    "reset_chat_state",
]
