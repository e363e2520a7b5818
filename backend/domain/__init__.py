"""Domain layer definitions."""

from .conversations import ChatMessage, Conversation

__all__ = [
    "ChatMessage",
    "Conversation",
]
