# Data models for the chat layer.

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ChatEvent:
    """One inbound text message."""
    message_id: int
    conversation_id: int
    text: str
    update_id: Optional[int] = None

    @classmethod
    def from_update(cls, update: Dict[str, Any]) -> Optional["ChatEvent"]:
        """Build an event from a Telegram update; None when it carries no usable text message."""
        if not isinstance(update, dict):
            return None
        message = update.get("message")
        if not isinstance(message, dict):
            return None
        chat = message.get("chat") or {}
        message_id = message.get("message_id")
        chat_id = chat.get("id") if isinstance(chat, dict) else None
        text = message.get("text")
        if message_id is None or chat_id is None or not isinstance(text, str):
            return None
        return cls(
            message_id=int(message_id),
            conversation_id=int(chat_id),
            text=text,
            update_id=update.get("update_id"),
        )
