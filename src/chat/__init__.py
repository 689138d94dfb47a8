# Chat platform package: inbound events and reply delivery.

from .types import ChatEvent
from .telegram_client import TelegramClient, chunk_message

__all__ = ["ChatEvent", "TelegramClient", "chunk_message"]
