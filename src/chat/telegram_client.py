# Telegram Bot API client over plain HTTPS (requests).
#  - get_me() authenticates the token at startup
#  - iter_events() long-polls getUpdates and yields ChatEvents
#  - send_reply() is shared by all dispatchers; each thread gets its own
#    requests.Session so concurrent sends never share a connection pool

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterator, List, Optional

import requests

from src.chat.types import ChatEvent
from src.errors import AuthError, DeliveryError

logger = logging.getLogger("storybot.telegram")

TELEGRAM_API_URL = "https://api.telegram.org"
MESSAGE_LIMIT = 4096
MAX_POLL_BACKOFF = 30.0


class TelegramAPIError(Exception):
    """The Bot API answered with ok=false."""

    def __init__(self, method: str, description: str, error_code: Optional[int] = None):
        super().__init__(f"{method} failed ({error_code}): {description}")
        self.method = method
        self.description = description
        self.error_code = error_code


def chunk_message(text: str, limit: int = MESSAGE_LIMIT) -> List[str]:
    """Split text to fit the platform limit: by paragraph first, then hard cuts."""
    if not text:
        return []
    if len(text) <= limit:
        return [text]
    chunks: List[str] = []
    for para in text.split("\n\n"):
        if chunks and len(chunks[-1]) + len(para) + 2 <= limit:
            chunks[-1] += "\n\n" + para
        else:
            while len(para) > limit:
                chunks.append(para[:limit])
                para = para[limit:]
            if para:
                chunks.append(para)
    return chunks or [text[:limit]]


class TelegramClient:
    def __init__(
        self,
        token: str,
        base_url: str = TELEGRAM_API_URL,
        timeout: float = 15.0,
        poll_timeout: int = 60,
    ):
        self._token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.poll_timeout = poll_timeout
        self._local = threading.local()

    def __repr__(self) -> str:
        return f"TelegramClient(base_url={self.base_url!r})"

    def _redact(self, error: Exception) -> str:
        # request errors embed the URL, and the URL embeds the token
        message = str(error)
        return message.replace(self._token, "***") if self._token else message

    # -------------------------
    # HTTP plumbing
    # -------------------------
    def _session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
        return session

    def _call(self, method: str, payload: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None) -> Any:
        url = f"{self.base_url}/bot{self._token}/{method}"
        resp = self._session().post(url, json=payload or {}, timeout=timeout or self.timeout)
        try:
            data = resp.json()
        except ValueError:
            resp.raise_for_status()
            raise TelegramAPIError(method, "response is not JSON", resp.status_code)
        if not data.get("ok"):
            raise TelegramAPIError(method, data.get("description", "unknown error"), data.get("error_code"))
        return data.get("result")

    # -------------------------
    # Startup
    # -------------------------
    def get_me(self) -> Dict[str, Any]:
        try:
            me = self._call("getMe")
        except (requests.RequestException, TelegramAPIError) as e:
            raise AuthError(f"Telegram login failed: {self._redact(e)}") from e
        logger.info("Authorized on account %s", me.get("username"))
        return me

    def set_webhook(self, url: str, secret_token: Optional[str] = None) -> None:
        payload: Dict[str, Any] = {"url": url, "allowed_updates": ["message"]}
        if secret_token:
            payload["secret_token"] = secret_token
        self._call("setWebhook", payload)
        logger.info("Webhook registered at %s", url)

    def delete_webhook(self) -> bool:
        """Remove any registered webhook. Pending updates stay queued. Failures are logged."""
        try:
            self._call("deleteWebhook", {"drop_pending_updates": False})
        except (requests.RequestException, TelegramAPIError) as e:
            logger.warning("Could not remove webhook: %s", self._redact(e))
            return False
        logger.info("Webhook removed")
        return True

    # -------------------------
    # Inbound
    # -------------------------
    def get_updates(self, offset: Optional[int] = None, timeout: Optional[int] = None) -> List[Dict[str, Any]]:
        poll = self.poll_timeout if timeout is None else timeout
        payload: Dict[str, Any] = {"timeout": poll, "allowed_updates": ["message"]}
        if offset is not None:
            payload["offset"] = offset
        # the HTTP deadline must outlast the server-side long poll
        return self._call("getUpdates", payload, timeout=poll + self.timeout) or []

    def iter_events(self, stop: threading.Event) -> Iterator[ChatEvent]:
        """Long-poll until `stop` is set. Malformed updates are skipped."""
        offset: Optional[int] = None
        backoff = 1.0
        try:
            while not stop.is_set():
                try:
                    updates = self.get_updates(offset=offset)
                except (requests.RequestException, TelegramAPIError) as e:
                    logger.warning("getUpdates failed, retrying in %.0fs: %s", backoff, self._redact(e))
                    stop.wait(backoff)
                    backoff = min(backoff * 2, MAX_POLL_BACKOFF)
                    continue
                backoff = 1.0
                for update in updates:
                    update_id = update.get("update_id")
                    if isinstance(update_id, int):
                        offset = update_id + 1
                    event = ChatEvent.from_update(update)
                    if event is None:
                        logger.debug("Skipping update %s without a text message", update_id)
                        continue
                    yield event
        finally:
            if offset is not None:
                self._confirm_offset(offset)

    def _confirm_offset(self, offset: int) -> None:
        # Telegram only forgets delivered updates once a later getUpdates names the next offset
        try:
            self.get_updates(offset=offset, timeout=0)
        except (requests.RequestException, TelegramAPIError) as e:
            logger.warning("Could not confirm update offset %s: %s", offset, self._redact(e))

    # -------------------------
    # Outbound
    # -------------------------
    def send_reply(self, conversation_id: int, text: str, reply_to_message_id: Optional[int] = None) -> None:
        """Send text to a chat, threaded to reply_to_message_id. Raises DeliveryError."""
        chunks = chunk_message(text)
        if not chunks:
            raise DeliveryError("refusing to send an empty reply")
        for i, chunk in enumerate(chunks):
            payload: Dict[str, Any] = {"chat_id": conversation_id, "text": chunk}
            if i == 0 and reply_to_message_id is not None:
                payload["reply_parameters"] = {
                    "message_id": reply_to_message_id,
                    "allow_sending_without_reply": True,
                }
            try:
                self._call("sendMessage", payload)
            except (requests.RequestException, TelegramAPIError) as e:
                raise DeliveryError(f"sendMessage to chat {conversation_id} failed: {self._redact(e)}") from e
