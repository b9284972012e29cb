"""Telegram message source.

Reads recent history from configured chats with Telethon and maps it to core
RawMessages, keeping Telethon-specific details out of the core pipeline.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from telethon.tl.custom import Message

from core.errors import MessageFetchError
from core.models import RawMessage

LOGGER = logging.getLogger(__name__)


def chat_key_from_message(message: Message) -> str:
    """Normalize a chat key: @username when public, chat_id:<id> otherwise."""

    chat = getattr(message, "chat", None)
    username = getattr(chat, "username", None)
    if isinstance(username, str) and username:
        return f"@{username.lower()}"
    return f"chat_id:{message.chat_id}"


def sender_name_from_message(message: Message) -> str:
    sender = getattr(message, "sender", None)
    title = getattr(sender, "title", None)
    if title:
        return str(title)
    first = getattr(sender, "first_name", None)
    last = getattr(sender, "last_name", None)
    if first or last:
        return " ".join(part for part in [first, last] if part)
    username = getattr(sender, "username", None)
    if username:
        return f"@{username}"
    sender_id = getattr(message, "sender_id", None)
    if sender_id is None:
        return "Unknown User"
    return f"User-{str(sender_id)[:8]}"


def raw_message_from_telegram(message: Message) -> Optional[RawMessage]:
    """Map a Telethon Message; media without a caption yields None."""

    text = message.raw_text or ""
    if not text.strip():
        return None
    sender_id = getattr(message, "sender_id", None)
    return RawMessage(
        sender_id=str(sender_id) if sender_id is not None else None,
        sender_name=sender_name_from_message(message),
        text=text,
        timestamp=int(message.date.timestamp() * 1000),
        group_id=chat_key_from_message(message),
    )


def _entity_ref(chat_key: str):
    if chat_key.startswith("chat_id:"):
        return int(chat_key.split("chat_id:", 1)[1])
    return chat_key


class TelegramMessageSource:
    """MessageSourcePort that scans the last N messages of each chat."""

    def __init__(self, client, chats: Iterable[str], messages_per_chat: int = 50) -> None:
        self._client = client
        self._chats = list(chats)
        self._messages_per_chat = messages_per_chat

    async def fetch(self, filter_id: Optional[str] = None) -> List[RawMessage]:
        if not self._client.is_connected():
            raise MessageFetchError("Telegram client is not connected")

        messages: List[RawMessage] = []
        for chat_key in self._chats:
            try:
                entity = await self._client.get_entity(_entity_ref(chat_key))
            except Exception:
                LOGGER.exception("Failed to resolve chat %s", chat_key)
                continue
            try:
                async for message in self._client.iter_messages(entity, limit=self._messages_per_chat):
                    raw = raw_message_from_telegram(message)
                    if raw is None:
                        continue
                    if filter_id and raw.sender_id != filter_id:
                        continue
                    messages.append(raw)
            except Exception as exc:
                raise MessageFetchError(
                    f"Reading history of {chat_key} failed: {exc.__class__.__name__}"
                ) from exc

        messages.sort(key=lambda message: message.timestamp, reverse=True)
        LOGGER.info("Loaded %s messages from %s chats", len(messages), len(self._chats))
        return messages
