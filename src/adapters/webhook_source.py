"""Webhook API message source.

The webhook server stores group chat messages and serves them from
``GET {api}/messages``; an optional ``line_id`` narrows the batch to one
sender.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from core.config import ApiConfig
from core.errors import MessageFetchError
from core.models import RawMessage

LOGGER = logging.getLogger(__name__)


def message_from_payload(entry: dict[str, Any]) -> Optional[RawMessage]:
    """Map one API message object to a RawMessage; None if it is unusable."""

    text = entry.get("message")
    timestamp = entry.get("timestamp")
    if not isinstance(text, str) or timestamp is None:
        return None
    try:
        timestamp = int(timestamp)
    except (TypeError, ValueError):
        return None
    return RawMessage(
        sender_id=entry.get("user_id") or None,
        sender_name=entry.get("user_name") or "",
        text=text,
        timestamp=timestamp,
        group_id=entry.get("group_id") or None,
    )


class WebhookMessageSource:
    """MessageSourcePort backed by the webhook API."""

    def __init__(self, client: httpx.AsyncClient, config: Optional[ApiConfig] = None) -> None:
        self._client = client
        self._config = config or ApiConfig()

    def _endpoint(self) -> str:
        return f"{self._config.base_url.rstrip('/')}/messages"

    async def fetch(self, filter_id: Optional[str] = None) -> List[RawMessage]:
        """Return the batch newest-first."""

        params = {"line_id": filter_id} if filter_id else None
        url = self._endpoint()
        LOGGER.info("Fetching messages from %s", url)
        try:
            response = await self._client.get(url, params=params, timeout=self._config.timeout)
        except httpx.HTTPError as exc:
            raise MessageFetchError(f"Message fetch failed: {exc.__class__.__name__}") from exc
        if response.status_code != 200:
            raise MessageFetchError(
                f"Message fetch failed (HTTP {response.status_code})",
                status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise MessageFetchError("Message fetch returned invalid JSON") from exc

        if payload is None:
            return []
        if not isinstance(payload, dict):
            raise MessageFetchError(f"Message fetch returned {type(payload).__name__}, expected an object")

        # "messages" is null when the store is empty.
        entries = payload.get("messages") or []
        if not isinstance(entries, list):
            raise MessageFetchError("Message fetch returned a malformed message list")
        messages = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            message = message_from_payload(entry)
            if message is not None:
                messages.append(message)
        messages.sort(key=lambda message: message.timestamp, reverse=True)
        return messages
