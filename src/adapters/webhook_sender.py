"""Webhook API adapter for outbound group messages.

Unlike preview resolution, sending is an explicit user action, so failures
are raised to the caller as typed errors.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from core.config import ApiConfig
from core.errors import MissingCredentialsError, SendFailedError

LOGGER = logging.getLogger(__name__)


class WebhookMessageSender:
    """Posts a text message to a group through ``POST {api}/send``."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        channel_token: Optional[str],
        config: Optional[ApiConfig] = None,
    ) -> None:
        self._client = client
        self._channel_token = channel_token or ""
        self._config = config or ApiConfig()

    def _endpoint(self) -> str:
        return f"{self._config.base_url.rstrip('/')}/send"

    async def send(self, group_id: str, text: str) -> None:
        if not self._channel_token:
            raise MissingCredentialsError("LINE_MESSAGING_TOKEN is not configured")
        if not group_id or not text:
            raise ValueError("group_id and text are required")

        response = await self._client.post(
            self._endpoint(),
            json={"group_id": group_id, "message": text},
            headers={"Authorization": f"Bearer {self._channel_token}"},
            timeout=self._config.timeout,
        )
        if response.status_code != 200:
            raise SendFailedError(response.status_code, response.text)
        LOGGER.info("Message sent to group %s", group_id)
