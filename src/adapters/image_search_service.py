"""Webhook API adapter for the core ImageSearchServicePort."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from core.config import ApiConfig, ImageSearchConfig
from core.errors import FetchError


class WebhookImageSearchService:
    """Calls the server-side search endpoint: GET {api}/search_image?q=..."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api: Optional[ApiConfig] = None,
        config: Optional[ImageSearchConfig] = None,
    ) -> None:
        self._client = client
        self._api = api or ApiConfig()
        self._config = config or ImageSearchConfig()

    def _endpoint(self) -> str:
        return f"{self._api.base_url.rstrip('/')}/search_image"

    async def search(self, query: str) -> dict[str, Any]:
        url = self._endpoint()
        try:
            response = await self._client.get(url, params={"q": query}, timeout=self._config.timeout)
        except httpx.HTTPError as exc:
            raise FetchError(url, f"Image search failed: {exc.__class__.__name__}") from exc
        if response.status_code != 200:
            raise FetchError(url, "Image search returned an error", status=response.status_code)
        try:
            payload = response.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}
