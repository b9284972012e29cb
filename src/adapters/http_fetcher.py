"""httpx adapter for the core HttpPort."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

import httpx

from core.config import HttpConfig
from core.errors import FetchError
from core.models import FetchResponse, HeadResponse

LOGGER = logging.getLogger(__name__)


class HttpxFetcher:
    """GET/HEAD over a shared httpx.AsyncClient.

    Redirects are followed so FetchResponse.final_url is the landing page.
    Transport errors become FetchError; statuses are passed through as-is.
    """

    def __init__(self, client: httpx.AsyncClient, config: Optional[HttpConfig] = None) -> None:
        self._client = client
        self._config = config or HttpConfig()

    def _headers(self, extra: Optional[Mapping[str, str]] = None) -> dict[str, str]:
        headers = {"User-Agent": self._config.user_agent}
        if extra:
            headers.update(extra)
        return headers

    async def get(self, url: str, headers: Mapping[str, str], timeout: float) -> FetchResponse:
        try:
            response = await self._client.get(
                url,
                headers=self._headers(headers),
                timeout=timeout,
                follow_redirects=True,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(url, f"GET failed: {exc.__class__.__name__}") from exc
        return FetchResponse(
            status=response.status_code,
            headers=dict(response.headers),
            body=response.content,
            final_url=str(response.url),
        )

    async def head(self, url: str, timeout: float) -> HeadResponse:
        try:
            response = await self._client.head(
                url,
                headers=self._headers(),
                timeout=timeout,
                follow_redirects=True,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(url, f"HEAD failed: {exc.__class__.__name__}") from exc
        return HeadResponse(status=response.status_code, headers=dict(response.headers))


def build_http_client(config: Optional[HttpConfig] = None) -> httpx.AsyncClient:
    """Shared client used by every adapter for one run."""

    config = config or HttpConfig()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.get_timeout, connect=config.head_timeout),
        limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        headers={"User-Agent": config.user_agent},
    )
