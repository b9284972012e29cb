"""On-demand preview candidates for one link (manual override UI)."""

from __future__ import annotations

import logging
from typing import List, Optional

from core.config import CandidateConfig, HttpConfig, ResolverConfig
from core.errors import FetchError
from core.html_meta import PageMetadata, absolute_url
from core.image_search import ImageSearchClient
from core.models import LinkRecord
from core.ports import HttpPort

LOGGER = logging.getLogger(__name__)


def dedupe(urls: List[str]) -> List[str]:
    """Drop repeats, keeping first-seen order."""

    return list(dict.fromkeys(urls))


class CandidateGatherer:
    """Collects og:image, twitter:image and <img> sources for a page.

    Never touches the record; the caller applies a choice explicitly.
    """

    def __init__(
        self,
        http: HttpPort,
        image_search: ImageSearchClient,
        config: Optional[CandidateConfig] = None,
        http_config: Optional[HttpConfig] = None,
        resolver_config: Optional[ResolverConfig] = None,
    ) -> None:
        self._http = http
        self._image_search = image_search
        self._config = config or CandidateConfig()
        self._http_config = http_config or HttpConfig()
        self._accept = (resolver_config or ResolverConfig()).accept

    async def _page_candidates(self, record: LinkRecord) -> List[str]:
        try:
            response = await self._http.get(
                record.url, {"Accept": self._accept}, self._http_config.get_timeout
            )
        except FetchError as exc:
            LOGGER.warning("Candidate GET failed for %s: %s", record.url, exc)
            return []
        if not response.ok:
            LOGGER.debug("Candidate GET %s returned %s", record.url, response.status)
            return []

        base_url = response.final_url or record.url
        metadata = PageMetadata(response.body, response.charset)
        raw: List[str] = []
        for value in (metadata.og_image, metadata.twitter_image):
            if value:
                raw.append(value)
        raw.extend(metadata.image_sources())
        return [absolute_url(value, base_url) for value in raw]

    async def gather(self, record: LinkRecord, query: Optional[str] = None) -> List[str]:
        limit = self._config.max_candidates
        candidates = dedupe(await self._page_candidates(record))[:limit]

        if len(candidates) < limit and query and query.strip():
            image_url = await self._image_search.first_image(query)
            if image_url and image_url not in candidates:
                candidates.append(image_url)

        return candidates[:limit]
