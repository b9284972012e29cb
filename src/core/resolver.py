"""Metadata resolver: fetch each unresolved page once and walk the fallback chain.

Order per record:
1) og:image
2) twitter:image
3) coordinates in the final URL -> static map
4) q= address -> geocode -> static map, else image search

A failed GET, a non-2xx status or an exhausted chain leaves the record
unresolved. One record's failure never stops the rest of the batch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from core.collection import LinkCollection
from core.config import HttpConfig, ResolverConfig, StaticMapConfig
from core.errors import FetchError
from core.extractor import is_absolute_url
from core.geocode import GeocodeClient
from core.html_meta import PageMetadata
from core.image_search import ImageSearchClient
from core.models import LinkRecord, Resolution
from core.ports import HttpPort
from core.strategies import (
    AddressLookupStrategy,
    FetchedPage,
    MapCoordinateStrategy,
    OpenGraphImageStrategy,
    ResolverStrategy,
    TwitterImageStrategy,
)

LOGGER = logging.getLogger(__name__)


def default_strategies(
    geocoder: GeocodeClient,
    image_search: ImageSearchClient,
    static_map: Optional[StaticMapConfig] = None,
) -> list[ResolverStrategy]:
    return [
        OpenGraphImageStrategy(),
        TwitterImageStrategy(),
        MapCoordinateStrategy(static_map),
        AddressLookupStrategy(geocoder, image_search, static_map),
    ]


class MetadataResolver:
    """Resolves preview images for links that are not direct images."""

    def __init__(
        self,
        http: HttpPort,
        strategies: Sequence[ResolverStrategy],
        config: Optional[ResolverConfig] = None,
        http_config: Optional[HttpConfig] = None,
    ) -> None:
        self._http = http
        self._strategies = list(strategies)
        self._config = config or ResolverConfig()
        self._http_config = http_config or HttpConfig()

    async def _fetch_page(self, record: LinkRecord) -> Optional[FetchedPage]:
        headers = {"Accept": self._config.accept}
        try:
            response = await self._http.get(record.url, headers, self._http_config.get_timeout)
        except FetchError as exc:
            LOGGER.warning("GET page failed for %s: %s", record.url, exc)
            return None
        if not response.ok:
            LOGGER.debug("GET %s returned %s", record.url, response.status)
            return None
        return FetchedPage(
            record=record,
            response=response,
            metadata=PageMetadata(response.body, response.charset),
        )

    async def resolve_record(self, record: LinkRecord) -> Optional[Resolution]:
        """Run the chain for one record; stages never overlap."""

        page = await self._fetch_page(record)
        if page is None:
            return None
        for strategy in self._strategies:
            resolution = await strategy.resolve(page)
            if resolution is not None:
                LOGGER.info(
                    "Preview for %s via %s: %s (label: %s)",
                    record.url,
                    strategy.name,
                    resolution.image_url,
                    resolution.label,
                )
                return resolution
        LOGGER.debug("No preview found for %s", record.url)
        return None

    async def _attempt(self, record: LinkRecord) -> Optional[Resolution]:
        try:
            return await self.resolve_record(record)
        except Exception:
            LOGGER.exception("Error while resolving preview for %s", record.url)
            return None

    def _pending(self, collection: LinkCollection) -> list[int]:
        return [
            index
            for index, record in enumerate(collection)
            if not record.is_image
            and record.preview_image_url is None
            and is_absolute_url(record.url)
        ]

    async def resolve(self, collection: LinkCollection) -> int:
        """Resolve previews in place; return how many were stored.

        Never stores more than max_previews previews. With concurrency above
        one, results that finish after the cap was reached are dropped.
        """

        limit = self._config.max_previews
        pending = self._pending(collection)
        resolved = 0

        def _store(index: int, resolution: Optional[Resolution]) -> None:
            nonlocal resolved
            # No await between the cap check and the increment.
            if resolution is None or resolved >= limit:
                return
            if collection.record_resolution(index, resolution):
                resolved += 1

        if self._config.concurrency <= 1:
            for index in pending:
                if resolved >= limit:
                    break
                _store(index, await self._attempt(collection[index]))
            return resolved

        semaphore = asyncio.Semaphore(self._config.concurrency)

        async def _worker(index: int) -> None:
            async with semaphore:
                if resolved >= limit:
                    return
                resolution = await self._attempt(collection[index])
            if resolution is not None and resolved >= limit:
                LOGGER.debug("Preview cap reached, dropping result for %s", collection[index].url)
            _store(index, resolution)

        await asyncio.gather(*(_worker(index) for index in pending))
        return resolved
