"""Preview resolution strategies.

Each strategy looks at one fetched page and either produces a Resolution or
returns None so the resolver can move on to the next one. The resolver owns
the ordering; strategies know nothing about each other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.parse import urlsplit

from core.config import StaticMapConfig
from core.geocode import GeocodeClient
from core.html_meta import PageMetadata, absolute_url
from core.image_search import ImageSearchClient
from core.models import FetchResponse, LinkRecord, Resolution
from core.places import (
    build_static_map_url,
    coordinate_label,
    extract_coordinates,
    extract_place_term,
    extract_query_param,
    format_place_display_name,
)

LOGGER = logging.getLogger(__name__)


def _host(url: str) -> Optional[str]:
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


@dataclass
class FetchedPage:
    """A record together with the page its URL led to."""

    record: LinkRecord
    response: FetchResponse
    metadata: PageMetadata

    @property
    def final_url(self) -> str:
        return self.response.final_url or self.record.url

    @property
    def host(self) -> Optional[str]:
        return _host(self.final_url) or _host(self.record.url)


class ResolverStrategy(Protocol):
    name: str

    async def resolve(self, page: FetchedPage) -> Optional[Resolution]:
        ...


class OpenGraphImageStrategy:
    name = "og:image"

    async def resolve(self, page: FetchedPage) -> Optional[Resolution]:
        image = page.metadata.og_image
        if not image:
            return None
        return Resolution(
            image_url=absolute_url(image, page.final_url),
            label=page.metadata.preview_label(page.host),
        )


class TwitterImageStrategy:
    name = "twitter:image"

    async def resolve(self, page: FetchedPage) -> Optional[Resolution]:
        image = page.metadata.twitter_image
        if not image:
            return None
        return Resolution(
            image_url=absolute_url(image, page.final_url),
            label=page.metadata.preview_label(page.host),
        )


class MapCoordinateStrategy:
    """Static map for coordinates embedded in the final URL."""

    name = "map"

    def __init__(self, static_map: Optional[StaticMapConfig] = None) -> None:
        self._static_map = static_map or StaticMapConfig()

    async def resolve(self, page: FetchedPage) -> Optional[Resolution]:
        coordinate = extract_coordinates(page.final_url)
        if coordinate is None:
            LOGGER.debug("No coordinates found in final URL %s", page.final_url)
            return None
        return Resolution(
            image_url=build_static_map_url(coordinate, self._static_map),
            label=coordinate_label(coordinate),
        )


class AddressLookupStrategy:
    """Geocode the q= address; fall back to an image search for the place."""

    name = "address"

    def __init__(
        self,
        geocoder: GeocodeClient,
        image_search: ImageSearchClient,
        static_map: Optional[StaticMapConfig] = None,
    ) -> None:
        self._geocoder = geocoder
        self._image_search = image_search
        self._static_map = static_map or StaticMapConfig()

    async def resolve(self, page: FetchedPage) -> Optional[Resolution]:
        address = extract_query_param(page.final_url, "q")
        if not address or not address.strip():
            return None

        LOGGER.debug("Found q= address %r, trying geocode", address)
        coordinate = await self._geocoder.locate(address)
        if coordinate is not None:
            return Resolution(
                image_url=build_static_map_url(coordinate, self._static_map),
                label=format_place_display_name(address),
            )

        place = extract_place_term(address)
        if not place:
            return None
        LOGGER.debug("Geocode failed, falling back to image search for %r", place)
        image_url = await self._image_search.first_image(place)
        if not image_url:
            return None
        return Resolution(image_url=image_url, label=format_place_display_name(place))
