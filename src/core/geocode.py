"""Address geocoding with one relaxed retry."""

from __future__ import annotations

import logging
from typing import Optional

from core.errors import FetchError
from core.models import Coordinate
from core.places import normalize_address
from core.ports import GeocodingServicePort

LOGGER = logging.getLogger(__name__)


class GeocodeClient:
    """Resolves a free-text address to a single coordinate.

    The first query is restricted to the configured country. Only an empty
    answer triggers the retry without that restriction; a transport failure
    ends the lookup.
    """

    def __init__(self, service: GeocodingServicePort) -> None:
        self._service = service

    async def locate(self, address: str) -> Optional[Coordinate]:
        query = normalize_address(address)
        if not query:
            return None

        for country_restricted in (True, False):
            try:
                results = await self._service.search(query, country_restricted)
            except FetchError as exc:
                LOGGER.warning("Geocode request failed for %r: %s", query, exc)
                return None
            if results:
                return results[0]
            if country_restricted:
                LOGGER.debug("No geocode result for %r, retrying without country filter", query)
        return None
