"""Nominatim adapter for the core GeocodingServicePort."""

from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from core.config import GeocodeConfig
from core.errors import FetchError
from core.models import Coordinate

LOGGER = logging.getLogger(__name__)


class NominatimGeocoder:
    """Queries the OpenStreetMap Nominatim search API for one result."""

    def __init__(self, client: httpx.AsyncClient, config: Optional[GeocodeConfig] = None) -> None:
        self._client = client
        self._config = config or GeocodeConfig()

    def _params(self, address: str, country_restricted: bool) -> dict[str, str]:
        params = {
            "format": "json",
            "limit": "1",
            "accept-language": self._config.language,
            "q": address,
        }
        if country_restricted and self._config.country_codes:
            params["countrycodes"] = self._config.country_codes
        return params

    async def search(self, address: str, country_restricted: bool) -> List[Coordinate]:
        params = self._params(address, country_restricted)
        url = self._config.base_url
        try:
            response = await self._client.get(
                url,
                params=params,
                # Nominatim's usage policy requires an identifying User-Agent.
                headers={"User-Agent": self._config.user_agent},
                timeout=self._config.timeout,
            )
        except httpx.HTTPError as exc:
            raise FetchError(url, f"Nominatim request failed: {exc.__class__.__name__}") from exc
        if response.status_code != 200:
            raise FetchError(url, "Nominatim returned an error", status=response.status_code)

        LOGGER.debug("Nominatim response for %r: %s", address, response.text[:1000])
        try:
            payload = response.json()
        except ValueError:
            return []
        if not isinstance(payload, list):
            return []

        results: List[Coordinate] = []
        for entry in payload:
            if not isinstance(entry, dict):
                continue
            try:
                results.append(Coordinate(float(entry["lat"]), float(entry["lon"])))
            except (KeyError, TypeError, ValueError):
                continue
        return results
