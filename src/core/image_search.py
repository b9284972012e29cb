"""Last-resort keyword image search."""

from __future__ import annotations

import logging
from typing import Optional

from core.errors import FetchError
from core.ports import ImageSearchServicePort

LOGGER = logging.getLogger(__name__)


class ImageSearchClient:
    """Returns the first image URL for a query, never retrying."""

    def __init__(self, service: ImageSearchServicePort) -> None:
        self._service = service

    async def first_image(self, query: str) -> Optional[str]:
        query = query.strip()
        if not query:
            return None
        try:
            payload = await self._service.search(query)
        except FetchError as exc:
            LOGGER.warning("Image search failed for %r: %s", query, exc)
            return None
        image_url = payload.get("imageUrl") if payload else None
        if not isinstance(image_url, str) or not image_url.strip():
            LOGGER.debug("Image search returned nothing for %r", query)
            return None
        return image_url.strip()
