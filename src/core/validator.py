"""HEAD-based refinement of direct-image detection.

All probes for a batch run concurrently; results are merged back into the
collection from a single place after every probe has finished.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from core.collection import LinkCollection
from core.config import HttpConfig, ValidatorConfig
from core.errors import FetchError
from core.extractor import is_absolute_url
from core.ports import HttpPort

LOGGER = logging.getLogger(__name__)


def _content_type(headers) -> str:
    for key, value in headers.items():
        if key.lower() == "content-type":
            return value.strip().lower()
    return ""


class ContentTypeValidator:
    """Flags links whose HEAD response advertises an image content type."""

    def __init__(
        self,
        http: HttpPort,
        http_config: Optional[HttpConfig] = None,
        config: Optional[ValidatorConfig] = None,
    ) -> None:
        self._http = http
        self._http_config = http_config or HttpConfig()
        self._config = config or ValidatorConfig()

    async def _probe(self, url: str, semaphore: Optional[asyncio.Semaphore]) -> bool:
        try:
            if semaphore is None:
                response = await self._http.head(url, self._http_config.head_timeout)
            else:
                async with semaphore:
                    response = await self._http.head(url, self._http_config.head_timeout)
        except FetchError as exc:
            LOGGER.warning("HEAD request failed for %s: %s", url, exc)
            return False
        except Exception:
            LOGGER.exception("Unexpected error during HEAD for %s", url)
            return False

        if not response.ok:
            LOGGER.debug("HEAD for %s returned %s, inconclusive", url, response.status)
            return False
        content_type = _content_type(response.headers)
        if content_type.startswith("image/"):
            LOGGER.info("HEAD indicates image for %s (%s)", url, content_type)
            return True
        LOGGER.debug("HEAD Content-Type for %s: %s", url, content_type or "<none>")
        return False

    async def validate(self, collection: LinkCollection) -> int:
        """Probe every non-image record once; return how many were flipped."""

        pending = [
            index
            for index, record in enumerate(collection)
            if not record.is_image and is_absolute_url(record.url)
        ]
        if not pending:
            return 0

        workers = self._config.max_workers
        semaphore = asyncio.Semaphore(workers) if workers else None
        results = await asyncio.gather(
            *(self._probe(collection[index].url, semaphore) for index in pending)
        )

        flipped = 0
        for index, is_image in zip(pending, results):
            if is_image:
                collection.mark_image(index)
                flipped += 1
        return flipped
