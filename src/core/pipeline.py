"""Core link pipeline.

This module is integration-agnostic. It only relies on ports for the message
source and HTTP access, enabling other frontends or adapters without changes
here.

One refresh runs the stages in a strict order:
1) Fetch the message batch (a failed fetch counts as an empty batch)
2) Extract one LinkRecord per URL occurrence
3) Flag direct images by extension
4) HEAD-validate the remaining links concurrently
5) Resolve previews for links that are still not images
"""

from __future__ import annotations

import logging
from typing import List, Optional

from core.candidates import CandidateGatherer
from core.classifier import classify_links
from core.collection import LinkCollection
from core.errors import MessageFetchError
from core.extractor import extract_links
from core.models import LinkRecord, RawMessage
from core.ports import MessageSourcePort
from core.resolver import MetadataResolver
from core.validator import ContentTypeValidator

LOGGER = logging.getLogger(__name__)


class LinkPipeline:
    """Orchestrates extraction, validation and preview resolution.

    Callers must not overlap two refreshes on the same pipeline.
    """

    def __init__(
        self,
        source: MessageSourcePort,
        validator: ContentTypeValidator,
        resolver: MetadataResolver,
        gatherer: CandidateGatherer,
    ) -> None:
        self._source = source
        self._validator = validator
        self._resolver = resolver
        self._gatherer = gatherer
        self.is_loading = False
        self.messages: List[RawMessage] = []

    async def _load_messages(self, filter_id: Optional[str]) -> List[RawMessage]:
        try:
            return await self._source.fetch(filter_id)
        except MessageFetchError as exc:
            LOGGER.warning("Message fetch failed, treating batch as empty: %s", exc)
            return []

    async def refresh(self, filter_id: Optional[str] = None) -> LinkCollection:
        """Build a fresh, enriched collection from the current message batch."""

        self.is_loading = True
        try:
            self.messages = await self._load_messages(filter_id)
            records = extract_links(self.messages)
            classify_links(records)
            collection = LinkCollection(records)
            LOGGER.info("Extracted %s links from %s messages", len(collection), len(self.messages))
        finally:
            self.is_loading = False

        flipped = await self._validator.validate(collection)
        resolved = await self._resolver.resolve(collection)
        LOGGER.info("Refresh complete: links=%s, images=%s, previews=%s", len(collection), flipped, resolved)
        return collection

    async def candidates(self, record: LinkRecord, query: Optional[str] = None) -> List[str]:
        return await self._gatherer.gather(record, query)

    @staticmethod
    def apply_override(
        collection: LinkCollection,
        record_id: str,
        image_url: Optional[str],
        label: Optional[str],
    ) -> bool:
        """Manual preview override; lost on the next refresh unless persisted elsewhere."""

        return collection.apply_override(record_id, image_url, label)
