"""The in-memory link collection shared by one pipeline run.

The collection is owned by the caller and handed to each stage. Every write
goes through an index-based update here so concurrent stages never
read-modify-write a record behind another stage's back.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional

from core.models import LinkRecord, Resolution

LOGGER = logging.getLogger(__name__)


class LinkCollection:
    """Ordered LinkRecords for the current batch."""

    def __init__(self, records: Optional[Iterable[LinkRecord]] = None) -> None:
        self._records: List[LinkRecord] = list(records or [])

    def __iter__(self) -> Iterator[LinkRecord]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, index: int) -> LinkRecord:
        return self._records[index]

    def records(self) -> List[LinkRecord]:
        return list(self._records)

    def index_of(self, record_id: str) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        return None

    def find(self, record_id: str) -> Optional[LinkRecord]:
        index = self.index_of(record_id)
        if index is None:
            return None
        return self._records[index]

    def mark_image(self, index: int) -> None:
        """Set is_image. The flag never goes back to False."""

        self._records[index].is_image = True

    def record_resolution(self, index: int, resolution: Resolution) -> bool:
        """Store a resolver result unless the record already has a preview."""

        record = self._records[index]
        if record.preview_image_url is not None:
            LOGGER.debug("Preview already set for %s, keeping it", record.url)
            return False
        record.preview_image_url = resolution.image_url
        record.preview_image_source = resolution.label
        return True

    def apply_override(self, record_id: str, image_url: Optional[str], label: Optional[str]) -> bool:
        """Manual preview override chosen by the user.

        Returns False when the id is not part of this batch.
        """

        index = self.index_of(record_id)
        if index is None:
            return False
        record = self._records[index]
        record.preview_image_url = image_url
        record.preview_image_source = label
        LOGGER.info("Preview override applied for %s", record.url)
        return True
