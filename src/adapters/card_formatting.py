"""Shared link card formatting helpers.

Keeping formatting here prevents drift between the CLI and the TUI so both
show the same labels for a link.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from rich.table import Table

from core.display_names import DisplayNameDirectory
from core.models import LinkRecord


@dataclass(frozen=True)
class CardRow:
    record_id: str
    posted_at: str
    sender: str
    kind: str
    preview: str
    url: str


def format_timestamp(timestamp_ms: int) -> str:
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return moment.astimezone().strftime("%Y-%m-%d %H:%M")


def link_kind(record: LinkRecord) -> str:
    if record.is_image:
        return "image"
    if record.preview_image_url:
        return "preview"
    return "link"


def preview_label(record: LinkRecord) -> str:
    """Label shown under a card; direct images use their own URL."""

    if record.is_image:
        return record.url
    if record.preview_image_source:
        return record.preview_image_source
    if record.preview_image_url:
        return record.preview_image_url
    return "-"


def clip(value: str, limit: int = 64) -> str:
    if len(value) <= limit:
        return value
    return value[: limit - 3] + "..."


def build_rows(
    records: Iterable[LinkRecord],
    names: Optional[DisplayNameDirectory] = None,
) -> List[CardRow]:
    names = names or DisplayNameDirectory()
    return [
        CardRow(
            record_id=record.id,
            posted_at=format_timestamp(record.timestamp),
            sender=names.display_name(record.sender_id, record.sender_name),
            kind=link_kind(record),
            preview=preview_label(record),
            url=record.url,
        )
        for record in records
    ]


def record_to_dict(record: LinkRecord) -> dict:
    return {
        "id": record.id,
        "url": record.url,
        "sender_name": record.sender_name,
        "sender_id": record.sender_id,
        "timestamp": record.timestamp,
        "is_image": record.is_image,
        "preview_image_url": record.preview_image_url,
        "preview_image_source": record.preview_image_source,
    }


def build_table(rows: Iterable[CardRow], title: str = "Links") -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("posted", no_wrap=True)
    table.add_column("sender")
    table.add_column("kind", no_wrap=True)
    table.add_column("preview")
    table.add_column("url", overflow="fold")
    for row in rows:
        table.add_row(row.posted_at, row.sender, row.kind, clip(row.preview, 40), row.url)
    return table
