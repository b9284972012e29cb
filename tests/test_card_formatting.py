from __future__ import annotations

from rich.table import Table

from adapters.card_formatting import build_rows, build_table, clip, link_kind, preview_label, record_to_dict
from core.display_names import DisplayNameDirectory
from core.models import LinkRecord


def _record(**kwargs) -> LinkRecord:
    defaults = {"url": "https://example.com/a", "sender_name": "Alice", "sender_id": "U1", "timestamp": 1_700_000_000_000}
    defaults.update(kwargs)
    return LinkRecord(**defaults)


def test_kind_and_label() -> None:
    image = _record(url="https://example.com/p.jpg", is_image=True)
    preview = _record(preview_image_url="https://cdn.example.com/og.jpg", preview_image_source="Site")
    bare = _record()

    assert [link_kind(record) for record in (image, preview, bare)] == ["image", "preview", "link"]
    assert preview_label(image) == "https://example.com/p.jpg"
    assert preview_label(preview) == "Site"
    assert preview_label(_record(preview_image_url="https://cdn.example.com/x.jpg")) == "https://cdn.example.com/x.jpg"
    assert preview_label(bare) == "-"


def test_rows_use_display_name_overrides() -> None:
    names = DisplayNameDirectory({"U1": "Mom", "U2": ""})
    rows = build_rows([_record(), _record(sender_id="U2", sender_name="Bob"), _record(sender_id=None, sender_name="Anon")], names)

    assert [row.sender for row in rows] == ["Mom", "Bob", "Anon"]
    assert rows[0].posted_at.startswith("2023-11-1")


def test_clip() -> None:
    assert clip("short") == "short"
    assert clip("x" * 70, limit=10) == "xxxxxxx..."


def test_record_to_dict_and_table() -> None:
    record = _record(preview_image_url="https://cdn.example.com/og.jpg", preview_image_source="Site")
    payload = record_to_dict(record)
    assert payload["id"] == record.id
    assert payload["preview_image_source"] == "Site"
    assert payload["is_image"] is False

    table = build_table(build_rows([record]), title="Trip")
    assert isinstance(table, Table)
    assert table.row_count == 1
    assert table.title == "Trip"
