from __future__ import annotations

from core.collection import LinkCollection
from core.models import LinkRecord, Resolution


def _collection() -> LinkCollection:
    return LinkCollection(
        [
            LinkRecord(url="https://example.com/a", sender_name="Alice", sender_id="u1", timestamp=1),
            LinkRecord(url="https://example.com/b", sender_name="Bob", sender_id="u2", timestamp=2),
        ]
    )


def test_resolution_is_written_once() -> None:
    collection = _collection()
    assert collection.record_resolution(0, Resolution("https://img/1.jpg", "Site"))
    assert not collection.record_resolution(0, Resolution("https://img/2.jpg", "Other"))
    assert collection[0].preview_image_url == "https://img/1.jpg"
    assert collection[0].preview_image_source == "Site"
    assert collection[0].has_preview


def test_override_replaces_and_clears() -> None:
    collection = _collection()
    record_id = collection[1].id
    collection.record_resolution(1, Resolution("https://img/auto.jpg", "Auto"))

    assert collection.apply_override(record_id, "https://img/manual.jpg", "手動")
    assert collection.find(record_id).preview_image_url == "https://img/manual.jpg"

    assert collection.apply_override(record_id, None, None)
    assert collection.find(record_id).preview_image_url is None
    assert collection.find(record_id).preview_image_source is None


def test_unknown_id_is_rejected() -> None:
    collection = _collection()
    assert not collection.apply_override("missing", "https://img/x.jpg", "手動")
    assert collection.index_of("missing") is None
    assert collection.find("missing") is None


def test_mark_image_and_iteration_snapshot() -> None:
    collection = _collection()
    collection.mark_image(1)
    assert [record.is_image for record in collection] == [False, True]
    assert len(collection) == 2
    assert collection.records() is not collection.records()
