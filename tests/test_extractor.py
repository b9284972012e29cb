from __future__ import annotations

from core.extractor import extract_links, find_urls, is_absolute_url
from core.models import RawMessage


def _message(text: str, sender: str = "User-1234abcd", timestamp: int = 1_700_000_000_000) -> RawMessage:
    return RawMessage(
        sender_id=sender.lower(),
        sender_name=sender,
        text=text,
        timestamp=timestamp,
        group_id="C123",
    )


def test_no_urls_yields_empty_sequence() -> None:
    assert find_urls("明日は10時に集合です") == []
    assert extract_links([_message("no links here"), _message("")]) == []


def test_preserves_message_then_match_order() -> None:
    messages = [
        _message("first https://a.example.com/1 then https://b.example.com/2", sender="Alice"),
        _message("later https://c.example.com/3", sender="Bob", timestamp=1_700_000_000_500),
    ]
    records = extract_links(messages)
    assert [record.url for record in records] == [
        "https://a.example.com/1",
        "https://b.example.com/2",
        "https://c.example.com/3",
    ]
    assert records[2].sender_name == "Bob"
    assert records[2].sender_id == "bob"
    assert records[2].timestamp == 1_700_000_000_500


def test_duplicate_urls_are_independent_records() -> None:
    messages = [_message("https://example.com/x"), _message("again https://example.com/x")]
    records = extract_links(messages)
    assert len(records) == 2
    assert records[0].id != records[1].id
    assert all(not record.is_image and record.preview_image_url is None for record in records)


def test_url_ends_at_non_url_characters() -> None:
    assert find_urls("ここ→https://example.com/spot です") == ["https://example.com/spot"]
    assert find_urls("https://example.com/tour行きたい") == ["https://example.com/tour"]


def test_trailing_punctuation_is_trimmed() -> None:
    assert find_urls("See https://example.com/a.") == ["https://example.com/a"]
    assert find_urls("(https://example.com/b)") == ["https://example.com/b"]
    assert find_urls("https://en.example.org/wiki/Foo_(bar)!") == ["https://en.example.org/wiki/Foo_(bar)"]


def test_query_strings_and_www_links() -> None:
    urls = find_urls("map https://maps.example.com/?q=35.0,135.0&z=3 and www.example.jp/page")
    assert urls == ["https://maps.example.com/?q=35.0,135.0&z=3", "http://www.example.jp/page"]


def test_malformed_candidates_are_skipped() -> None:
    assert find_urls("broken http://. link") == []
    assert not is_absolute_url("/relative/path")
    assert is_absolute_url("https://example.com")
