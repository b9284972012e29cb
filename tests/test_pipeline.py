from __future__ import annotations

import asyncio

import httpx

from adapters.telegram_source import TelegramMessageSource
from adapters.webhook_source import WebhookMessageSource
from core.candidates import CandidateGatherer
from core.config import ApiConfig
from core.errors import FetchError, MessageFetchError
from core.geocode import GeocodeClient
from core.image_search import ImageSearchClient
from core.models import FetchResponse, HeadResponse, RawMessage
from core.pipeline import LinkPipeline
from core.resolver import MetadataResolver, default_strategies
from core.validator import ContentTypeValidator


class FakeSource:
    def __init__(self, messages=None, error: Exception | None = None) -> None:
        self.messages = list(messages or [])
        self.error = error
        self.filters: list = []

    async def fetch(self, filter_id=None):
        self.filters.append(filter_id)
        if self.error:
            raise self.error
        return list(self.messages)


class FakeHttp:
    def __init__(self, pages=None, heads=None) -> None:
        self.pages = pages or {}
        self.heads = heads or {}
        self.get_calls: list[str] = []
        self.head_calls: list[str] = []

    async def get(self, url, headers, timeout):
        self.get_calls.append(url)
        if url not in self.pages:
            raise FetchError(url, "no route")
        return self.pages[url]

    async def head(self, url, timeout):
        self.head_calls.append(url)
        if url not in self.heads:
            raise FetchError(url, "no route")
        return self.heads[url]


class EmptyGeocodingService:
    async def search(self, address, country_restricted):
        return []


class EmptyImageSearchService:
    async def search(self, query):
        return {}


def _pipeline(source, http) -> LinkPipeline:
    image_search = ImageSearchClient(EmptyImageSearchService())
    strategies = default_strategies(GeocodeClient(EmptyGeocodingService()), image_search)
    return LinkPipeline(
        source=source,
        validator=ContentTypeValidator(http),
        resolver=MetadataResolver(http, strategies),
        gatherer=CandidateGatherer(http, image_search),
    )


def _message(text: str, timestamp: int = 1_700_000_000_000) -> RawMessage:
    return RawMessage(sender_id="u1", sender_name="Alice", text=text, timestamp=timestamp, group_id="C1")


def test_refresh_end_to_end() -> None:
    map_url = "https://maps.example.com/@35.0,135.0,14z"
    source = FakeSource(
        [
            _message("Look https://example.com/photo.jpg"),
            _message(f"Meet here {map_url}", timestamp=1_700_000_001_000),
        ]
    )
    http = FakeHttp(
        pages={map_url: FetchResponse(status=200, headers={}, body=b"<html></html>", final_url=map_url)},
        heads={map_url: HeadResponse(status=200, headers={"Content-Type": "text/html"})},
    )
    pipeline = _pipeline(source, http)

    collection = asyncio.run(pipeline.refresh())

    assert len(collection) == 2
    photo, place = collection[0], collection[1]
    assert photo.is_image is True
    assert photo.preview_image_url is None
    assert place.is_image is False
    assert "center=35.0,135.0" in place.preview_image_url
    assert place.preview_image_source == "地図 35.00000,135.00000"
    assert http.head_calls == [map_url]
    assert http.get_calls == [map_url]
    assert pipeline.is_loading is False
    assert len(pipeline.messages) == 2


def test_head_detected_image_is_not_resolved() -> None:
    url = "https://example.com/render?id=1"
    source = FakeSource([_message(url)])
    http = FakeHttp(heads={url: HeadResponse(status=200, headers={"Content-Type": "image/webp"})})

    collection = asyncio.run(_pipeline(source, http).refresh())

    assert collection[0].is_image is True
    assert http.get_calls == []


def test_message_fetch_failure_is_an_empty_batch() -> None:
    source = FakeSource(error=MessageFetchError("HTTP 500", status=500))
    pipeline = _pipeline(source, FakeHttp())

    collection = asyncio.run(pipeline.refresh("U123"))

    assert len(collection) == 0
    assert source.filters == ["U123"]
    assert pipeline.is_loading is False
    assert pipeline.messages == []


def test_each_refresh_builds_new_records() -> None:
    source = FakeSource([_message("https://example.com/a https://example.com/a")])
    pipeline = _pipeline(source, FakeHttp())

    first = asyncio.run(pipeline.refresh())
    second = asyncio.run(pipeline.refresh())

    assert [record.url for record in first] == ["https://example.com/a", "https://example.com/a"]
    assert {record.id for record in first}.isdisjoint({record.id for record in second})


def test_candidates_and_override() -> None:
    url = "https://example.com/page"
    source = FakeSource([_message(url)])
    http = FakeHttp(
        pages={
            url: FetchResponse(
                status=200,
                headers={},
                body=b'<img src="/a.png"><img src="/b.png">',
                final_url=url,
            )
        }
    )
    pipeline = _pipeline(source, http)
    collection = asyncio.run(pipeline.refresh())
    record = collection[0]

    candidates = asyncio.run(pipeline.candidates(record))
    assert candidates == ["https://example.com/a.png", "https://example.com/b.png"]
    assert record.preview_image_url is None

    assert LinkPipeline.apply_override(collection, record.id, candidates[1], "page")
    assert collection[0].preview_image_url == "https://example.com/b.png"
    assert collection[0].preview_image_source == "page"
    assert not LinkPipeline.apply_override(collection, "unknown", candidates[0], "page")


class DisconnectingTelegramClient:
    def is_connected(self) -> bool:
        return True

    async def get_entity(self, ref):
        return ref

    async def iter_messages(self, entity, limit: int):
        raise ConnectionError("connection lost")
        yield


def test_broken_telegram_history_is_an_empty_batch() -> None:
    source = TelegramMessageSource(DisconnectingTelegramClient(), ["@trip"])
    pipeline = _pipeline(source, FakeHttp())

    collection = asyncio.run(pipeline.refresh())

    assert len(collection) == 0
    assert pipeline.is_loading is False


def test_malformed_webhook_reply_is_an_empty_batch() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"message": "https://example.com", "timestamp": 1}])

    async def _refresh():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            pipeline = _pipeline(WebhookMessageSource(client, ApiConfig()), FakeHttp())
            return await pipeline.refresh(), pipeline

    collection, pipeline = asyncio.run(_refresh())

    assert len(collection) == 0
    assert pipeline.messages == []
