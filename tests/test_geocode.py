from __future__ import annotations

import asyncio

from core.errors import FetchError
from core.geocode import GeocodeClient
from core.models import Coordinate


class FakeGeocodingService:
    def __init__(self, answers) -> None:
        self.answers = list(answers)
        self.calls: list[tuple[str, bool]] = []

    async def search(self, address: str, country_restricted: bool):
        self.calls.append((address, country_restricted))
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


def test_restricted_hit_needs_no_retry() -> None:
    service = FakeGeocodingService([[Coordinate(35.0, 139.0), Coordinate(1.0, 1.0)]])
    assert asyncio.run(GeocodeClient(service).locate("東京都港区")) == Coordinate(35.0, 139.0)
    assert service.calls == [("東京都港区", True)]


def test_empty_result_retries_without_country() -> None:
    service = FakeGeocodingService([[], [Coordinate(48.85, 2.35)]])
    assert asyncio.run(GeocodeClient(service).locate("Paris")) == Coordinate(48.85, 2.35)
    assert service.calls == [("Paris", True), ("Paris", False)]


def test_two_empty_results_give_none() -> None:
    service = FakeGeocodingService([[], []])
    assert asyncio.run(GeocodeClient(service).locate("nowhere")) is None
    assert len(service.calls) == 2


def test_transport_failure_ends_lookup() -> None:
    service = FakeGeocodingService([FetchError("https://geo.example.com", "timed out")])
    assert asyncio.run(GeocodeClient(service).locate("Kyoto")) is None
    assert len(service.calls) == 1


def test_service_receives_normalized_address() -> None:
    service = FakeGeocodingService([[Coordinate(35.8, 139.4)]])
    asyncio.run(GeocodeClient(service).locate("〒358-0014 埼玉県入間市宮寺"))
    query = service.calls[0][0]
    assert "〒" not in query
    assert "358-0014" not in query
    assert query == "埼玉県入間市宮寺"


def test_blank_address_skips_service() -> None:
    service = FakeGeocodingService([])
    assert asyncio.run(GeocodeClient(service).locate("〒 ")) is None
    assert service.calls == []
