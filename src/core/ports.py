"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for message sources, HTTP access and the
external lookup services so that the core can be reused with different
backends.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from core.models import Coordinate, FetchResponse, HeadResponse, RawMessage


class MessageSourcePort(Protocol):
    """Delivers the current message batch, optionally filtered by sender."""

    async def fetch(self, filter_id: Optional[str] = None) -> list[RawMessage]:
        ...


class HttpPort(Protocol):
    """HTTP operations required by the validator, resolver and gatherer.

    Implementations follow redirects on GET and raise FetchError on transport
    failures. Non-2xx statuses are returned, not raised.
    """

    async def get(self, url: str, headers: Mapping[str, str], timeout: float) -> FetchResponse:
        ...

    async def head(self, url: str, timeout: float) -> HeadResponse:
        ...


class GeocodingServicePort(Protocol):
    async def search(self, address: str, country_restricted: bool) -> Sequence[Coordinate]:
        ...


class ImageSearchServicePort(Protocol):
    async def search(self, query: str) -> Mapping[str, Any]:
        ...


class MessageSenderPort(Protocol):
    async def send(self, group_id: str, text: str) -> None:
        ...
