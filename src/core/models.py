"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any message-source or HTTP-library specific types.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Mapping, Optional


@dataclass(frozen=True)
class RawMessage:
    """One chat message as delivered by a message source."""

    sender_id: Optional[str]
    sender_name: str
    text: str
    timestamp: int
    group_id: Optional[str] = None


@dataclass
class LinkRecord:
    """A single detected URL occurrence plus its preview resolution state."""

    url: str
    sender_name: str
    sender_id: Optional[str]
    timestamp: int
    is_image: bool = False
    preview_image_url: Optional[str] = None
    preview_image_source: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def has_preview(self) -> bool:
        return self.preview_image_url is not None


@dataclass(frozen=True)
class Resolution:
    """Outcome of one successful fallback stage."""

    image_url: str
    label: str


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class HeadResponse:
    status: int
    headers: Mapping[str, str]

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass(frozen=True)
class FetchResponse:
    """Result of a GET, after redirects have been followed."""

    status: int
    headers: Mapping[str, str]
    body: bytes
    final_url: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def charset(self) -> Optional[str]:
        """charset parameter of the Content-Type header, if any."""

        for key, value in self.headers.items():
            if key.lower() != "content-type":
                continue
            for param in value.split(";")[1:]:
                name, _, charset = param.partition("=")
                if name.strip().lower() == "charset" and charset.strip():
                    return charset.strip().strip('"').lower()
        return None

    def text(self) -> str:
        try:
            return self.body.decode(self.charset or "utf-8", errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")
