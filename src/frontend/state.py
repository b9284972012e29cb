"""State container for the link browser."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class BrowserState:
    loading: bool = False
    error: str | None = None
    status: str = ""


@dataclass(frozen=True)
class PreviewChoice:
    """A preview picked in the candidate modal; image_url None clears it."""

    record_id: str
    image_url: str | None
    label: str | None
