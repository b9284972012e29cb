"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_USER_AGENT = "tripcards/1.0 (+https://github.com/tripcards/tripcards)"


@dataclass(frozen=True)
class HttpConfig:
    """Timeouts used for page probes."""

    head_timeout: float = 5.0
    get_timeout: float = 6.0
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(frozen=True)
class ValidatorConfig:
    """Concurrency bound for HEAD validation. None means one task per link."""

    max_workers: Optional[int] = 8


@dataclass(frozen=True)
class ResolverConfig:
    """Metadata resolution settings."""

    max_previews: int = 6
    concurrency: int = 1
    accept: str = "text/html,application/xhtml+xml"


@dataclass(frozen=True)
class StaticMapConfig:
    base_url: str = "https://staticmap.openstreetmap.de/staticmap.php"
    zoom: int = 15
    size: str = "600x300"
    marker: str = "red-pushpin"


@dataclass(frozen=True)
class GeocodeConfig:
    """Nominatim query settings; country_codes is dropped on the relaxed retry."""

    base_url: str = "https://nominatim.openstreetmap.org/search"
    country_codes: str = "jp"
    language: str = "ja"
    timeout: float = 8.0
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(frozen=True)
class ImageSearchConfig:
    timeout: float = 8.0


@dataclass(frozen=True)
class CandidateConfig:
    max_candidates: int = 4


@dataclass(frozen=True)
class ApiConfig:
    """Webhook API that stores chat messages and proxies image search."""

    base_url: str = "https://line-trip-list-api.vercel.app/api"
    timeout: float = 10.0
