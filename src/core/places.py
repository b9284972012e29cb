"""Map and address helpers used by the fallback stages.

Map links usually carry either coordinates or a free-text address in their
final (post-redirect) URL. These helpers pull both out and turn them into a
static map image plus a short display label.
"""

from __future__ import annotations

import re
from typing import List, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit

from core.config import StaticMapConfig
from core.models import Coordinate

POSTAL_MARK = "〒"
ADDRESS_WORD = "住所"

_NUMBER = r"([0-9+\-.]+)"
_COORDINATE_PATTERNS = [
    re.compile(rf"@{_NUMBER},{_NUMBER},", re.IGNORECASE),
    re.compile(rf"[?&]q={_NUMBER},{_NUMBER}", re.IGNORECASE),
    re.compile(rf"[?&]ll={_NUMBER},{_NUMBER}", re.IGNORECASE),
]

# U+2212 MINUS SIGN and U+FF0D FULLWIDTH HYPHEN-MINUS both show up in
# Japanese addresses.
_HYPHEN_TRANSLATION = str.maketrans({"\u2212": "-", "\uff0d": "-"})
_POSTAL_CODE_RE = re.compile(r"[0-9]{3}-?[0-9]{4}")
_WHITESPACE_RE = re.compile(r"\s+")
_PLACE_SEPARATOR_RE = re.compile(r"[+\u3000]+")
_PLACE_TOKEN_RE = re.compile(r"[ ,]")
_DISPLAY_TOKEN_RE = re.compile(r"[ /,、\u3000]")
_DIGITS_RE = re.compile(r"^[0-9]+$")


def extract_coordinates(url: str) -> Optional[Coordinate]:
    """Find a lat/lon pair in a map-style URL (@lat,lon, ?q=lat,lon, ?ll=lat,lon)."""

    for pattern in _COORDINATE_PATTERNS:
        match = pattern.search(url)
        if not match:
            continue
        try:
            return Coordinate(float(match.group(1)), float(match.group(2)))
        except ValueError:
            continue
    return None


def extract_query_param(url: str, name: str) -> Optional[str]:
    """Return the decoded value of the first query parameter called name."""

    try:
        query = urlsplit(url).query
    except ValueError:
        return None
    for key, value in parse_qsl(query, keep_blank_values=True):
        if key == name:
            return value
    return None


def build_static_map_url(coordinate: Coordinate, config: StaticMapConfig) -> str:
    center = f"{coordinate.latitude},{coordinate.longitude}"
    query = urlencode(
        {
            "center": center,
            "zoom": config.zoom,
            "size": config.size,
            "markers": f"{center},{config.marker}",
        },
        safe=",",
    )
    return f"{config.base_url}?{query}"


def coordinate_label(coordinate: Coordinate) -> str:
    return f"地図 {coordinate.latitude:.5f},{coordinate.longitude:.5f}"


def strip_postal_codes(text: str) -> str:
    text = text.replace(POSTAL_MARK, "").translate(_HYPHEN_TRANSLATION)
    return _POSTAL_CODE_RE.sub("", text)


def normalize_address(address: str) -> str:
    """Prepare an address for geocoding.

    Drops the postal mark and postal code, maps full-width hyphens to ASCII and
    collapses whitespace runs.
    """

    normalized = strip_postal_codes(address)
    return _WHITESPACE_RE.sub(" ", normalized).strip()


def extract_place_term(address: str) -> str:
    """Reduce an address to its first few place tokens for an image search."""

    term = strip_postal_codes(address)
    term = _PLACE_SEPARATOR_RE.sub(" ", term).strip()
    tokens = [token for token in _PLACE_TOKEN_RE.split(term) if token]
    return " ".join(tokens[:4])


def format_place_display_name(raw: str) -> str:
    """Shorten a place or address string into a card label."""

    text = strip_postal_codes(raw)
    for separator in ("(", "（", ","):
        text = text.split(separator, 1)[0]
    text = text.replace(ADDRESS_WORD, "").strip()

    tokens = [token.strip() for token in _DISPLAY_TOKEN_RE.split(text)]
    tokens = [token for token in tokens if token]
    if not tokens:
        return text
    tail = tokens[-3:]
    named: List[str] = [token for token in tail if not _DIGITS_RE.match(token)]
    return " ".join(named or tail)
