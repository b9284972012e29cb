"""URL discovery over free-form message text (core domain)."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional
from urllib.parse import urlsplit

from core.models import LinkRecord, RawMessage

LOGGER = logging.getLogger(__name__)

# A scheme (or a bare "www.") followed by RFC 3986 characters. Anything outside
# that set, including CJK text glued to the URL, ends the match.
_CANDIDATE_RE = re.compile(
    r"(?:(?<![A-Za-z0-9+.\-])[A-Za-z][A-Za-z0-9+.\-]*://|(?<![A-Za-z0-9.\-])www\.)"
    r"[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]+",
)

_TRAILING_PUNCTUATION = ".,;:!?'*"
_CLOSERS = {")": "(", "]": "["}


def _trim_trailing(candidate: str) -> str:
    while candidate:
        last = candidate[-1]
        if last in _TRAILING_PUNCTUATION:
            candidate = candidate[:-1]
            continue
        opener = _CLOSERS.get(last)
        if opener and candidate.count(opener) < candidate.count(last):
            candidate = candidate[:-1]
            continue
        break
    return candidate


def normalize_candidate(candidate: str) -> Optional[str]:
    """Return an absolute URL for a scanned candidate, or None if malformed."""

    candidate = _trim_trailing(candidate)
    if candidate.lower().startswith("www."):
        candidate = f"http://{candidate}"
    try:
        parts = urlsplit(candidate)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    host = parts.hostname or ""
    if not host or host.startswith(".") or host.endswith("."):
        return None
    return candidate


def find_urls(text: str) -> List[str]:
    """Return every absolute URL in text, in order of appearance."""

    urls: List[str] = []
    for match in _CANDIDATE_RE.finditer(text):
        url = normalize_candidate(match.group(0))
        if url:
            urls.append(url)
    return urls


def is_absolute_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


def extract_links(messages: Iterable[RawMessage]) -> List[LinkRecord]:
    """Build one LinkRecord per URL occurrence.

    Order follows message order, then match order inside a message. Repeated
    URLs are kept as independent records.
    """

    records: List[LinkRecord] = []
    for message in messages:
        for url in find_urls(message.text):
            records.append(
                LinkRecord(
                    url=url,
                    sender_name=message.sender_name,
                    sender_id=message.sender_id,
                    timestamp=message.timestamp,
                )
            )
            LOGGER.debug("Detected link %s from %s", url, message.sender_name)
    return records
