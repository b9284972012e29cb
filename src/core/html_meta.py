"""HTML metadata extraction for preview images."""

from __future__ import annotations

from typing import List, Optional, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup


class PageMetadata:
    """Parsed view of one HTML page.

    Meta tags are matched on either the ``property`` or the ``name``
    attribute; pages use both spellings for Open Graph and Twitter cards.

    Raw bytes are decoded by BeautifulSoup itself, using ``encoding`` (the
    HTTP charset) first and the page's own ``<meta charset>`` otherwise.
    """

    def __init__(self, markup: Union[str, bytes], encoding: Optional[str] = None) -> None:
        if isinstance(markup, bytes):
            self._soup = BeautifulSoup(markup, "html.parser", from_encoding=encoding)
        else:
            self._soup = BeautifulSoup(markup, "html.parser")

    def meta_content(self, key: str) -> Optional[str]:
        key = key.lower()
        for meta in self._soup.find_all("meta"):
            prop = (meta.get("property") or meta.get("name") or "").strip().lower()
            if prop != key:
                continue
            content = (meta.get("content") or "").strip()
            if content:
                return content
        return None

    @property
    def og_image(self) -> Optional[str]:
        return self.meta_content("og:image")

    @property
    def twitter_image(self) -> Optional[str]:
        return self.meta_content("twitter:image")

    @property
    def title(self) -> Optional[str]:
        tag = self._soup.find("title")
        if tag is None:
            return None
        text = tag.get_text().strip()
        return text or None

    def preview_label(self, fallback_host: Optional[str]) -> str:
        """og:site_name, then og:title, then <title>, then the host."""

        label = (
            self.meta_content("og:site_name")
            or self.meta_content("og:title")
            or self.title
            or fallback_host
            or ""
        )
        return label.strip()

    def image_sources(self) -> List[str]:
        sources: List[str] = []
        for tag in self._soup.find_all("img"):
            src = (tag.get("src") or "").strip()
            if src:
                sources.append(src)
        return sources


def absolute_url(raw: str, base_url: str) -> str:
    """Resolve absolute, scheme-relative and relative references against base_url."""

    return urljoin(base_url, raw.strip())
