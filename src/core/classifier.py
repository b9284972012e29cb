"""Cheap direct-image detection by file extension."""

from __future__ import annotations

import posixpath
from typing import Iterable
from urllib.parse import urlsplit

from core.models import LinkRecord

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "webp", "bmp", "heic", "heif"})


def path_extension(url: str) -> str:
    """Return the lower-cased extension of the last path segment, or ""."""

    try:
        path = urlsplit(url).path
    except ValueError:
        return ""
    _, ext = posixpath.splitext(posixpath.basename(path))
    return ext[1:].lower()


def has_image_extension(url: str) -> bool:
    return path_extension(url) in IMAGE_EXTENSIONS


def classify_links(records: Iterable[LinkRecord]) -> None:
    """Flag records whose URL points straight at an image file."""

    for record in records:
        if has_image_extension(record.url):
            record.is_image = True
