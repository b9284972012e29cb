"""Shared constants for the Textual UI."""

from __future__ import annotations

ACCENT = "#06C755"
MANUAL_LABEL = "手動"
