"""User-chosen display names for message senders."""

from __future__ import annotations

from typing import Iterable, List, Mapping, Optional

from core.models import LinkRecord


class DisplayNameDirectory:
    """Maps sender ids to display names, falling back to the source's name.

    An empty override is kept as a placeholder and behaves like no override.
    """

    def __init__(self, overrides: Optional[Mapping[str, str]] = None) -> None:
        self._overrides: dict[str, str] = dict(overrides or {})

    @property
    def overrides(self) -> dict[str, str]:
        return dict(self._overrides)

    def set_override(self, sender_id: str, name: str) -> None:
        self._overrides[sender_id] = name

    def remove_override(self, sender_id: str) -> None:
        self._overrides.pop(sender_id, None)

    def display_name(self, sender_id: Optional[str], fallback: str) -> str:
        if not sender_id:
            return fallback
        return self._overrides.get(sender_id) or fallback

    def discover(self, records: Iterable[LinkRecord]) -> List[str]:
        """Register unseen sender ids with an empty name; return the new ids."""

        added: List[str] = []
        for record in records:
            sender_id = (record.sender_id or "").strip()
            if not sender_id or sender_id in self._overrides:
                continue
            self._overrides[sender_id] = ""
            added.append(sender_id)
        return added
