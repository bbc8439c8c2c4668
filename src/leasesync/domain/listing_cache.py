"""Run-scoped memo of unit id -> listing lookups."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .model import ListingEntity


class NotLookedUp(Enum):
    """Marker for a unit that has not been queried during this run."""

    TOKEN = "not-looked-up"


NOT_LOOKED_UP = NotLookedUp.TOKEN


@dataclass(frozen=True, slots=True)
class LookedUp:
    """Result of a completed lookup; ``listing`` is ``None`` when the unit has none."""

    listing: ListingEntity | None


type ListingLookup = NotLookedUp | LookedUp


@dataclass(slots=True)
class ListingCache:
    _entries: dict[str, LookedUp] = field(default_factory=dict)

    def get(self, unit_id: str) -> ListingLookup:
        return self._entries.get(unit_id, NOT_LOOKED_UP)

    def store(self, unit_id: str, listing: ListingEntity | None) -> LookedUp:
        entry = LookedUp(listing)
        self._entries[unit_id] = entry
        return entry

    def prime(self, listings: Iterable[ListingEntity]) -> int:
        """Record found listings from a batched lookup; returns how many were stored."""

        stored = 0
        for listing in listings:
            self.store(listing.unit_id, listing)
            stored += 1
        return stored
