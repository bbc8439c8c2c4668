"""Resolve natural keys (tenant email, unit id) to target-system entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import ResolutionMiss
from .listing_cache import ListingCache, LookedUp, NotLookedUp

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .model import ContactEntity, ListingEntity, TenantRecord
    from .ports import RelationshipGraph

log = getLogger(__name__)

DEFAULT_LISTING_CHUNK_SIZE = 100


@dataclass(slots=True)
class EntityResolver:
    graph: RelationshipGraph
    listing_chunk_size: int = DEFAULT_LISTING_CHUNK_SIZE
    cache: ListingCache = field(default_factory=ListingCache)

    async def resolve_contact(self, tenant: TenantRecord) -> ContactEntity | None:
        email = (tenant.email or "").strip()
        if not email:
            return None
        return await self.graph.find_contact_by_email(email)

    async def resolve_listing(
        self, unit_id: str | None, cache: ListingCache | None = None
    ) -> ListingEntity | None:
        if not unit_id:
            return None
        active_cache = cache if cache is not None else self.cache
        match active_cache.get(unit_id):
            case LookedUp(listing=listing):
                return listing
            case NotLookedUp():
                listing = await self.graph.find_listing_by_unit_id(unit_id)
                active_cache.store(unit_id, listing)
                return listing

    async def require_contact(self, tenant: TenantRecord) -> ContactEntity:
        contact = await self.resolve_contact(tenant)
        if contact is None:
            raise ResolutionMiss("contact", tenant.email)
        return contact

    async def require_listing(
        self, unit_id: str | None, cache: ListingCache | None = None
    ) -> ListingEntity:
        listing = await self.resolve_listing(unit_id, cache)
        if listing is None:
            raise ResolutionMiss("listing", unit_id)
        return listing

    async def resolve_listings_by_unit_ids(
        self, unit_ids: Iterable[str | None], cache: ListingCache | None = None
    ) -> int:
        """Prime the cache for ``unit_ids`` with one batched request per chunk.

        Only listings the batch actually returns are cached; units it omits stay
        unresolved so the single-lookup path still decides them. Blank ids are
        left to ``resolve_listing`` as well.
        """

        active_cache = cache if cache is not None else self.cache
        pending = _dedupe(
            unit_id
            for unit_id in unit_ids
            if unit_id and isinstance(active_cache.get(unit_id), NotLookedUp)
        )
        primed = 0
        for chunk in _chunks(pending, self.listing_chunk_size):
            listings = await self.graph.find_listings_by_unit_ids(chunk)
            requested = set(chunk)
            primed += active_cache.prime(
                listing for listing in listings if listing.unit_id in requested
            )
            log.debug("Batch listing lookup: requested=%s found=%s", len(chunk), len(listings))
        return primed


def _dedupe(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _chunks(values: list[str], size: int) -> Iterable[list[str]]:
    if size <= 0:
        raise ValueError("Chunk size must be positive")
    for index in range(0, len(values), size):
        yield values[index : index + size]
