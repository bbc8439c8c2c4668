"""Incremental and scoped retrieval of lease records.

Pagination uses a fixed page size; a short page ends the data. A hard page
ceiling, shared by every request of one fetch, stops runaway pagination and
returns what was gathered so far with a warning. Transport errors propagate unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .model import UnitDescriptor
from .observer import LoggingObserver

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Sequence
    from datetime import datetime

    from .model import LeaseRecord, ProcessingScope
    from .observer import EventMeta, LifecycleObserver
    from .ports import LeaseSource

    type PageFetcher = Callable[[int, int], Awaitable[list[LeaseRecord]]]

DEFAULT_PAGE_SIZE = 500
DEFAULT_MAX_PAGES = 100
DEFAULT_PROPERTY_CHUNK_SIZE = 5


@dataclass(slots=True)
class FetchResult:
    """Work set returned by the fetcher."""

    leases: list[LeaseRecord] = field(default_factory=list)
    pages: int = 0
    safety_limit_reached: bool = False

    def extend(self, other: FetchResult) -> None:
        self.leases.extend(other.leases)
        self.pages += other.pages
        self.safety_limit_reached = self.safety_limit_reached or other.safety_limit_reached


@dataclass(slots=True)
class _PageBudget:
    remaining: int
    exhausted: bool = False


@dataclass(slots=True)
class IncrementalFetcher:
    source: LeaseSource
    page_size: int = DEFAULT_PAGE_SIZE
    max_pages: int = DEFAULT_MAX_PAGES
    property_chunk_size: int = DEFAULT_PROPERTY_CHUNK_SIZE
    observer: LifecycleObserver = field(default_factory=LoggingObserver)

    def __post_init__(self) -> None:
        if self.page_size <= 0:
            raise ValueError("Page size must be positive")
        if self.max_pages <= 0:
            raise ValueError("Page ceiling must be positive")
        if self.property_chunk_size <= 0:
            raise ValueError("Property chunk size must be positive")

    async def fetch_since(
        self, since: datetime, *, max_records: int | None = None
    ) -> FetchResult:
        """Fetch leases changed since ``since``, optionally stopping after ``max_records``."""

        if max_records is not None and max_records < 0:
            raise ValueError("max_records must be non-negative")
        self.observer.event("fetch.updated-since", {"since": since.isoformat()})

        async def fetch_page(limit: int, offset: int) -> list[LeaseRecord]:
            return await self.source.list_leases_updated_since(since, limit=limit, offset=offset)

        return await self._paginate(
            fetch_page, _PageBudget(self.max_pages), max_records=max_records
        )

    async def fetch_for_scope(self, scope: ProcessingScope) -> FetchResult:
        """Fetch every lease belonging to the units and properties of ``scope``."""

        self.observer.event(
            "fetch.scope",
            {"units": len(scope.unit_ids), "properties": len(scope.property_ids)},
        )
        budget = _PageBudget(self.max_pages)
        result = FetchResult()
        for chunk in _chunks(sorted(scope.property_ids), self.property_chunk_size):
            if budget.exhausted:
                break
            result.extend(await self._paginate(self._property_page_fetcher(chunk), budget))
        if scope.unit_ids and not budget.exhausted:
            result.extend(
                await self._resolve_units(
                    [UnitDescriptor(unit_id) for unit_id in sorted(scope.unit_ids)], budget
                )
            )
        result.leases = _dedupe_leases(result.leases)
        return result

    async def resolve_leases_by_unit_ids(
        self, units: Iterable[UnitDescriptor | str]
    ) -> FetchResult:
        """Fetch all leases of ``units``, one paginated request per property chunk.

        Units without a known property id fall back to a per-unit request. Only
        leases whose unit id was requested are returned.
        """

        return await self._resolve_units(units, _PageBudget(self.max_pages))

    async def _resolve_units(
        self, units: Iterable[UnitDescriptor | str], budget: _PageBudget
    ) -> FetchResult:
        descriptors = _merge_descriptors(units)
        requested = {descriptor.unit_id for descriptor in descriptors}
        units_by_property: dict[str, list[str]] = {}
        ungrouped: list[str] = []
        for descriptor in descriptors:
            if descriptor.property_id:
                units_by_property.setdefault(descriptor.property_id, []).append(
                    descriptor.unit_id
                )
            else:
                ungrouped.append(descriptor.unit_id)

        result = FetchResult()
        for chunk in _chunks(list(units_by_property), self.property_chunk_size):
            if budget.exhausted:
                break
            page_result = await self._paginate(self._property_page_fetcher(chunk), budget)
            page_result.leases = [
                lease for lease in page_result.leases if lease.unit_id in requested
            ]
            result.extend(page_result)

        for unit_id in ungrouped:
            if not self._spend(budget, {"unitId": unit_id, "received": len(result.leases)}):
                result.safety_limit_reached = True
                break
            unit_leases = await self.source.list_leases_for_unit(unit_id)
            result.pages += 1
            result.leases.extend(lease for lease in unit_leases if lease.unit_id == unit_id)

        result.leases = _dedupe_leases(result.leases)
        return result

    def _property_page_fetcher(self, property_ids: Sequence[str]) -> PageFetcher:
        async def fetch_page(limit: int, offset: int) -> list[LeaseRecord]:
            return await self.source.list_leases_for_properties(
                property_ids, limit=limit, offset=offset
            )

        return fetch_page

    async def _paginate(
        self,
        fetch_page: PageFetcher,
        budget: _PageBudget,
        *,
        max_records: int | None = None,
    ) -> FetchResult:
        result = FetchResult()
        if max_records == 0:
            return result
        offset = 0
        while True:
            if not self._spend(budget, {"offset": offset, "received": len(result.leases)}):
                result.safety_limit_reached = True
                return result

            self.observer.event("fetch.batch", {"offset": offset, "batchSize": self.page_size})
            batch = await fetch_page(self.page_size, offset)
            result.pages += 1
            result.leases.extend(batch)
            self.observer.event(
                "fetch.batch.complete", {"received": len(batch), "total": len(result.leases)}
            )

            if max_records is not None and len(result.leases) >= max_records:
                self.observer.event("limit.max-records", {"maxRecords": max_records})
                del result.leases[max_records:]
                return result
            if len(batch) < self.page_size:
                return result
            offset += self.page_size

    def _spend(self, budget: _PageBudget, meta: EventMeta) -> bool:
        """Take one request from ``budget``; warn once when the ceiling is hit."""

        if budget.remaining > 0:
            budget.remaining -= 1
            return True
        if not budget.exhausted:
            budget.exhausted = True
            self.observer.warn("fetch.batch.safety-stop", {**meta, "maxPages": self.max_pages})
        return False

def _merge_descriptors(units: Iterable[UnitDescriptor | str]) -> list[UnitDescriptor]:
    merged: dict[str, UnitDescriptor] = {}
    for unit in units:
        descriptor = UnitDescriptor(unit) if isinstance(unit, str) else unit
        if not descriptor.unit_id:
            continue
        existing = merged.get(descriptor.unit_id)
        if existing is None:
            merged[descriptor.unit_id] = descriptor
            continue
        merged[descriptor.unit_id] = UnitDescriptor(
            unit_id=existing.unit_id,
            property_id=existing.property_id or descriptor.property_id,
            unit_number=existing.unit_number or descriptor.unit_number,
        )
    return list(merged.values())


def _dedupe_leases(leases: Iterable[LeaseRecord]) -> list[LeaseRecord]:
    by_id: dict[str, LeaseRecord] = {}
    for lease in leases:
        by_id.setdefault(lease.lease_id, lease)
    return list(by_id.values())


def _chunks[T](values: Sequence[T], size: int) -> Iterable[Sequence[T]]:
    for index in range(0, len(values), size):
        yield values[index : index + size]
