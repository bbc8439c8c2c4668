"""Application service tying fetch and reconciliation into one run."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from .fetcher import (
    DEFAULT_MAX_PAGES,
    DEFAULT_PAGE_SIZE,
    DEFAULT_PROPERTY_CHUNK_SIZE,
    FetchResult,
    IncrementalFetcher,
)
from .observer import LoggingObserver
from .resolver import DEFAULT_LISTING_CHUNK_SIZE
from .runner import run_reconciliation

if TYPE_CHECKING:
    from collections.abc import Callable

    from .model import ProcessingScope
    from .observer import LifecycleObserver
    from .ports import LeaseSource, RelationshipGraph
    from .runner import LimitPolicy
    from .stats import SyncStats

log = getLogger(__name__)

DEFAULT_LOOKBACK_DAYS = 30


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class LifecycleSyncRequest:
    """Inputs of one lifecycle run.

    A non-empty ``scope`` switches from the incremental pull to a scoped fetch
    and bounds every write to the declared units and properties.
    """

    since: datetime | None = None
    lookback_days: int = DEFAULT_LOOKBACK_DAYS
    scope: ProcessingScope | None = None
    dry_run: bool = False
    max_records: int | None = None
    limit_policy: LimitPolicy | None = None
    prefetch_listings: bool = True
    page_size: int = DEFAULT_PAGE_SIZE
    max_pages: int = DEFAULT_MAX_PAGES
    property_chunk_size: int = DEFAULT_PROPERTY_CHUNK_SIZE
    listing_chunk_size: int = DEFAULT_LISTING_CHUNK_SIZE

    @property
    def is_scoped(self) -> bool:
        return self.scope is not None and not self.scope.is_empty

    def effective_since(self, now: datetime) -> datetime:
        if self.since is not None:
            return self.since
        return now - timedelta(days=self.lookback_days)


@dataclass(slots=True)
class LifecycleSyncResult:
    stats: SyncStats
    fetched: int
    pages: int
    safety_limit_reached: bool
    since: datetime | None = None
    scoped: bool = False


async def sync_lease_lifecycle(
    *,
    source: LeaseSource,
    graph: RelationshipGraph,
    request: LifecycleSyncRequest,
    observer: LifecycleObserver | None = None,
    now_provider: Callable[[], datetime] = _utcnow,
) -> LifecycleSyncResult:
    """Fetch the work set and reconcile it.

    A failed fetch propagates: without a work set there is nothing to iterate.
    Everything after that is isolated per lease by the runner.
    """

    active_observer = observer or LoggingObserver()
    fetcher = IncrementalFetcher(
        source,
        page_size=request.page_size,
        max_pages=request.max_pages,
        property_chunk_size=request.property_chunk_size,
        observer=active_observer,
    )

    since: datetime | None = None
    fetched: FetchResult
    if request.is_scoped and request.scope is not None:
        fetched = await fetcher.fetch_for_scope(request.scope)
        if request.max_records is not None and len(fetched.leases) > request.max_records:
            active_observer.event("limit.max-records", {"maxRecords": request.max_records})
            del fetched.leases[request.max_records :]
    else:
        since = request.effective_since(now_provider())
        fetched = await fetcher.fetch_since(since, max_records=request.max_records)

    log.info(
        "Fetched %s leases in %s pages (scoped=%s, since=%s)",
        len(fetched.leases),
        fetched.pages,
        request.is_scoped,
        since,
    )

    stats = await run_reconciliation(
        fetched.leases,
        source=source,
        graph=graph,
        dry_run=request.dry_run,
        scope=request.scope if request.is_scoped else None,
        limit_policy=request.limit_policy,
        observer=active_observer,
        prefetch_listings=request.prefetch_listings,
        listing_chunk_size=request.listing_chunk_size,
    )

    return LifecycleSyncResult(
        stats=stats,
        fetched=len(fetched.leases),
        pages=fetched.pages,
        safety_limit_reached=fetched.safety_limit_reached,
        since=since,
        scoped=request.is_scoped,
    )
