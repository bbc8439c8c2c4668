"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack
from logging import getLogger
from typing import TYPE_CHECKING

from leasesync.adapters.buildium import BuildiumLeaseSource, should_cache_buildium_payload
from leasesync.adapters.hubspot import HubSpotRelationshipGraph
from leasesync.config import get_buildium_config, get_hubspot_config, get_sync_config
from leasesync.domain.data_integration import LifecycleSyncRequest, sync_lease_lifecycle
from leasesync.domain.model import ProcessingScope
from leasesync.domain.runner import LimitMode, LimitPolicy

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from leasesync.config import SyncConfig
    from leasesync.domain.data_integration import LifecycleSyncResult
    from leasesync.domain.observer import LifecycleObserver
    from leasesync.domain.ports import LeaseSource, RelationshipGraph


log = getLogger(__name__)


def build_sync_request(
    *,
    config: SyncConfig,
    dry_run: bool = False,
    since: datetime | None = None,
    lookback_days: int | None = None,
    unit_ids: Sequence[str] = (),
    property_ids: Sequence[str] = (),
    max_records: int | None = None,
    limit: int | None = None,
    limit_mode: LimitMode = LimitMode.EXAMINED,
    prefetch_listings: bool = True,
) -> LifecycleSyncRequest:
    scope = ProcessingScope.of(unit_ids=list(unit_ids), property_ids=list(property_ids))
    limit_policy = LimitPolicy(limit_mode, limit) if limit is not None else None
    return LifecycleSyncRequest(
        since=since,
        lookback_days=lookback_days if lookback_days is not None else config.lookback_days,
        scope=None if scope.is_empty else scope,
        dry_run=dry_run,
        max_records=max_records,
        limit_policy=limit_policy,
        # Batched listing lookups pay off on broad incremental pulls only.
        prefetch_listings=prefetch_listings and scope.is_empty,
        page_size=config.page_size,
        max_pages=config.max_pages,
        property_chunk_size=config.property_chunk_size,
        listing_chunk_size=config.listing_chunk_size,
    )


def sync_tenant_lifecycle(
    *,
    dry_run: bool = False,
    since: datetime | None = None,
    lookback_days: int | None = None,
    unit_ids: Sequence[str] = (),
    property_ids: Sequence[str] = (),
    max_records: int | None = None,
    limit: int | None = None,
    limit_mode: LimitMode = LimitMode.EXAMINED,
    prefetch_listings: bool = True,
    source: LeaseSource | None = None,
    graph: RelationshipGraph | None = None,
    observer: LifecycleObserver | None = None,
) -> LifecycleSyncResult:
    """Synchronise tenant associations with lease statuses using the configured adapters."""

    request = build_sync_request(
        config=get_sync_config(),
        dry_run=dry_run,
        since=since,
        lookback_days=lookback_days,
        unit_ids=unit_ids,
        property_ids=property_ids,
        max_records=max_records,
        limit=limit,
        limit_mode=limit_mode,
        prefetch_listings=prefetch_listings,
    )
    log.info(
        "Starting tenant lifecycle sync: dry_run=%s, since=%s, lookback_days=%s, "
        "units=%s, properties=%s, max_records=%s, limit=%s",
        request.dry_run,
        request.since,
        request.lookback_days,
        len(unit_ids),
        len(property_ids),
        request.max_records,
        request.limit_policy,
    )

    result = asyncio.run(_run_sync(request, source=source, graph=graph, observer=observer))

    stats = result.stats
    log.info(
        f"Finished tenant lifecycle sync: fetched={result.fetched}, "
        f"changed={stats.total_transitions}, "
        f"futureToActive={stats.future_to_active}, "
        f"activeToInactive={stats.active_to_inactive}, "
        f"futureToInactive={stats.future_to_inactive}, errors={stats.errors}, "
        f"dry_run={request.dry_run}"
    )
    if result.safety_limit_reached:
        log.warning("Fetch stopped at the page ceiling; rerun to process the remaining leases")
    return result


async def _run_sync(
    request: LifecycleSyncRequest,
    *,
    source: LeaseSource | None,
    graph: RelationshipGraph | None,
    observer: LifecycleObserver | None,
) -> LifecycleSyncResult:
    async with AsyncExitStack() as stack:
        if source is None:
            source = await stack.enter_async_context(
                BuildiumLeaseSource(
                    config=get_buildium_config(cache_predicate=should_cache_buildium_payload)
                )
            )
        if graph is None:
            graph = await stack.enter_async_context(
                HubSpotRelationshipGraph(config=get_hubspot_config())
            )
        return await sync_lease_lifecycle(
            source=source, graph=graph, request=request, observer=observer
        )
