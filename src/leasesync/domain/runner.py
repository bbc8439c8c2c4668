"""Per-lease reconciliation loop.

Leases are processed strictly in order. Each lease runs inside its own error
boundary: a failure is counted and reported, and the loop moves on. The listing
cache and the stats accumulator are the only state shared between leases.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from .lifecycle import derive_transition
from .listing_cache import ListingCache
from .observer import LoggingObserver
from .reconciler import reconcile
from .resolver import DEFAULT_LISTING_CHUNK_SIZE, EntityResolver
from .scope import assert_in_scope
from .stats import SyncStats

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .lifecycle import LifecycleTarget
    from .model import LeaseRecord, ListingEntity, ProcessingScope, TenantRef
    from .observer import LifecycleObserver
    from .ports import LeaseSource, RelationshipGraph


class LimitMode(StrEnum):
    EXAMINED = "examined"
    CHANGED = "changed"


@dataclass(frozen=True, slots=True)
class LimitPolicy:
    """How a run is truncated.

    ``EXAMINED`` cuts the work set before the loop starts. ``CHANGED`` stops the
    loop once ``limit`` leases produced at least one applied (or, in dry-run,
    planned) association change.
    """

    mode: LimitMode
    limit: int

    def __post_init__(self) -> None:
        if self.limit < 0:
            raise ValueError("Limit must be non-negative")

    @classmethod
    def examined(cls, limit: int) -> LimitPolicy:
        return cls(LimitMode.EXAMINED, limit)

    @classmethod
    def changed(cls, limit: int) -> LimitPolicy:
        return cls(LimitMode.CHANGED, limit)


class LeaseOutcome(StrEnum):
    CHANGED = "changed"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True)
class _RunContext:
    source: LeaseSource
    graph: RelationshipGraph
    resolver: EntityResolver
    observer: LifecycleObserver
    stats: SyncStats = field(default_factory=SyncStats)
    dry_run: bool = False
    scope: ProcessingScope | None = None


async def run_reconciliation(
    work_set: Sequence[LeaseRecord],
    *,
    source: LeaseSource,
    graph: RelationshipGraph,
    dry_run: bool = False,
    scope: ProcessingScope | None = None,
    limit_policy: LimitPolicy | None = None,
    observer: LifecycleObserver | None = None,
    cache: ListingCache | None = None,
    prefetch_listings: bool = False,
    listing_chunk_size: int = DEFAULT_LISTING_CHUNK_SIZE,
) -> SyncStats:
    """Reconcile every lease of ``work_set`` and return the run's counters.

    Only per-lease failures are caught here; the returned stats report them in
    ``errors``. Nothing raised while processing a lease aborts the run.
    """

    active_observer = observer or LoggingObserver()
    context = _RunContext(
        source=source,
        graph=graph,
        resolver=EntityResolver(
            graph,
            listing_chunk_size=listing_chunk_size,
            cache=cache if cache is not None else ListingCache(),
        ),
        observer=active_observer,
        dry_run=dry_run,
        scope=scope,
    )

    leases = list(work_set)
    if limit_policy is not None and limit_policy.mode is LimitMode.EXAMINED:
        if len(leases) > limit_policy.limit:
            active_observer.event(
                "limit.apply",
                {"limit": limit_policy.limit, "available": len(leases)},
            )
            leases = leases[: limit_policy.limit]

    if prefetch_listings and leases:
        await _prefetch_listings(context, leases)

    changed = 0
    for lease in leases:
        if (
            limit_policy is not None
            and limit_policy.mode is LimitMode.CHANGED
            and changed >= limit_policy.limit
        ):
            active_observer.event("limit.reached", {"limit": limit_policy.limit})
            break
        outcome = await _process_lease_safely(context, lease)
        if outcome is LeaseOutcome.CHANGED:
            changed += 1

    return context.stats


async def _prefetch_listings(context: _RunContext, leases: Sequence[LeaseRecord]) -> None:
    unit_ids = [lease.unit_id for lease in leases if lease.unit_id]
    context.observer.event("prefetch.listings.start", {"units": len(set(unit_ids))})
    try:
        primed = await context.resolver.resolve_listings_by_unit_ids(unit_ids)
    except Exception as exc:  # noqa: BLE001
        # The per-unit lookup still runs for every lease, so the loop can proceed.
        context.observer.error(exc, {"phase": "prefetch.listings"})
        return
    context.observer.event("prefetch.listings.complete", {"primed": primed})


async def _process_lease_safely(context: _RunContext, lease: LeaseRecord) -> LeaseOutcome:
    try:
        return await _process_lease(context, lease)
    except Exception as exc:  # noqa: BLE001
        context.stats.record_error()
        context.observer.error(
            exc,
            {"leaseId": lease.lease_id, "unitId": lease.unit_id, "status": lease.status},
        )
        return LeaseOutcome.FAILED


async def _process_lease(context: _RunContext, lease: LeaseRecord) -> LeaseOutcome:
    target = derive_transition(lease.status)
    if target is None:
        context.observer.warn(
            "lease.status-unknown",
            {"leaseId": lease.lease_id, "status": lease.raw_status or lease.status},
        )
        return LeaseOutcome.SKIPPED

    assert_in_scope(lease, context.scope, observer=context.observer)

    if not lease.tenants:
        context.observer.event("lease.no-tenants", {"leaseId": lease.lease_id})
        return LeaseOutcome.SKIPPED

    listing = await context.resolver.resolve_listing(lease.unit_id)
    if listing is None:
        context.observer.warn(
            "listing.missing",
            {"leaseId": lease.lease_id, "unitId": lease.unit_id, "tenantIds": lease.tenant_ids},
        )
        return LeaseOutcome.SKIPPED

    outcome = LeaseOutcome.SKIPPED
    for tenant_ref in lease.tenants:
        tenant_outcome = await _process_tenant(context, lease, tenant_ref, listing, target)
        if tenant_outcome is LeaseOutcome.CHANGED or (
            tenant_outcome is LeaseOutcome.UNCHANGED and outcome is LeaseOutcome.SKIPPED
        ):
            outcome = tenant_outcome
    return outcome


async def _process_tenant(
    context: _RunContext,
    lease: LeaseRecord,
    tenant_ref: TenantRef,
    listing: ListingEntity,
    target: LifecycleTarget,
) -> LeaseOutcome:
    tenant = await context.source.get_tenant(tenant_ref.tenant_id)
    if tenant is None:
        context.observer.warn(
            "tenant.missing", {"leaseId": lease.lease_id, "tenantId": tenant_ref.tenant_id}
        )
        return LeaseOutcome.SKIPPED

    contact = await context.resolver.resolve_contact(tenant)
    if contact is None:
        context.observer.warn(
            "contact.missing",
            {
                "leaseId": lease.lease_id,
                "tenantId": tenant.tenant_id,
                "name": tenant.display_name,
                "email": tenant.email,
            },
        )
        return LeaseOutcome.SKIPPED

    current_edges = await context.graph.list_associations(contact.contact_id, listing.listing_id)
    result = await reconcile(
        context.graph,
        contact.contact_id,
        listing.listing_id,
        target,
        current_edges,
        dry_run=context.dry_run,
        observer=context.observer,
    )
    if not result.applied:
        return LeaseOutcome.UNCHANGED
    context.stats.record_transition(result.transition)
    return LeaseOutcome.CHANGED
