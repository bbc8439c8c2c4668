from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import pytest

from leasesync.domain.errors import ScopeViolationError
from leasesync.domain.model import AssociationType, LeaseStatus, ProcessingScope
from leasesync.domain.runner import LimitMode, LimitPolicy, run_reconciliation
from leasesync.domain.stats import SyncStats
from tests.helpers.lifecycle import (
    FakeLeaseSource,
    FakeRelationshipGraph,
    RecordingObserver,
    make_lease,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from leasesync.domain.model import LeaseRecord


def _world(
    units: Sequence[str] = ("U1",), tenants: Sequence[str] = ("T1",)
) -> tuple[FakeLeaseSource, FakeRelationshipGraph]:
    source = FakeLeaseSource()
    graph = FakeRelationshipGraph()
    for index, unit_id in enumerate(units):
        graph.add_listing(unit_id, f"{100 + index}")
    for tenant_id in tenants:
        source.add_tenant(tenant_id, f"{tenant_id.lower()}@example.com")
        graph.add_contact(f"{tenant_id.lower()}@example.com", f"C-{tenant_id}")
    return source, graph


def _run(
    leases: Sequence[LeaseRecord],
    source: FakeLeaseSource,
    graph: FakeRelationshipGraph,
    *,
    observer: RecordingObserver | None = None,
    dry_run: bool = False,
    scope: ProcessingScope | None = None,
    limit_policy: LimitPolicy | None = None,
    prefetch_listings: bool = False,
) -> SyncStats:
    return asyncio.run(
        run_reconciliation(
            leases,
            source=source,
            graph=graph,
            dry_run=dry_run,
            scope=scope,
            limit_policy=limit_policy,
            observer=observer or RecordingObserver(),
            prefetch_listings=prefetch_listings,
        )
    )


def test_activation_updates_stats() -> None:
    source, graph = _world()
    graph.add_edge("C-T1", "100", AssociationType.FUTURE_TENANT)

    stats = _run([make_lease(status=LeaseStatus.ACTIVE)], source, graph)

    assert stats == SyncStats(future_to_active=1)
    assert graph.edge_types("C-T1", "100") == {AssociationType.ACTIVE_TENANT}


def test_termination_updates_stats() -> None:
    source, graph = _world()
    graph.add_edge("C-T1", "100", AssociationType.ACTIVE_TENANT)

    stats = _run([make_lease(status=LeaseStatus.TERMINATED)], source, graph)

    assert stats == SyncStats(active_to_inactive=1)


def test_termination_over_future_edge_counts_active_to_inactive() -> None:
    source, graph = _world()
    graph.add_edge("C-T1", "100", AssociationType.FUTURE_TENANT)

    stats = _run([make_lease(status=LeaseStatus.TERMINATED)], source, graph)

    assert stats == SyncStats(active_to_inactive=1)
    assert graph.edge_types("C-T1", "100") == {
        AssociationType.FUTURE_TENANT,
        AssociationType.INACTIVE_TENANT,
    }
    assert graph.calls["delete_association"] == 0


def test_converged_lease_changes_nothing() -> None:
    source, graph = _world()
    graph.add_edge("C-T1", "100", AssociationType.ACTIVE_TENANT)

    stats = _run([make_lease(status=LeaseStatus.ACTIVE)], source, graph)

    assert stats == SyncStats()
    assert graph.write_count == 0


def test_out_of_scope_lease_is_an_error_and_others_complete() -> None:
    source, graph = _world(units=("U1", "U2"))
    observer = RecordingObserver()
    leases = [
        make_lease("L-out", unit_id="U2", property_id="P2"),
        make_lease("L-in", unit_id="U1", property_id="P1"),
    ]

    stats = _run(
        leases, source, graph, observer=observer, scope=ProcessingScope.of(unit_ids=["U1"])
    )

    assert stats.errors == 1
    assert stats.future_to_active == 1
    assert all(write[2] != "101" for write in graph.writes)
    assert isinstance(observer.errors[0][0], ScopeViolationError)
    assert observer.errors[0][1]["leaseId"] == "L-out"


def test_two_leases_on_one_unit_look_up_the_listing_once() -> None:
    source, graph = _world(tenants=("T1", "T2"))
    leases = [
        make_lease("L1", unit_id="U1", tenant_ids=("T1",)),
        make_lease("L2", unit_id="U1", tenant_ids=("T2",)),
    ]

    _run(leases, source, graph)

    assert graph.calls["find_listing_by_unit_id"] == 1


def test_unknown_status_is_skipped_without_stats() -> None:
    source, graph = _world()
    observer = RecordingObserver()

    stats = _run([make_lease(status=LeaseStatus.UNKNOWN)], source, graph, observer=observer)

    assert stats == SyncStats()
    assert observer.warning_names == ["lease.status-unknown"]
    assert graph.calls == {}


def test_resolution_misses_skip_without_errors() -> None:
    source, graph = _world()
    source.add_tenant("T-noemail", None)
    observer = RecordingObserver()
    leases = [
        make_lease("L1", unit_id="U404"),
        make_lease("L2", tenant_ids=("T-unknown",)),
        make_lease("L3", tenant_ids=("T-noemail",)),
        make_lease("L4", tenant_ids=()),
    ]

    stats = _run(leases, source, graph, observer=observer)

    assert stats == SyncStats()
    assert observer.warning_names == ["listing.missing", "tenant.missing", "contact.missing"]
    assert "lease.no-tenants" in observer.event_names


def test_transient_failure_is_isolated_per_lease() -> None:
    source, graph = _world(units=("U1", "U2"))
    source.failing_tenants["T-broken"] = httpx.ReadTimeout("timed out")
    leases = [
        make_lease("L1", unit_id="U1", tenant_ids=("T-broken",)),
        make_lease("L2", unit_id="U2", tenant_ids=("T1",)),
    ]

    stats = _run(leases, source, graph)

    assert stats.errors == 1
    assert stats.future_to_active == 1
    assert graph.edge_types("C-T1", "101") == {AssociationType.ACTIVE_TENANT}


def test_tenant_failure_aborts_remaining_tenants_of_that_lease() -> None:
    source, graph = _world(tenants=("T1", "T3"))
    source.failing_tenants["T2"] = RuntimeError("boom")

    stats = _run([make_lease(tenant_ids=("T1", "T2", "T3"))], source, graph)

    assert stats == SyncStats(future_to_active=1, errors=1)
    assert source.tenant_calls == ["T1", "T2"]


def test_every_tenant_of_a_lease_is_reconciled() -> None:
    source, graph = _world(tenants=("T1", "T2"))

    stats = _run([make_lease(tenant_ids=("T1", "T2"))], source, graph)

    assert stats.future_to_active == 2
    assert graph.edge_types("C-T2", "100") == {AssociationType.ACTIVE_TENANT}


def test_dry_run_counts_but_never_writes() -> None:
    source, graph = _world()
    graph.add_edge("C-T1", "100", AssociationType.ACTIVE_TENANT)

    stats = _run([make_lease(status=LeaseStatus.EXPIRED)], source, graph, dry_run=True)

    assert stats == SyncStats(active_to_inactive=1)
    assert graph.calls["create_association"] == 0
    assert graph.calls["delete_association"] == 0
    assert graph.calls["list_associations"] == 1


def test_second_run_is_idempotent() -> None:
    source, graph = _world(units=("U1", "U2"), tenants=("T1", "T2"))
    graph.add_edge("C-T2", "101", AssociationType.ACTIVE_TENANT)
    leases = [
        make_lease("L1", unit_id="U1", tenant_ids=("T1",)),
        make_lease("L2", unit_id="U2", tenant_ids=("T2",), status=LeaseStatus.PAST),
    ]

    first = _run(leases, source, graph)
    writes = graph.write_count
    second = _run(leases, source, graph)

    assert first.total_transitions == 2
    assert second == SyncStats()
    assert graph.write_count == writes


def test_examined_limit_truncates_work_set() -> None:
    source, graph = _world(units=("U1", "U2", "U3"))
    observer = RecordingObserver()
    leases = [make_lease(f"L{index}", unit_id=f"U{index}") for index in (1, 2, 3)]

    stats = _run(
        leases, source, graph, observer=observer, limit_policy=LimitPolicy.examined(2)
    )

    assert stats.future_to_active == 2
    assert graph.calls["find_listing_by_unit_id"] == 2
    assert "limit.apply" in observer.event_names


def test_changed_limit_counts_only_changed_leases() -> None:
    source, graph = _world(units=("U1", "U2", "U3"))
    graph.add_edge("C-T1", "100", AssociationType.ACTIVE_TENANT)
    observer = RecordingObserver()
    leases = [make_lease(f"L{index}", unit_id=f"U{index}") for index in (1, 2, 3)]

    stats = _run(leases, source, graph, observer=observer, limit_policy=LimitPolicy.changed(1))

    # L1 is already converged, L2 changes, L3 is never examined
    assert stats.future_to_active == 1
    assert graph.edge_types("C-T1", "102") == set()
    assert "limit.reached" in observer.event_names


def test_limit_policy_rejects_negative_limits() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        LimitPolicy(LimitMode.CHANGED, -1)


def test_prefetch_primes_listing_cache() -> None:
    source, graph = _world(units=("U1", "U2"))
    observer = RecordingObserver()
    leases = [make_lease("L1", unit_id="U1"), make_lease("L2", unit_id="U2")]

    stats = _run(leases, source, graph, observer=observer, prefetch_listings=True)

    assert stats.future_to_active == 2
    assert graph.calls["find_listings_by_unit_ids"] == 1
    assert graph.calls["find_listing_by_unit_id"] == 0
    assert observer.event_names[:2] == ["prefetch.listings.start", "prefetch.listings.complete"]


def test_failed_prefetch_falls_back_to_single_lookups() -> None:
    source, graph = _world()
    graph.failures["find_listings_by_unit_ids"] = RuntimeError("batch down")
    observer = RecordingObserver()

    stats = _run([make_lease()], source, graph, observer=observer, prefetch_listings=True)

    assert stats == SyncStats(future_to_active=1)
    assert graph.calls["find_listing_by_unit_id"] == 1
    assert observer.errors[0][1] == {"phase": "prefetch.listings"}


def test_empty_work_set_returns_zero_stats() -> None:
    source, graph = _world()
    assert _run([], source, graph) == SyncStats()
