from __future__ import annotations

import asyncio

import pytest

from leasesync.domain.lifecycle import LifecycleTarget, derive_transition
from leasesync.domain.model import AssociationEdge, AssociationType, LeaseStatus, TransitionType
from leasesync.domain.reconciler import ReconcileOutcome, plan_reconciliation, reconcile
from tests.helpers.lifecycle import FakeRelationshipGraph, RecordingObserver

CONTACT = "C1"
LISTING = "100"


def _target(status: LeaseStatus) -> LifecycleTarget:
    target = derive_transition(status)
    assert target is not None
    return target


def _run(
    graph: FakeRelationshipGraph,
    status: LeaseStatus,
    *,
    dry_run: bool = False,
    observer: RecordingObserver | None = None,
) -> ReconcileOutcome:
    async def scenario() -> ReconcileOutcome:
        edges = await graph.list_associations(CONTACT, LISTING)
        return await reconcile(
            graph,
            CONTACT,
            LISTING,
            _target(status),
            edges,
            dry_run=dry_run,
            observer=observer or RecordingObserver(),
        )

    return asyncio.run(scenario())


def test_active_lease_replaces_future_edge() -> None:
    graph = FakeRelationshipGraph()
    graph.add_edge(CONTACT, LISTING, AssociationType.FUTURE_TENANT)

    outcome = _run(graph, LeaseStatus.ACTIVE)

    assert outcome.applied
    assert outcome.transition is TransitionType.FUTURE_TO_ACTIVE
    assert outcome.removed == (AssociationType.FUTURE_TENANT,)
    assert outcome.added is AssociationType.ACTIVE_TENANT
    assert graph.edge_types(CONTACT, LISTING) == {AssociationType.ACTIVE_TENANT}
    assert [write[0] for write in graph.writes] == ["delete", "create"]


def test_terminated_lease_replaces_active_edge() -> None:
    graph = FakeRelationshipGraph()
    graph.add_edge(CONTACT, LISTING, AssociationType.ACTIVE_TENANT)

    outcome = _run(graph, LeaseStatus.TERMINATED)

    assert outcome.applied
    assert outcome.transition is TransitionType.ACTIVE_TO_INACTIVE
    assert graph.edge_types(CONTACT, LISTING) == {AssociationType.INACTIVE_TENANT}


def test_converged_pair_is_left_untouched() -> None:
    graph = FakeRelationshipGraph()
    graph.add_edge(CONTACT, LISTING, AssociationType.ACTIVE_TENANT)
    observer = RecordingObserver()

    outcome = _run(graph, LeaseStatus.ACTIVE, observer=observer)

    assert not outcome.applied
    assert graph.write_count == 0
    assert observer.event_names == ["association.no-change"]


def test_second_pass_performs_no_writes() -> None:
    graph = FakeRelationshipGraph()
    graph.add_edge(CONTACT, LISTING, AssociationType.FUTURE_TENANT)

    first = _run(graph, LeaseStatus.ACTIVE)
    writes_after_first = graph.write_count
    second = _run(graph, LeaseStatus.ACTIVE)

    assert first.applied
    assert not second.applied
    assert graph.write_count == writes_after_first


def test_owner_edge_survives_every_transition() -> None:
    graph = FakeRelationshipGraph()
    graph.add_edge(CONTACT, LISTING, AssociationType.OWNER)
    graph.add_edge(CONTACT, LISTING, AssociationType.FUTURE_TENANT)

    _run(graph, LeaseStatus.ACTIVE)
    _run(graph, LeaseStatus.TERMINATED)

    assert graph.edge_types(CONTACT, LISTING) == {
        AssociationType.OWNER,
        AssociationType.INACTIVE_TENANT,
    }
    assert all(write[3] is not AssociationType.OWNER for write in graph.writes)


def test_termination_keeps_future_edge_it_may_not_remove() -> None:
    graph = FakeRelationshipGraph()
    graph.add_edge(CONTACT, LISTING, AssociationType.FUTURE_TENANT)

    outcome = _run(graph, LeaseStatus.TERMINATED)

    assert outcome.transition is TransitionType.ACTIVE_TO_INACTIVE
    assert outcome.removed == ()
    assert graph.edge_types(CONTACT, LISTING) == {
        AssociationType.FUTURE_TENANT,
        AssociationType.INACTIVE_TENANT,
    }
    assert [write[0] for write in graph.writes] == ["create"]


@pytest.mark.parametrize(
    "prior",
    [
        (),
        (AssociationType.FUTURE_TENANT,),
        (AssociationType.FUTURE_TENANT, AssociationType.INACTIVE_TENANT),
        (AssociationType.FUTURE_TENANT, AssociationType.INACTIVE_TENANT, AssociationType.OWNER),
    ],
)
def test_activation_converges_regardless_of_prior_edges(
    prior: tuple[AssociationType, ...],
) -> None:
    graph = FakeRelationshipGraph()
    for type_id in prior:
        graph.add_edge(CONTACT, LISTING, type_id)

    _run(graph, LeaseStatus.ACTIVE)

    current = graph.edge_types(CONTACT, LISTING)
    assert AssociationType.ACTIVE_TENANT in current
    assert AssociationType.FUTURE_TENANT not in current


def test_partial_prior_run_is_completed() -> None:
    # a previous run removed the future edge and failed before adding the active one
    graph = FakeRelationshipGraph()

    outcome = _run(graph, LeaseStatus.ACTIVE)

    assert outcome.removed == ()
    assert outcome.added is AssociationType.ACTIVE_TENANT
    assert graph.edge_types(CONTACT, LISTING) == {AssociationType.ACTIVE_TENANT}


def test_dry_run_matches_live_decision_without_writes() -> None:
    live_graph = FakeRelationshipGraph()
    dry_graph = FakeRelationshipGraph()
    for graph in (live_graph, dry_graph):
        graph.add_edge(CONTACT, LISTING, AssociationType.FUTURE_TENANT)
    observer = RecordingObserver()

    dry = _run(dry_graph, LeaseStatus.ACTIVE, dry_run=True, observer=observer)
    live = _run(live_graph, LeaseStatus.ACTIVE)

    assert (dry.applied, dry.transition, dry.removed, dry.added) == (
        live.applied,
        live.transition,
        live.removed,
        live.added,
    )
    assert dry.dry_run
    assert dry_graph.write_count == 0
    assert dry_graph.edge_types(CONTACT, LISTING) == {AssociationType.FUTURE_TENANT}
    assert observer.event_names == ["association.dry-run"]


def test_plan_removes_each_eligible_type_once() -> None:
    edges = [
        AssociationEdge(CONTACT, LISTING, AssociationType.FUTURE_TENANT),
        AssociationEdge(CONTACT, LISTING, AssociationType.FUTURE_TENANT),
        AssociationEdge(CONTACT, LISTING, AssociationType.INACTIVE_TENANT),
    ]

    plan = plan_reconciliation(CONTACT, LISTING, _target(LeaseStatus.ACTIVE), edges)

    assert plan.remove == (AssociationType.FUTURE_TENANT,)
    assert plan.add is AssociationType.ACTIVE_TENANT
    assert not plan.is_noop


def test_failed_write_propagates() -> None:
    graph = FakeRelationshipGraph()
    graph.failures["create_association"] = RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        _run(graph, LeaseStatus.ACTIVE)
