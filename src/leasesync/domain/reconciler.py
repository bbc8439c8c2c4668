"""Compute and apply the minimal association diff for one contact/listing pair.

Removal and addition are separate target-system calls. If a previous run removed
an edge and failed before adding the target, the target is still absent on the
next run, so the same plan completes the transition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .lifecycle import is_removable
from .observer import LoggingObserver

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .lifecycle import LifecycleTarget
    from .model import AssociationEdge, AssociationType, TransitionType
    from .observer import LifecycleObserver
    from .ports import RelationshipGraph


@dataclass(frozen=True, slots=True)
class ReconciliationPlan:
    contact_id: str
    listing_id: str
    transition: TransitionType
    remove: tuple[AssociationType, ...]
    add: AssociationType | None

    @property
    def is_noop(self) -> bool:
        return self.add is None and not self.remove


@dataclass(frozen=True, slots=True)
class ReconcileOutcome:
    applied: bool
    transition: TransitionType
    removed: tuple[AssociationType, ...] = ()
    added: AssociationType | None = None
    dry_run: bool = False


def plan_reconciliation(
    contact_id: str,
    listing_id: str,
    target: LifecycleTarget,
    current_edges: Sequence[AssociationEdge],
) -> ReconciliationPlan:
    """Decide which edges to remove and whether to add the target edge."""

    current_types = [edge.type_id for edge in current_edges]
    transition = target.transition
    if target.target_type in current_types:
        return ReconciliationPlan(contact_id, listing_id, transition, remove=(), add=None)

    removals: list[AssociationType] = []
    for edge_type in current_types:
        if is_removable(edge_type, transition) and edge_type not in removals:
            removals.append(edge_type)
    return ReconciliationPlan(
        contact_id, listing_id, transition, remove=tuple(removals), add=target.target_type
    )


async def reconcile(
    graph: RelationshipGraph,
    contact_id: str,
    listing_id: str,
    target: LifecycleTarget,
    current_edges: Sequence[AssociationEdge],
    *,
    dry_run: bool = False,
    observer: LifecycleObserver | None = None,
) -> ReconcileOutcome:
    """Converge the pair's edges toward ``target``; dry-run skips only the writes."""

    active_observer = observer or LoggingObserver()
    plan = plan_reconciliation(contact_id, listing_id, target, current_edges)
    if plan.is_noop:
        active_observer.event(
            "association.no-change",
            {"contactId": contact_id, "listingId": listing_id, "transition": plan.transition},
        )
        return ReconcileOutcome(applied=False, transition=plan.transition, dry_run=dry_run)

    if dry_run:
        active_observer.event(
            "association.dry-run",
            {
                "contactId": contact_id,
                "listingId": listing_id,
                "remove": [edge_type.label for edge_type in plan.remove],
                "target": plan.add.label if plan.add is not None else None,
                "transition": plan.transition,
            },
        )
    else:
        await _apply(graph, plan, active_observer)

    return ReconcileOutcome(
        applied=True,
        transition=plan.transition,
        removed=plan.remove,
        added=plan.add,
        dry_run=dry_run,
    )


async def _apply(
    graph: RelationshipGraph, plan: ReconciliationPlan, observer: LifecycleObserver
) -> None:
    for edge_type in plan.remove:
        await graph.delete_association(plan.contact_id, plan.listing_id, edge_type)
        observer.event(
            "association.removed",
            {"contactId": plan.contact_id, "listingId": plan.listing_id, "type": edge_type.label},
        )
    if plan.add is not None:
        await graph.create_association(plan.contact_id, plan.listing_id, plan.add)
        observer.event(
            "association.created",
            {"contactId": plan.contact_id, "listingId": plan.listing_id, "type": plan.add.label},
        )
