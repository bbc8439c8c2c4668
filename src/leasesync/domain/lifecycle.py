"""Lease status -> association type state machine.

``derive_transition`` is the only place lease statuses are interpreted. Future
and Active share the ``futureToActive`` classification: both mean
the tenancy is moving toward (or has reached) activation, and the transition
decides which prior edge may be removed.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from .model import AssociationType, LeaseStatus, TransitionType

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True)
class LifecycleTarget:
    """Desired association type for a lease and the transition it belongs to."""

    target_type: AssociationType
    transition: TransitionType


_TARGETS: Mapping[LeaseStatus, LifecycleTarget] = MappingProxyType(
    {
        LeaseStatus.FUTURE: LifecycleTarget(
            AssociationType.FUTURE_TENANT, TransitionType.FUTURE_TO_ACTIVE
        ),
        LeaseStatus.ACTIVE: LifecycleTarget(
            AssociationType.ACTIVE_TENANT, TransitionType.FUTURE_TO_ACTIVE
        ),
        LeaseStatus.PAST: LifecycleTarget(
            AssociationType.INACTIVE_TENANT, TransitionType.ACTIVE_TO_INACTIVE
        ),
        LeaseStatus.EXPIRED: LifecycleTarget(
            AssociationType.INACTIVE_TENANT, TransitionType.ACTIVE_TO_INACTIVE
        ),
        LeaseStatus.TERMINATED: LifecycleTarget(
            AssociationType.INACTIVE_TENANT, TransitionType.ACTIVE_TO_INACTIVE
        ),
    }
)

REMOVABLE_SOURCE_TYPES: Mapping[TransitionType, frozenset[AssociationType]] = MappingProxyType(
    {
        TransitionType.FUTURE_TO_ACTIVE: frozenset({AssociationType.FUTURE_TENANT}),
        TransitionType.ACTIVE_TO_INACTIVE: frozenset({AssociationType.ACTIVE_TENANT}),
        TransitionType.FUTURE_TO_INACTIVE: frozenset({AssociationType.FUTURE_TENANT}),
    }
)


def derive_transition(status: LeaseStatus) -> LifecycleTarget | None:
    """Return the lifecycle target for ``status`` or ``None`` when it must be skipped."""

    return _TARGETS.get(status)


def is_removable(edge_type: AssociationType, transition: TransitionType) -> bool:
    return edge_type in REMOVABLE_SOURCE_TYPES[transition]
