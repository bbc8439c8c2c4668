"""Domain error taxonomy for lifecycle reconciliation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .model import ProcessingScope


class LeaseSyncError(RuntimeError):
    """Base class for domain errors raised by the reconciliation engine."""


class ResolutionMiss(LeaseSyncError):  # noqa: N818
    """A natural key (email, unit id) did not resolve to a target entity."""

    def __init__(self, kind: str, key: str | None) -> None:
        super().__init__(f"No {kind} found for {key!r}")
        self.kind = kind
        self.key = key


class ScopeViolationError(LeaseSyncError):
    """A lease references a unit outside the declared processing scope."""

    def __init__(self, *, lease_id: str, unit_id: str, scope: ProcessingScope) -> None:
        super().__init__(f"Lifecycle scope mismatch for lease {lease_id} (unit {unit_id})")
        self.lease_id = lease_id
        self.unit_id = unit_id
        self.scope = scope
