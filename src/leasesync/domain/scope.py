"""Scope guard: keep writes inside the declared processing boundary."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .errors import ScopeViolationError

if TYPE_CHECKING:
    from .model import LeaseRecord, ProcessingScope
    from .observer import LifecycleObserver


def assert_in_scope(
    lease: LeaseRecord,
    scope: ProcessingScope | None,
    *,
    observer: LifecycleObserver,
) -> None:
    """Raise :class:`ScopeViolationError` if ``lease`` falls outside ``scope``.

    ``None`` or an empty scope means an unbounded (global incremental) run. A lease
    without a unit id cannot be verified and is let through with a warning.
    """

    if scope is None or scope.is_empty:
        return
    if lease.unit_id is None:
        observer.warn("lease.unit-missing", {"leaseId": lease.lease_id})
        return
    if scope.contains(lease):
        return
    raise ScopeViolationError(lease_id=lease.lease_id, unit_id=lease.unit_id, scope=scope)
