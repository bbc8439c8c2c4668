"""Lease lifecycle reconciliation engine."""

from __future__ import annotations

from .data_integration import LifecycleSyncRequest, LifecycleSyncResult, sync_lease_lifecycle
from .errors import LeaseSyncError, ResolutionMiss, ScopeViolationError
from .fetcher import FetchResult, IncrementalFetcher
from .lifecycle import LifecycleTarget, derive_transition
from .listing_cache import NOT_LOOKED_UP, ListingCache, LookedUp
from .observer import LifecycleObserver, LoggingObserver, NullObserver
from .reconciler import ReconcileOutcome, ReconciliationPlan, plan_reconciliation, reconcile
from .resolver import EntityResolver
from .runner import LimitMode, LimitPolicy, run_reconciliation
from .scope import assert_in_scope
from .stats import SyncStats

__all__ = [
    "NOT_LOOKED_UP",
    "EntityResolver",
    "FetchResult",
    "IncrementalFetcher",
    "LeaseSyncError",
    "LifecycleObserver",
    "LifecycleSyncRequest",
    "LifecycleSyncResult",
    "LifecycleTarget",
    "LimitMode",
    "LimitPolicy",
    "ListingCache",
    "LoggingObserver",
    "LookedUp",
    "NullObserver",
    "ReconcileOutcome",
    "ReconciliationPlan",
    "ResolutionMiss",
    "ScopeViolationError",
    "SyncStats",
    "assert_in_scope",
    "derive_transition",
    "plan_reconciliation",
    "reconcile",
    "run_reconciliation",
    "sync_lease_lifecycle",
]
