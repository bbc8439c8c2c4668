"""Per-run counters."""

from __future__ import annotations

from dataclasses import dataclass

from .model import TransitionType


@dataclass(slots=True)
class SyncStats:
    """Counts of applied (or, in dry-run, planned) transitions and failed leases."""

    future_to_active: int = 0
    active_to_inactive: int = 0
    future_to_inactive: int = 0
    errors: int = 0

    def record_transition(self, transition: TransitionType) -> None:
        match transition:
            case TransitionType.FUTURE_TO_ACTIVE:
                self.future_to_active += 1
            case TransitionType.ACTIVE_TO_INACTIVE:
                self.active_to_inactive += 1
            case TransitionType.FUTURE_TO_INACTIVE:
                self.future_to_inactive += 1

    def record_error(self) -> None:
        self.errors += 1

    @property
    def total_transitions(self) -> int:
        return self.future_to_active + self.active_to_inactive + self.future_to_inactive
