"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import IntEnum, StrEnum


class LeaseStatus(StrEnum):
    FUTURE = "Future"
    ACTIVE = "Active"
    PAST = "Past"
    EXPIRED = "Expired"
    TERMINATED = "Terminated"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str | None) -> LeaseStatus:
        """Map a raw source status onto the enum, ``UNKNOWN`` for anything unrecognised."""

        if value is None:
            return cls.UNKNOWN
        normalized = value.strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        return cls.UNKNOWN


class AssociationType(IntEnum):
    """Contact -> Listing association labels in the target graph.

    Values are the target system's association type ids.
    """

    FUTURE_TENANT = 11
    ACTIVE_TENANT = 2
    INACTIVE_TENANT = 6
    OWNER = 4

    @property
    def label(self) -> str:
        return _ASSOCIATION_LABELS[self]

    @classmethod
    def from_type_id(cls, type_id: int) -> AssociationType | None:
        try:
            return cls(type_id)
        except ValueError:
            return None


_ASSOCIATION_LABELS = {
    AssociationType.FUTURE_TENANT: "Future Tenant",
    AssociationType.ACTIVE_TENANT: "Active Tenant",
    AssociationType.INACTIVE_TENANT: "Inactive Tenant",
    AssociationType.OWNER: "Owner",
}


class TransitionType(StrEnum):
    FUTURE_TO_ACTIVE = "futureToActive"
    ACTIVE_TO_INACTIVE = "activeToInactive"
    FUTURE_TO_INACTIVE = "futureToInactive"
