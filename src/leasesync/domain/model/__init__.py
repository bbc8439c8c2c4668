"""Domain model for lease lifecycle reconciliation."""

from __future__ import annotations

from .enums import AssociationType, LeaseStatus, TransitionType
from .records import (
    AssociationEdge,
    ContactEntity,
    LeaseRecord,
    ListingEntity,
    ProcessingScope,
    TenantRecord,
    TenantRef,
    UnitDescriptor,
)

__all__ = [
    "AssociationEdge",
    "AssociationType",
    "ContactEntity",
    "LeaseRecord",
    "LeaseStatus",
    "ListingEntity",
    "ProcessingScope",
    "TenantRecord",
    "TenantRef",
    "TransitionType",
    "UnitDescriptor",
]
