"""Immutable snapshots of source records and target entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import LeaseStatus

if TYPE_CHECKING:
    from datetime import datetime

    from .enums import AssociationType


@dataclass(frozen=True, slots=True)
class TenantRef:
    """Tenant reference embedded in a lease record."""

    tenant_id: str
    first_name: str | None = None
    last_name: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class LeaseRecord:
    """Snapshot of one lease as fetched from the source system.

    ``unit_id`` may be ``None`` when the source omits it; such leases cannot be
    scope-verified and never resolve a listing.
    """

    lease_id: str
    unit_id: str | None
    status: LeaseStatus
    tenants: tuple[TenantRef, ...] = ()
    last_updated: datetime | None = None
    property_id: str | None = None
    unit_number: str | None = None
    raw_status: str | None = None

    @property
    def tenant_ids(self) -> tuple[str, ...]:
        return tuple(tenant.tenant_id for tenant in self.tenants)


@dataclass(frozen=True, slots=True)
class TenantRecord:
    tenant_id: str
    email: str | None
    first_name: str | None = None
    last_name: str | None = None

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


@dataclass(frozen=True, slots=True)
class ContactEntity:
    contact_id: str
    email: str | None = None


@dataclass(frozen=True, slots=True)
class ListingEntity:
    listing_id: str
    unit_id: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class AssociationEdge:
    contact_id: str
    listing_id: str
    type_id: AssociationType


@dataclass(frozen=True, slots=True)
class UnitDescriptor:
    """Unit identifier plus the parent metadata used to group batched lookups."""

    unit_id: str
    property_id: str | None = None
    unit_number: str | None = None


@dataclass(frozen=True, slots=True)
class ProcessingScope:
    """Units and properties a run is allowed to mutate."""

    unit_ids: frozenset[str] = field(default_factory=frozenset[str])
    property_ids: frozenset[str] = field(default_factory=frozenset[str])

    @classmethod
    def of(
        cls,
        *,
        unit_ids: tuple[str, ...] | list[str] | frozenset[str] = (),
        property_ids: tuple[str, ...] | list[str] | frozenset[str] = (),
    ) -> ProcessingScope:
        return cls(
            unit_ids=frozenset(str(value) for value in unit_ids),
            property_ids=frozenset(str(value) for value in property_ids),
        )

    @property
    def is_empty(self) -> bool:
        return not self.unit_ids and not self.property_ids

    def contains(self, lease: LeaseRecord) -> bool:
        if lease.unit_id is not None and lease.unit_id in self.unit_ids:
            return True
        return lease.property_id is not None and lease.property_id in self.property_ids
