"""Ports for reading lease data from the source of record."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from leasesync.domain.model import LeaseRecord, TenantRecord


@runtime_checkable
class LeaseSource(Protocol):
    """Read-only access to leases and tenants in the source system."""

    async def list_leases_updated_since(
        self, since: datetime, *, limit: int, offset: int
    ) -> list[LeaseRecord]: ...

    async def list_leases_for_properties(
        self, property_ids: Sequence[str], *, limit: int, offset: int
    ) -> list[LeaseRecord]: ...

    async def list_leases_for_unit(self, unit_id: str) -> list[LeaseRecord]: ...

    async def get_tenant(self, tenant_id: str) -> TenantRecord | None: ...
