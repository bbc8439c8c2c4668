"""Translate Buildium payloads into domain records."""

from __future__ import annotations

from collections.abc import Mapping

from leasesync.domain.model import LeaseRecord, LeaseStatus, TenantRecord, TenantRef

from .schema import LeasePayload, TenantPayload

type LeasePayloadInput = LeasePayload | Mapping[str, object]
type TenantPayloadInput = TenantPayload | Mapping[str, object]


def parse_lease(payload: LeasePayloadInput) -> LeaseRecord:
    lease = payload if isinstance(payload, LeasePayload) else LeasePayload.model_validate(payload)
    return LeaseRecord(
        lease_id=lease.id,
        unit_id=lease.unit_id,
        status=LeaseStatus.parse(lease.lease_status),
        tenants=tuple(
            TenantRef(tenant.id, first_name=tenant.first_name, last_name=tenant.last_name)
            for tenant in lease.tenants
        ),
        last_updated=lease.last_updated,
        property_id=lease.property_id,
        unit_number=lease.unit_number,
        raw_status=lease.lease_status,
    )


def parse_tenant(payload: TenantPayloadInput) -> TenantRecord:
    tenant = (
        payload if isinstance(payload, TenantPayload) else TenantPayload.model_validate(payload)
    )
    return TenantRecord(
        tenant_id=tenant.id,
        email=tenant.email,
        first_name=tenant.first_name,
        last_name=tenant.last_name,
    )
