"""Public interface for the Buildium adapter."""

from __future__ import annotations

from .client import (
    BuildiumAPIError,
    BuildiumLeaseSource,
    format_buildium_timestamp,
    should_cache_buildium_payload,
)
from .schema import LeasePayload, LeaseTenantPayload, TenantPayload, UnitPayload
from .translator import parse_lease, parse_tenant

__all__ = [
    "BuildiumAPIError",
    "BuildiumLeaseSource",
    "LeasePayload",
    "LeaseTenantPayload",
    "TenantPayload",
    "UnitPayload",
    "format_buildium_timestamp",
    "parse_lease",
    "parse_tenant",
    "should_cache_buildium_payload",
]
