"""HTTP client for the Buildium API, exposed as a lease source."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from leasesync.adapters.http_resilience import ResilientClient

from .schema import LeasePayload, UnitPayload
from .translator import parse_lease, parse_tenant

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime
    from types import TracebackType

    from leasesync.config.buildium import BuildiumConfig
    from leasesync.config.http_resilience import ResilienceConfig
    from leasesync.domain.model import LeaseRecord, TenantRecord
    from leasesync.domain.ports import LeaseSource

log = getLogger(__name__)

UNIT_LEASE_PAGE_SIZE = 100
UNIT_LEASE_MAX_RECORDS = 10_000


class BuildiumAPIError(RuntimeError):
    """Raised when the Buildium API returns an unexpected response."""


def should_cache_buildium_payload(payload: object) -> bool:
    """Cache single tenant and unit lookups; lease listings change during a run."""

    if not isinstance(payload, Mapping):
        return False
    return "Email" in payload or "UnitNumber" in payload


def format_buildium_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


class BuildiumLeaseSource:
    """Lease source backed by one long-lived resilient client.

    Use as an async context manager so the rate limiter and connection pool are
    shared by every request of a run.
    """

    def __init__(
        self,
        *,
        config: BuildiumConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._client: ResilientClient | None = None

    async def __aenter__(self) -> BuildiumLeaseSource:
        self._client = self._client_factory(self._resilience)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    async def list_leases_updated_since(
        self, since: datetime, *, limit: int, offset: int
    ) -> list[LeaseRecord]:
        params = httpx.QueryParams(
            {
                "lastupdatedfrom": format_buildium_timestamp(since),
                "limit": limit,
                "offset": offset,
            }
        )
        return await self._get_leases(params)

    async def list_leases_for_properties(
        self, property_ids: Sequence[str], *, limit: int, offset: int
    ) -> list[LeaseRecord]:
        params = httpx.QueryParams(
            [("propertyids", property_id) for property_id in property_ids]
            + [("limit", limit), ("offset", offset)]
        )
        return await self._get_leases(params)

    async def list_leases_for_unit(self, unit_id: str) -> list[LeaseRecord]:
        unit = await self._get_unit(unit_id)
        if unit is None or unit.property_id is None:
            log.warning("Buildium unit %s not found or has no property", unit_id)
            return []

        candidates: list[LeaseRecord] = []
        if unit.unit_number is not None:
            candidates = await self._collect_leases(
                [("propertyids", unit.property_id), ("unitnumber", unit.unit_number)]
            )
        if not candidates:
            log.debug("No leases matched unit number for unit %s; using property filter", unit_id)
            candidates = await self._collect_leases([("propertyids", unit.property_id)])

        matched = [lease for lease in candidates if lease.unit_id == unit_id]
        if len(matched) != len(candidates):
            log.debug(
                "Dropped %s leases of property %s not on unit %s",
                len(candidates) - len(matched),
                unit.property_id,
                unit_id,
            )
        return matched

    async def get_tenant(self, tenant_id: str) -> TenantRecord | None:
        payload = await self._get_json(f"/leases/tenants/{tenant_id}", allow_missing=True)
        if payload is None:
            return None
        if not isinstance(payload, Mapping):
            raise BuildiumAPIError(f"Unexpected Buildium tenant payload for {tenant_id}")
        return parse_tenant(payload)

    async def _get_unit(self, unit_id: str) -> UnitPayload | None:
        payload = await self._get_json(f"/rentals/units/{unit_id}", allow_missing=True)
        if payload is None:
            return None
        if not isinstance(payload, Mapping):
            raise BuildiumAPIError(f"Unexpected Buildium unit payload for {unit_id}")
        return UnitPayload.model_validate(payload)

    async def _collect_leases(self, filters: list[tuple[str, str]]) -> list[LeaseRecord]:
        leases: list[LeaseRecord] = []
        offset = 0
        while offset < UNIT_LEASE_MAX_RECORDS:
            params = httpx.QueryParams(
                [*filters, ("limit", UNIT_LEASE_PAGE_SIZE), ("offset", offset)]
            )
            page = await self._get_leases(params)
            leases.extend(page)
            if len(page) < UNIT_LEASE_PAGE_SIZE:
                break
            offset += UNIT_LEASE_PAGE_SIZE
        return leases

    async def _get_leases(self, params: httpx.QueryParams) -> list[LeaseRecord]:
        payload = await self._get_json("/leases", params=params)
        if not isinstance(payload, list):
            raise BuildiumAPIError("Unexpected Buildium lease list payload")
        return [parse_lease(LeasePayload.model_validate(item)) for item in payload]

    async def _get_json(
        self,
        path: str,
        *,
        params: httpx.QueryParams | None = None,
        allow_missing: bool = False,
    ) -> object:
        client = self._require_client()
        response = await client.get(path, params=params)
        if allow_missing and response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()
        return response.json()

    def _require_client(self) -> ResilientClient:
        if self._client is None:
            raise BuildiumAPIError("BuildiumLeaseSource must be used inside 'async with'")
        return self._client


if TYPE_CHECKING:

    def _satisfies_port(source: BuildiumLeaseSource) -> LeaseSource:
        return source
