"""HTTP client for the HubSpot CRM API, exposed as a relationship graph."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from leasesync.adapters.http_resilience import ResilientClient

from .schema import AssociationsPage, BatchResponse, BatchWriteResponse, SearchResponse
from .translator import (
    LISTING_NAME_PROPERTY,
    UNIT_ID_PROPERTY,
    USER_DEFINED_CATEGORY,
    parse_association_edges,
    parse_contact,
    parse_listing,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import TracebackType

    from leasesync.config.http_resilience import ResilienceConfig
    from leasesync.config.hubspot import HubSpotConfig
    from leasesync.domain.model import (
        AssociationEdge,
        AssociationType,
        ContactEntity,
        ListingEntity,
    )
    from leasesync.domain.ports import RelationshipGraph

    from .schema import AssociationResult

log = getLogger(__name__)

CONTACTS_OBJECT = "contacts"
LISTINGS_OBJECT = "0-420"
BATCH_READ_CHUNK_SIZE = 100
ASSOCIATIONS_PAGE_LIMIT = 500
CONTACT_PROPERTIES = ("email", "firstname", "lastname")
LISTING_PROPERTIES = (UNIT_ID_PROPERTY, LISTING_NAME_PROPERTY)


class HubSpotAPIError(RuntimeError):
    """Raised when the HubSpot API returns an unexpected or failed batch response."""


class HubSpotRelationshipGraph:
    """Contacts, listings and their association labels held in HubSpot.

    Use as an async context manager; every request of a run goes through the same
    rate-limited client.
    """

    def __init__(
        self,
        *,
        config: HubSpotConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._client: ResilientClient | None = None

    async def __aenter__(self) -> HubSpotRelationshipGraph:
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

    async def find_contact_by_email(self, email: str) -> ContactEntity | None:
        response = await self._search(
            CONTACTS_OBJECT, property_name="email", value=email, properties=CONTACT_PROPERTIES
        )
        if not response.results:
            return None
        return parse_contact(response.results[0])

    async def find_listing_by_unit_id(self, unit_id: str) -> ListingEntity | None:
        response = await self._search(
            LISTINGS_OBJECT,
            property_name=UNIT_ID_PROPERTY,
            value=unit_id,
            properties=LISTING_PROPERTIES,
        )
        if not response.results:
            return None
        return parse_listing(response.results[0], unit_id=unit_id)

    async def find_listings_by_unit_ids(self, unit_ids: Sequence[str]) -> list[ListingEntity]:
        unique_ids = list(dict.fromkeys(unit_id for unit_id in unit_ids if unit_id))
        listings: list[ListingEntity] = []
        for index in range(0, len(unique_ids), BATCH_READ_CHUNK_SIZE):
            chunk = unique_ids[index : index + BATCH_READ_CHUNK_SIZE]
            payload = await self._post_json(
                f"/crm/v3/objects/{LISTINGS_OBJECT}/batch/read",
                {
                    "idProperty": UNIT_ID_PROPERTY,
                    "properties": list(LISTING_PROPERTIES),
                    "inputs": [{"id": unit_id} for unit_id in chunk],
                },
            )
            response = BatchResponse.model_validate(payload)
            for result in response.results:
                listing = parse_listing(result)
                if listing is not None:
                    listings.append(listing)
            log.debug(
                "Listing batch read: requested=%s found=%s", len(chunk), len(response.results)
            )
        return listings

    async def list_associations(self, contact_id: str, listing_id: str) -> list[AssociationEdge]:
        results: list[AssociationResult] = []
        after: str | None = None
        while True:
            params: dict[str, str | int] = {"limit": ASSOCIATIONS_PAGE_LIMIT}
            if after is not None:
                params["after"] = after
            response = await self._request(
                "GET",
                f"/crm/v4/objects/{CONTACTS_OBJECT}/{contact_id}/associations/{LISTINGS_OBJECT}",
                params=httpx.QueryParams(params),
            )
            page = AssociationsPage.model_validate(response.json())
            results.extend(page.results)
            after = page.next_after
            if not after:
                break
        return parse_association_edges(contact_id, listing_id, results)

    async def create_association(
        self, contact_id: str, listing_id: str, type_id: AssociationType
    ) -> None:
        await self._write_association("batch/create", contact_id, listing_id, type_id)

    async def delete_association(
        self, contact_id: str, listing_id: str, type_id: AssociationType
    ) -> None:
        # Archiving a single label keeps any other labels (e.g. owner) on the pair.
        await self._write_association("batch/labels/archive", contact_id, listing_id, type_id)

    async def _write_association(
        self, operation: str, contact_id: str, listing_id: str, type_id: AssociationType
    ) -> None:
        payload = await self._post_json(
            f"/crm/v4/associations/{CONTACTS_OBJECT}/{LISTINGS_OBJECT}/{operation}",
            {
                "inputs": [
                    {
                        "from": {"id": contact_id},
                        "to": {"id": listing_id},
                        "types": [
                            {
                                "associationCategory": USER_DEFINED_CATEGORY,
                                "associationTypeId": int(type_id),
                            }
                        ],
                    }
                ]
            },
        )
        if payload is None:
            return
        response = BatchWriteResponse.model_validate(payload)
        if response.errors:
            messages = "; ".join(error.message or "unknown error" for error in response.errors)
            raise HubSpotAPIError(
                f"Association {operation} failed for contact {contact_id} "
                f"and listing {listing_id}: {messages}"
            )

    async def _search(
        self,
        object_type: str,
        *,
        property_name: str,
        value: str,
        properties: Sequence[str],
    ) -> SearchResponse:
        payload = await self._post_json(
            f"/crm/v3/objects/{object_type}/search",
            {
                "filterGroups": [
                    {"filters": [{"propertyName": property_name, "operator": "EQ", "value": value}]}
                ],
                "properties": list(properties),
                "limit": 1,
            },
        )
        if payload is None:
            raise HubSpotAPIError(f"Empty HubSpot search response for {object_type}")
        return SearchResponse.model_validate(payload)

    async def _post_json(self, path: str, body: dict[str, object]) -> object | None:
        response = await self._request("POST", path, json=body)
        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        payload = response.json()
        if not isinstance(payload, dict):
            raise HubSpotAPIError(f"Unexpected HubSpot response payload from {path}")
        return payload

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: httpx.QueryParams | None = None,
        json: object = None,
    ) -> httpx.Response:
        client = self._require_client()
        if json is None:
            response = await client.request(method, path, params=params)
        else:
            response = await client.request(method, path, params=params, json=json)
        response.raise_for_status()
        return response

    def _require_client(self) -> ResilientClient:
        if self._client is None:
            raise HubSpotAPIError("HubSpotRelationshipGraph must be used inside 'async with'")
        return self._client


if TYPE_CHECKING:

    def _satisfies_port(graph: HubSpotRelationshipGraph) -> RelationshipGraph:
        return graph
