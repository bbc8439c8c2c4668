from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import pytest

from leasesync.adapters.hubspot import HubSpotAPIError, HubSpotRelationshipGraph
from leasesync.config.http_resilience import ResilienceConfig
from leasesync.config.hubspot import HubSpotConfig
from leasesync.domain.model import (
    AssociationEdge,
    AssociationType,
    ContactEntity,
    ListingEntity,
)
from tests.helpers.http import make_client_factory, request_json

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


BASE_URL = "https://hubspot.test"


def _config() -> HubSpotConfig:
    return HubSpotConfig(
        access_token="token",  # noqa: S106
        resilience=ResilienceConfig(name="hubspot", base_url=BASE_URL, cache=None),
    )


def _call[T](
    handler: Callable[[httpx.Request], httpx.Response],
    action: Callable[[HubSpotRelationshipGraph], Awaitable[T]],
) -> T:
    async def scenario() -> T:
        graph = HubSpotRelationshipGraph(
            config=_config(), client_factory=make_client_factory(handler)
        )
        async with graph:
            return await action(graph)

    return asyncio.run(scenario())


def test_contact_search_by_email() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"total": 1, "results": [{"id": "51", "properties": {"email": "a@example.com"}}]},
        )

    contact = _call(handler, lambda graph: graph.find_contact_by_email("a@example.com"))

    assert contact == ContactEntity(contact_id="51", email="a@example.com")
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/crm/v3/objects/contacts/search"
    body = request_json(seen[0])
    assert body["filterGroups"] == [
        {"filters": [{"propertyName": "email", "operator": "EQ", "value": "a@example.com"}]}
    ]


def test_contact_search_miss() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return httpx.Response(200, json={"total": 0, "results": []})

    assert _call(handler, lambda graph: graph.find_contact_by_email("x@example.com")) is None


def test_listing_search_by_unit_id() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "results": [
                    {"id": 9001, "properties": {"buildium_unit_id": "11", "hs_name": "Unit 2A"}}
                ]
            },
        )

    listing = _call(handler, lambda graph: graph.find_listing_by_unit_id("11"))

    assert listing == ListingEntity(listing_id="9001", unit_id="11", name="Unit 2A")
    assert seen[0].url.path == "/crm/v3/objects/0-420/search"
    filters = request_json(seen[0])["filterGroups"]
    assert filters == [
        {"filters": [{"propertyName": "buildium_unit_id", "operator": "EQ", "value": "11"}]}
    ]


def test_listing_batch_read_is_chunked() -> None:
    requested: list[list[str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = request_json(request)
        assert body["idProperty"] == "buildium_unit_id"
        inputs = body["inputs"]
        assert isinstance(inputs, list)
        ids = [str(item["id"]) for item in inputs]  # pyright: ignore[reportUnknownArgumentType,reportUnknownVariableType]
        requested.append(ids)
        results = [
            {"id": f"L{unit_id}", "properties": {"buildium_unit_id": unit_id}}
            for unit_id in ids
            if int(unit_id) % 2 == 0
        ]
        return httpx.Response(207, json={"status": "COMPLETE", "results": results})

    unit_ids = [str(index) for index in range(150)]
    listings = _call(handler, lambda graph: graph.find_listings_by_unit_ids([*unit_ids, "0"]))

    assert [len(chunk) for chunk in requested] == [100, 50]
    assert len(listings) == 75
    assert listings[0] == ListingEntity(listing_id="L0", unit_id="0")


def test_list_associations_follows_paging_and_filters() -> None:
    seen: list[httpx.Request] = []
    pages = {
        None: {
            "results": [
                {
                    "toObjectId": 100,
                    "associationTypes": [
                        {"category": "USER_DEFINED", "typeId": 11, "label": "Future Tenant"},
                        {"category": "HUBSPOT_DEFINED", "typeId": 2, "label": None},
                    ],
                },
                {
                    "toObjectId": 200,
                    "associationTypes": [{"category": "USER_DEFINED", "typeId": 2}],
                },
            ],
            "paging": {"next": {"after": "cursor-1"}},
        },
        "cursor-1": {
            "results": [
                {
                    "toObjectId": "100",
                    "associationTypes": [
                        {"category": "USER_DEFINED", "typeId": 4, "label": "Owner"},
                        {"category": "USER_DEFINED", "typeId": 77, "label": "Other"},
                    ],
                }
            ]
        },
    }

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=pages[request.url.params.get("after")])

    edges = _call(handler, lambda graph: graph.list_associations("51", "100"))

    assert seen[0].url.path == "/crm/v4/objects/contacts/51/associations/0-420"
    assert len(seen) == 2
    assert edges == [
        AssociationEdge("51", "100", AssociationType.FUTURE_TENANT),
        AssociationEdge("51", "100", AssociationType.OWNER),
    ]


def test_create_association_posts_user_defined_label() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"status": "COMPLETE", "results": []})

    _call(
        handler,
        lambda graph: graph.create_association("51", "100", AssociationType.ACTIVE_TENANT),
    )

    assert seen[0].url.path == "/crm/v4/associations/contacts/0-420/batch/create"
    assert request_json(seen[0]) == {
        "inputs": [
            {
                "from": {"id": "51"},
                "to": {"id": "100"},
                "types": [{"associationCategory": "USER_DEFINED", "associationTypeId": 2}],
            }
        ]
    }


def test_delete_association_archives_only_the_label() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    _call(
        handler,
        lambda graph: graph.delete_association("51", "100", AssociationType.FUTURE_TENANT),
    )

    assert seen[0].url.path == "/crm/v4/associations/contacts/0-420/batch/labels/archive"
    body = request_json(seen[0])
    assert body["inputs"] == [
        {
            "from": {"id": "51"},
            "to": {"id": "100"},
            "types": [{"associationCategory": "USER_DEFINED", "associationTypeId": 11}],
        }
    ]


def test_batch_write_errors_raise() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return httpx.Response(
            207,
            json={
                "status": "COMPLETE",
                "results": [],
                "errors": [{"status": "error", "message": "Invalid association type"}],
            },
        )

    with pytest.raises(HubSpotAPIError, match="Invalid association type"):
        _call(
            handler,
            lambda graph: graph.create_association("51", "100", AssociationType.ACTIVE_TENANT),
        )


def test_http_errors_propagate() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return httpx.Response(429, json={"message": "rate limited"})

    with pytest.raises(httpx.HTTPStatusError):
        _call(handler, lambda graph: graph.find_contact_by_email("a@example.com"))
