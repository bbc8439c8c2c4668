"""Translate HubSpot payloads into domain entities."""

from __future__ import annotations

from typing import TYPE_CHECKING

from leasesync.domain.model import AssociationEdge, AssociationType, ContactEntity, ListingEntity

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .schema import AssociationResult, CrmObject

UNIT_ID_PROPERTY = "buildium_unit_id"
LISTING_NAME_PROPERTY = "hs_name"
USER_DEFINED_CATEGORY = "USER_DEFINED"


def parse_contact(payload: CrmObject) -> ContactEntity:
    return ContactEntity(contact_id=payload.id, email=payload.get_property("email"))


def parse_listing(payload: CrmObject, *, unit_id: str | None = None) -> ListingEntity | None:
    resolved_unit = payload.get_property(UNIT_ID_PROPERTY) or unit_id
    if resolved_unit is None:
        return None
    return ListingEntity(
        listing_id=payload.id,
        unit_id=resolved_unit,
        name=payload.get_property(LISTING_NAME_PROPERTY),
    )


def parse_association_edges(
    contact_id: str, listing_id: str, results: Iterable[AssociationResult]
) -> list[AssociationEdge]:
    """Edges between the pair, one per known label; unknown type ids are dropped."""

    edges: list[AssociationEdge] = []
    seen: set[AssociationType] = set()
    for result in results:
        if result.to_object_id != listing_id:
            continue
        for association_type in result.association_types:
            if association_type.category not in (None, USER_DEFINED_CATEGORY):
                continue
            type_id = AssociationType.from_type_id(association_type.type_id)
            if type_id is None or type_id in seen:
                continue
            seen.add(type_id)
            edges.append(AssociationEdge(contact_id, listing_id, type_id))
    return edges
