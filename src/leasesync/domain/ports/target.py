"""Ports for the relationship graph held by the target system."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from leasesync.domain.model import (
        AssociationEdge,
        AssociationType,
        ContactEntity,
        ListingEntity,
    )


@runtime_checkable
class RelationshipGraph(Protocol):
    """Lookup and mutation of contacts, listings and their association edges."""

    async def find_contact_by_email(self, email: str) -> ContactEntity | None: ...

    async def find_listing_by_unit_id(self, unit_id: str) -> ListingEntity | None: ...

    async def find_listings_by_unit_ids(self, unit_ids: Sequence[str]) -> list[ListingEntity]: ...

    async def list_associations(
        self, contact_id: str, listing_id: str
    ) -> list[AssociationEdge]: ...

    async def create_association(
        self, contact_id: str, listing_id: str, type_id: AssociationType
    ) -> None: ...

    async def delete_association(
        self, contact_id: str, listing_id: str, type_id: AssociationType
    ) -> None: ...
