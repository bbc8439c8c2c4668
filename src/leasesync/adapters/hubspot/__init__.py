"""Public interface for the HubSpot adapter."""

from __future__ import annotations

from .client import HubSpotAPIError, HubSpotRelationshipGraph
from .schema import AssociationsPage, BatchResponse, CrmObject, SearchResponse
from .translator import parse_association_edges, parse_contact, parse_listing

__all__ = [
    "AssociationsPage",
    "BatchResponse",
    "CrmObject",
    "HubSpotAPIError",
    "HubSpotRelationshipGraph",
    "SearchResponse",
    "parse_association_edges",
    "parse_contact",
    "parse_listing",
]
