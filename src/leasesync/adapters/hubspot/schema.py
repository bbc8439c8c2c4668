"""Pydantic models describing the HubSpot CRM API payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _id_to_str(value: object) -> object:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class HubSpotBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CrmObject(HubSpotBaseModel):
    id: str
    properties: dict[str, str | None] = Field(default_factory=dict)

    _normalize_id = field_validator("id", mode="before")(_id_to_str)

    def get_property(self, name: str) -> str | None:
        value = self.properties.get(name)
        if value is None:
            return None
        return value.strip() or None


class SearchResponse(HubSpotBaseModel):
    total: int = 0
    results: list[CrmObject] = Field(default_factory=list)


class BatchErrorPayload(HubSpotBaseModel):
    status: str | None = None
    category: str | None = None
    message: str | None = None


class BatchResponse(HubSpotBaseModel):
    status: str | None = None
    results: list[CrmObject] = Field(default_factory=list)
    errors: list[BatchErrorPayload] = Field(default_factory=list)


class BatchWriteResponse(HubSpotBaseModel):
    status: str | None = None
    errors: list[BatchErrorPayload] = Field(default_factory=list)


class AssociationTypePayload(HubSpotBaseModel):
    category: str | None = None
    type_id: int = Field(alias="typeId")
    label: str | None = None


class AssociationResult(HubSpotBaseModel):
    to_object_id: str = Field(alias="toObjectId")
    association_types: list[AssociationTypePayload] = Field(
        default_factory=list, alias="associationTypes"
    )

    _normalize_id = field_validator("to_object_id", mode="before")(_id_to_str)


class PagingCursor(HubSpotBaseModel):
    after: str | None = None
    link: str | None = None


class Paging(HubSpotBaseModel):
    next: PagingCursor | None = None


class AssociationsPage(HubSpotBaseModel):
    results: list[AssociationResult] = Field(default_factory=list)
    paging: Paging | None = None

    @property
    def next_after(self) -> str | None:
        if self.paging is None or self.paging.next is None:
            return None
        return self.paging.next.after
