"""Pydantic models describing the Buildium API payloads."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _id_to_str(value: object) -> object:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _none_to_list(value: object) -> object:
    return [] if value is None else value


class BuildiumBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LeaseTenantPayload(BuildiumBaseModel):
    id: str = Field(alias="Id")
    first_name: str | None = Field(default=None, alias="FirstName")
    last_name: str | None = Field(default=None, alias="LastName")

    _normalize_id = field_validator("id", mode="before")(_id_to_str)


class LeasePayload(BuildiumBaseModel):
    id: str = Field(alias="Id")
    unit_id: str | None = Field(default=None, alias="UnitId")
    property_id: str | None = Field(default=None, alias="PropertyId")
    unit_number: str | None = Field(default=None, alias="UnitNumber")
    lease_status: str | None = Field(
        default=None, validation_alias=AliasChoices("LeaseStatus", "Status", "lease_status")
    )
    tenants: list[LeaseTenantPayload] = Field(
        default_factory=list,
        validation_alias=AliasChoices("Tenants", "CurrentTenants", "tenants"),
    )
    last_updated: datetime | None = Field(default=None, alias="LastUpdatedDateTime")

    _normalize_ids = field_validator("id", "unit_id", "property_id", mode="before")(_id_to_str)
    _normalize_text = field_validator("unit_number", "lease_status", mode="before")(
        _blank_to_none
    )
    _normalize_tenants = field_validator("tenants", mode="before")(_none_to_list)


class TenantPayload(BuildiumBaseModel):
    id: str = Field(alias="Id")
    email: str | None = Field(default=None, alias="Email")
    first_name: str | None = Field(default=None, alias="FirstName")
    last_name: str | None = Field(default=None, alias="LastName")

    _normalize_id = field_validator("id", mode="before")(_id_to_str)
    _normalize_email = field_validator("email", mode="before")(_blank_to_none)


class UnitPayload(BuildiumBaseModel):
    id: str = Field(alias="Id")
    property_id: str | None = Field(default=None, alias="PropertyId")
    unit_number: str | None = Field(default=None, alias="UnitNumber")

    _normalize_ids = field_validator("id", "property_id", mode="before")(_id_to_str)
    _normalize_number = field_validator("unit_number", mode="before")(_blank_to_none)
