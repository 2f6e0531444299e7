"""Schemas for unit owners, units and clients."""

from datetime import datetime

from pydantic import Field

from leasing.schemas import CamelModel


class OwnerCreate(CamelModel):
    """Request payload for POST /external-unit-owners."""

    unit_id: int = Field(..., description="Unit the owner receives rent for")
    owner_name: str = Field(..., min_length=1, description="Owner's full name")
    owner_email: str | None = Field(None, description="Owner's email address")
    owner_phone: str | None = Field(None, description="Owner's phone number")
    is_active: bool = True


class OwnerResponse(CamelModel):
    id: int
    unit_id: int
    owner_name: str
    owner_email: str | None = None
    owner_phone: str | None = None
    is_active: bool
    created_at: datetime


class UnitResponse(CamelModel):
    id: int
    condominium_id: int | None = None
    unit_number: str
    is_active: bool
    current_contract_id: int | None = None
    is_available: bool


class ClientResponse(CamelModel):
    id: int
    first_name: str
    last_name: str
    full_name: str
    email: str | None = None
    phone: str | None = None
