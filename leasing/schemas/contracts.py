"""Schemas for rental contracts, their services and co-tenants."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field

from leasing.models import ChargeKind, ContractStatus, PaymentFrequency, ServiceType
from leasing.schemas import CamelModel


class ContractPayload(CamelModel):
    """The ``contract`` object of POST /external-rental-contracts."""

    unit_id: int
    owner_id: int | None = None
    client_id: int | None = None
    tenant_name: str = Field(..., min_length=1)
    tenant_email: str | None = None
    tenant_phone: str | None = None
    start_date: date
    end_date: date
    monthly_rent: Decimal = Field(..., gt=0)
    currency: str = "MXN"
    lease_duration_months: int = Field(..., ge=0)
    security_deposit: Decimal = Decimal("0")
    rental_purpose: str = "living"
    has_pet: bool = False
    pet_name: str | None = None
    pet_photo_url: str | None = None
    pet_description: str | None = None


class ServicePayload(CamelModel):
    """One ``additionalServices`` item: a recurring charge definition."""

    service_type: ServiceType
    amount: Decimal = Decimal("0")
    day_of_month: int = Field(..., ge=1, le=31)
    currency: str | None = None
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    charge_kind: ChargeKind = ChargeKind.FIXED


class ContractCreate(CamelModel):
    """Request payload for POST /external-rental-contracts."""

    contract: ContractPayload
    additional_services: list[ServicePayload] = Field(default_factory=list)


class ScheduleEntryResponse(CamelModel):
    id: int
    contract_id: int
    service_type: ServiceType
    charge_kind: ChargeKind
    amount: float
    day_of_month: int
    payment_frequency: PaymentFrequency
    currency: str
    is_active: bool


class ContractResponse(CamelModel):
    id: int
    unit_id: int
    owner_id: int | None = None
    client_id: int | None = None
    tenant_name: str
    tenant_email: str | None = None
    tenant_phone: str | None = None
    start_date: date
    end_date: date
    monthly_rent: float
    currency: str
    lease_duration_months: int
    security_deposit: float
    rental_purpose: str
    status: ContractStatus
    has_pet: bool
    pet_name: str | None = None
    pet_photo_url: str | None = None
    pet_description: str | None = None
    created_at: datetime


class TenantCreate(CamelModel):
    """Request payload for POST /external-rental-tenants."""

    contract_id: int
    full_name: str = Field(..., min_length=1)
    email: str | None = None
    phone: str | None = None
    id_photo_url: str | None = None


class TenantResponse(CamelModel):
    id: int
    contract_id: int
    full_name: str
    email: str | None = None
    phone: str | None = None
    id_photo_url: str | None = None
