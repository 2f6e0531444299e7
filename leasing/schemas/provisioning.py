"""Schemas for POST /rental-provisioning.

Amounts and dates are accepted as entered (text or numbers); the workflow
parses them and reports problems as message codes.
"""

from pydantic import Field

from leasing.models import ChargeKind, PaymentFrequency, ServiceType
from leasing.schemas import CamelModel
from leasing.schemas.contracts import ContractResponse
from leasing.schemas.owners import OwnerResponse


class TenantSelectionPayload(CamelModel):
    use_existing_client: bool = False
    client_id: int | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None


class OwnerSelectionPayload(CamelModel):
    existing_owner_id: int | None = None
    is_creating_new_owner: bool = False
    replace_owner: bool = False
    name: str | None = None
    email: str | None = None
    phone: str | None = None


class LeaseTermsPayload(CamelModel):
    start_date: str | None = None
    duration_months: int | None = 12
    end_date: str | None = None
    monthly_rent: str | float | None = None
    security_deposit: str | float | None = None
    currency: str | None = None
    rental_purpose: str = "living"


class ChargePayload(CamelModel):
    service_type: str
    day_of_month: int = 1
    amount: str | float | None = None
    charge_kind: str = "fixed"
    payment_frequency: str = "monthly"
    currency: str | None = None


class PetPayload(CamelModel):
    has_pet: bool = False
    name: str | None = None
    photo_url: str | None = None
    description: str | None = None


class AdditionalTenantPayload(CamelModel):
    full_name: str = ""
    email: str | None = None
    phone: str | None = None
    id_photo_url: str | None = None


class ProvisioningPayload(CamelModel):
    unit_id: int | None = None
    tenant: TenantSelectionPayload = Field(default_factory=TenantSelectionPayload)
    owner: OwnerSelectionPayload = Field(default_factory=OwnerSelectionPayload)
    terms: LeaseTermsPayload
    extra_charges: list[ChargePayload] = Field(default_factory=list)
    pet: PetPayload | None = None
    additional_tenants: list[AdditionalTenantPayload] = Field(default_factory=list)


class ScheduleDraftResponse(CamelModel):
    service_type: ServiceType
    charge_kind: ChargeKind
    amount: float
    day_of_month: int
    payment_frequency: PaymentFrequency
    currency: str


class TenantResultResponse(CamelModel):
    full_name: str
    ok: bool
    tenant_id: int | None = None
    error: str | None = None


class ProvisioningResponse(CamelModel):
    contract: ContractResponse
    owner: OwnerResponse | None = None
    schedule: list[ScheduleDraftResponse]
    span_days: int | None = None
    tenant_results: list[TenantResultResponse]
    completed_steps: list[str]
