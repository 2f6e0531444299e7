"""Rental contract, co-tenant and provisioning API routes."""

import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, Header, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leasing.api.deps import get_view_cache
from leasing.errors import EntityNotFoundError
from leasing.models import ChargeKind, Contract
from leasing.schemas.contracts import (
    ContractCreate,
    ContractResponse,
    ScheduleEntryResponse,
    TenantCreate,
    TenantResponse,
)
from leasing.schemas.owners import OwnerResponse
from leasing.schemas.provisioning import (
    ProvisioningPayload,
    ProvisioningResponse,
    ScheduleDraftResponse,
    TenantResultResponse,
)
from leasing.services import get_async_session
from leasing.services.cache import CONTRACTS_KEY, UNITS_KEY, ViewCache
from leasing.services.entity_store import ContractDraft, SqlEntityStore, TenantDraft
from leasing.services.provisioning_service import (
    ContractProvisioningWorkflow,
    LeaseTerms,
    OwnerSelection,
    PetDetails,
    ProvisioningRequest,
    TenantSelection,
)
from leasing.services.schedule_service import ChargeDefinition, ScheduleEntryDraft

logger = logging.getLogger(__name__)

router = APIRouter(tags=["contracts"])


@router.post(
    "/external-rental-contracts",
    response_model=ContractResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_contract(
    payload: ContractCreate,
    idempotency_key: str | None = Header(None, alias="Idempotency-Key"),
    db: AsyncSession = Depends(get_async_session),
    cache: ViewCache = Depends(get_view_cache),
) -> ContractResponse:
    """
    Create a contract together with its schedule entries.

    A repeated request with the same Idempotency-Key returns the contract
    created by the first one.

    Returns:
        201: Created (or previously created) contract
        404: Unit does not exist
        422: Validation error if required fields missing
    """
    data = payload.contract
    draft = ContractDraft(
        unit_id=data.unit_id,
        owner_id=data.owner_id,
        client_id=data.client_id,
        tenant_name=data.tenant_name,
        tenant_email=data.tenant_email,
        tenant_phone=data.tenant_phone,
        start_date=data.start_date,
        end_date=data.end_date,
        monthly_rent=data.monthly_rent,
        security_deposit=data.security_deposit,
        lease_duration_months=data.lease_duration_months,
        currency=data.currency,
        rental_purpose=data.rental_purpose,
        has_pet=data.has_pet,
        pet_name=data.pet_name,
        pet_photo_url=data.pet_photo_url,
        pet_description=data.pet_description,
    )
    services = [
        ScheduleEntryDraft(
            service_type=service.service_type,
            charge_kind=service.charge_kind,
            amount=Decimal("0") if service.charge_kind == ChargeKind.VARIABLE else service.amount,
            day_of_month=service.day_of_month,
            payment_frequency=service.payment_frequency,
            currency=service.currency or data.currency,
        )
        for service in payload.additional_services
    ]

    contract = await SqlEntityStore(db).create_contract(draft, services, provisioning_key=idempotency_key)
    cache.invalidate(CONTRACTS_KEY, UNITS_KEY)
    return ContractResponse.model_validate(contract)


@router.get("/external-rental-contracts", response_model=list[ContractResponse])
async def list_contracts(
    db: AsyncSession = Depends(get_async_session),
    cache: ViewCache = Depends(get_view_cache),
) -> list[ContractResponse]:
    async def load() -> list[ContractResponse]:
        contracts = (await db.execute(select(Contract).order_by(Contract.id))).scalars().all()
        return [ContractResponse.model_validate(contract) for contract in contracts]

    return await cache.get_or_load(CONTRACTS_KEY, load)


@router.get(
    "/external-rental-contracts/{contract_id}/schedule",
    response_model=list[ScheduleEntryResponse],
)
async def get_contract_schedule(
    contract_id: int, db: AsyncSession = Depends(get_async_session)
) -> list[ScheduleEntryResponse]:
    """Schedule entries of one contract."""
    if await db.get(Contract, contract_id) is None:
        raise EntityNotFoundError("Contract", contract_id)
    entries = await SqlEntityStore(db).list_schedule(contract_id)
    return [ScheduleEntryResponse.model_validate(entry) for entry in entries]


@router.post(
    "/external-rental-tenants",
    response_model=TenantResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_additional_tenant(
    payload: TenantCreate, db: AsyncSession = Depends(get_async_session)
) -> TenantResponse:
    tenant = await SqlEntityStore(db).create_additional_tenant(
        payload.contract_id,
        TenantDraft(
            full_name=payload.full_name,
            email=payload.email,
            phone=payload.phone,
            id_photo_url=payload.id_photo_url,
        ),
    )
    return TenantResponse.model_validate(tenant)


@router.post(
    "/rental-provisioning",
    response_model=ProvisioningResponse,
    status_code=status.HTTP_201_CREATED,
)
async def provision_contract(
    payload: ProvisioningPayload,
    idempotency_key: str | None = Header(None, alias="Idempotency-Key"),
    db: AsyncSession = Depends(get_async_session),
    cache: ViewCache = Depends(get_view_cache),
) -> ProvisioningResponse:
    """
    Run the whole provisioning workflow for a unit.

    Returns:
        201: Contract, owner, schedule and per co-tenant results
        400: Request incomplete (error.fields lists the message codes)
        502: Owner, tenant or contract step failed (earlier steps are kept)
    """
    request = ProvisioningRequest(
        unit_id=payload.unit_id,
        tenant=TenantSelection(**payload.tenant.model_dump()),
        owner=OwnerSelection(**payload.owner.model_dump()),
        terms=LeaseTerms(**payload.terms.model_dump()),
        extra_charges=[ChargeDefinition(**charge.model_dump()) for charge in payload.extra_charges],
        pet=PetDetails(**payload.pet.model_dump()) if payload.pet else None,
        additional_tenants=[TenantDraft(**tenant.model_dump()) for tenant in payload.additional_tenants],
        provisioning_key=idempotency_key,
    )
    result = await ContractProvisioningWorkflow(SqlEntityStore(db), cache=cache).provision(request)

    if result.failed_tenants:
        logger.warning(
            f"Contract {result.contract.id}: {len(result.failed_tenants)} co-tenant(s) not stored"
        )
    return ProvisioningResponse(
        contract=ContractResponse.model_validate(result.contract),
        owner=OwnerResponse.model_validate(result.owner) if result.owner else None,
        schedule=[ScheduleDraftResponse.model_validate(entry) for entry in result.schedule.entries],
        span_days=result.schedule.span_days,
        tenant_results=[TenantResultResponse.model_validate(item) for item in result.tenant_results],
        completed_steps=[step.value for step in result.completed_steps],
    )
