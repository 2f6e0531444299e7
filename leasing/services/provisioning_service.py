"""Rental contract provisioning workflow.

Turns a unit plus lease terms into an owner, a contract, its billing schedule
and its co-tenants. Steps run strictly in order as separate store calls:

1. owner     - reuse the unit's active owner or create a new one
2. tenant    - copy an existing client's details or take the freeform fields
3. contract  - submit the contract record
4. schedule  - rent entry + extra charges, submitted with the contract
5. additional_tenants - best effort, one result per co-tenant

There is no cross-step transaction. A failure at the owner or contract step
raises ProvisioningError naming the failed step and the steps already done;
earlier writes stay in place. Contract submission carries an optional
idempotency key so a retried attempt returns the contract created the first
time instead of a duplicate.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from dateutil.relativedelta import relativedelta

from leasing.config import settings
from leasing.errors import ProvisioningError, ProvisioningValidationError
from leasing.models import ChargeKind, Contract, Owner
from leasing.services.cache import ACTIVE_OWNER_KEY, CONTRACTS_KEY, UNITS_KEY, ViewCache
from leasing.services.entity_store import ContractDraft, EntityStore, OwnerData, TenantDraft
from leasing.services.schedule_service import (
    MAX_DURATION_MONTHS,
    ChargeDefinition,
    ScheduleResult,
    add_months,
    coerce_enum,
    generate,
    parse_amount,
    parse_date,
)

logger = logging.getLogger(__name__)


class ProvisioningStep(str, Enum):
    """Steps of the workflow, in execution order."""

    OWNER = "owner"
    TENANT = "tenant"
    CONTRACT = "contract"
    SCHEDULE = "schedule"
    ADDITIONAL_TENANTS = "additional_tenants"


@dataclass
class TenantSelection:
    """Either an existing client or freeform tenant details."""

    use_existing_client: bool = False
    client_id: int | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None


@dataclass
class OwnerSelection:
    """How the owner should be resolved.

    ``existing_owner_id`` is the owner the caller already detected for the
    unit, if any. Setting ``is_creating_new_owner`` or ``replace_owner`` skips
    reuse and creates an owner from ``name``/``email``/``phone``.
    """

    existing_owner_id: int | None = None
    is_creating_new_owner: bool = False
    replace_owner: bool = False
    name: str | None = None
    email: str | None = None
    phone: str | None = None

    @property
    def wants_new_owner(self) -> bool:
        return self.is_creating_new_owner or self.replace_owner


@dataclass
class LeaseTerms:
    """Lease terms as entered; amounts may still be decimal text.

    When ``duration_months`` is set it defines the end date; otherwise
    ``end_date`` is taken as given.
    """

    start_date: Any
    duration_months: int | None = 12
    end_date: Any = None
    monthly_rent: Any = None
    security_deposit: Any = None
    currency: str | None = None
    rental_purpose: str = "living"


@dataclass
class PetDetails:
    """Pet details; ignored unless ``has_pet`` is set."""

    has_pet: bool = False
    name: str | None = None
    photo_url: str | None = None
    description: str | None = None


@dataclass
class ProvisioningRequest:
    unit_id: int | None
    tenant: TenantSelection
    owner: OwnerSelection
    terms: LeaseTerms
    extra_charges: list[ChargeDefinition] = field(default_factory=list)
    pet: PetDetails | None = None
    additional_tenants: list[TenantDraft] = field(default_factory=list)
    provisioning_key: str | None = None


@dataclass
class TenantSubmissionResult:
    """Outcome of one co-tenant submission."""

    full_name: str
    ok: bool
    tenant_id: int | None = None
    error: str | None = None


@dataclass
class ProvisioningResult:
    contract: Contract
    owner: Owner | None
    schedule: ScheduleResult
    tenant_results: list[TenantSubmissionResult] = field(default_factory=list)
    completed_steps: list[ProvisioningStep] = field(default_factory=list)

    @property
    def failed_tenants(self) -> list[TenantSubmissionResult]:
        return [result for result in self.tenant_results if not result.ok]


def _blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _months(value: Any) -> int:
    try:
        return int(value) if value is not None else 0
    except (TypeError, ValueError):
        return 0


class ContractProvisioningWorkflow:
    """Runs the provisioning steps against an entity store."""

    def __init__(self, store: EntityStore, cache: ViewCache | None = None):
        self.store = store
        self.cache = cache

    def validate(self, request: ProvisioningRequest) -> list[str]:
        """Collect blocking problems that can be detected without the store.

        Returns:
            List of message codes; empty when the request can proceed
        """
        codes: list[str] = []
        if request.unit_id is None:
            codes.append("unit_required")

        start = parse_date(request.terms.start_date)
        if start is None:
            codes.append("start_date_required")
        else:
            months = _months(request.terms.duration_months)
            if months < 1 and parse_date(request.terms.end_date) is None:
                codes.append("end_date_required")
            elif months > MAX_DURATION_MONTHS or (months >= 1 and add_months(start, months) is None):
                codes.append("invalid_duration")

        if parse_amount(request.terms.monthly_rent) <= 0:
            codes.append("monthly_rent_required")

        if request.owner.wants_new_owner and _blank(request.owner.name):
            codes.append("owner_name_required")

        tenant = request.tenant
        if tenant.use_existing_client:
            if tenant.client_id is None:
                codes.append("client_required")
        else:
            if _blank(tenant.name):
                codes.append("tenant_name_required")
            if _blank(tenant.email):
                codes.append("tenant_email_required")
            if _blank(tenant.phone):
                codes.append("tenant_phone_required")

        for charge in request.extra_charges:
            kind = coerce_enum(ChargeKind, charge.charge_kind, ChargeKind.FIXED)
            if kind == ChargeKind.FIXED and parse_amount(charge.amount) <= 0:
                codes.append("charge_amount_required")
                break

        return codes

    async def provision(self, request: ProvisioningRequest) -> ProvisioningResult:
        """Run every step and return the created contract with per-step outcomes.

        Raises:
            ProvisioningValidationError: Request incomplete (nothing was written)
            ProvisioningError: Owner, tenant or contract step failed
        """
        codes = self.validate(request)
        if codes:
            logger.warning(f"Provisioning for unit {request.unit_id} rejected: {codes}")
            raise ProvisioningValidationError(codes)

        completed: list[ProvisioningStep] = []
        currency = request.terms.currency or settings.default_currency

        owner = await self._resolve_owner(request, completed)
        completed.append(ProvisioningStep.OWNER)

        tenant_name, tenant_email, tenant_phone, client_id = await self._resolve_tenant(
            request, completed
        )
        completed.append(ProvisioningStep.TENANT)

        schedule = generate(
            request.terms.start_date,
            duration_months=request.terms.duration_months,
            end_date=request.terms.end_date,
            monthly_rent=request.terms.monthly_rent,
            currency=currency,
            extra_charges=request.extra_charges,
        )
        pet = request.pet if request.pet and request.pet.has_pet else None
        draft = ContractDraft(
            unit_id=request.unit_id,
            owner_id=owner.id if owner else None,
            client_id=client_id,
            tenant_name=tenant_name,
            tenant_email=tenant_email,
            tenant_phone=tenant_phone,
            start_date=schedule.start_date,
            end_date=schedule.end_date,
            monthly_rent=parse_amount(request.terms.monthly_rent),
            security_deposit=parse_amount(request.terms.security_deposit),
            lease_duration_months=self._duration_months(request.terms, schedule),
            currency=currency,
            rental_purpose=request.terms.rental_purpose,
            has_pet=pet is not None,
            pet_name=pet.name if pet else None,
            pet_photo_url=pet.photo_url if pet else None,
            pet_description=pet.description if pet else None,
        )

        try:
            contract = await self.store.create_contract(
                draft, schedule.entries, provisioning_key=request.provisioning_key
            )
        except Exception as e:
            logger.error(f"Contract creation for unit {request.unit_id} failed: {e}")
            raise ProvisioningError(ProvisioningStep.CONTRACT, completed, e) from e
        completed.append(ProvisioningStep.CONTRACT)
        completed.append(ProvisioningStep.SCHEDULE)
        logger.info(
            f"Contract {contract.id} created for unit {request.unit_id}: "
            f"{schedule.start_date} to {schedule.end_date}, {len(schedule.entries)} schedule entries"
        )

        tenant_results = await self.submit_additional_tenants(contract.id, request.additional_tenants)
        completed.append(ProvisioningStep.ADDITIONAL_TENANTS)

        if self.cache is not None:
            self.cache.invalidate(CONTRACTS_KEY, UNITS_KEY, ACTIVE_OWNER_KEY)

        return ProvisioningResult(
            contract=contract,
            owner=owner,
            schedule=schedule,
            tenant_results=tenant_results,
            completed_steps=completed,
        )

    async def _resolve_owner(
        self, request: ProvisioningRequest, completed: list[ProvisioningStep]
    ) -> Owner | None:
        selection = request.owner
        try:
            if not selection.wants_new_owner:
                existing = await self.store.get_active_owner(request.unit_id)
                if existing is not None:
                    if selection.existing_owner_id not in (None, existing.id):
                        logger.warning(
                            f"Unit {request.unit_id}: detected owner {selection.existing_owner_id} "
                            f"is no longer active, using {existing.id}"
                        )
                    logger.info(f"Reusing owner {existing.id} for unit {request.unit_id}")
                    return existing
                if _blank(selection.name):
                    raise ProvisioningValidationError(["owner_name_required"])

            owner = await self.store.create_owner(
                request.unit_id,
                OwnerData(name=selection.name.strip(), email=selection.email, phone=selection.phone),
            )
        except ProvisioningValidationError:
            raise
        except Exception as e:
            logger.error(f"Owner resolution for unit {request.unit_id} failed: {e}")
            raise ProvisioningError(ProvisioningStep.OWNER, completed, e) from e

        logger.info(f"Created owner {owner.id} ({owner.owner_name}) for unit {request.unit_id}")
        return owner

    async def _resolve_tenant(
        self, request: ProvisioningRequest, completed: list[ProvisioningStep]
    ) -> tuple[str, str | None, str | None, int | None]:
        selection = request.tenant
        if not selection.use_existing_client:
            return (
                selection.name.strip(),
                selection.email.strip(),
                selection.phone.strip(),
                None,
            )

        try:
            client = await self.store.get_client(selection.client_id)
        except Exception as e:
            raise ProvisioningError(ProvisioningStep.TENANT, completed, e) from e
        if client is None:
            raise ProvisioningError(
                ProvisioningStep.TENANT,
                completed,
                LookupError(f"Client {selection.client_id} not found"),
            )
        return client.full_name, client.email or "", client.phone or "", client.id

    @staticmethod
    def _duration_months(terms: LeaseTerms, schedule: ScheduleResult) -> int:
        if _months(terms.duration_months) >= 1:
            return _months(terms.duration_months)
        # Specific-dates mode: derived for display only, never checked
        delta = relativedelta(schedule.end_date, schedule.start_date)
        return delta.years * 12 + delta.months

    async def submit_additional_tenants(
        self, contract_id: int, tenants: list[TenantDraft]
    ) -> list[TenantSubmissionResult]:
        """Submit co-tenants one by one; failures are recorded, never raised."""
        results: list[TenantSubmissionResult] = []
        for tenant in tenants:
            if _blank(tenant.full_name):
                continue
            try:
                created = await self.store.create_additional_tenant(contract_id, tenant)
            except Exception as e:
                logger.warning(
                    f"Additional tenant '{tenant.full_name}' for contract {contract_id} failed: {e}"
                )
                results.append(TenantSubmissionResult(full_name=tenant.full_name, ok=False, error=str(e)))
                continue
            results.append(
                TenantSubmissionResult(full_name=tenant.full_name, ok=True, tenant_id=created.id)
            )
        return results


__all__ = [
    "ContractProvisioningWorkflow",
    "ProvisioningRequest",
    "ProvisioningResult",
    "ProvisioningStep",
    "TenantSelection",
    "OwnerSelection",
    "LeaseTerms",
    "PetDetails",
    "TenantSubmissionResult",
]
