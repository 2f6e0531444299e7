"""Entity store used by the provisioning workflow.

The workflow only needs a handful of calls: look up and create owners, look
up clients, create a contract together with its schedule, and attach
co-tenants. ``SqlEntityStore`` performs them against the database directly;
``RestEntityStore`` performs them against the REST surface of a running
service, one HTTP request per call.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

import httpx
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from leasing.config import settings
from leasing.errors import EntityNotFoundError, StoreError
from leasing.models import (
    AdditionalTenant,
    Client,
    Contract,
    ContractStatus,
    Owner,
    PaymentScheduleEntry,
    Unit,
)
from leasing.services.schedule_service import ScheduleEntryDraft, parse_amount, parse_date

logger = logging.getLogger(__name__)


@dataclass
class OwnerData:
    """Fields of a new owner."""

    name: str
    email: str | None = None
    phone: str | None = None


@dataclass
class TenantDraft:
    """A co-tenant to attach to a contract."""

    full_name: str
    email: str | None = None
    phone: str | None = None
    id_photo_url: str | None = None

    def to_payload(self, contract_id: int) -> dict[str, Any]:
        payload: dict[str, Any] = {"contractId": contract_id, "fullName": self.full_name}
        if self.email:
            payload["email"] = self.email
        if self.phone:
            payload["phone"] = self.phone
        if self.id_photo_url:
            payload["idPhotoUrl"] = self.id_photo_url
        return payload


@dataclass
class ContractDraft:
    """A contract record assembled by the workflow, not yet submitted."""

    unit_id: int
    tenant_name: str
    start_date: date
    end_date: date
    monthly_rent: Decimal
    lease_duration_months: int
    tenant_email: str | None = None
    tenant_phone: str | None = None
    client_id: int | None = None
    owner_id: int | None = None
    security_deposit: Decimal = Decimal("0")
    currency: str = "MXN"
    rental_purpose: str = "living"
    has_pet: bool = False
    pet_name: str | None = None
    pet_photo_url: str | None = None
    pet_description: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Wire shape of the ``contract`` object of POST /external-rental-contracts."""
        return {
            "unitId": self.unit_id,
            "ownerId": self.owner_id,
            "clientId": self.client_id,
            "tenantName": self.tenant_name,
            "tenantEmail": self.tenant_email,
            "tenantPhone": self.tenant_phone,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "monthlyRent": float(self.monthly_rent),
            "securityDeposit": float(self.security_deposit),
            "leaseDurationMonths": self.lease_duration_months,
            "currency": self.currency,
            "rentalPurpose": self.rental_purpose,
            "hasPet": self.has_pet,
            "petName": self.pet_name if self.has_pet else None,
            "petPhotoUrl": self.pet_photo_url if self.has_pet else None,
            "petDescription": self.pet_description if self.has_pet else None,
        }


class EntityStore(ABC):
    """Operations the provisioning workflow performs on owners, contracts and tenants."""

    @abstractmethod
    async def get_active_owner(self, unit_id: int) -> Owner | None:
        """Active owner of a unit, or None when the unit has none."""

    @abstractmethod
    async def create_owner(self, unit_id: int, owner: OwnerData) -> Owner:
        """Create an active owner scoped to the unit."""

    @abstractmethod
    async def get_client(self, client_id: int) -> Client | None:
        """Existing client, or None."""

    @abstractmethod
    async def create_contract(
        self,
        draft: ContractDraft,
        services: list[ScheduleEntryDraft],
        provisioning_key: str | None = None,
    ) -> Contract:
        """Create the contract and its schedule entries."""

    @abstractmethod
    async def create_additional_tenant(self, contract_id: int, tenant: TenantDraft) -> AdditionalTenant:
        """Attach a co-tenant to an existing contract."""


class SqlEntityStore(EntityStore):
    """Entity store backed by an async SQLAlchemy session."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get_unit(self, unit_id: int) -> Unit | None:
        return await self.db.get(Unit, unit_id)

    async def get_active_owner(self, unit_id: int) -> Owner | None:
        # Newest active owner wins when more than one is active
        result = await self.db.execute(
            select(Owner)
            .where(Owner.unit_id == unit_id, Owner.is_active.is_(True))
            .order_by(Owner.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def create_owner(self, unit_id: int, owner: OwnerData) -> Owner:
        if await self.get_unit(unit_id) is None:
            raise EntityNotFoundError("Unit", unit_id)

        record = Owner(
            unit_id=unit_id,
            owner_name=owner.name,
            owner_email=owner.email or None,
            owner_phone=owner.phone or None,
            is_active=True,
        )
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        logger.info(f"Created owner {record.id} for unit {unit_id}")
        return record

    async def get_client(self, client_id: int) -> Client | None:
        return await self.db.get(Client, client_id)

    async def get_contract_by_key(self, provisioning_key: str) -> Contract | None:
        result = await self.db.execute(
            select(Contract).where(Contract.provisioning_key == provisioning_key)
        )
        return result.scalar_one_or_none()

    async def create_contract(
        self,
        draft: ContractDraft,
        services: list[ScheduleEntryDraft],
        provisioning_key: str | None = None,
    ) -> Contract:
        if provisioning_key:
            existing = await self.get_contract_by_key(provisioning_key)
            if existing is not None:
                logger.info(
                    f"Provisioning key {provisioning_key} already used by contract {existing.id}"
                )
                return existing

        unit = await self.get_unit(draft.unit_id)
        if unit is None:
            raise EntityNotFoundError("Unit", draft.unit_id)

        contract = Contract(
            unit_id=draft.unit_id,
            owner_id=draft.owner_id,
            client_id=draft.client_id,
            tenant_name=draft.tenant_name,
            tenant_email=draft.tenant_email,
            tenant_phone=draft.tenant_phone,
            start_date=draft.start_date,
            end_date=draft.end_date,
            monthly_rent=draft.monthly_rent,
            currency=draft.currency,
            lease_duration_months=draft.lease_duration_months,
            security_deposit=draft.security_deposit,
            rental_purpose=draft.rental_purpose,
            has_pet=draft.has_pet,
            pet_name=draft.pet_name if draft.has_pet else None,
            pet_photo_url=draft.pet_photo_url if draft.has_pet else None,
            pet_description=draft.pet_description if draft.has_pet else None,
            status=ContractStatus.ACTIVE,
            provisioning_key=provisioning_key,
        )
        self.db.add(contract)
        try:
            await self.db.flush()
            for service in services:
                self.db.add(
                    PaymentScheduleEntry(
                        contract_id=contract.id,
                        service_type=service.service_type,
                        charge_kind=service.charge_kind,
                        amount=service.amount,
                        day_of_month=service.day_of_month,
                        payment_frequency=service.payment_frequency,
                        currency=service.currency or draft.currency,
                        is_active=True,
                    )
                )
            unit.current_contract_id = contract.id
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if provisioning_key:
                existing = await self.get_contract_by_key(provisioning_key)
                if existing is not None:
                    return existing
            raise StoreError(f"Contract could not be stored: {e.orig}") from e

        await self.db.refresh(contract)
        logger.info(
            f"Created contract {contract.id} for unit {draft.unit_id} "
            f"with {len(services)} schedule entries"
        )
        return contract

    async def create_additional_tenant(self, contract_id: int, tenant: TenantDraft) -> AdditionalTenant:
        if await self.db.get(Contract, contract_id) is None:
            raise EntityNotFoundError("Contract", contract_id)

        record = AdditionalTenant(
            contract_id=contract_id,
            full_name=tenant.full_name,
            email=tenant.email or None,
            phone=tenant.phone or None,
            id_photo_url=tenant.id_photo_url or None,
        )
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        return record

    async def list_schedule(self, contract_id: int) -> list[PaymentScheduleEntry]:
        result = await self.db.execute(
            select(PaymentScheduleEntry)
            .where(PaymentScheduleEntry.contract_id == contract_id)
            .order_by(PaymentScheduleEntry.id)
        )
        return list(result.scalars().all())


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        error = body.get("error") or body.get("detail")
        if isinstance(error, dict):
            return str(error.get("message", error))
        if error:
            return str(error)
    return f"HTTP {response.status_code}"


def owner_from_json(data: dict[str, Any]) -> Owner:
    return Owner(
        id=data["id"],
        unit_id=data["unitId"],
        owner_name=data["ownerName"],
        owner_email=data.get("ownerEmail"),
        owner_phone=data.get("ownerPhone"),
        is_active=data.get("isActive", True),
    )


def client_from_json(data: dict[str, Any]) -> Client:
    return Client(
        id=data["id"],
        first_name=data.get("firstName", ""),
        last_name=data.get("lastName", ""),
        email=data.get("email"),
        phone=data.get("phone"),
    )


def contract_from_json(data: dict[str, Any]) -> Contract:
    return Contract(
        id=data["id"],
        unit_id=data["unitId"],
        owner_id=data.get("ownerId"),
        client_id=data.get("clientId"),
        tenant_name=data["tenantName"],
        tenant_email=data.get("tenantEmail"),
        tenant_phone=data.get("tenantPhone"),
        start_date=parse_date(data.get("startDate")),
        end_date=parse_date(data.get("endDate")),
        monthly_rent=parse_amount(data.get("monthlyRent")),
        currency=data.get("currency", "MXN"),
        lease_duration_months=data.get("leaseDurationMonths"),
        security_deposit=parse_amount(data.get("securityDeposit")),
        rental_purpose=data.get("rentalPurpose", "living"),
        has_pet=data.get("hasPet", False),
        pet_name=data.get("petName"),
        pet_photo_url=data.get("petPhotoUrl"),
        pet_description=data.get("petDescription"),
        status=ContractStatus(data.get("status", "active")),
    )


def tenant_from_json(data: dict[str, Any]) -> AdditionalTenant:
    return AdditionalTenant(
        id=data["id"],
        contract_id=data["contractId"],
        full_name=data["fullName"],
        email=data.get("email"),
        phone=data.get("phone"),
        id_photo_url=data.get("idPhotoUrl"),
    )


class RestEntityStore(EntityStore):
    """Entity store speaking to the REST API with an ``httpx.AsyncClient``.

    Returned ORM objects are transient (not attached to any session).
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @classmethod
    def from_settings(cls, **client_kwargs: Any) -> "RestEntityStore":
        """Store with its own client pointed at ``settings.api_base_url``."""
        return cls(httpx.AsyncClient(base_url=settings.api_base_url, **client_kwargs))

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise StoreError(f"{method} {url} failed: {e}") from e

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        message = _error_message(response)
        if response.status_code == 404:
            raise StoreError(message, http_status=404)
        raise StoreError(message)

    async def get_active_owner(self, unit_id: int) -> Owner | None:
        response = await self._request("GET", f"/external-unit-owners/active/{unit_id}")
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        return owner_from_json(response.json())

    async def create_owner(self, unit_id: int, owner: OwnerData) -> Owner:
        payload: dict[str, Any] = {"unitId": unit_id, "ownerName": owner.name, "isActive": True}
        if owner.email:
            payload["ownerEmail"] = owner.email
        if owner.phone:
            payload["ownerPhone"] = owner.phone
        response = await self._request("POST", "/external-unit-owners", json=payload)
        self._raise_for_status(response)
        return owner_from_json(response.json())

    async def get_client(self, client_id: int) -> Client | None:
        response = await self._request("GET", f"/external-clients/{client_id}")
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        return client_from_json(response.json())

    async def create_contract(
        self,
        draft: ContractDraft,
        services: list[ScheduleEntryDraft],
        provisioning_key: str | None = None,
    ) -> Contract:
        headers = {"Idempotency-Key": provisioning_key} if provisioning_key else None
        response = await self._request(
            "POST",
            "/external-rental-contracts",
            json={
                "contract": draft.to_payload(),
                "additionalServices": [service.to_payload() for service in services],
            },
            headers=headers,
        )
        self._raise_for_status(response)
        return contract_from_json(response.json())

    async def create_additional_tenant(self, contract_id: int, tenant: TenantDraft) -> AdditionalTenant:
        response = await self._request(
            "POST", "/external-rental-tenants", json=tenant.to_payload(contract_id)
        )
        self._raise_for_status(response)
        return tenant_from_json(response.json())


__all__ = [
    "EntityStore",
    "SqlEntityStore",
    "RestEntityStore",
    "OwnerData",
    "TenantDraft",
    "ContractDraft",
]
