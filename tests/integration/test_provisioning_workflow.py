"""Integration tests for the contract provisioning workflow against the database.

Covers the full owner -> tenant -> contract -> schedule -> co-tenants flow
with SqlEntityStore, including partial failures and retried submissions.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from leasing.errors import ProvisioningError, ProvisioningValidationError, StoreError
from leasing.models import (
    AdditionalTenant,
    ChargeKind,
    Contract,
    Owner,
    PaymentFrequency,
    ServiceType,
)
from leasing.services.cache import ACTIVE_OWNER_KEY, CONTRACTS_KEY, RECEIPTS_KEY, UNITS_KEY, ViewCache
from leasing.services.entity_store import SqlEntityStore, TenantDraft
from leasing.services.provisioning_service import (
    ContractProvisioningWorkflow,
    LeaseTerms,
    OwnerSelection,
    PetDetails,
    ProvisioningRequest,
    ProvisioningStep,
    TenantSelection,
)
from leasing.services.schedule_service import ChargeDefinition

pytestmark = pytest.mark.integration


async def count(db, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


def make_request(unit_id, **overrides) -> ProvisioningRequest:
    values = dict(
        unit_id=unit_id,
        tenant=TenantSelection(name="Marco Ruiz", email="marco@example.com", phone="555-0101"),
        owner=OwnerSelection(is_creating_new_owner=True, name="Jane Doe", email="jane@example.com"),
        terms=LeaseTerms(start_date="2025-03-15", duration_months=12, monthly_rent="12000"),
    )
    values.update(overrides)
    return ProvisioningRequest(**values)


class FailingContractStore(SqlEntityStore):
    async def create_contract(self, draft, services, provisioning_key=None):
        raise StoreError("contract service unavailable")


class FailingTenantStore(SqlEntityStore):
    async def create_additional_tenant(self, contract_id, tenant):
        if tenant.full_name == "Broken Record":
            raise StoreError("tenant rejected")
        return await super().create_additional_tenant(contract_id, tenant)


class TestProvisioningHappyPath:
    async def test_new_owner_contract_and_rent_schedule(self, async_db_session, unit):
        store = SqlEntityStore(async_db_session)

        result = await ContractProvisioningWorkflow(store).provision(make_request(unit.id))

        owner = result.owner
        assert owner.owner_name == "Jane Doe"
        assert owner.unit_id == unit.id
        assert owner.is_active

        contract = result.contract
        assert contract.owner_id == owner.id
        assert contract.start_date == date(2025, 3, 15)
        assert contract.end_date == date(2026, 3, 15)
        assert contract.lease_duration_months == 12
        assert contract.monthly_rent == Decimal("12000")
        assert contract.currency == "MXN"

        entries = await store.list_schedule(contract.id)
        rent = [entry for entry in entries if entry.service_type == ServiceType.RENT]
        assert len(rent) == 1
        assert rent[0].day_of_month == 15
        assert rent[0].amount == Decimal("12000")
        assert rent[0].payment_frequency == PaymentFrequency.MONTHLY

        assert result.completed_steps == list(ProvisioningStep)
        refreshed_unit = await store.get_unit(unit.id)
        assert refreshed_unit.current_contract_id == contract.id

    async def test_reuses_active_owner(self, async_db_session, unit):
        existing = Owner(unit_id=unit.id, owner_name="Existing Owner", is_active=True)
        async_db_session.add(existing)
        await async_db_session.commit()

        request = make_request(unit.id, owner=OwnerSelection(existing_owner_id=existing.id))
        result = await ContractProvisioningWorkflow(SqlEntityStore(async_db_session)).provision(request)

        assert result.owner.id == existing.id
        assert result.contract.owner_id == existing.id
        assert await count(async_db_session, Owner) == 1

    async def test_replace_owner_creates_new_one(self, async_db_session, unit):
        async_db_session.add(Owner(unit_id=unit.id, owner_name="Old Owner", is_active=True))
        await async_db_session.commit()

        request = make_request(unit.id, owner=OwnerSelection(replace_owner=True, name="New Owner"))
        result = await ContractProvisioningWorkflow(SqlEntityStore(async_db_session)).provision(request)

        assert result.owner.owner_name == "New Owner"
        assert await count(async_db_session, Owner) == 2

    async def test_existing_client(self, async_db_session, unit, client_record):
        request = make_request(
            unit.id,
            tenant=TenantSelection(use_existing_client=True, client_id=client_record.id),
        )
        result = await ContractProvisioningWorkflow(SqlEntityStore(async_db_session)).provision(request)

        assert result.contract.client_id == client_record.id
        assert result.contract.tenant_name == "Lucia Herrera"
        assert result.contract.tenant_email == "lucia@example.com"

    async def test_extra_charges_and_pet(self, async_db_session, unit):
        store = SqlEntityStore(async_db_session)
        request = make_request(
            unit.id,
            extra_charges=[
                ChargeDefinition(ServiceType.INTERNET, day_of_month=3, amount="499"),
                ChargeDefinition(
                    ServiceType.WATER,
                    day_of_month=5,
                    amount="250",
                    charge_kind=ChargeKind.VARIABLE,
                    payment_frequency=PaymentFrequency.BIMONTHLY,
                ),
            ],
            pet=PetDetails(has_pet=True, name="Luna", description="Beagle"),
        )

        result = await ContractProvisioningWorkflow(store).provision(request)

        entries = await store.list_schedule(result.contract.id)
        assert [entry.service_type for entry in entries] == [
            ServiceType.RENT,
            ServiceType.INTERNET,
            ServiceType.WATER,
        ]
        water = entries[2]
        assert water.charge_kind == ChargeKind.VARIABLE
        assert water.amount == Decimal("0")
        assert result.contract.has_pet
        assert result.contract.pet_name == "Luna"

    async def test_pet_details_without_flag_are_ignored(self, async_db_session, unit):
        request = make_request(unit.id, pet=PetDetails(name="Luna"))

        result = await ContractProvisioningWorkflow(SqlEntityStore(async_db_session)).provision(request)

        assert result.contract.has_pet is False
        assert result.contract.pet_name is None

    async def test_specific_dates_mode(self, async_db_session, unit):
        request = make_request(
            unit.id,
            terms=LeaseTerms(
                start_date="2025-03-15",
                duration_months=None,
                end_date="2025-09-15",
                monthly_rent="9000",
            ),
        )
        result = await ContractProvisioningWorkflow(SqlEntityStore(async_db_session)).provision(request)

        assert result.contract.end_date == date(2025, 9, 15)
        assert result.contract.lease_duration_months == 6
        assert result.schedule.span_days == 184

    async def test_invalidates_cached_views(self, async_db_session, unit):
        cache = ViewCache()
        for key in (CONTRACTS_KEY, UNITS_KEY, ACTIVE_OWNER_KEY + (unit.id,), RECEIPTS_KEY):
            cache.set(key, "stale")

        await ContractProvisioningWorkflow(SqlEntityStore(async_db_session), cache).provision(
            make_request(unit.id)
        )

        assert CONTRACTS_KEY not in cache
        assert UNITS_KEY not in cache
        assert ACTIVE_OWNER_KEY + (unit.id,) not in cache
        assert RECEIPTS_KEY in cache


class TestProvisioningValidation:
    async def test_all_problems_reported_before_any_write(self, async_db_session, unit):
        request = make_request(
            unit.id,
            tenant=TenantSelection(name=" ", email="", phone=None),
            owner=OwnerSelection(is_creating_new_owner=True, name=""),
            terms=LeaseTerms(start_date="", monthly_rent="0"),
            extra_charges=[ChargeDefinition(ServiceType.INTERNET, day_of_month=3, amount="0")],
        )

        with pytest.raises(ProvisioningValidationError) as exc_info:
            await ContractProvisioningWorkflow(SqlEntityStore(async_db_session)).provision(request)

        assert exc_info.value.codes == [
            "start_date_required",
            "monthly_rent_required",
            "owner_name_required",
            "tenant_name_required",
            "tenant_email_required",
            "tenant_phone_required",
            "charge_amount_required",
        ]
        assert await count(async_db_session, Owner) == 0
        assert await count(async_db_session, Contract) == 0

    async def test_missing_unit_and_client(self, async_db_session):
        request = make_request(None, tenant=TenantSelection(use_existing_client=True))
        codes = ContractProvisioningWorkflow(SqlEntityStore(async_db_session)).validate(request)
        assert codes == ["unit_required", "client_required"]

    async def test_specific_dates_need_end_date(self, async_db_session, unit):
        request = make_request(
            unit.id, terms=LeaseTerms(start_date="2025-03-15", duration_months=0, monthly_rent="1")
        )
        codes = ContractProvisioningWorkflow(SqlEntityStore(async_db_session)).validate(request)
        assert codes == ["end_date_required"]

    @pytest.mark.parametrize(
        "terms",
        [
            LeaseTerms(start_date="2025-03-15", duration_months=100000, monthly_rent="1"),
            LeaseTerms(start_date="9999-06-01", duration_months=12, monthly_rent="1"),
        ],
    )
    async def test_duration_out_of_range_rejected_before_any_write(self, async_db_session, unit, terms):
        request = make_request(unit.id, terms=terms)

        with pytest.raises(ProvisioningValidationError) as exc_info:
            await ContractProvisioningWorkflow(SqlEntityStore(async_db_session)).provision(request)

        assert exc_info.value.codes == ["invalid_duration"]
        assert await count(async_db_session, Owner) == 0

    async def test_no_owner_on_unit_and_no_name(self, async_db_session, unit):
        request = make_request(unit.id, owner=OwnerSelection())

        with pytest.raises(ProvisioningValidationError) as exc_info:
            await ContractProvisioningWorkflow(SqlEntityStore(async_db_session)).provision(request)

        assert exc_info.value.codes == ["owner_name_required"]
        assert await count(async_db_session, Contract) == 0


class TestProvisioningFailures:
    async def test_owner_step_failure(self, async_db_session):
        request = make_request(999)

        with pytest.raises(ProvisioningError) as exc_info:
            await ContractProvisioningWorkflow(SqlEntityStore(async_db_session)).provision(request)

        assert exc_info.value.step == ProvisioningStep.OWNER
        assert exc_info.value.completed_steps == []
        assert await count(async_db_session, Contract) == 0

    async def test_missing_client_fails_tenant_step(self, async_db_session, unit):
        request = make_request(unit.id, tenant=TenantSelection(use_existing_client=True, client_id=404))

        with pytest.raises(ProvisioningError) as exc_info:
            await ContractProvisioningWorkflow(SqlEntityStore(async_db_session)).provision(request)

        assert exc_info.value.step == ProvisioningStep.TENANT
        assert exc_info.value.completed_steps == [ProvisioningStep.OWNER]
        # the owner created by the first step is not rolled back
        assert await count(async_db_session, Owner) == 1

    async def test_contract_step_failure_keeps_owner(self, async_db_session, unit):
        with pytest.raises(ProvisioningError) as exc_info:
            await ContractProvisioningWorkflow(FailingContractStore(async_db_session)).provision(
                make_request(unit.id)
            )

        error = exc_info.value
        assert error.step == ProvisioningStep.CONTRACT
        assert error.completed_steps == [ProvisioningStep.OWNER, ProvisioningStep.TENANT]
        assert "contract service unavailable" in error.message
        assert await count(async_db_session, Owner) == 1
        assert await count(async_db_session, Contract) == 0

    async def test_co_tenants_are_best_effort(self, async_db_session, unit):
        request = make_request(
            unit.id,
            additional_tenants=[
                TenantDraft(full_name="Ana Soto", email="ana@example.com"),
                TenantDraft(full_name="Broken Record"),
                TenantDraft(full_name="   "),
            ],
        )

        result = await ContractProvisioningWorkflow(FailingTenantStore(async_db_session)).provision(request)

        assert [(r.full_name, r.ok) for r in result.tenant_results] == [
            ("Ana Soto", True),
            ("Broken Record", False),
        ]
        assert result.failed_tenants[0].error == "tenant rejected"
        assert ProvisioningStep.ADDITIONAL_TENANTS in result.completed_steps
        tenants = (await async_db_session.execute(select(AdditionalTenant))).scalars().all()
        assert [tenant.full_name for tenant in tenants] == ["Ana Soto"]
        assert tenants[0].contract_id == result.contract.id


class TestProvisioningRetry:
    async def test_same_key_returns_first_contract(self, async_db_session, unit):
        workflow = ContractProvisioningWorkflow(SqlEntityStore(async_db_session))
        first = await workflow.provision(make_request(unit.id, provisioning_key="form-42"))

        # The retry reuses the owner the first attempt created
        retry = make_request(unit.id, owner=OwnerSelection(), provisioning_key="form-42")
        second = await workflow.provision(retry)

        assert second.contract.id == first.contract.id
        assert second.owner.id == first.owner.id
        assert await count(async_db_session, Contract) == 1
        assert await count(async_db_session, Owner) == 1

    async def test_without_key_creates_another_contract(self, async_db_session, unit):
        workflow = ContractProvisioningWorkflow(SqlEntityStore(async_db_session))
        await workflow.provision(make_request(unit.id))
        await workflow.provision(make_request(unit.id, owner=OwnerSelection()))

        assert await count(async_db_session, Contract) == 2
