"""Unit tests for verification_service.py."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from leasing.errors import EntityNotFoundError, InvalidTransitionError, StaleRecordError
from leasing.models import PayerRole, PaymentRecord, PaymentStatus
from leasing.services.verification_service import (
    ActionGuard,
    DisplayStatus,
    OwnerPaymentActions,
    PaymentVerificationService,
    classify,
    summarize,
)

TODAY = date(2025, 5, 1)


def record(status, due=date(2025, 5, 15), amount="1000", currency="MXN"):
    return PaymentRecord(
        contract_id=1,
        category="rent",
        amount=Decimal(amount),
        currency=currency,
        due_date=due,
        status=status,
        version=1,
    )


class TestClassify:
    def test_pending_before_due_date(self):
        assert classify(record(PaymentStatus.PENDING), TODAY) == DisplayStatus.PENDING

    def test_pending_on_due_date_is_not_overdue(self):
        assert classify(record(PaymentStatus.PENDING, due=TODAY), TODAY) == DisplayStatus.PENDING

    def test_pending_past_due_date_is_overdue(self):
        late = record(PaymentStatus.PENDING, due=date(2025, 4, 15))
        assert classify(late, TODAY) == DisplayStatus.OVERDUE
        # never written back
        assert late.status == PaymentStatus.PENDING

    def test_accepts_datetime(self):
        late = record(PaymentStatus.PENDING, due=date(2025, 4, 30))
        assert classify(late, datetime(2025, 5, 1, 0, 1)) == DisplayStatus.OVERDUE

    @pytest.mark.parametrize("status", [PaymentStatus.PAID, PaymentStatus.VERIFIED, PaymentStatus.REJECTED])
    def test_other_statuses_never_overdue(self, status):
        assert classify(record(status, due=date(2020, 1, 1)), TODAY).value == status.value


class TestSummarize:
    def test_totals(self):
        records = [
            record(PaymentStatus.PENDING, amount="1000"),
            record(PaymentStatus.PENDING, due=date(2025, 4, 1), amount="500"),
            record(PaymentStatus.PAID, amount="300"),
            record(PaymentStatus.VERIFIED, amount="200"),
            record(PaymentStatus.REJECTED, amount="999"),
        ]
        summary = summarize(records, TODAY)

        assert summary.total_due == Decimal("1500")
        assert summary.total_paid == Decimal("500")
        assert summary.total_verified == Decimal("200")
        assert summary.pending_count == 1
        assert summary.overdue_count == 1
        assert summary.currency == "MXN"

    def test_empty_uses_default_currency(self):
        summary = summarize([], TODAY)
        assert summary.total_due == Decimal("0")
        assert summary.pending_count == 0
        assert summary.currency == "MXN"

    def test_currency_from_records(self):
        assert summarize([record(PaymentStatus.PAID, currency="USD")], TODAY).currency == "USD"


@pytest.fixture
def service(async_db_session):
    return PaymentVerificationService(async_db_session)


class TestSubmit:
    async def test_pending_to_paid(self, service, make_payment):
        payment = await make_payment(PaymentStatus.PENDING)

        result = await service.submit(
            payment.id,
            receipt_url="https://files.example.com/r1.pdf",
            paid_date=date(2025, 4, 14),
            tenant_notes="transfer",
        )

        assert result.status == PaymentStatus.PAID
        assert result.paid_by == PayerRole.TENANT
        assert result.paid_date == date(2025, 4, 14)
        assert result.receipt_url == "https://files.example.com/r1.pdf"
        assert result.tenant_notes == "transfer"
        assert result.version == 2

    async def test_submit_twice_is_rejected(self, service, make_payment):
        payment = await make_payment(PaymentStatus.PENDING)
        await service.submit(payment.id)

        with pytest.raises(InvalidTransitionError):
            await service.submit(payment.id)


class TestVerifyReject:
    async def test_verify_paid(self, service, make_payment):
        payment = await make_payment(PaymentStatus.PAID)

        result = await service.verify(payment.id, owner_notes="ok")

        assert result.status == PaymentStatus.VERIFIED
        assert result.owner_notes == "ok"
        assert result.verified_at is not None
        assert result.version == 2

    async def test_reject_paid(self, service, make_payment):
        payment = await make_payment(PaymentStatus.PAID)

        result = await service.reject(payment.id, owner_notes="insufficient proof")

        assert result.status == PaymentStatus.REJECTED
        assert result.owner_notes == "insufficient proof"
        assert result.verified_at is None

    @pytest.mark.parametrize("action", ["verify", "reject"])
    async def test_pending_cannot_be_reviewed(self, service, make_payment, action):
        payment = await make_payment(PaymentStatus.PENDING)

        with pytest.raises(InvalidTransitionError):
            await getattr(service, action)(payment.id)

        assert (await service.get_payment(payment.id)).status == PaymentStatus.PENDING

    @pytest.mark.parametrize("terminal", [PaymentStatus.VERIFIED, PaymentStatus.REJECTED])
    @pytest.mark.parametrize("action", ["verify", "reject"])
    async def test_terminal_states_are_noop(self, service, make_payment, terminal, action):
        payment = await make_payment(terminal)

        result = await getattr(service, action)(payment.id, owner_notes="again")

        assert result.status == terminal
        assert result.owner_notes is None
        assert result.version == 1

    async def test_stale_version(self, service, make_payment):
        payment = await make_payment(PaymentStatus.PAID)

        with pytest.raises(StaleRecordError):
            await service.verify(payment.id, expected_version=5)

        assert (await service.get_payment(payment.id)).status == PaymentStatus.PAID

    async def test_matching_version(self, service, make_payment):
        payment = await make_payment(PaymentStatus.PAID)
        result = await service.verify(payment.id, expected_version=1)
        assert result.status == PaymentStatus.VERIFIED

    async def test_missing_record(self, service):
        with pytest.raises(EntityNotFoundError):
            await service.verify(999)


class TestListing:
    async def test_list_and_summary(self, service, make_payment):
        await make_payment(PaymentStatus.PAID, due_date=date(2025, 5, 15))
        await make_payment(PaymentStatus.PENDING, due_date=date(2025, 4, 15))

        records = await service.list_payments()
        assert [r.due_date for r in records] == [date(2025, 4, 15), date(2025, 5, 15)]

        summary = await service.payment_summary(now=TODAY)
        assert summary.pending_count == 1
        assert summary.overdue_count == 1

    async def test_filter_by_contract(self, service, make_payment, contract):
        await make_payment()
        assert len(await service.list_payments(contract.id)) == 1
        assert await service.list_payments(contract.id + 100) == []


class TestActionGuard:
    def test_single_in_flight(self):
        guard = ActionGuard()
        assert guard.acquire(1)
        assert guard.busy
        assert not guard.acquire(2)
        guard.release()
        assert guard.acquire(2)


class TestOwnerPaymentActions:
    async def test_success_notice(self, service, make_payment):
        payment = await make_payment(PaymentStatus.PAID)
        actions = OwnerPaymentActions(service)

        notice = await actions.verify(payment.id)

        assert notice.title == "Payment verified successfully"
        assert notice.variant == "default"
        assert not actions.guard.busy

    async def test_failure_becomes_destructive_notice(self, service, make_payment):
        payment = await make_payment(PaymentStatus.PENDING)
        actions = OwnerPaymentActions(service)

        notice = await actions.reject(payment.id, owner_notes="no")

        assert notice.variant == "destructive"
        assert notice.title == "Error"
        assert "pending" in notice.description
        assert (await service.get_payment(payment.id)).status == PaymentStatus.PENDING
        assert not actions.guard.busy

    async def test_duplicate_suppressed_while_in_flight(self, service, make_payment):
        payment = await make_payment(PaymentStatus.PAID)
        guard = ActionGuard()
        guard.acquire(payment.id)
        actions = OwnerPaymentActions(service, guard)

        assert await actions.verify(payment.id) is None
        assert (await service.get_payment(payment.id)).status == PaymentStatus.PAID
