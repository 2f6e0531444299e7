"""Payment verification lifecycle.

Stored states move ``pending -> paid -> verified | rejected``. ``overdue`` is
a display status derived from the due date and never written back.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Iterable

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from leasing.config import settings
from leasing.errors import AppError, EntityNotFoundError, InvalidTransitionError, StaleRecordError
from leasing.models import PayerRole, PaymentRecord, PaymentStatus

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({PaymentStatus.VERIFIED, PaymentStatus.REJECTED})


class DisplayStatus(str, Enum):
    """Status shown to users; adds the derived ``overdue``."""

    PENDING = "pending"
    OVERDUE = "overdue"
    PAID = "paid"
    VERIFIED = "verified"
    REJECTED = "rejected"


def _as_date(now: date | datetime) -> date:
    return now.date() if isinstance(now, datetime) else now


def classify(record: PaymentRecord, now: date | datetime) -> DisplayStatus:
    """Display status of a record: pending records past their due date are overdue."""
    if (
        record.status == PaymentStatus.PENDING
        and record.due_date is not None
        and record.due_date < _as_date(now)
    ):
        return DisplayStatus.OVERDUE
    return DisplayStatus(record.status.value)


@dataclass
class PaymentSummary:
    """Totals shown above a contract's payment list."""

    total_due: Decimal
    total_paid: Decimal
    total_verified: Decimal
    pending_count: int
    overdue_count: int
    currency: str


def summarize(
    records: Iterable[PaymentRecord], now: date | datetime, currency: str | None = None
) -> PaymentSummary:
    """Aggregate a contract's records.

    ``total_due`` sums unpaid records, ``total_paid`` everything the tenant
    reported as paid (awaiting review or verified), ``total_verified`` only
    verified ones. ``pending_count`` counts records awaiting the owner's
    review, i.e. stored status ``paid``.
    """
    total_due = Decimal("0")
    total_paid = Decimal("0")
    total_verified = Decimal("0")
    pending_count = 0
    overdue_count = 0

    for record in records:
        if currency is None:
            currency = record.currency
        display = classify(record, now)
        amount = Decimal(record.amount or 0)
        if display in (DisplayStatus.PENDING, DisplayStatus.OVERDUE):
            total_due += amount
            if display == DisplayStatus.OVERDUE:
                overdue_count += 1
        elif display == DisplayStatus.PAID:
            total_paid += amount
            pending_count += 1
        elif display == DisplayStatus.VERIFIED:
            total_paid += amount
            total_verified += amount

    return PaymentSummary(
        total_due=total_due,
        total_paid=total_paid,
        total_verified=total_verified,
        pending_count=pending_count,
        overdue_count=overdue_count,
        currency=currency or settings.default_currency,
    )


class PaymentVerificationService:
    """Applies tenant submissions and owner reviews to payment records."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get_payment(self, record_id: int) -> PaymentRecord:
        """Load a record or raise EntityNotFoundError."""
        record = (
            await self.db.execute(select(PaymentRecord).where(PaymentRecord.id == record_id))
        ).scalar_one_or_none()
        if record is None:
            raise EntityNotFoundError("Payment", record_id)
        return record

    async def list_payments(self, contract_id: int | None = None) -> list[PaymentRecord]:
        stmt = select(PaymentRecord).order_by(PaymentRecord.due_date, PaymentRecord.id)
        if contract_id is not None:
            stmt = stmt.where(PaymentRecord.contract_id == contract_id)
        return list((await self.db.execute(stmt)).scalars().all())

    async def payment_summary(
        self, contract_id: int | None = None, now: date | datetime | None = None
    ) -> PaymentSummary:
        records = await self.list_payments(contract_id)
        return summarize(records, now or datetime.now(timezone.utc))

    async def submit(
        self,
        record_id: int,
        receipt_url: str | None = None,
        paid_date: date | None = None,
        tenant_notes: str | None = None,
        expected_version: int | None = None,
    ) -> PaymentRecord:
        """Tenant marks a pending record as paid.

        Raises:
            EntityNotFoundError: No such record
            InvalidTransitionError: Record is not pending
            StaleRecordError: ``expected_version`` does not match
        """
        record = await self.get_payment(record_id)
        if record.status != PaymentStatus.PENDING:
            raise InvalidTransitionError(record.status.value, "submit")

        values = {
            "status": PaymentStatus.PAID,
            "paid_by": PayerRole.TENANT,
            "paid_date": paid_date or datetime.now(timezone.utc).date(),
        }
        if receipt_url is not None:
            values["receipt_url"] = receipt_url
        if tenant_notes is not None:
            values["tenant_notes"] = tenant_notes

        record = await self._apply(record, values, expected_version)
        logger.info(f"Payment {record_id} submitted as paid by tenant")
        return record

    async def verify(
        self,
        record_id: int,
        owner_notes: str | None = None,
        expected_version: int | None = None,
    ) -> PaymentRecord:
        """Owner confirms a paid record. Verified/rejected records are returned unchanged."""
        return await self._review(record_id, PaymentStatus.VERIFIED, owner_notes, expected_version)

    async def reject(
        self,
        record_id: int,
        owner_notes: str | None = None,
        expected_version: int | None = None,
    ) -> PaymentRecord:
        """Owner rejects a paid record. Verified/rejected records are returned unchanged."""
        return await self._review(record_id, PaymentStatus.REJECTED, owner_notes, expected_version)

    async def _review(
        self,
        record_id: int,
        target: PaymentStatus,
        owner_notes: str | None,
        expected_version: int | None,
    ) -> PaymentRecord:
        action = "verify" if target == PaymentStatus.VERIFIED else "reject"
        record = await self.get_payment(record_id)

        if record.status in TERMINAL_STATUSES:
            logger.info(
                f"Payment {record_id} already {record.status.value}, ignoring {action}"
            )
            return record
        if record.status != PaymentStatus.PAID:
            raise InvalidTransitionError(record.status.value, action)

        values = {"status": target, "owner_notes": owner_notes}
        if target == PaymentStatus.VERIFIED:
            values["verified_at"] = datetime.now(timezone.utc)

        record = await self._apply(record, values, expected_version)
        logger.info(f"Payment {record_id} {target.value} by owner")
        return record

    async def _apply(
        self, record: PaymentRecord, values: dict, expected_version: int | None
    ) -> PaymentRecord:
        """Write ``values`` guarded by the record's version and bump it."""
        if expected_version is not None and expected_version != record.version:
            raise StaleRecordError(expected_version, record.version)

        result = await self.db.execute(
            update(PaymentRecord)
            .where(PaymentRecord.id == record.id, PaymentRecord.version == record.version)
            .values(version=record.version + 1, **values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            current = await self.get_payment(record.id)
            raise StaleRecordError(record.version, current.version)

        await self.db.commit()
        await self.db.refresh(record)
        return record


@dataclass
class Notice:
    """User-facing outcome of an owner action."""

    title: str
    description: str | None = None
    variant: str = "default"


class ActionGuard:
    """Allows one verify/reject in flight per session."""

    def __init__(self) -> None:
        self.in_flight: int | None = None

    @property
    def busy(self) -> bool:
        return self.in_flight is not None

    def acquire(self, record_id: int) -> bool:
        if self.in_flight is not None:
            return False
        self.in_flight = record_id
        return True

    def release(self) -> None:
        self.in_flight = None


class OwnerPaymentActions:
    """Owner-side verify/reject with duplicate suppression and notices.

    Failures never raise: they come back as a destructive notice and the
    record keeps whatever status it had.
    """

    def __init__(self, service: PaymentVerificationService, guard: ActionGuard | None = None):
        self.service = service
        self.guard = guard or ActionGuard()

    async def verify(
        self, record_id: int, owner_notes: str | None = None, expected_version: int | None = None
    ) -> Notice | None:
        return await self._run(
            record_id,
            self.service.verify,
            "Payment verified successfully",
            owner_notes,
            expected_version,
        )

    async def reject(
        self, record_id: int, owner_notes: str | None = None, expected_version: int | None = None
    ) -> Notice | None:
        return await self._run(
            record_id,
            self.service.reject,
            "Payment rejected",
            owner_notes,
            expected_version,
        )

    async def _run(self, record_id, action, success_title, owner_notes, expected_version):
        if not self.guard.acquire(record_id):
            logger.debug(
                f"Ignoring action on payment {record_id}: {self.guard.in_flight} still in flight"
            )
            return None
        try:
            await action(record_id, owner_notes=owner_notes, expected_version=expected_version)
        except AppError as e:
            logger.warning(f"Owner action on payment {record_id} failed: {e.message}")
            return Notice(title="Error", description=e.message, variant="destructive")
        finally:
            self.guard.release()
        return Notice(title=success_title)


__all__ = [
    "DisplayStatus",
    "classify",
    "PaymentSummary",
    "summarize",
    "PaymentVerificationService",
    "Notice",
    "ActionGuard",
    "OwnerPaymentActions",
]
