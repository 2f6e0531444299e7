"""Monthly materialization of payment records from active schedule entries."""

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leasing.models import (
    ChargeKind,
    Contract,
    ContractStatus,
    PaymentRecord,
    PaymentScheduleEntry,
    PaymentStatus,
)
from leasing.services.schedule_service import due_date_for, is_billing_month

logger = logging.getLogger(__name__)


@dataclass
class GenerationStats:
    schedules_processed: int = 0
    payments_created: int = 0
    payments_skipped: int = 0
    errors: int = 0


class PaymentGenerationService:
    """Creates pending payment records for one month.

    Safe to rerun: a schedule entry never gets two records for the same due date.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def generate_for_month(self, target_month: date) -> GenerationStats:
        """Generate records for every active schedule entry.

        Args:
            target_month: Any date inside the month to generate

        Returns:
            GenerationStats with per-outcome counters
        """
        year, month = target_month.year, target_month.month
        month_start = date(year, month, 1)
        month_end = due_date_for(31, year, month)
        stats = GenerationStats()

        schedule_ids = (
            await self.db.execute(
                select(PaymentScheduleEntry.id)
                .where(PaymentScheduleEntry.is_active.is_(True))
                .order_by(PaymentScheduleEntry.id)
            )
        ).scalars().all()
        logger.info(f"Generating payments for {year}-{month:02d}: {len(schedule_ids)} active schedules")

        for schedule_id in schedule_ids:
            stats.schedules_processed += 1
            try:
                # Reloaded per iteration: a rollback expires everything in the session
                schedule = await self.db.get(PaymentScheduleEntry, schedule_id)
                contract = (
                    await self.db.execute(select(Contract).where(Contract.id == schedule.contract_id))
                ).scalar_one_or_none()
                if contract is None:
                    logger.info(f"Skipping schedule {schedule_id}: contract not found")
                    stats.payments_skipped += 1
                    continue
                if (
                    contract.status != ContractStatus.ACTIVE
                    or contract.end_date < month_start
                    or contract.start_date > month_end
                ):
                    logger.info(f"Skipping schedule {schedule_id}: contract not active for this period")
                    stats.payments_skipped += 1
                    continue
                if not is_billing_month(schedule.payment_frequency, contract.start_date, year, month):
                    logger.info(f"Skipping schedule {schedule_id}: not a billing month")
                    stats.payments_skipped += 1
                    continue

                due = due_date_for(schedule.day_of_month, year, month)
                existing = (
                    await self.db.execute(
                        select(PaymentRecord.id)
                        .where(
                            PaymentRecord.schedule_id == schedule_id,
                            PaymentRecord.due_date == due,
                        )
                        .limit(1)
                    )
                ).first()
                if existing is not None:
                    logger.info(f"Payment already exists for schedule {schedule_id} on {due}")
                    stats.payments_skipped += 1
                    continue

                service = schedule.service_type.value
                description = f"Auto-generated from payment schedule ({service})"
                if schedule.charge_kind == ChargeKind.VARIABLE:
                    description += ", amount pending meter reading"

                self.db.add(
                    PaymentRecord(
                        contract_id=schedule.contract_id,
                        schedule_id=schedule_id,
                        category=service,
                        description=description,
                        amount=schedule.amount,
                        currency=schedule.currency,
                        due_date=due,
                        status=PaymentStatus.PENDING,
                    )
                )
                await self.db.commit()
                stats.payments_created += 1
                logger.info(
                    f"Created payment for schedule {schedule_id}: {service} {schedule.amount} due {due}"
                )
            except Exception as e:
                await self.db.rollback()
                stats.errors += 1
                logger.error(f"Error processing schedule {schedule_id}: {e}", exc_info=True)

        return stats


__all__ = ["GenerationStats", "PaymentGenerationService"]
