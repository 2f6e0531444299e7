"""Legacy receipt review: pending -> approved | rejected."""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leasing.errors import EntityNotFoundError
from leasing.models import PaymentReceipt, ReceiptStatus
from leasing.services.cache import RECEIPTS_KEY, ViewCache

logger = logging.getLogger(__name__)


class ReceiptService:
    """Service for reviewing tenant-uploaded receipts.

    Approved and rejected are terminal; acting on them again returns the
    receipt unchanged. Receipts are never upgraded into payment records.
    """

    def __init__(self, db_session: AsyncSession, cache: ViewCache | None = None):
        self.db = db_session
        self.cache = cache

    async def get_receipt(self, receipt_id: int) -> PaymentReceipt:
        receipt = (
            await self.db.execute(select(PaymentReceipt).where(PaymentReceipt.id == receipt_id))
        ).scalar_one_or_none()
        if receipt is None:
            raise EntityNotFoundError("Receipt", receipt_id)
        return receipt

    async def list_receipts(self, contract_id: int | None = None) -> list[PaymentReceipt]:
        stmt = select(PaymentReceipt).order_by(PaymentReceipt.created_at.desc(), PaymentReceipt.id)
        if contract_id is not None:
            stmt = stmt.where(PaymentReceipt.contract_id == contract_id)
        return list((await self.db.execute(stmt)).scalars().all())

    async def approve(self, receipt_id: int) -> PaymentReceipt:
        return await self._review(receipt_id, ReceiptStatus.APPROVED)

    async def reject(self, receipt_id: int) -> PaymentReceipt:
        return await self._review(receipt_id, ReceiptStatus.REJECTED)

    async def _review(self, receipt_id: int, target: ReceiptStatus) -> PaymentReceipt:
        receipt = await self.get_receipt(receipt_id)
        if receipt.status != ReceiptStatus.PENDING:
            logger.info(f"Receipt {receipt_id} already {receipt.status.value}, ignoring")
            return receipt

        receipt.status = target
        receipt.reviewed_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(receipt)

        if self.cache is not None:
            self.cache.invalidate(RECEIPTS_KEY)
        logger.info(f"Receipt {receipt_id} {target.value}")
        return receipt


__all__ = ["ReceiptService"]
