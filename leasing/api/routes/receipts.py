"""Legacy receipt review API routes."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leasing.api.deps import get_view_cache
from leasing.schemas.payments import ReceiptResponse
from leasing.services import get_async_session
from leasing.services.cache import RECEIPTS_KEY, ViewCache
from leasing.services.receipt_service import ReceiptService

router = APIRouter(prefix="/portal/receipts", tags=["receipts"])


@router.get("", response_model=list[ReceiptResponse])
async def list_receipts(
    contract_id: int | None = Query(None, alias="contractId"),
    db: AsyncSession = Depends(get_async_session),
    cache: ViewCache = Depends(get_view_cache),
) -> list[ReceiptResponse]:
    async def load() -> list[ReceiptResponse]:
        receipts = await ReceiptService(db).list_receipts(contract_id)
        return [ReceiptResponse.model_validate(receipt) for receipt in receipts]

    return await cache.get_or_load(RECEIPTS_KEY + (contract_id,), load)


@router.post("/{receipt_id}/approve", response_model=ReceiptResponse)
async def approve_receipt(
    receipt_id: int,
    db: AsyncSession = Depends(get_async_session),
    cache: ViewCache = Depends(get_view_cache),
) -> ReceiptResponse:
    receipt = await ReceiptService(db, cache).approve(receipt_id)
    return ReceiptResponse.model_validate(receipt)


@router.post("/{receipt_id}/reject", response_model=ReceiptResponse)
async def reject_receipt(
    receipt_id: int,
    db: AsyncSession = Depends(get_async_session),
    cache: ViewCache = Depends(get_view_cache),
) -> ReceiptResponse:
    receipt = await ReceiptService(db, cache).reject(receipt_id)
    return ReceiptResponse.model_validate(receipt)
