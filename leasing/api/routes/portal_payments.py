"""Payment portal API routes: listing, summary, tenant submission and owner review."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leasing.schemas.payments import (
    PaymentResponse,
    PaymentSummaryResponse,
    ReviewPaymentPayload,
    SubmitPaymentPayload,
)
from leasing.services import get_async_session
from leasing.services.verification_service import PaymentVerificationService, summarize

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/portal/payments", tags=["payments"])


@router.get("", response_model=list[PaymentResponse])
async def list_payments(
    contract_id: int | None = Query(None, alias="contractId"),
    db: AsyncSession = Depends(get_async_session),
) -> list[PaymentResponse]:
    """Payment records ordered by due date, with their display status.

    Read from the database on every call: the monthly generation job adds
    records from its own process.
    """
    today = date.today()
    records = await PaymentVerificationService(db).list_payments(contract_id)
    return [PaymentResponse.from_record(record, today) for record in records]


@router.get("/summary", response_model=PaymentSummaryResponse)
async def payment_summary(
    contract_id: int | None = Query(None, alias="contractId"),
    db: AsyncSession = Depends(get_async_session),
) -> PaymentSummaryResponse:
    records = await PaymentVerificationService(db).list_payments(contract_id)
    return PaymentSummaryResponse.from_summary(summarize(records, date.today()))


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(payment_id: int, db: AsyncSession = Depends(get_async_session)) -> PaymentResponse:
    record = await PaymentVerificationService(db).get_payment(payment_id)
    return PaymentResponse.from_record(record, date.today())


@router.post("/{payment_id}/submit", response_model=PaymentResponse)
async def submit_payment(
    payment_id: int,
    payload: SubmitPaymentPayload,
    db: AsyncSession = Depends(get_async_session),
) -> PaymentResponse:
    """
    Tenant reports a pending payment as paid.

    Returns:
        200: Updated payment
        404: Payment does not exist
        409: Payment is not pending, or its version changed
    """
    record = await PaymentVerificationService(db).submit(
        payment_id,
        receipt_url=payload.receipt_url,
        paid_date=payload.paid_date,
        tenant_notes=payload.tenant_notes,
        expected_version=payload.version,
    )
    return PaymentResponse.from_record(record, date.today())


@router.post("/{payment_id}/verify", response_model=PaymentResponse)
async def verify_payment(
    payment_id: int,
    payload: ReviewPaymentPayload | None = None,
    db: AsyncSession = Depends(get_async_session),
) -> PaymentResponse:
    """
    Owner confirms a paid payment. Already reviewed payments come back unchanged.

    Returns:
        200: Payment after the action
        404: Payment does not exist
        409: Payment still pending, or its version changed
    """
    payload = payload or ReviewPaymentPayload()
    record = await PaymentVerificationService(db).verify(
        payment_id, owner_notes=payload.owner_notes, expected_version=payload.version
    )
    return PaymentResponse.from_record(record, date.today())


@router.post("/{payment_id}/reject", response_model=PaymentResponse)
async def reject_payment(
    payment_id: int,
    payload: ReviewPaymentPayload | None = None,
    db: AsyncSession = Depends(get_async_session),
) -> PaymentResponse:
    """Owner rejects a paid payment. Already reviewed payments come back unchanged."""
    payload = payload or ReviewPaymentPayload()
    record = await PaymentVerificationService(db).reject(
        payment_id, owner_notes=payload.owner_notes, expected_version=payload.version
    )
    return PaymentResponse.from_record(record, date.today())
