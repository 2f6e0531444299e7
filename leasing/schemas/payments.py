"""Schemas for payment records, summaries and legacy receipts."""

from datetime import date, datetime

from pydantic import Field

from leasing.models import PayerRole, PaymentRecord, PaymentStatus, ReceiptStatus
from leasing.schemas import CamelModel
from leasing.services.verification_service import DisplayStatus, PaymentSummary, classify


class SubmitPaymentPayload(CamelModel):
    """Request payload for POST /portal/payments/{id}/submit."""

    receipt_url: str | None = None
    paid_date: date | None = None
    tenant_notes: str | None = None
    version: int | None = Field(None, description="Version the caller last read")


class ReviewPaymentPayload(CamelModel):
    """Request payload for POST /portal/payments/{id}/verify and /reject."""

    owner_notes: str | None = None
    version: int | None = Field(None, description="Version the caller last read")


class PaymentResponse(CamelModel):
    id: int
    contract_id: int
    schedule_id: int | None = None
    category: str
    description: str | None = None
    amount: float
    currency: str
    due_date: date
    paid_date: date | None = None
    status: PaymentStatus
    display_status: DisplayStatus
    paid_by: PayerRole | None = None
    receipt_url: str | None = None
    tenant_notes: str | None = None
    owner_notes: str | None = None
    verified_at: datetime | None = None
    version: int

    @classmethod
    def from_record(cls, record: PaymentRecord, today: date) -> "PaymentResponse":
        values = {name: getattr(record, name) for name in cls.model_fields if name != "display_status"}
        return cls(display_status=classify(record, today), **values)


class PaymentSummaryResponse(CamelModel):
    total_due: float
    total_paid: float
    total_verified: float
    pending_count: int
    overdue_count: int
    currency: str

    @classmethod
    def from_summary(cls, summary: PaymentSummary) -> "PaymentSummaryResponse":
        return cls.model_validate(summary)


class ReceiptResponse(CamelModel):
    id: int
    contract_id: int
    payment_id: int | None = None
    receipt_url: str
    amount: float | None = None
    payment_date: date | None = None
    notes: str | None = None
    uploaded_by: str
    status: ReceiptStatus
    reviewed_at: datetime | None = None
