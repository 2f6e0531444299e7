"""Legacy payment receipt ORM model with a two-state approval flow."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from leasing.models import Base, BaseModel


class ReceiptStatus(str, Enum):
    """Receipt review status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentReceipt(Base, BaseModel):
    """A tenant-uploaded receipt reviewed by the owner.

    Distinct from PaymentRecord and never converted into one.
    """

    __tablename__ = "payment_receipts"

    contract_id: Mapped[int] = mapped_column(
        ForeignKey("rental_contracts.id"),
        nullable=False,
        index=True,
    )
    payment_id: Mapped[int | None] = mapped_column(
        ForeignKey("payment_records.id"),
        nullable=True,
    )
    receipt_url: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    uploaded_by: Mapped[str] = mapped_column(String(20), nullable=False, default="tenant")
    status: Mapped[ReceiptStatus] = mapped_column(
        SQLEnum(ReceiptStatus, native_enum=False),
        nullable=False,
        default=ReceiptStatus.PENDING,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<PaymentReceipt(id={self.id}, contract_id={self.contract_id}, status={self.status.value})>"


__all__ = ["PaymentReceipt", "ReceiptStatus"]
