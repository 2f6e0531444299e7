"""Payment record ORM model: one concrete, datable charge with a verification lifecycle."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from leasing.models import Base, BaseModel


class PaymentStatus(str, Enum):
    """Stored payment status. ``overdue`` is never stored, see verification_service.classify."""

    PENDING = "pending"
    PAID = "paid"
    VERIFIED = "verified"
    REJECTED = "rejected"


class PayerRole(str, Enum):
    """Who settled the charge."""

    TENANT = "tenant"
    OWNER = "owner"


class PaymentRecord(Base, BaseModel):
    """Model representing a single billing instance.

    Created by the monthly generation job from a schedule entry or by direct
    tenant submission; mutated only through the verification service.
    """

    __tablename__ = "payment_records"

    contract_id: Mapped[int] = mapped_column(
        ForeignKey("rental_contracts.id"),
        nullable=False,
        index=True,
    )
    schedule_id: Mapped[int | None] = mapped_column(
        ForeignKey("payment_schedules.id"),
        nullable=True,
        comment="Schedule entry this record was generated from",
    )
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="rent")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="MXN")
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    paid_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus, native_enum=False),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    paid_by: Mapped[PayerRole | None] = mapped_column(
        SQLEnum(PayerRole, native_enum=False),
        nullable=True,
    )
    receipt_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    tenant_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    owner_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        comment="Optimistic concurrency token, bumped on every transition",
    )

    __table_args__ = (
        Index("idx_payment_contract_status", "contract_id", "status"),
        Index("idx_payment_schedule_due", "schedule_id", "due_date"),
        Index("idx_payment_due_date", "due_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<PaymentRecord(id={self.id}, contract_id={self.contract_id}, category={self.category}, "
            f"amount={self.amount}, due_date={self.due_date}, status={self.status.value})>"
        )


__all__ = ["PaymentRecord", "PaymentStatus", "PayerRole"]
