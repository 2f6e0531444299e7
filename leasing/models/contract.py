"""Rental contract ORM model."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from leasing.models import Base, BaseModel


class ContractStatus(str, Enum):
    """Lifecycle status of a lease."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Contract(Base, BaseModel):
    """Model representing a lease on a unit.

    Tenant identity is embedded (name/email/phone) and optionally linked to a
    Client. ``end_date`` follows ``start_date + lease_duration_months`` only
    when the contract was created in duration mode.
    """

    __tablename__ = "rental_contracts"

    unit_id: Mapped[int] = mapped_column(
        ForeignKey("units.id"),
        nullable=False,
        index=True,
        comment="Leased unit",
    )
    owner_id: Mapped[int | None] = mapped_column(
        ForeignKey("unit_owners.id"),
        nullable=True,
        comment="Owner receiving rent (may be attached later)",
    )
    client_id: Mapped[int | None] = mapped_column(
        ForeignKey("clients.id"),
        nullable=True,
        comment="Existing client chosen as tenant, if any",
    )

    # Tenant identity
    tenant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    tenant_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tenant_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Terms
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    monthly_rent: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="MXN")
    lease_duration_months: Mapped[int] = mapped_column(Integer, nullable=False)
    security_deposit: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    rental_purpose: Mapped[str] = mapped_column(String(50), nullable=False, default="living")
    status: Mapped[ContractStatus] = mapped_column(
        SQLEnum(ContractStatus, native_enum=False),
        nullable=False,
        default=ContractStatus.ACTIVE,
    )

    # Pets
    has_pet: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    pet_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    pet_photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    pet_description: Mapped[str | None] = mapped_column(Text, nullable=True)

    provisioning_key: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        unique=True,
        comment="Idempotency key of the provisioning attempt that created this contract",
    )

    __table_args__ = (Index("idx_contract_unit_status", "unit_id", "status"),)

    def __repr__(self) -> str:
        return (
            f"<Contract(id={self.id}, unit_id={self.unit_id}, tenant_name={self.tenant_name}, "
            f"start_date={self.start_date}, end_date={self.end_date})>"
        )


__all__ = ["Contract", "ContractStatus"]
