"""Payment schedule ORM model: recurring charge definitions of a contract."""

from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from leasing.models import Base, BaseModel


class ServiceType(str, Enum):
    """What a recurring charge pays for."""

    RENT = "rent"
    WATER = "water"
    ELECTRICITY = "electricity"
    INTERNET = "internet"
    GAS = "gas"
    MAINTENANCE = "maintenance"
    OTHER = "other"


class ChargeKind(str, Enum):
    """Whether the amount is known up front or metered at cut-off."""

    FIXED = "fixed"
    VARIABLE = "variable"


class PaymentFrequency(str, Enum):
    """Billing cadence."""

    MONTHLY = "monthly"
    BIMONTHLY = "bimonthly"


class PaymentScheduleEntry(Base, BaseModel):
    """Model representing one recurring charge of a contract.

    Variable charges carry a zero placeholder amount; the real amount is
    recorded on the generated payment record once the reading is known.
    """

    __tablename__ = "payment_schedules"

    contract_id: Mapped[int] = mapped_column(
        ForeignKey("rental_contracts.id"),
        nullable=False,
        index=True,
    )
    service_type: Mapped[ServiceType] = mapped_column(
        SQLEnum(ServiceType, native_enum=False),
        nullable=False,
    )
    charge_kind: Mapped[ChargeKind] = mapped_column(
        SQLEnum(ChargeKind, native_enum=False),
        nullable=False,
        default=ChargeKind.FIXED,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    day_of_month: Mapped[int] = mapped_column(Integer, nullable=False, comment="1-31, clamped per month")
    payment_frequency: Mapped[PaymentFrequency] = mapped_column(
        SQLEnum(PaymentFrequency, native_enum=False),
        nullable=False,
        default=PaymentFrequency.MONTHLY,
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="MXN")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return (
            f"<PaymentScheduleEntry(id={self.id}, contract_id={self.contract_id}, "
            f"service_type={self.service_type.value}, day_of_month={self.day_of_month})>"
        )


__all__ = ["PaymentScheduleEntry", "ServiceType", "ChargeKind", "PaymentFrequency"]
