"""SQLAlchemy base model with common fields and model exports."""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Base class for all models
Base = declarative_base()


class BaseModel:
    """Base model with common timestamp fields."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


# Import models to register them with Base (after Base is defined)
# This must be after Base declaration to avoid circular imports
from leasing.models.condominium import Condominium  # noqa: E402
from leasing.models.unit import Unit  # noqa: E402
from leasing.models.client import Client  # noqa: E402
from leasing.models.owner import Owner  # noqa: E402
from leasing.models.contract import Contract, ContractStatus  # noqa: E402
from leasing.models.tenant import AdditionalTenant  # noqa: E402
from leasing.models.payment_schedule import (  # noqa: E402
    ChargeKind,
    PaymentFrequency,
    PaymentScheduleEntry,
    ServiceType,
)
from leasing.models.payment_record import PayerRole, PaymentRecord, PaymentStatus  # noqa: E402
from leasing.models.payment_receipt import PaymentReceipt, ReceiptStatus  # noqa: E402
from leasing.models.maintenance_ticket import MaintenanceTicket  # noqa: E402

__all__ = [
    "Base",
    "BaseModel",
    "Condominium",
    "Unit",
    "Client",
    "Owner",
    "Contract",
    "ContractStatus",
    "AdditionalTenant",
    "PaymentScheduleEntry",
    "ServiceType",
    "ChargeKind",
    "PaymentFrequency",
    "PaymentRecord",
    "PaymentStatus",
    "PayerRole",
    "PaymentReceipt",
    "ReceiptStatus",
    "MaintenanceTicket",
]
