"""Owner ORM model for people receiving rent for a unit."""

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from leasing.models import Base, BaseModel


class Owner(Base, BaseModel):
    """Model representing the owner of a unit.

    At most one active owner per unit is expected, but not enforced here.
    """

    __tablename__ = "unit_owners"

    unit_id: Mapped[int] = mapped_column(
        ForeignKey("units.id"),
        nullable=False,
        comment="Unit this owner is registered for",
    )
    owner_name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    owner_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (Index("idx_unit_owner_active", "unit_id", "is_active"),)

    def __repr__(self) -> str:
        return (
            f"<Owner(id={self.id}, unit_id={self.unit_id}, owner_name={self.owner_name}, "
            f"is_active={self.is_active})>"
        )


__all__ = ["Owner"]
