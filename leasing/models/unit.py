"""Unit ORM model for rentable spaces."""

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from leasing.models import Base, BaseModel


class Unit(Base, BaseModel):
    """Model representing a rentable space inside a condominium.

    A unit is available while ``current_contract_id`` is null.
    """

    __tablename__ = "units"

    condominium_id: Mapped[int | None] = mapped_column(
        ForeignKey("condominiums.id"),
        nullable=True,
        index=True,
        comment="Condominium the unit belongs to",
    )
    unit_number: Mapped[str] = mapped_column(String(50), nullable=False, comment="Unit label")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # No FK: contracts reference units, this is a denormalized back-pointer
    current_contract_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Contract currently occupying the unit (null = available)",
    )

    @property
    def is_available(self) -> bool:
        return self.is_active and self.current_contract_id is None

    def __repr__(self) -> str:
        return (
            f"<Unit(id={self.id}, unit_number={self.unit_number}, "
            f"condominium_id={self.condominium_id}, current_contract_id={self.current_contract_id})>"
        )


__all__ = ["Unit"]
