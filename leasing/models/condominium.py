"""Condominium ORM model (catalog data, read by the calendar filters)."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from leasing.models import Base, BaseModel


class Condominium(Base, BaseModel):
    """A building or complex grouping rentable units."""

    __tablename__ = "condominiums"

    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="Display name")

    def __repr__(self) -> str:
        return f"<Condominium(id={self.id}, name={self.name})>"


__all__ = ["Condominium"]
