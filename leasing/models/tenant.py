"""Additional tenant ORM model (co-tenants attached after contract creation)."""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from leasing.models import Base, BaseModel


class AdditionalTenant(Base, BaseModel):
    """A co-tenant listed on a contract."""

    __tablename__ = "rental_tenants"

    contract_id: Mapped[int] = mapped_column(
        ForeignKey("rental_contracts.id"),
        nullable=False,
        index=True,
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    id_photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<AdditionalTenant(id={self.id}, contract_id={self.contract_id}, full_name={self.full_name})>"


__all__ = ["AdditionalTenant"]
