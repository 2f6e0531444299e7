"""Client ORM model (prospective or existing tenants)."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from leasing.models import Base, BaseModel


class Client(Base, BaseModel):
    """A person already known to the agency who can be selected as tenant."""

    __tablename__ = "clients"

    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, name={self.full_name})>"


__all__ = ["Client"]
