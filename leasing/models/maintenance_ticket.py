"""Maintenance ticket ORM model (read by the calendar)."""

from datetime import date

from sqlalchemy import Date, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from leasing.models import Base, BaseModel


class MaintenanceTicket(Base, BaseModel):
    """A maintenance visit on a unit, optionally scheduled for a date and time."""

    __tablename__ = "maintenance_tickets"

    unit_id: Mapped[int] = mapped_column(ForeignKey("units.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="open")
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    scheduled_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    scheduled_time: Mapped[str | None] = mapped_column(String(5), nullable=True, comment="HH:MM")

    def __repr__(self) -> str:
        return (
            f"<MaintenanceTicket(id={self.id}, unit_id={self.unit_id}, title={self.title}, "
            f"scheduled_date={self.scheduled_date})>"
        )


__all__ = ["MaintenanceTicket"]
