"""Schemas for calendar, agenda and today views."""

from datetime import date

from leasing.schemas import CamelModel
from leasing.services.calendar_service import CondominiumBuckets, DateIndicators, EventType


class CalendarEventResponse(CamelModel):
    """One event; fields not carried by an event kind stay null."""

    type: EventType
    date: date
    title: str
    time: str = ""
    status: str = ""
    unit_id: int | None = None
    unit_number: str = ""
    condominium_id: int | None = None
    condominium: str = ""
    tenant_name: str | None = None
    amount: float | None = None
    currency: str | None = None
    service_type: str | None = None
    priority: str | None = None
    payment_id: int | None = None
    schedule_id: int | None = None
    ticket_id: int | None = None
    contract_id: int | None = None
    projected: bool = False


class DateIndicatorsResponse(CamelModel):
    payments: int = 0
    services: int = 0
    tickets: int = 0
    contracts: int = 0

    @classmethod
    def from_indicators(cls, indicators: DateIndicators) -> "DateIndicatorsResponse":
        return cls.model_validate(indicators)


class CalendarDay(CamelModel):
    date: date
    indicators: DateIndicatorsResponse
    events: list[CalendarEventResponse]


class CalendarResponse(CamelModel):
    """Response of GET /calendar/events."""

    window_start: date
    window_end: date
    total: int
    days: list[CalendarDay]


class AgendaDay(CamelModel):
    date: date
    events: list[CalendarEventResponse]


class AgendaResponse(CamelModel):
    """Response of GET /calendar/agenda."""

    total: int
    days: list[AgendaDay]


class CondominiumGroup(CamelModel):
    condominium: str
    payments: list[CalendarEventResponse]
    services: list[CalendarEventResponse]
    tickets: list[CalendarEventResponse]
    contracts: list[CalendarEventResponse]

    @classmethod
    def from_buckets(cls, name: str, buckets: CondominiumBuckets) -> "CondominiumGroup":
        return cls(
            condominium=name,
            payments=[CalendarEventResponse.model_validate(e) for e in buckets.payments],
            services=[CalendarEventResponse.model_validate(e) for e in buckets.services],
            tickets=[CalendarEventResponse.model_validate(e) for e in buckets.tickets],
            contracts=[CalendarEventResponse.model_validate(e) for e in buckets.contracts],
        )


class TodayResponse(CamelModel):
    """Response of GET /calendar/today."""

    date: date
    total: int
    condominiums: list[CondominiumGroup]


class DayPageResponse(CamelModel):
    """Response of GET /calendar/day."""

    date: date
    page: int
    page_count: int
    has_next: bool
    has_previous: bool
    total: int
    events: list[CalendarEventResponse]
