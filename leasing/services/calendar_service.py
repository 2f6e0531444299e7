"""Calendar event aggregation.

Merges payment records, schedule entries, maintenance tickets and contract
starts into one date-keyed, filterable event list. Read-only: nothing here
writes to the database.

Display dates come from the first present of due date (payments and
schedules), scheduled date (tickets) and start date (contracts). Events
without one are left out. Within a date, events are ordered by zero-padded
``HH:MM`` time, untimed events first, ties keeping source order.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Iterable

from dateutil.relativedelta import relativedelta
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leasing.config import settings
from leasing.models import (
    Condominium,
    Contract,
    MaintenanceTicket,
    PaymentRecord,
    PaymentScheduleEntry,
    ServiceType,
    Unit,
)
from leasing.services.schedule_service import occurrences
from leasing.services.verification_service import classify

logger = logging.getLogger(__name__)

NO_CONDOMINIUM = "No condominium"


class EventType(str, Enum):
    PAYMENT = "payment"
    SERVICE = "service"
    TICKET = "ticket"
    CONTRACT = "contract"


def normalize_time(value: str | None) -> str:
    """Zero-pad ``H:M`` style times to ``HH:MM``; empty or missing becomes ``""``."""
    if not value:
        return ""
    text = str(value).strip()
    parts = text.split(":")
    if len(parts) < 2 or not all(part.isdigit() for part in parts[:2]):
        return text
    hours, minutes = int(parts[0]), int(parts[1])
    return f"{hours:02d}:{minutes:02d}"


@dataclass(kw_only=True)
class CalendarEvent:
    """Fields shared by every event kind."""

    type: ClassVar[EventType]

    date: date | None
    title: str
    time: str = ""
    status: str = ""
    unit_id: int | None = None
    unit_number: str = ""
    condominium_id: int | None = None
    condominium: str = ""
    tenant_name: str | None = None

    def __post_init__(self) -> None:
        self.time = normalize_time(self.time)

    @property
    def sort_key(self) -> tuple:
        return (self.date or date.min, self.time)

    @property
    def event_type(self) -> EventType:
        return self.type


@dataclass(kw_only=True)
class PaymentEvent(CalendarEvent):
    """Rent due, settled by the tenant."""

    type: ClassVar[EventType] = EventType.PAYMENT

    amount: Decimal = Decimal("0")
    currency: str = ""
    payment_id: int | None = None
    schedule_id: int | None = None
    projected: bool = False


@dataclass(kw_only=True)
class ServiceEvent(CalendarEvent):
    """Non-rent charge (water, electricity, ...)."""

    type: ClassVar[EventType] = EventType.SERVICE

    service_type: str = ServiceType.OTHER.value
    amount: Decimal = Decimal("0")
    currency: str = ""
    payment_id: int | None = None
    schedule_id: int | None = None
    projected: bool = False


@dataclass(kw_only=True)
class TicketEvent(CalendarEvent):
    type: ClassVar[EventType] = EventType.TICKET

    ticket_id: int | None = None
    priority: str | None = None


@dataclass(kw_only=True)
class ContractEvent(CalendarEvent):
    type: ClassVar[EventType] = EventType.CONTRACT

    contract_id: int | None = None


@dataclass
class CalendarFilters:
    """Conjunctive filters.

    The window bounds every event and the schedule projection; it defaults to
    today's month.
    """

    condominium_id: int | None = None
    show_payments: bool = True
    show_services: bool = True
    show_tickets: bool = True
    show_contracts: bool = True
    window_start: date | None = None
    window_end: date | None = None

    def shows(self, event_type: EventType) -> bool:
        return {
            EventType.PAYMENT: self.show_payments,
            EventType.SERVICE: self.show_services,
            EventType.TICKET: self.show_tickets,
            EventType.CONTRACT: self.show_contracts,
        }[event_type]

    def window(self, today: date) -> tuple[date, date]:
        start = self.window_start or today.replace(day=1)
        end = self.window_end or (start + relativedelta(day=31))
        return start, end


@dataclass
class DateIndicators:
    """Per-date counts used to mark calendar cells."""

    payments: int = 0
    services: int = 0
    tickets: int = 0
    contracts: int = 0

    def add(self, event_type: EventType) -> None:
        if event_type == EventType.PAYMENT:
            self.payments += 1
        elif event_type == EventType.SERVICE:
            self.services += 1
        elif event_type == EventType.TICKET:
            self.tickets += 1
        else:
            self.contracts += 1

    @property
    def total(self) -> int:
        return self.payments + self.services + self.tickets + self.contracts

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.payments, self.services, self.tickets, self.contracts)


@dataclass
class CalendarView:
    """Filtered, sorted events with per-date grouping and indicator counts."""

    events: list[CalendarEvent] = field(default_factory=list)
    by_date: dict[date, list[CalendarEvent]] = field(default_factory=dict)
    indicators: dict[date, DateIndicators] = field(default_factory=dict)

    def events_on(self, day: date) -> list[CalendarEvent]:
        return list(self.by_date.get(day, []))

    def indicators_on(self, day: date) -> DateIndicators:
        return self.indicators.get(day, DateIndicators())

    def count(self, event_type: EventType | None = None) -> int:
        if event_type is None:
            return len(self.events)
        return sum(1 for event in self.events if event.type == event_type)


class _Locator:
    """Resolves unit, condominium and tenant labels for events."""

    def __init__(self, units, condominiums, contracts):
        self.units = {unit.id: unit for unit in units}
        self.condominiums = {condo.id: condo for condo in condominiums}
        self.contracts = {contract.id: contract for contract in contracts}

    def place(self, unit_id: int | None) -> dict[str, Any]:
        unit = self.units.get(unit_id) if unit_id is not None else None
        condominium_id = unit.condominium_id if unit else None
        condominium = self.condominiums.get(condominium_id) if condominium_id is not None else None
        return {
            "unit_id": unit_id,
            "unit_number": unit.unit_number if unit else "",
            "condominium_id": condominium_id,
            "condominium": condominium.name if condominium else "",
        }

    def for_contract(self, contract_id: int | None) -> dict[str, Any]:
        contract = self.contracts.get(contract_id)
        if contract is None:
            return self.place(None)
        return {**self.place(contract.unit_id), "tenant_name": contract.tenant_name}


def _charge_title(category: str) -> str:
    if category == ServiceType.RENT.value:
        return "Rent payment"
    return f"{category.replace('_', ' ').capitalize()} payment"


def _payment_events(payments, locator: _Locator, today: date) -> list[CalendarEvent]:
    events: list[CalendarEvent] = []
    for record in payments:
        common = dict(
            date=record.due_date,
            title=_charge_title(record.category),
            status=classify(record, today).value,
            amount=record.amount,
            currency=record.currency,
            payment_id=record.id,
            schedule_id=record.schedule_id,
            **locator.for_contract(record.contract_id),
        )
        if record.category == ServiceType.RENT.value:
            events.append(PaymentEvent(**common))
        else:
            events.append(ServiceEvent(service_type=record.category, **common))
    return events


def _schedule_events(
    entries, payments, locator: _Locator, window: tuple[date, date]
) -> list[CalendarEvent]:
    """Project active schedule entries onto their due dates inside ``window``.

    Dates already covered by a stored payment record of the same entry are skipped.
    """
    materialized = {
        (record.schedule_id, record.due_date) for record in payments if record.schedule_id is not None
    }
    events: list[CalendarEvent] = []
    for entry in entries:
        if not entry.is_active:
            continue
        contract = locator.contracts.get(entry.contract_id)
        if contract is None:
            continue
        start = max(window[0], contract.start_date)
        end = min(window[1], contract.end_date) if contract.end_date else window[1]
        for due in occurrences(entry.day_of_month, entry.payment_frequency, contract.start_date, start, end):
            if (entry.id, due) in materialized:
                continue
            service_type = entry.service_type.value
            common = dict(
                date=due,
                title=_charge_title(service_type),
                status="scheduled",
                amount=entry.amount,
                currency=entry.currency,
                schedule_id=entry.id,
                projected=True,
                **locator.for_contract(entry.contract_id),
            )
            if entry.service_type == ServiceType.RENT:
                events.append(PaymentEvent(**common))
            else:
                events.append(ServiceEvent(service_type=service_type, **common))
    return events


def _ticket_events(tickets, locator: _Locator) -> list[CalendarEvent]:
    return [
        TicketEvent(
            date=ticket.scheduled_date,
            time=ticket.scheduled_time or "",
            title=ticket.title,
            status=ticket.status,
            priority=ticket.priority,
            ticket_id=ticket.id,
            **locator.place(ticket.unit_id),
        )
        for ticket in tickets
    ]


def _contract_events(contracts, locator: _Locator) -> list[CalendarEvent]:
    return [
        ContractEvent(
            date=contract.start_date,
            title=f"Contract start: {contract.tenant_name}",
            status=contract.status.value,
            contract_id=contract.id,
            tenant_name=contract.tenant_name,
            **locator.place(contract.unit_id),
        )
        for contract in contracts
    ]


def aggregate(
    payments: Iterable[PaymentRecord],
    schedule_entries: Iterable[PaymentScheduleEntry],
    tickets: Iterable[MaintenanceTicket],
    contracts: Iterable[Contract],
    filters: CalendarFilters | None = None,
    *,
    units: Iterable[Unit] = (),
    condominiums: Iterable[Condominium] = (),
    today: date | None = None,
) -> CalendarView:
    """Build the calendar view from the four entity streams.

    Args:
        payments: Stored payment records
        schedule_entries: Recurring charges, projected into the filter window
        tickets: Maintenance tickets
        contracts: Contracts (start events, tenant names, schedule anchors)
        filters: Window, condominium and type filters; defaults show today's month
        units: Units, used to resolve condominiums
        condominiums: Condominiums, used for display names
        today: Reference date for overdue classification and the default window

    Returns:
        CalendarView with sorted events, per-date groups and indicator counts
    """
    filters = filters or CalendarFilters()
    today = today or date.today()
    payments = list(payments)
    contracts = list(contracts)
    locator = _Locator(units, condominiums, contracts)
    window_start, window_end = filters.window(today)

    candidates: list[CalendarEvent] = []
    candidates.extend(_payment_events(payments, locator, today))
    candidates.extend(_schedule_events(schedule_entries, payments, locator, (window_start, window_end)))
    candidates.extend(_ticket_events(tickets, locator))
    candidates.extend(_contract_events(contracts, locator))

    visible = [
        event
        for event in candidates
        if event.date is not None
        and window_start <= event.date <= window_end
        and filters.shows(event.type)
        and (filters.condominium_id is None or event.condominium_id == filters.condominium_id)
    ]
    visible.sort(key=lambda event: event.sort_key)

    view = CalendarView(events=visible)
    for event in visible:
        view.by_date.setdefault(event.date, []).append(event)
        view.indicators.setdefault(event.date, DateIndicators()).add(event.type)

    logger.debug(
        f"Calendar aggregated {len(visible)} of {len(candidates)} events on {len(view.by_date)} dates"
    )
    return view


class DayPager:
    """Fixed-size pages over one day's events.

    Changing page collapses any expanded item.
    """

    def __init__(self, events: list[CalendarEvent], page_size: int | None = None):
        self.events = list(events)
        self.page_size = max(1, page_size or settings.calendar_page_size)
        self.page = 0
        self.expanded: set[int] = set()

    @property
    def page_count(self) -> int:
        return max(1, -(-len(self.events) // self.page_size))

    @property
    def items(self) -> list[CalendarEvent]:
        offset = self.page * self.page_size
        return self.events[offset : offset + self.page_size]

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.page_count

    @property
    def has_previous(self) -> bool:
        return self.page > 0

    def next(self) -> bool:
        if not self.has_next:
            return False
        self.page += 1
        self.expanded.clear()
        return True

    def previous(self) -> bool:
        if not self.has_previous:
            return False
        self.page -= 1
        self.expanded.clear()
        return True

    def toggle(self, index: int) -> bool:
        """Expand or collapse an item on the current page; returns the new state."""
        if index in self.expanded:
            self.expanded.discard(index)
            return False
        self.expanded.add(index)
        return True


def agenda(
    events: CalendarView | Iterable[CalendarEvent],
    now: datetime,
    days: int | None = None,
) -> dict[date, list[CalendarEvent]]:
    """Upcoming events from the start of today through ``now + days``, grouped by date."""
    if isinstance(events, CalendarView):
        events = events.events
    days = settings.agenda_days if days is None else days
    first = now.date()
    last = (now + timedelta(days=days)).date()

    upcoming = [event for event in events if event.date is not None and first <= event.date <= last]
    upcoming.sort(key=lambda event: event.sort_key)

    grouped: dict[date, list[CalendarEvent]] = {}
    for event in upcoming:
        grouped.setdefault(event.date, []).append(event)
    return grouped


@dataclass
class CondominiumBuckets:
    payments: list[CalendarEvent] = field(default_factory=list)
    services: list[CalendarEvent] = field(default_factory=list)
    tickets: list[CalendarEvent] = field(default_factory=list)
    contracts: list[CalendarEvent] = field(default_factory=list)

    def add(self, event: CalendarEvent) -> None:
        {
            EventType.PAYMENT: self.payments,
            EventType.SERVICE: self.services,
            EventType.TICKET: self.tickets,
            EventType.CONTRACT: self.contracts,
        }[event.type].append(event)


def group_by_condominium(events: Iterable[CalendarEvent]) -> dict[str, CondominiumBuckets]:
    """Group a day's events by condominium name, one bucket per event type."""
    grouped: dict[str, CondominiumBuckets] = {}
    for event in events:
        grouped.setdefault(event.condominium or NO_CONDOMINIUM, CondominiumBuckets()).add(event)
    return grouped


@dataclass
class CalendarSources:
    payments: list[PaymentRecord]
    schedule_entries: list[PaymentScheduleEntry]
    tickets: list[MaintenanceTicket]
    contracts: list[Contract]
    units: list[Unit]
    condominiums: list[Condominium]


async def load_calendar_sources(db: AsyncSession) -> CalendarSources:
    """Read the current snapshot of every entity the calendar needs."""

    async def all_of(model):
        return list((await db.execute(select(model).order_by(model.id))).scalars().all())

    return CalendarSources(
        payments=await all_of(PaymentRecord),
        schedule_entries=await all_of(PaymentScheduleEntry),
        tickets=await all_of(MaintenanceTicket),
        contracts=await all_of(Contract),
        units=await all_of(Unit),
        condominiums=await all_of(Condominium),
    )


__all__ = [
    "EventType",
    "CalendarEvent",
    "PaymentEvent",
    "ServiceEvent",
    "TicketEvent",
    "ContractEvent",
    "CalendarFilters",
    "DateIndicators",
    "CalendarView",
    "DayPager",
    "CondominiumBuckets",
    "CalendarSources",
    "normalize_time",
    "aggregate",
    "agenda",
    "group_by_condominium",
    "load_calendar_sources",
]
