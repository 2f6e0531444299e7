"""Calendar API routes: month view, paged day view, 7-day agenda and today."""

from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leasing.config import settings
from leasing.schemas.calendar import (
    AgendaDay,
    AgendaResponse,
    CalendarDay,
    CalendarEventResponse,
    CalendarResponse,
    CondominiumGroup,
    DateIndicatorsResponse,
    DayPageResponse,
    TodayResponse,
)
from leasing.services import get_async_session
from leasing.services.calendar_service import (
    CalendarFilters,
    DayPager,
    aggregate,
    agenda,
    group_by_condominium,
    load_calendar_sources,
)

router = APIRouter(prefix="/calendar", tags=["calendar"])


def calendar_filters(
    condominium_id: int | None = Query(None, alias="condominiumId"),
    show_payments: bool = Query(True, alias="showPayments"),
    show_services: bool = Query(True, alias="showServices"),
    show_tickets: bool = Query(True, alias="showTickets"),
    show_contracts: bool = Query(True, alias="showContracts"),
    start: date | None = Query(None),
    end: date | None = Query(None),
) -> CalendarFilters:
    return CalendarFilters(
        condominium_id=condominium_id,
        show_payments=show_payments,
        show_services=show_services,
        show_tickets=show_tickets,
        show_contracts=show_contracts,
        window_start=start,
        window_end=end,
    )


async def build_view(db: AsyncSession, filters: CalendarFilters, today: date):
    sources = await load_calendar_sources(db)
    return aggregate(
        sources.payments,
        sources.schedule_entries,
        sources.tickets,
        sources.contracts,
        filters,
        units=sources.units,
        condominiums=sources.condominiums,
        today=today,
    )


@router.get("/events", response_model=CalendarResponse)
async def calendar_events(
    filters: CalendarFilters = Depends(calendar_filters),
    db: AsyncSession = Depends(get_async_session),
) -> CalendarResponse:
    """Events inside the window, grouped by date with per-date indicator counts."""
    today = date.today()
    window_start, window_end = filters.window(today)
    view = await build_view(db, filters, today)
    return CalendarResponse(
        window_start=window_start,
        window_end=window_end,
        total=len(view.events),
        days=[
            CalendarDay(
                date=day,
                indicators=DateIndicatorsResponse.from_indicators(view.indicators[day]),
                events=[CalendarEventResponse.model_validate(event) for event in events],
            )
            for day, events in view.by_date.items()
        ],
    )


@router.get("/day", response_model=DayPageResponse)
async def calendar_day(
    day: date = Query(..., alias="date"),
    page: int = Query(0, ge=0),
    filters: CalendarFilters = Depends(calendar_filters),
    db: AsyncSession = Depends(get_async_session),
) -> DayPageResponse:
    """One page of a single day's events."""
    filters.window_start = filters.window_end = day
    view = await build_view(db, filters, date.today())

    pager = DayPager(view.events_on(day), settings.calendar_page_size)
    while pager.page < page and pager.next():
        pass
    return DayPageResponse(
        date=day,
        page=pager.page,
        page_count=pager.page_count,
        has_next=pager.has_next,
        has_previous=pager.has_previous,
        total=len(pager.events),
        events=[CalendarEventResponse.model_validate(event) for event in pager.items],
    )


@router.get("/agenda", response_model=AgendaResponse)
async def calendar_agenda(
    filters: CalendarFilters = Depends(calendar_filters),
    db: AsyncSession = Depends(get_async_session),
) -> AgendaResponse:
    """Events from today through the next ``agenda_days`` days."""
    now = datetime.now()
    filters.window_start = now.date()
    filters.window_end = (now + timedelta(days=settings.agenda_days)).date()
    view = await build_view(db, filters, now.date())

    grouped = agenda(view, now, settings.agenda_days)
    return AgendaResponse(
        total=sum(len(events) for events in grouped.values()),
        days=[
            AgendaDay(date=day, events=[CalendarEventResponse.model_validate(e) for e in events])
            for day, events in grouped.items()
        ],
    )


@router.get("/today", response_model=TodayResponse)
async def calendar_today(
    filters: CalendarFilters = Depends(calendar_filters),
    db: AsyncSession = Depends(get_async_session),
) -> TodayResponse:
    """Today's events grouped by condominium."""
    today = date.today()
    filters.window_start = filters.window_end = today
    view = await build_view(db, filters, today)

    events = view.events_on(today)
    return TodayResponse(
        date=today,
        total=len(events),
        condominiums=[
            CondominiumGroup.from_buckets(name, buckets)
            for name, buckets in group_by_condominium(events).items()
        ],
    )
