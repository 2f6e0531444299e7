"""Contract tests for the calendar endpoints and the health check."""

from datetime import date, timedelta

import pytest
from sqlalchemy import select

from leasing.models import Condominium, MaintenanceTicket, PaymentScheduleEntry, ServiceType, Unit

pytestmark = pytest.mark.contract

MAY = {"start": "2025-05-01", "end": "2025-05-31"}
TICKETS_ONLY = {"showPayments": "false", "showServices": "false", "showContracts": "false"}


@pytest.fixture
async def second_unit(async_db_session):
    condo = Condominium(name="Selva Norte")
    async_db_session.add(condo)
    await async_db_session.flush()
    record = Unit(condominium_id=condo.id, unit_number="B-7", is_active=True)
    async_db_session.add(record)
    await async_db_session.commit()
    return record


@pytest.fixture
async def make_ticket(async_db_session, unit):
    async def _make(scheduled_date, scheduled_time=None, title="Fix AC", unit_id=None):
        ticket = MaintenanceTicket(
            unit_id=unit_id or unit.id,
            title=title,
            scheduled_date=scheduled_date,
            scheduled_time=scheduled_time,
        )
        async_db_session.add(ticket)
        await async_db_session.commit()
        return ticket

    return _make


def day_entry(data, day):
    return next(item for item in data["days"] if item["date"] == day)


class TestCalendarEvents:
    async def test_month_projection(self, api_client, contract):
        response = await api_client.get("/calendar/events", params=MAY)

        assert response.status_code == 200
        data = response.json()
        assert data["windowStart"] == "2025-05-01"
        assert data["windowEnd"] == "2025-05-31"

        rent_day = day_entry(data, "2025-05-15")
        assert rent_day["indicators"] == {"payments": 1, "services": 0, "tickets": 0, "contracts": 0}
        rent = rent_day["events"][0]
        assert rent["type"] == "payment"
        assert rent["title"] == "Rent payment"
        assert rent["status"] == "scheduled"
        assert rent["projected"] is True
        assert rent["unitNumber"] == "A-101"
        assert rent["condominium"] == "Torre Aqua"
        assert rent["tenantName"] == "Marco Ruiz"

        water = day_entry(data, "2025-05-05")["events"][0]
        assert water["type"] == "service"
        assert water["serviceType"] == "water"

        assert [item["date"] for item in data["days"]] == sorted(item["date"] for item in data["days"])

    async def test_window_bounds_every_event(self, api_client, contract, make_ticket):
        await make_ticket(date(2025, 6, 2), title="June visit")

        may = (await api_client.get("/calendar/events", params=MAY)).json()
        assert "2025-03-15" not in [item["date"] for item in may["days"]]
        assert all(item["date"].startswith("2025-05") for item in may["days"])

        march = (
            await api_client.get("/calendar/events", params={"start": "2025-03-01", "end": "2025-03-31"})
        ).json()
        events = {event["type"]: event for event in day_entry(march, "2025-03-15")["events"]}
        assert set(events) == {"contract", "payment"}
        assert events["contract"]["title"] == "Contract start: Marco Ruiz"

    async def test_stored_payment_replaces_projection(self, api_client, async_db_session, contract, make_payment):
        rent_schedule = (
            await async_db_session.execute(
                select(PaymentScheduleEntry).where(PaymentScheduleEntry.service_type == ServiceType.RENT)
            )
        ).scalar_one()
        stored = await make_payment(due_date=date(2025, 5, 15), schedule_id=rent_schedule.id)

        data = (await api_client.get("/calendar/events", params=MAY)).json()

        events = day_entry(data, "2025-05-15")["events"]
        assert len(events) == 1
        assert events[0]["paymentId"] == stored.id
        assert events[0]["projected"] is False
        assert events[0]["status"] == "overdue"

    async def test_type_toggle(self, api_client, contract):
        data = (await api_client.get("/calendar/events", params={**MAY, "showPayments": "false"})).json()

        types = {event["type"] for item in data["days"] for event in item["events"]}
        assert types == {"service"}
        assert all(item["indicators"]["payments"] == 0 for item in data["days"])

    async def test_condominium_filter(self, api_client, contract, second_unit, make_ticket):
        await make_ticket(date(2025, 5, 20), unit_id=second_unit.id, title="Leak")

        data = (
            await api_client.get(
                "/calendar/events", params={**MAY, "condominiumId": second_unit.condominium_id}
            )
        ).json()

        assert data["total"] == 1
        assert data["days"][0]["events"][0]["title"] == "Leak"
        assert data["days"][0]["events"][0]["condominium"] == "Selva Norte"

    async def test_undated_tickets_hidden(self, api_client, make_ticket):
        await make_ticket(None, title="Someday")
        data = (await api_client.get("/calendar/events", params=MAY)).json()
        assert data["total"] == 0


class TestCalendarDay:
    async def test_pages_of_five_sorted_by_time(self, api_client, make_ticket):
        day = date(2025, 6, 10)
        for time in ["14:00", "9:00", None, "11:30", "08:15", "16:45", "10:00"]:
            await make_ticket(day, time, title=f"Ticket {time}")

        first = (await api_client.get("/calendar/day", params={"date": day.isoformat()})).json()

        assert first["total"] == 7
        assert first["pageCount"] == 2
        assert first["hasNext"] is True
        assert first["hasPrevious"] is False
        assert [event["time"] for event in first["events"]] == ["", "08:15", "09:00", "10:00", "11:30"]

        second = (
            await api_client.get("/calendar/day", params={"date": day.isoformat(), "page": 1})
        ).json()
        assert second["page"] == 1
        assert [event["time"] for event in second["events"]] == ["14:00", "16:45"]
        assert second["hasNext"] is False

    async def test_page_past_end_stays_on_last(self, api_client, make_ticket):
        await make_ticket(date(2025, 6, 10), "10:00")
        data = (await api_client.get("/calendar/day", params={"date": "2025-06-10", "page": 4})).json()
        assert data["page"] == 0
        assert len(data["events"]) == 1

    async def test_date_is_required(self, api_client):
        response = await api_client.get("/calendar/day")
        assert response.status_code == 422


class TestAgendaAndToday:
    async def test_agenda_covers_next_seven_days(self, api_client, make_ticket):
        today = date.today()
        await make_ticket(today - timedelta(days=1), title="Yesterday")
        await make_ticket(today, "18:00", title="Today")
        await make_ticket(today + timedelta(days=3), title="Soon")
        await make_ticket(today + timedelta(days=10), title="Later")

        data = (await api_client.get("/calendar/agenda", params=TICKETS_ONLY)).json()

        assert data["total"] == 2
        assert [item["date"] for item in data["days"]] == [
            today.isoformat(),
            (today + timedelta(days=3)).isoformat(),
        ]
        assert data["days"][0]["events"][0]["title"] == "Today"

    async def test_today_grouped_by_condominium(self, api_client, make_ticket, second_unit):
        today = date.today()
        await make_ticket(today, "09:00", title="Fix AC")
        await make_ticket(today, "10:00", title="Leak", unit_id=second_unit.id)
        await make_ticket(today + timedelta(days=1), title="Tomorrow")

        data = (await api_client.get("/calendar/today", params=TICKETS_ONLY)).json()

        assert data["date"] == today.isoformat()
        assert data["total"] == 2
        groups = {group["condominium"]: group for group in data["condominiums"]}
        assert set(groups) == {"Torre Aqua", "Selva Norte"}
        assert [event["title"] for event in groups["Selva Norte"]["tickets"]] == ["Leak"]
        assert groups["Torre Aqua"]["payments"] == []


async def test_health(api_client):
    response = await api_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
