"""Pytest configuration: in-memory databases, seeded entities and an API client."""

import os

# Set test settings BEFORE any imports from leasing so the global engine
# never touches a file database
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("LOG_FILE", "logs/test.log")

from datetime import date  # noqa: E402
from decimal import Decimal  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from leasing.main import app  # noqa: E402
from leasing.models import (  # noqa: E402
    Base,
    ChargeKind,
    Client,
    Condominium,
    Contract,
    PaymentFrequency,
    PaymentRecord,
    PaymentScheduleEntry,
    PaymentStatus,
    ServiceType,
    Unit,
)
from leasing.services import get_async_session  # noqa: E402
from leasing.services.cache import view_cache  # noqa: E402


@pytest.fixture(autouse=True)
def clear_view_cache():
    """The read-model cache is process-wide; start every test empty."""
    view_cache.clear()
    yield
    view_cache.clear()


@pytest.fixture
async def test_engine():
    """Create a fresh in-memory database with every table."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def async_db_session(session_factory):
    """Create async test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def api_client(session_factory):
    """HTTP client bound to the app, with sessions from the test database."""

    async def override_get_async_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_async_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def condominium(async_db_session):
    condo = Condominium(name="Torre Aqua")
    async_db_session.add(condo)
    await async_db_session.commit()
    return condo


@pytest.fixture
async def unit(async_db_session, condominium):
    """An available unit with no owner."""
    record = Unit(condominium_id=condominium.id, unit_number="A-101", is_active=True)
    async_db_session.add(record)
    await async_db_session.commit()
    return record


@pytest.fixture
async def client_record(async_db_session):
    record = Client(
        first_name="Lucia",
        last_name="Herrera",
        email="lucia@example.com",
        phone="+52 998 100 2000",
    )
    async_db_session.add(record)
    await async_db_session.commit()
    return record


@pytest.fixture
async def contract(async_db_session, unit):
    """Active 12-month contract starting 2025-03-15 with a rent and a water schedule."""
    record = Contract(
        unit_id=unit.id,
        tenant_name="Marco Ruiz",
        tenant_email="marco@example.com",
        tenant_phone="555-0101",
        start_date=date(2025, 3, 15),
        end_date=date(2026, 3, 15),
        monthly_rent=Decimal("12000"),
        currency="MXN",
        lease_duration_months=12,
    )
    async_db_session.add(record)
    await async_db_session.flush()
    async_db_session.add_all(
        [
            PaymentScheduleEntry(
                contract_id=record.id,
                service_type=ServiceType.RENT,
                charge_kind=ChargeKind.FIXED,
                amount=Decimal("12000"),
                day_of_month=15,
                payment_frequency=PaymentFrequency.MONTHLY,
                currency="MXN",
            ),
            PaymentScheduleEntry(
                contract_id=record.id,
                service_type=ServiceType.WATER,
                charge_kind=ChargeKind.VARIABLE,
                amount=Decimal("0"),
                day_of_month=5,
                payment_frequency=PaymentFrequency.BIMONTHLY,
                currency="MXN",
            ),
        ]
    )
    unit.current_contract_id = record.id
    await async_db_session.commit()
    return record


@pytest.fixture
async def make_payment(async_db_session, contract):
    """Factory for payment records on the fixture contract."""

    async def _make(
        status: PaymentStatus = PaymentStatus.PENDING,
        due_date: date = date(2025, 4, 15),
        amount: str = "12000",
        category: str = "rent",
        schedule_id: int | None = None,
    ) -> PaymentRecord:
        record = PaymentRecord(
            contract_id=contract.id,
            schedule_id=schedule_id,
            category=category,
            amount=Decimal(amount),
            currency="MXN",
            due_date=due_date,
            status=status,
        )
        async_db_session.add(record)
        await async_db_session.commit()
        return record

    return _make
