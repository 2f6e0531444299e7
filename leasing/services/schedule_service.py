"""Payment schedule generation.

Turns a contract start date, a lease length and a list of charge definitions
into concrete recurring schedule entries. Everything here is pure: no
database access and no exceptions for bad input. An absent or unparseable
start date yields an empty result so forms can keep rendering while the user
is still typing.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from leasing.models.payment_schedule import ChargeKind, PaymentFrequency, ServiceType

MIN_DAY_OF_MONTH = 1
MAX_DAY_OF_MONTH = 31
MAX_DURATION_MONTHS = 600


@dataclass
class ChargeDefinition:
    """A caller-supplied extra charge (water, electricity, ...)."""

    service_type: ServiceType
    day_of_month: int
    amount: Any = None
    charge_kind: ChargeKind = ChargeKind.FIXED
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    currency: str | None = None


@dataclass
class ScheduleEntryDraft:
    """A schedule entry ready to be submitted with its contract."""

    service_type: ServiceType
    charge_kind: ChargeKind
    amount: Decimal
    day_of_month: int
    payment_frequency: PaymentFrequency
    currency: str

    @property
    def is_variable(self) -> bool:
        return self.charge_kind == ChargeKind.VARIABLE

    def to_payload(self) -> dict[str, Any]:
        """Wire shape of one ``additionalServices`` item."""
        return {
            "serviceType": self.service_type.value,
            "chargeKind": self.charge_kind.value,
            "amount": float(self.amount),
            "dayOfMonth": self.day_of_month,
            "currency": self.currency,
            "paymentFrequency": self.payment_frequency.value,
        }


@dataclass
class ScheduleResult:
    """Derived end date plus the rent and extra schedule entries."""

    start_date: date | None = None
    end_date: date | None = None
    entries: list[ScheduleEntryDraft] = field(default_factory=list)

    @property
    def rent_entry(self) -> ScheduleEntryDraft | None:
        for entry in self.entries:
            if entry.service_type == ServiceType.RENT:
                return entry
        return None

    @property
    def span_days(self) -> int | None:
        return span_days(self.start_date, self.end_date)


def parse_date(value: Any) -> date | None:
    """Coerce a date, datetime or ISO string into a date; None when not possible."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return isoparse(text).date()
        except (ValueError, OverflowError):
            return None
    return None


def parse_amount(value: Any) -> Decimal:
    """Parse decimal text (or a number) into a Decimal. Invalid input becomes zero."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    text = str(value).strip().replace(",", "")
    if not text:
        return Decimal("0")
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return Decimal("0")
    if not amount.is_finite():
        return Decimal("0")
    return amount


def add_months(start: date, months: int) -> date | None:
    """Calendar-month addition; clamps to the last day of shorter months.

    Returns None when the result falls outside the supported date range.
    """
    try:
        return start + relativedelta(months=months)
    except (ValueError, OverflowError):
        return None


def span_days(start: date | None, end: date | None) -> int | None:
    """Number of days between two dates, recomputed on demand for display."""
    if start is None or end is None:
        return None
    return (end - start).days


def clamp_day(day_of_month: Any) -> int:
    try:
        day = int(day_of_month)
    except (TypeError, ValueError):
        return MIN_DAY_OF_MONTH
    return max(MIN_DAY_OF_MONTH, min(MAX_DAY_OF_MONTH, day))


def due_date_for(day_of_month: int, year: int, month: int) -> date:
    """Due date of a charge in a given month, e.g. day 31 in February becomes the 28th/29th."""
    first = date(year, month, 1)
    last_day = (first + relativedelta(day=31)).day
    return date(year, month, min(clamp_day(day_of_month), last_day))


def months_between(anchor: date, year: int, month: int) -> int:
    return (year - anchor.year) * 12 + (month - anchor.month)


def is_billing_month(
    frequency: PaymentFrequency, anchor: date | None, year: int, month: int
) -> bool:
    """Whether a charge bills in the given month.

    Monthly charges bill every month. Bimonthly charges bill every second
    month counted from the anchor (the contract start month).
    """
    if frequency != PaymentFrequency.BIMONTHLY or anchor is None:
        return True
    return months_between(anchor, year, month) % 2 == 0


def occurrences(
    day_of_month: int,
    frequency: PaymentFrequency,
    anchor: date | None,
    window_start: date,
    window_end: date,
) -> list[date]:
    """Due dates of a recurring charge inside ``[window_start, window_end]``.

    Nothing is emitted before the anchor month.
    """
    dates: list[date] = []
    if window_end < window_start:
        return dates
    cursor = date(window_start.year, window_start.month, 1)
    while cursor <= window_end:
        if anchor is None or months_between(anchor, cursor.year, cursor.month) >= 0:
            if is_billing_month(frequency, anchor, cursor.year, cursor.month):
                due = due_date_for(day_of_month, cursor.year, cursor.month)
                if window_start <= due <= window_end:
                    dates.append(due)
        cursor = add_months(cursor, 1)
        if cursor is None:
            break
    return dates


def build_rent_entry(start: date, monthly_rent: Any, currency: str) -> ScheduleEntryDraft:
    """Rent bills monthly on the start date's day of month."""
    return ScheduleEntryDraft(
        service_type=ServiceType.RENT,
        charge_kind=ChargeKind.FIXED,
        amount=parse_amount(monthly_rent),
        day_of_month=start.day,
        payment_frequency=PaymentFrequency.MONTHLY,
        currency=currency,
    )


def coerce_enum(enum_cls, value, fallback):
    """Enum member for a value; unknown values map to ``fallback``."""
    try:
        return enum_cls(value)
    except ValueError:
        return fallback


def build_charge_entry(charge: ChargeDefinition, currency: str) -> ScheduleEntryDraft:
    kind = coerce_enum(ChargeKind, charge.charge_kind, ChargeKind.FIXED)
    amount = Decimal("0") if kind == ChargeKind.VARIABLE else parse_amount(charge.amount)
    return ScheduleEntryDraft(
        service_type=coerce_enum(ServiceType, charge.service_type, ServiceType.OTHER),
        charge_kind=kind,
        amount=amount,
        day_of_month=clamp_day(charge.day_of_month),
        payment_frequency=coerce_enum(
            PaymentFrequency, charge.payment_frequency, PaymentFrequency.MONTHLY
        ),
        currency=charge.currency or currency,
    )


def generate(
    start_date: Any,
    duration_months: int | None = None,
    end_date: Any = None,
    monthly_rent: Any = None,
    currency: str = "MXN",
    extra_charges: Iterable[ChargeDefinition] = (),
) -> ScheduleResult:
    """Derive the end date and the schedule entries of a contract.

    Args:
        start_date: Lease start (date, datetime or ISO string)
        duration_months: Lease length; wins over ``end_date`` when both are given
        end_date: Explicit end date (specific-dates mode, not checked against start)
        monthly_rent: Rent amount, numeric or decimal text
        currency: Currency propagated to every entry without its own
        extra_charges: Additional recurring charges

    Returns:
        ScheduleResult; empty when the start date is missing or invalid
    """
    start = parse_date(start_date)
    if start is None:
        return ScheduleResult()

    try:
        months = int(duration_months) if duration_months is not None else 0
    except (TypeError, ValueError):
        months = 0

    if months >= 1:
        end = add_months(start, months)
        if end is None:
            return ScheduleResult()
    else:
        end = parse_date(end_date)

    entries = [build_rent_entry(start, monthly_rent, currency)]
    entries.extend(build_charge_entry(charge, currency) for charge in extra_charges)
    return ScheduleResult(start_date=start, end_date=end, entries=entries)


__all__ = [
    "MAX_DURATION_MONTHS",
    "ChargeDefinition",
    "ScheduleEntryDraft",
    "ScheduleResult",
    "parse_date",
    "parse_amount",
    "add_months",
    "span_days",
    "due_date_for",
    "is_billing_month",
    "occurrences",
    "generate",
]
