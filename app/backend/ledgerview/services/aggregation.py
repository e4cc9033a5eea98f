"""Numeric and calendar helpers shared by every insights aggregator."""

from __future__ import annotations

import calendar
import math
from collections.abc import Callable
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation

ZERO = Decimal("0")
SECONDS_PER_DAY = 86400

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_decimal(value: object) -> Decimal:
    """Coerce a decimal-like value into ``Decimal``.

    ``None`` and unparseable strings resolve to zero; floats go through
    ``str`` so that ``0.1`` stays ``Decimal("0.1")``.
    """

    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value)) if math.isfinite(value) else ZERO
    to_decimal_method = getattr(value, "to_decimal", None)
    if callable(to_decimal_method):
        return to_decimal(to_decimal_method())
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation:
        return ZERO
    return parsed if parsed.is_finite() else ZERO


def to_number(value: object) -> float:
    """Coerce a decimal-like value into ``float``; ``None`` becomes ``0.0``."""

    return float(to_decimal(value))


def safe_div(numerator: Decimal | float | int, denominator: Decimal | float | int) -> Decimal:
    """Divide, resolving a zero denominator to zero instead of raising."""

    denominator = to_decimal(denominator)
    if denominator == ZERO:
        return ZERO
    return to_decimal(numerator) / denominator


def as_utc_datetime(value: date | datetime) -> datetime:
    """Dates become UTC midnight; naive datetimes are read as UTC."""

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def isoformat_utc(value: date | datetime | None) -> str | None:
    if value is None:
        return None
    return as_utc_datetime(value).isoformat().replace("+00:00", "Z")


def days_between(start: date | datetime, end: date | datetime) -> float:
    """Real number of days from ``start`` to ``end``; never floored."""

    delta = as_utc_datetime(end) - as_utc_datetime(start)
    return delta.total_seconds() / SECONDS_PER_DAY


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return as_utc_datetime(value).date()
    return value


def start_of_week(value: date | datetime) -> date:
    """Monday of the ISO week containing ``value`` (UTC)."""

    day = _as_date(value)
    return day - timedelta(days=day.isoweekday() - 1)


def start_of_month(value: date | datetime) -> date:
    return _as_date(value).replace(day=1)


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def add_months(value: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month length."""

    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def first_date_on_or_after(moment: date | datetime) -> date:
    """Earliest calendar date whose UTC midnight is not before ``moment``."""

    moment = as_utc_datetime(moment)
    day = moment.date()
    if moment.time() != time.min:
        day += timedelta(days=1)
    return day


def iso_week_key(value: date) -> str:
    iso_year, iso_week, _ = value.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def month_key(value: date | datetime) -> str:
    day = _as_date(value)
    return f"{day.year}-{day.month:02d}"


def trailing_year_start(now: datetime) -> datetime:
    """UTC midnight on the same calendar day one year before ``now``.

    A 29 February anchor rolls forward to 1 March.
    """

    today = as_utc_datetime(now).date()
    try:
        anchor = today.replace(year=today.year - 1)
    except ValueError:
        anchor = date(today.year - 1, 3, 1)
    return as_utc_datetime(anchor)


def current_month_range(now: datetime) -> tuple[datetime, datetime]:
    """First instant and last millisecond of the calendar month containing ``now``."""

    first = start_of_month(now)
    following = add_months(first, 1)
    end = as_utc_datetime(following) - timedelta(milliseconds=1)
    return as_utc_datetime(first), end
