from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from ledgerview.services.aggregation import (
    ZERO,
    add_months,
    as_utc_datetime,
    current_month_range,
    days_between,
    first_date_on_or_after,
    iso_week_key,
    isoformat_utc,
    month_key,
    safe_div,
    start_of_month,
    start_of_week,
    to_decimal,
    to_number,
    trailing_year_start,
)


class _DecimalLike:
    def to_decimal(self) -> str:
        return "12.34"


def test_to_number_coerces_supported_inputs() -> None:
    assert to_number(None) == 0.0
    assert to_number(3) == 3.0
    assert to_number(Decimal("10.50")) == 10.5
    assert to_number("7.25") == 7.25
    assert to_number(_DecimalLike()) == 12.34
    assert to_number("not a number") == 0.0


def test_to_decimal_keeps_float_text_precision() -> None:
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(float("nan")) == ZERO
    assert to_decimal(True) == Decimal(1)


def test_safe_div_never_raises_on_zero_denominator() -> None:
    assert safe_div(5, 0) == ZERO
    assert safe_div(Decimal("5"), Decimal("0.00")) == ZERO
    assert safe_div(1, 4) == Decimal("0.25")


def test_days_between_is_real_valued() -> None:
    start = date(2026, 1, 1)
    end = datetime(2026, 1, 2, 12, 0, tzinfo=timezone.utc)

    assert days_between(start, end) == 1.5
    assert days_between(end, start) == -1.5


def test_naive_datetimes_are_read_as_utc() -> None:
    naive = datetime(2026, 1, 1, 8, 0)

    assert as_utc_datetime(naive) == datetime(2026, 1, 1, 8, 0, tzinfo=timezone.utc)
    assert isoformat_utc(naive) == "2026-01-01T08:00:00Z"
    assert isoformat_utc(None) is None


def test_week_and_month_starts() -> None:
    sunday = date(2026, 3, 15)

    assert start_of_week(sunday) == date(2026, 3, 9)
    assert start_of_week(date(2026, 3, 9)) == date(2026, 3, 9)
    assert start_of_month(datetime(2026, 3, 15, 23, 0, tzinfo=timezone.utc)) == date(2026, 3, 1)


def test_add_months_clamps_to_month_length() -> None:
    assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2026, 11, 1), 2) == date(2027, 1, 1)
    assert add_months(date(2026, 3, 1), -3) == date(2025, 12, 1)
    assert add_months(date(9999, 11, 30), 1) == date(9999, 12, 30)


def test_first_date_on_or_after_skips_a_partial_day() -> None:
    assert first_date_on_or_after(datetime(2025, 12, 15, 12, 0, tzinfo=timezone.utc)) == date(2025, 12, 16)
    assert first_date_on_or_after(datetime(2025, 12, 15, tzinfo=timezone.utc)) == date(2025, 12, 15)
    assert first_date_on_or_after(date(2025, 12, 15)) == date(2025, 12, 15)


def test_period_keys() -> None:
    assert iso_week_key(date(2026, 3, 9)) == "2026-W11"
    assert iso_week_key(date(2027, 1, 1)) == "2026-W53"
    assert month_key(date(2026, 3, 9)) == "2026-03"


def test_trailing_year_start_rolls_leap_day_forward() -> None:
    assert trailing_year_start(datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)) == datetime(
        2025, 3, 15, tzinfo=timezone.utc
    )
    assert trailing_year_start(datetime(2024, 2, 29, 10, 0, tzinfo=timezone.utc)) == datetime(
        2023, 3, 1, tzinfo=timezone.utc
    )


def test_current_month_range_ends_one_millisecond_before_next_month() -> None:
    start, end = current_month_range(datetime(2026, 2, 10, tzinfo=timezone.utc))

    assert start == datetime(2026, 2, 1, tzinfo=timezone.utc)
    assert end + timedelta(milliseconds=1) == datetime(2026, 3, 1, tzinfo=timezone.utc)
