from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from ledgerview.core.errors import BusinessOwnershipError, InvalidInputError, UserNotFoundError
from ledgerview.models.rows import TransactionRow
from ledgerview.services.cashflow_service import (
    CashflowService,
    build_projection,
    daily_averages,
    validate_horizon,
)

START = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)
HISTORY_START = START - timedelta(days=90)


def _row(row_id: int, direction: str, amount: str) -> TransactionRow:
    return TransactionRow(
        id=row_id,
        account_id=1,
        direction=direction,
        amount=Decimal(amount),
        occurred_on=date(2026, 2, 1),
    )


def test_daily_averages_over_ninety_days() -> None:
    rows = [_row(1, "in", "600"), _row(2, "in", "300"), _row(3, "out", "180"), _row(4, "transfer", "999")]

    avg_inflow, avg_outflow = daily_averages(rows, history_start=HISTORY_START, until=START)

    assert avg_inflow == Decimal("10")
    assert avg_outflow == Decimal("2")


def test_daily_averages_floor_the_window_at_one_day() -> None:
    avg_inflow, avg_outflow = daily_averages([_row(1, "in", "50")], history_start=START, until=START)

    assert avg_inflow == Decimal("50")
    assert avg_outflow == Decimal("0")


def test_projection_accumulates_net_from_zero() -> None:
    projection = build_projection(
        avg_inflow=Decimal("10"),
        avg_outflow=Decimal("2"),
        start=START,
        horizon_days=30,
        currency="EUR",
        generated_at=START,
    )

    assert len(projection.points) == 30
    assert projection.points[0].balance == Decimal("8")
    assert projection.points[29].balance == Decimal("240")
    assert projection.points[0].point_date == START + timedelta(days=1)
    dates = [point.point_date for point in projection.points]
    assert dates == sorted(dates)
    assert len(set(dates)) == len(dates)


@pytest.mark.parametrize("horizon", [30, 60, 90, 180, 365, 45])
def test_validate_horizon_accepts_range(horizon: int) -> None:
    assert validate_horizon(horizon) == horizon


@pytest.mark.parametrize("horizon", [0, 29, 366, True, "90"])
def test_validate_horizon_rejects_out_of_range(horizon: object) -> None:
    with pytest.raises(InvalidInputError):
        validate_horizon(horizon)  # type: ignore[arg-type]


def test_personal_projection_uses_budget_accounts_only(db_session: Session, seed, clock) -> None:
    user = seed.user(currency="PLN")
    business = seed.business(user)
    personal = seed.account(user)
    hidden = seed.account(user, include_in_budget=False)
    closed = seed.account(user, is_active=False)
    business_account = seed.account(user, business=business)

    seed.transaction(personal, amount="900.00", direction="in", occurred_on=date(2026, 1, 10))
    seed.transaction(personal, amount="180.00", direction="out", occurred_on=date(2026, 2, 1))
    seed.transaction(personal, amount="5000.00", direction="in", occurred_on=date(2025, 11, 1))
    seed.transaction(hidden, amount="1000.00", direction="in", occurred_on=date(2026, 1, 10))
    seed.transaction(closed, amount="1000.00", direction="in", occurred_on=date(2026, 1, 10))
    seed.transaction(business_account, amount="1000.00", direction="in", occurred_on=date(2026, 1, 10))

    service = CashflowService(db_session, clock=clock)
    projection = service.personal_projection(user_id=user.id, horizon_days=30)
    payload = service.serialize_projection(projection)

    assert payload["horizonDays"] == 30
    assert payload["currency"] == "PLN"
    assert len(payload["points"]) == 30
    assert payload["points"][0]["inflow"] == pytest.approx(10.0)
    assert payload["points"][0]["outflow"] == pytest.approx(2.0)
    assert payload["points"][29]["balance"] == pytest.approx(240.0)
    assert payload["points"][0]["date"] == "2026-03-16T12:00:00Z"
    assert payload["generatedAt"] == "2026-03-15T12:00:00Z"


def test_business_projection_uses_business_currency_and_default_horizon(db_session: Session, seed, clock) -> None:
    user = seed.user()
    business = seed.business(user, currency="USD")
    account = seed.account(user, business=business)
    seed.transaction(account, amount="450.00", direction="in", occurred_on=date(2026, 3, 1))

    service = CashflowService(db_session, clock=clock)
    projection = service.business_projection(user_id=user.id, business_id=business.id)

    assert projection.horizon_days == 90
    assert projection.currency == "USD"
    assert projection.points[0].inflow == Decimal("5")


def test_business_projection_rejects_foreign_business(db_session: Session, seed, clock) -> None:
    owner = seed.user("owner@test.local")
    other = seed.user("other@test.local")
    business = seed.business(owner)

    with pytest.raises(BusinessOwnershipError):
        CashflowService(db_session, clock=clock).business_projection(user_id=other.id, business_id=business.id)


def test_personal_projection_unknown_user(db_session: Session, clock) -> None:
    with pytest.raises(UserNotFoundError):
        CashflowService(db_session, clock=clock).personal_projection(user_id=404)


def test_history_window_skips_day_before_a_midday_start(db_session: Session, seed, clock) -> None:
    user = seed.user()
    account = seed.account(user)
    seed.transaction(account, amount="900.00", direction="in", occurred_on=date(2025, 12, 15))
    seed.transaction(account, amount="180.00", direction="out", occurred_on=date(2025, 12, 16))

    projection = CashflowService(db_session, clock=clock).personal_projection(user_id=user.id, horizon_days=30)

    assert projection.points[0].inflow == Decimal("0")
    assert projection.points[0].outflow == Decimal("2")
