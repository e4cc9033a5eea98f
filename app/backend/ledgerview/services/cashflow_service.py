"""Relative cashflow projection from trailing daily averages."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal

from ledgerview.core.errors import InvalidInputError
from ledgerview.models.entities import TransactionDirection
from ledgerview.models.rows import TransactionRow
from ledgerview.services.aggregation import (
    SECONDS_PER_DAY,
    ZERO,
    as_utc_datetime,
    first_date_on_or_after,
    isoformat_utc,
    to_decimal,
    to_number,
)
from ledgerview.services.base import InsightsService

logger = logging.getLogger(__name__)

MIN_HORIZON_DAYS = 30
MAX_HORIZON_DAYS = 365


@dataclass(frozen=True, slots=True)
class CashflowPoint:
    point_date: datetime
    balance: Decimal
    inflow: Decimal
    outflow: Decimal
    net: Decimal


@dataclass(frozen=True, slots=True)
class CashflowProjection:
    points: tuple[CashflowPoint, ...]
    horizon_days: int
    currency: str
    generated_at: datetime


def validate_horizon(horizon_days: int) -> int:
    if isinstance(horizon_days, bool) or not isinstance(horizon_days, int):
        raise InvalidInputError("horizonDays must be an integer.")
    if horizon_days < MIN_HORIZON_DAYS or horizon_days > MAX_HORIZON_DAYS:
        raise InvalidInputError(f"horizonDays must be between {MIN_HORIZON_DAYS} and {MAX_HORIZON_DAYS}.")
    return horizon_days


def daily_averages(
    transactions: Iterable[TransactionRow],
    *,
    history_start: datetime,
    until: datetime,
) -> tuple[Decimal, Decimal]:
    """Average daily inflow and outflow over the history window.

    The day count is ``ceil`` of the window length, floored at one.
    Directions other than in/out are ignored.
    """

    seconds = (as_utc_datetime(until) - as_utc_datetime(history_start)).total_seconds()
    total_days = max(1, math.ceil(seconds / SECONDS_PER_DAY))

    inflow = ZERO
    outflow = ZERO
    for row in transactions:
        amount = to_decimal(row.amount)
        if row.direction == TransactionDirection.IN.value:
            inflow += amount
        elif row.direction == TransactionDirection.OUT.value:
            outflow += amount
    return inflow / total_days, outflow / total_days


def build_projection(
    *,
    avg_inflow: Decimal,
    avg_outflow: Decimal,
    start: datetime,
    horizon_days: int,
    currency: str,
    generated_at: datetime,
) -> CashflowProjection:
    """One point per day after ``start``; the balance starts at zero."""

    net = avg_inflow - avg_outflow
    cumulative = ZERO
    points: list[CashflowPoint] = []
    start = as_utc_datetime(start)
    for offset in range(1, horizon_days + 1):
        cumulative += net
        points.append(
            CashflowPoint(
                point_date=start + timedelta(days=offset),
                balance=cumulative,
                inflow=avg_inflow,
                outflow=avg_outflow,
                net=net,
            )
        )
    return CashflowProjection(
        points=tuple(points),
        horizon_days=horizon_days,
        currency=currency,
        generated_at=generated_at,
    )


class CashflowService(InsightsService):
    """Personal and business cashflow projections."""

    @staticmethod
    def serialize_projection(projection: CashflowProjection) -> dict[str, object]:
        return {
            "points": [
                {
                    "date": isoformat_utc(point.point_date),
                    "balance": to_number(point.balance),
                    "inflow": to_number(point.inflow),
                    "outflow": to_number(point.outflow),
                    "net": to_number(point.net),
                }
                for point in projection.points
            ],
            "horizonDays": projection.horizon_days,
            "currency": projection.currency,
            "generatedAt": isoformat_utc(projection.generated_at),
        }

    def _window(self, start_date: date | datetime | None) -> tuple[datetime, datetime]:
        start = as_utc_datetime(start_date if start_date is not None else self.clock())
        history_start = start - timedelta(days=self.settings.cashflow_history_days)
        return history_start, start

    def _project(
        self,
        *,
        user_id: int,
        business_id: int | None,
        horizon_days: int | None,
        start_date: date | datetime | None,
        currency: str,
    ) -> CashflowProjection:
        horizon = validate_horizon(
            horizon_days if horizon_days is not None else self.settings.cashflow_default_horizon_days
        )
        history_start, start = self._window(start_date)
        transactions = self.repo.list_budget_transactions(
            user_id,
            business_id=business_id,
            since=first_date_on_or_after(history_start),
            until=start.date(),
        )
        avg_inflow, avg_outflow = daily_averages(transactions, history_start=history_start, until=start)
        logger.debug(
            "cashflow projection user_id=%s business_id=%s horizon=%s transactions=%s",
            user_id,
            business_id,
            horizon,
            len(transactions),
        )
        return build_projection(
            avg_inflow=avg_inflow,
            avg_outflow=avg_outflow,
            start=start,
            horizon_days=horizon,
            currency=currency,
            generated_at=self.clock(),
        )

    def personal_projection(
        self,
        *,
        user_id: int,
        horizon_days: int | None = None,
        start_date: date | datetime | None = None,
    ) -> CashflowProjection:
        self._ensure_user(user_id)
        return self._project(
            user_id=user_id,
            business_id=None,
            horizon_days=horizon_days,
            start_date=start_date,
            currency=self._user_currency(user_id),
        )

    def business_projection(
        self,
        *,
        user_id: int,
        business_id: int,
        horizon_days: int | None = None,
        start_date: date | datetime | None = None,
    ) -> CashflowProjection:
        business = self._ensure_business_owned(user_id=user_id, business_id=business_id)
        return self._project(
            user_id=user_id,
            business_id=business_id,
            horizon_days=horizon_days,
            start_date=start_date,
            currency=self._business_currency(business),
        )
