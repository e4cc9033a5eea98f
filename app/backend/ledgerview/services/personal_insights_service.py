"""Income, spending and monthly seasonality breakdowns for the personal scope."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from ledgerview.core.errors import InvalidInputError
from ledgerview.models.entities import TransactionDirection
from ledgerview.models.rows import TransactionRow
from ledgerview.services.aggregation import (
    ZERO,
    add_months,
    as_utc_datetime,
    current_month_range,
    isoformat_utc,
    month_key,
    safe_div,
    start_of_month,
    to_decimal,
    to_number,
)
from ledgerview.services.base import InsightsService

logger = logging.getLogger(__name__)

OTHER_INCOME = "Other income"
UNCATEGORIZED = "Uncategorized"
DEFAULT_SEASONALITY_MONTHS = 12
ANOMALY_Z_SCORE = 2.0


@dataclass(frozen=True, slots=True)
class IncomeSourceShare:
    source: str
    total: Decimal
    transaction_count: int
    share_of_income: Decimal
    tag: str | None


@dataclass(frozen=True, slots=True)
class IncomeSourcesSummary:
    period_from: datetime
    period_to: datetime
    currency: str
    sources: tuple[IncomeSourceShare, ...]
    top_source: str | None
    generated_at: datetime


@dataclass(frozen=True, slots=True)
class CategorySpending:
    category: str
    total: Decimal
    transaction_count: int
    share_of_spending: Decimal


@dataclass(frozen=True, slots=True)
class SpendingSummary:
    period_from: datetime
    period_to: datetime
    currency: str
    categories: tuple[CategorySpending, ...]
    top_category: str | None
    generated_at: datetime


@dataclass(frozen=True, slots=True)
class SeasonalityPoint:
    month: str
    income: Decimal
    spending: Decimal
    net: Decimal
    z_score: float
    is_anomaly: bool


@dataclass(frozen=True, slots=True)
class SeasonalitySummary:
    period_months: int
    currency: str
    points: tuple[SeasonalityPoint, ...]
    generated_at: datetime


def income_source_key(row: TransactionRow) -> str:
    return row.income_source_name or row.type or row.raw_label or OTHER_INCOME


@dataclass(slots=True)
class _IncomeBucket:
    total: Decimal = ZERO
    transaction_count: int = 0
    tag: str | None = None


@dataclass(slots=True)
class _SpendingBucket:
    total: Decimal = ZERO
    transaction_count: int = 0


def summarize_income_sources(transactions: Iterable[TransactionRow]) -> tuple[tuple[IncomeSourceShare, ...], str | None]:
    """Group income by source, largest first; the tag is the first source type seen."""

    total_income = ZERO
    buckets: dict[str, _IncomeBucket] = {}
    for row in transactions:
        amount = to_decimal(row.amount)
        total_income += amount
        bucket = buckets.setdefault(income_source_key(row), _IncomeBucket())
        bucket.total += amount
        bucket.transaction_count += 1
        if bucket.tag is None:
            bucket.tag = row.income_source_type

    sources = sorted(
        (
            IncomeSourceShare(
                source=key,
                total=bucket.total,
                transaction_count=bucket.transaction_count,
                share_of_income=safe_div(bucket.total, total_income),
                tag=bucket.tag,
            )
            for key, bucket in buckets.items()
        ),
        key=lambda item: item.total,
        reverse=True,
    )
    top_source = sources[0].source if sources else None
    return tuple(sources), top_source


def summarize_spending(transactions: Iterable[TransactionRow]) -> tuple[tuple[CategorySpending, ...], str | None]:
    """Group outflows by category name, largest first."""

    total_spending = ZERO
    buckets: dict[str, _SpendingBucket] = {}
    for row in transactions:
        amount = to_decimal(row.amount)
        total_spending += amount
        bucket = buckets.setdefault(row.category_name or UNCATEGORIZED, _SpendingBucket())
        bucket.total += amount
        bucket.transaction_count += 1

    categories = sorted(
        (
            CategorySpending(
                category=key,
                total=bucket.total,
                transaction_count=bucket.transaction_count,
                share_of_spending=safe_div(bucket.total, total_spending),
            )
            for key, bucket in buckets.items()
        ),
        key=lambda item: item.total,
        reverse=True,
    )
    top_category = categories[0].category if categories else None
    return tuple(categories), top_category


def resolve_months(months: int | None) -> int:
    if months is None or months <= 0:
        return DEFAULT_SEASONALITY_MONTHS
    return months


def seasonality_start(now: datetime, months: int) -> date:
    return add_months(start_of_month(now), -months + 1)


def summarize_seasonality(
    transactions: Iterable[TransactionRow],
    *,
    start_month: date,
    months: int,
) -> tuple[SeasonalityPoint, ...]:
    """Monthly income/spending/net over ``months`` continuous buckets.

    Each net is scored against the mean using the sample standard deviation;
    a zero deviation scores every month 0.
    """

    buckets: dict[str, list[Decimal]] = {}
    for offset in range(months):
        buckets[month_key(add_months(start_month, offset))] = [ZERO, ZERO]

    for row in transactions:
        bucket = buckets.get(month_key(row.occurred_on))
        if bucket is None:
            continue
        amount = to_decimal(row.amount)
        if row.direction == TransactionDirection.IN.value:
            bucket[0] += amount
        elif row.direction == TransactionDirection.OUT.value:
            bucket[1] += amount

    nets = [float(income - spending) for income, spending in buckets.values()]
    mean = sum(nets) / (len(nets) or 1)
    variance = sum((value - mean) ** 2 for value in nets) / (len(nets) - 1 if len(nets) > 1 else 1)
    stddev = math.sqrt(variance)

    points = []
    for (key, (income, spending)), net in zip(buckets.items(), nets):
        z_score = (net - mean) / stddev if stddev > 0 else 0.0
        points.append(
            SeasonalityPoint(
                month=key,
                income=income,
                spending=spending,
                net=income - spending,
                z_score=z_score,
                is_anomaly=abs(z_score) >= ANOMALY_Z_SCORE,
            )
        )
    return tuple(points)


class PersonalInsightsService(InsightsService):
    # ---------- Serialization ----------
    @staticmethod
    def serialize_income_sources(summary: IncomeSourcesSummary) -> dict[str, object]:
        return {
            "period": {
                "from": isoformat_utc(summary.period_from),
                "to": isoformat_utc(summary.period_to),
            },
            "currency": summary.currency,
            "sources": [
                {
                    "source": item.source,
                    "total": to_number(item.total),
                    "transactionCount": item.transaction_count,
                    "shareOfIncome": to_number(item.share_of_income),
                    "tag": item.tag,
                }
                for item in summary.sources
            ],
            "topSource": summary.top_source,
            "generatedAt": isoformat_utc(summary.generated_at),
        }

    @staticmethod
    def serialize_spending(summary: SpendingSummary) -> dict[str, object]:
        return {
            "period": {
                "from": isoformat_utc(summary.period_from),
                "to": isoformat_utc(summary.period_to),
            },
            "currency": summary.currency,
            "categories": [
                {
                    "category": item.category,
                    "total": to_number(item.total),
                    "transactionCount": item.transaction_count,
                    "shareOfSpending": to_number(item.share_of_spending),
                }
                for item in summary.categories
            ],
            "topCategory": summary.top_category,
            "generatedAt": isoformat_utc(summary.generated_at),
        }

    @staticmethod
    def serialize_seasonality(summary: SeasonalitySummary) -> dict[str, object]:
        return {
            "periodMonths": summary.period_months,
            "currency": summary.currency,
            "points": [
                {
                    "month": item.month,
                    "income": to_number(item.income),
                    "spending": to_number(item.spending),
                    "net": to_number(item.net),
                    "zScore": item.z_score,
                    "isAnomaly": item.is_anomaly,
                }
                for item in summary.points
            ],
            "generatedAt": isoformat_utc(summary.generated_at),
        }

    # ---------- Insights ----------
    def _resolve_period(
        self,
        now: datetime,
        date_from: date | datetime | None,
        date_to: date | datetime | None,
    ) -> tuple[datetime, datetime]:
        default_from, default_to = current_month_range(now)
        period_from = as_utc_datetime(date_from) if date_from is not None else default_from
        period_to = as_utc_datetime(date_to) if date_to is not None else default_to
        if period_to < period_from:
            raise InvalidInputError("to must be greater than or equal to from.")
        return period_from, period_to

    def income_sources(
        self,
        *,
        user_id: int,
        date_from: date | datetime | None = None,
        date_to: date | datetime | None = None,
    ) -> IncomeSourcesSummary:
        self._ensure_user(user_id)
        now = self.clock()
        period_from, period_to = self._resolve_period(now, date_from, date_to)

        transactions = self.repo.list_personal_income_transactions(
            user_id,
            since=period_from.date(),
            until=period_to.date(),
        )
        sources, top_source = summarize_income_sources(transactions)
        logger.debug("income sources user_id=%s transactions=%s sources=%s", user_id, len(transactions), len(sources))
        return IncomeSourcesSummary(
            period_from=period_from,
            period_to=period_to,
            currency=self._user_currency(user_id),
            sources=sources,
            top_source=top_source,
            generated_at=now,
        )

    def spending(
        self,
        *,
        user_id: int,
        date_from: date | datetime | None = None,
        date_to: date | datetime | None = None,
    ) -> SpendingSummary:
        self._ensure_user(user_id)
        now = self.clock()
        period_from, period_to = self._resolve_period(now, date_from, date_to)

        transactions = self.repo.list_personal_spending_transactions(
            user_id,
            since=period_from.date(),
            until=period_to.date(),
        )
        categories, top_category = summarize_spending(transactions)
        logger.debug("spending user_id=%s transactions=%s categories=%s", user_id, len(transactions), len(categories))
        return SpendingSummary(
            period_from=period_from,
            period_to=period_to,
            currency=self._user_currency(user_id),
            categories=categories,
            top_category=top_category,
            generated_at=now,
        )

    def seasonality(self, *, user_id: int, months: int | None = None) -> SeasonalitySummary:
        self._ensure_user(user_id)
        now = self.clock()
        resolved = resolve_months(months)
        start_month = seasonality_start(now, resolved)
        transactions = self.repo.list_personal_transactions_since(user_id, since=start_month)
        logger.debug("seasonality user_id=%s months=%s transactions=%s", user_id, resolved, len(transactions))
        return SeasonalitySummary(
            period_months=resolved,
            currency=self._user_currency(user_id),
            points=summarize_seasonality(transactions, start_month=start_month, months=resolved),
            generated_at=now,
        )
