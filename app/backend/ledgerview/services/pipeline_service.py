"""Quote pipeline conversion summary."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ledgerview.models.entities import QuoteStatus
from ledgerview.models.rows import QuoteRow
from ledgerview.services.aggregation import ZERO, days_between, isoformat_utc, safe_div, to_decimal, to_number
from ledgerview.services.base import InsightsService

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PipelineSummary:
    business_id: int
    quote_count: int
    accepted_count: int
    conversion_rate: Decimal
    avg_time_to_accept_days: float
    total_quoted: Decimal
    total_accepted: Decimal
    generated_at: datetime


def summarize_pipeline(
    quotes: Iterable[QuoteRow],
    *,
    business_id: int,
    generated_at: datetime,
) -> PipelineSummary:
    """Single pass over the full quote history of a business.

    An accepted quote without ``updated_at`` is taken as accepted at
    ``generated_at``; a missing issue date falls back to the acceptance date.
    """

    quote_count = 0
    accepted_count = 0
    total_quoted = ZERO
    total_accepted = ZERO
    time_to_accept_sum = 0.0

    for quote in quotes:
        amount = to_decimal(quote.total_amount)
        quote_count += 1
        total_quoted += amount

        if quote.status == QuoteStatus.ACCEPTED.value:
            accepted_count += 1
            total_accepted += amount
            accepted_at = quote.updated_at or generated_at
            issued_at = quote.issue_date or accepted_at
            time_to_accept_sum += days_between(issued_at, accepted_at)

    return PipelineSummary(
        business_id=business_id,
        quote_count=quote_count,
        accepted_count=accepted_count,
        conversion_rate=safe_div(accepted_count, quote_count),
        avg_time_to_accept_days=time_to_accept_sum / accepted_count if accepted_count else 0.0,
        total_quoted=total_quoted,
        total_accepted=total_accepted,
        generated_at=generated_at,
    )


class PipelineService(InsightsService):
    @staticmethod
    def serialize_summary(summary: PipelineSummary) -> dict[str, object]:
        return {
            "businessId": str(summary.business_id),
            "quoteCount": summary.quote_count,
            "acceptedCount": summary.accepted_count,
            "conversionRate": to_number(summary.conversion_rate),
            "avgTimeToAcceptDays": summary.avg_time_to_accept_days,
            "totalQuoted": to_number(summary.total_quoted),
            "totalAccepted": to_number(summary.total_accepted),
            "generatedAt": isoformat_utc(summary.generated_at),
        }

    def pipeline(self, *, user_id: int, business_id: int) -> PipelineSummary:
        self._ensure_business_owned(user_id=user_id, business_id=business_id)
        quotes = self.repo.list_quotes(business_id)
        logger.debug("pipeline summary business_id=%s quotes=%s", business_id, len(quotes))
        return summarize_pipeline(quotes, business_id=business_id, generated_at=self.clock())
