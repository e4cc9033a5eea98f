from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from ledgerview.core.errors import BusinessNotFoundError
from ledgerview.models.rows import QuoteRow
from ledgerview.services.pipeline_service import PipelineService, summarize_pipeline

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def _quote(quote_id: int, status: str, total: str, **kwargs) -> QuoteRow:
    return QuoteRow(id=quote_id, business_id=1, status=status, total_amount=Decimal(total), **kwargs)


def test_summarize_pipeline_conversion() -> None:
    quotes = [
        _quote(
            1,
            "accepted",
            "100",
            issue_date=date(2026, 3, 1),
            updated_at=datetime(2026, 3, 11, tzinfo=timezone.utc),
        ),
        _quote(
            2,
            "accepted",
            "200",
            issue_date=date(2026, 3, 1),
            updated_at=datetime(2026, 3, 21, tzinfo=timezone.utc),
        ),
        _quote(3, "sent", "50", issue_date=date(2026, 3, 2)),
        _quote(4, "rejected", "150", issue_date=date(2026, 3, 3)),
    ]

    summary = summarize_pipeline(quotes, business_id=1, generated_at=NOW)

    assert summary.quote_count == 4
    assert summary.accepted_count == 2
    assert summary.conversion_rate == Decimal("0.5")
    assert summary.total_quoted == Decimal("500")
    assert summary.total_accepted == Decimal("300")
    assert summary.avg_time_to_accept_days == pytest.approx(15.0)


def test_summarize_pipeline_without_quotes_is_all_zero() -> None:
    summary = summarize_pipeline([], business_id=1, generated_at=NOW)

    assert summary.quote_count == 0
    assert summary.conversion_rate == 0
    assert summary.avg_time_to_accept_days == 0.0
    assert summary.total_quoted == 0


def test_accepted_quote_without_dates_takes_zero_days() -> None:
    summary = summarize_pipeline([_quote(1, "accepted", "80")], business_id=1, generated_at=NOW)

    assert summary.avg_time_to_accept_days == 0.0
    assert summary.conversion_rate == 1


def test_pipeline_service_serializes_business_quotes(db_session: Session, seed, clock) -> None:
    user = seed.user()
    business = seed.business(user)
    other_business = seed.business(user, "Side project")
    seed.quote(
        business,
        status="accepted",
        total="100.00",
        issue_date=date(2026, 3, 1),
        updated_at=datetime(2026, 3, 11, tzinfo=timezone.utc),
    )
    seed.quote(business, status="draft", total="100.00", issue_date=date(2026, 3, 2))
    seed.quote(other_business, status="accepted", total="999.00", issue_date=date(2026, 3, 2))

    service = PipelineService(db_session, clock=clock)
    payload = service.serialize_summary(service.pipeline(user_id=user.id, business_id=business.id))

    assert payload == {
        "businessId": str(business.id),
        "quoteCount": 2,
        "acceptedCount": 1,
        "conversionRate": 0.5,
        "avgTimeToAcceptDays": pytest.approx(10.0),
        "totalQuoted": 200.0,
        "totalAccepted": 100.0,
        "generatedAt": "2026-03-15T12:00:00Z",
    }


def test_pipeline_service_unknown_business(db_session: Session, seed, clock) -> None:
    user = seed.user()

    with pytest.raises(BusinessNotFoundError):
        PipelineService(db_session, clock=clock).pipeline(user_id=user.id, business_id=999)
