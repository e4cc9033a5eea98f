"""Personal insights endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ledgerview.core.auth import RequestUserContext, get_current_user_context
from ledgerview.db.dependencies import get_db_session
from ledgerview.services.personal_insights_service import PersonalInsightsService

router = APIRouter(prefix="/personal/insights", tags=["personal-insights"])


def _service(db: Session) -> PersonalInsightsService:
    return PersonalInsightsService(db)


@router.get("/income-sources")
def income_sources(
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    summary = service.income_sources(user_id=context.user_id, date_from=date_from, date_to=date_to)
    return service.serialize_income_sources(summary)


@router.get("/seasonality")
def seasonality(
    months: int | None = None,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    summary = service.seasonality(user_id=context.user_id, months=months)
    return service.serialize_seasonality(summary)


@router.get("/spending")
def spending(
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    summary = service.spending(user_id=context.user_id, date_from=date_from, date_to=date_to)
    return service.serialize_spending(summary)
