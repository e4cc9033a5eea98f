"""Cashflow projection endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ledgerview.core.auth import RequestUserContext, get_current_user_context
from ledgerview.db.dependencies import get_db_session
from ledgerview.services.cashflow_service import CashflowService

router = APIRouter(tags=["cashflow"])


def _service(db: Session) -> CashflowService:
    return CashflowService(db)


@router.get("/personal/cashflow")
def personal_cashflow(
    horizon_days: int | None = None,
    start_date: date | None = None,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    projection = service.personal_projection(
        user_id=context.user_id,
        horizon_days=horizon_days,
        start_date=start_date,
    )
    return service.serialize_projection(projection)


@router.get("/businesses/{business_id}/cashflow")
def business_cashflow(
    business_id: int,
    horizon_days: int | None = None,
    start_date: date | None = None,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    projection = service.business_projection(
        user_id=context.user_id,
        business_id=business_id,
        horizon_days=horizon_days,
        start_date=start_date,
    )
    return service.serialize_projection(projection)
