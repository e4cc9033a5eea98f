"""Business insights endpoints: pipeline, project performance and rankings."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ledgerview.core.auth import RequestUserContext, get_current_user_context
from ledgerview.db.dependencies import get_db_session
from ledgerview.services.pipeline_service import PipelineService
from ledgerview.services.project_performance_service import ProjectPerformanceService
from ledgerview.services.ranking_service import RankingService

router = APIRouter(prefix="/businesses/{business_id}/insights", tags=["business-insights"])


def _pipeline_service(db: Session) -> PipelineService:
    return PipelineService(db)


def _performance_service(db: Session) -> ProjectPerformanceService:
    return ProjectPerformanceService(db)


def _ranking_service(db: Session) -> RankingService:
    return RankingService(db)


@router.get("/pipeline")
def pipeline(
    business_id: int,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _pipeline_service(db)
    summary = service.pipeline(user_id=context.user_id, business_id=business_id)
    return service.serialize_summary(summary)


@router.get("/projects-performance")
def projects_performance(
    business_id: int,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _performance_service(db)
    summary = service.performance(user_id=context.user_id, business_id=business_id)
    return service.serialize_summary(summary)


@router.get("/top-clients")
def top_clients(
    business_id: int,
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _ranking_service(db)
    summary = service.top_clients(
        user_id=context.user_id,
        business_id=business_id,
        date_from=date_from,
        date_to=date_to,
    )
    return service.serialize_top_clients(summary)


@router.get("/top-services")
def top_services(
    business_id: int,
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _ranking_service(db)
    summary = service.top_services(
        user_id=context.user_id,
        business_id=business_id,
        date_from=date_from,
        date_to=date_to,
    )
    return service.serialize_top_services(summary)
