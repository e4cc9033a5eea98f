"""Project workload endpoint."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ledgerview.core.auth import RequestUserContext, get_current_user_context
from ledgerview.db.dependencies import get_db_session
from ledgerview.services.workload_service import WorkloadService

router = APIRouter(prefix="/projects", tags=["projects"])


def _service(db: Session) -> WorkloadService:
    return WorkloadService(db)


@router.get("/{project_id}/workload")
def project_workload(
    project_id: int,
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    granularity: str = Query(default="week"),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    summary = service.workload(
        user_id=context.user_id,
        project_id=project_id,
        date_from=date_from,
        date_to=date_to,
        granularity=granularity,
    )
    return service.serialize_summary(summary)
