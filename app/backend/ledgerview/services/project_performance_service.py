"""Project completion timing and status distribution for a business."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ledgerview.models.rows import ProjectRow
from ledgerview.services.aggregation import as_utc_datetime, days_between, isoformat_utc, safe_div, to_number
from ledgerview.services.base import InsightsService

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StatusCount:
    status: str
    count: int


@dataclass(frozen=True, slots=True)
class ProjectsPerformanceSummary:
    business_id: int
    total_projects: int
    completed_projects: int
    on_time_projects: int
    on_time_rate: Decimal
    average_duration_days: float
    average_delay_days: float
    status_distribution: tuple[StatusCount, ...]
    generated_at: datetime


def summarize_projects(
    projects: Iterable[ProjectRow],
    *,
    business_id: int,
    generated_at: datetime,
) -> ProjectsPerformanceSummary:
    """Tally statuses for every project; timing only for completed ones.

    A due date is read as UTC midnight, so completing later on the due day
    counts as late. The delay average covers late projects only.
    """

    status_counts: dict[str, int] = {}
    total_projects = 0
    completed_projects = 0
    on_time_projects = 0
    duration_sum = 0.0
    delay_sum = 0.0
    delay_count = 0

    for project in projects:
        total_projects += 1
        status_counts[project.status] = status_counts.get(project.status, 0) + 1

        if project.completed_at is None:
            continue
        completed_projects += 1
        started = project.start_date or project.created_at
        duration_sum += days_between(started, project.completed_at)

        if project.due_date is None:
            continue
        if as_utc_datetime(project.completed_at) <= as_utc_datetime(project.due_date):
            on_time_projects += 1
        else:
            delay_sum += days_between(project.due_date, project.completed_at)
            delay_count += 1

    return ProjectsPerformanceSummary(
        business_id=business_id,
        total_projects=total_projects,
        completed_projects=completed_projects,
        on_time_projects=on_time_projects,
        on_time_rate=safe_div(on_time_projects, completed_projects),
        average_duration_days=duration_sum / completed_projects if completed_projects else 0.0,
        average_delay_days=delay_sum / delay_count if delay_count else 0.0,
        status_distribution=tuple(StatusCount(status=key, count=value) for key, value in status_counts.items()),
        generated_at=generated_at,
    )


class ProjectPerformanceService(InsightsService):
    @staticmethod
    def serialize_summary(summary: ProjectsPerformanceSummary) -> dict[str, object]:
        return {
            "businessId": str(summary.business_id),
            "totalProjects": summary.total_projects,
            "completedProjects": summary.completed_projects,
            "onTimeProjects": summary.on_time_projects,
            "onTimeRate": to_number(summary.on_time_rate),
            "averageDurationDays": summary.average_duration_days,
            "averageDelayDays": summary.average_delay_days,
            "statusDistribution": [
                {"status": item.status, "count": item.count} for item in summary.status_distribution
            ],
            "generatedAt": isoformat_utc(summary.generated_at),
        }

    def performance(self, *, user_id: int, business_id: int) -> ProjectsPerformanceSummary:
        self._ensure_business_owned(user_id=user_id, business_id=business_id)
        projects = self.repo.list_projects(business_id)
        logger.debug("projects performance business_id=%s projects=%s", business_id, len(projects))
        return summarize_projects(projects, business_id=business_id, generated_at=self.clock())
