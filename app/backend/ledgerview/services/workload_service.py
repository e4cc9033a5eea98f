"""Estimated versus actual effort for one project's tasks."""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal

from ledgerview.core.errors import InvalidInputError
from ledgerview.models.entities import TaskStatus
from ledgerview.models.rows import ProjectTaskRow
from ledgerview.services.aggregation import (
    ZERO,
    add_days,
    add_months,
    isoformat_utc,
    iso_week_key,
    month_key,
    safe_div,
    start_of_month,
    start_of_week,
    to_decimal,
    to_number,
)
from ledgerview.services.base import InsightsService

logger = logging.getLogger(__name__)

TOP_TASKS_LIMIT = 5
# Ten years of weekly buckets.
MAX_PERIODS = 530


class Granularity(str, enum.Enum):
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def parse(cls, value: str | Granularity | None) -> Granularity:
        if value is None:
            return cls.WEEK
        try:
            return cls(value)
        except ValueError:
            raise InvalidInputError("granularity must be one of: week, month.") from None


@dataclass(frozen=True, slots=True)
class StatusHours:
    status: TaskStatus
    estimated_hours: Decimal
    actual_hours: Decimal


@dataclass(frozen=True, slots=True)
class PeriodHours:
    period_key: str
    period_start: date
    period_end: date
    estimated_hours: Decimal
    actual_hours: Decimal


@dataclass(frozen=True, slots=True)
class TaskTimeInsight:
    task_id: int
    name: str
    status: str
    estimated_hours: Decimal | None
    actual_hours: Decimal | None
    ratio: Decimal | None


@dataclass(frozen=True, slots=True)
class WorkloadSummary:
    project_id: int
    total_estimated_hours: Decimal
    total_actual_hours: Decimal
    remaining_hours: Decimal
    completion_rate: Decimal
    granularity: Granularity
    range_start: date | None
    range_end: date | None
    by_status: tuple[StatusHours, ...]
    by_period: tuple[PeriodHours, ...]
    top_by_actual_hours: tuple[TaskTimeInsight, ...]
    top_by_overrun: tuple[TaskTimeInsight, ...]
    generated_at: datetime


def _next_period_start(cursor: date, granularity: Granularity) -> date | None:
    """Start of the following period, or ``None`` when it would pass ``date.max``."""

    if granularity is Granularity.WEEK:
        if cursor > date.max - timedelta(days=7):
            return None
        return add_days(cursor, 7)
    if cursor.year == date.max.year and cursor.month == 12:
        return None
    return add_months(cursor, 1)


def count_periods(range_start: date, range_end: date, granularity: Granularity) -> int:
    if range_end < range_start:
        return 0
    if granularity is Granularity.WEEK:
        return (range_end - range_start).days // 7 + 1
    return (range_end.year - range_start.year) * 12 + range_end.month - range_start.month + 1


def _period_buckets(range_start: date, range_end: date, granularity: Granularity) -> list[dict[str, object]]:
    """Consecutive, non-overlapping buckets from ``range_start`` through ``range_end``.

    The last bucket of the calendar ends on ``date.max``.
    """

    periods = count_periods(range_start, range_end, granularity)
    if periods > MAX_PERIODS:
        raise InvalidInputError(
            f"Range spans {periods} {granularity.value} periods; at most {MAX_PERIODS} are allowed."
        )

    buckets: list[dict[str, object]] = []
    cursor: date | None = range_start
    while cursor is not None and cursor <= range_end:
        following = _next_period_start(cursor, granularity)
        buckets.append(
            {
                "period_key": iso_week_key(cursor) if granularity is Granularity.WEEK else month_key(cursor),
                "period_start": cursor,
                "period_end": add_days(following, -1) if following is not None else date.max,
                "estimated_hours": ZERO,
                "actual_hours": ZERO,
            }
        )
        cursor = following
    return buckets


def _task_insight(task: ProjectTaskRow) -> TaskTimeInsight:
    estimated = to_decimal(task.estimated_hours)
    actual = to_decimal(task.actual_hours)
    return TaskTimeInsight(
        task_id=task.id,
        name=task.name,
        status=task.status,
        estimated_hours=estimated if task.estimated_hours is not None else None,
        actual_hours=actual if task.actual_hours is not None else None,
        ratio=actual / estimated if estimated > ZERO else None,
    )


def summarize_workload(
    tasks: Sequence[ProjectTaskRow],
    *,
    project_id: int,
    granularity: Granularity,
    generated_at: datetime,
    date_from: date | None = None,
    date_to: date | None = None,
) -> WorkloadSummary:
    total_estimated = ZERO
    total_actual = ZERO
    by_status: dict[TaskStatus, list[Decimal]] = {status: [ZERO, ZERO] for status in TaskStatus}

    for task in tasks:
        estimated = to_decimal(task.estimated_hours)
        actual = to_decimal(task.actual_hours)
        total_estimated += estimated
        total_actual += actual
        bucket = by_status[TaskStatus.parse(task.status)]
        bucket[0] += estimated
        bucket[1] += actual

    range_start: date | None = None
    range_end: date | None = None
    for task in tasks:
        for candidate in (task.start_date, task.due_date):
            if candidate is None:
                continue
            if range_start is None or candidate < range_start:
                range_start = candidate
            if range_end is None or candidate > range_end:
                range_end = candidate
    if date_from is not None:
        range_start = date_from
    if date_to is not None:
        range_end = date_to

    periods: list[dict[str, object]] = []
    if range_start is not None and range_end is not None:
        if granularity is Granularity.WEEK:
            range_start, range_end = start_of_week(range_start), start_of_week(range_end)
        else:
            range_start, range_end = start_of_month(range_start), start_of_month(range_end)
        periods = _period_buckets(range_start, range_end, granularity)

        # Buckets never overlap, so the first match is the only match.
        for task in tasks:
            when = task.due_date or task.start_date
            if when is None:
                continue
            for period in periods:
                if period["period_start"] <= when <= period["period_end"]:
                    period["estimated_hours"] += to_decimal(task.estimated_hours)
                    period["actual_hours"] += to_decimal(task.actual_hours)
                    break
    else:
        range_start = range_end = None

    insights = [_task_insight(task) for task in tasks]
    top_by_actual = sorted(
        (item for item in insights if item.actual_hours is not None),
        key=lambda item: item.actual_hours,
        reverse=True,
    )[:TOP_TASKS_LIMIT]
    top_by_overrun = sorted(
        (item for item in insights if item.ratio is not None),
        key=lambda item: item.ratio,
        reverse=True,
    )[:TOP_TASKS_LIMIT]

    return WorkloadSummary(
        project_id=project_id,
        total_estimated_hours=total_estimated,
        total_actual_hours=total_actual,
        remaining_hours=max(total_estimated - total_actual, ZERO),
        completion_rate=safe_div(total_actual, total_estimated),
        granularity=granularity,
        range_start=range_start,
        range_end=range_end,
        by_status=tuple(
            StatusHours(status=status, estimated_hours=hours[0], actual_hours=hours[1])
            for status, hours in by_status.items()
        ),
        by_period=tuple(PeriodHours(**period) for period in periods),
        top_by_actual_hours=tuple(top_by_actual),
        top_by_overrun=tuple(top_by_overrun),
        generated_at=generated_at,
    )


def _optional_number(value: Decimal | None) -> float | None:
    return to_number(value) if value is not None else None


class WorkloadService(InsightsService):
    @staticmethod
    def _serialize_task(item: TaskTimeInsight) -> dict[str, object]:
        return {
            "taskId": str(item.task_id),
            "name": item.name,
            "status": item.status,
            "estimatedHours": _optional_number(item.estimated_hours),
            "actualHours": _optional_number(item.actual_hours),
            "ratio": _optional_number(item.ratio),
        }

    @classmethod
    def serialize_summary(cls, summary: WorkloadSummary) -> dict[str, object]:
        return {
            "projectId": str(summary.project_id),
            "totalEstimatedHours": to_number(summary.total_estimated_hours),
            "totalActualHours": to_number(summary.total_actual_hours),
            "remainingHours": to_number(summary.remaining_hours),
            "completionRate": to_number(summary.completion_rate),
            "granularity": summary.granularity.value,
            "rangeStart": isoformat_utc(summary.range_start),
            "rangeEnd": isoformat_utc(summary.range_end),
            "byStatus": [
                {
                    "status": item.status.value,
                    "estimatedHours": to_number(item.estimated_hours),
                    "actualHours": to_number(item.actual_hours),
                }
                for item in summary.by_status
            ],
            "byPeriod": [
                {
                    "periodKey": item.period_key,
                    "periodStart": isoformat_utc(item.period_start),
                    "periodEnd": isoformat_utc(item.period_end),
                    "estimatedHours": to_number(item.estimated_hours),
                    "actualHours": to_number(item.actual_hours),
                }
                for item in summary.by_period
            ],
            "topByActualHours": [cls._serialize_task(item) for item in summary.top_by_actual_hours],
            "topByOverrun": [cls._serialize_task(item) for item in summary.top_by_overrun],
            "generatedAt": isoformat_utc(summary.generated_at),
        }

    def workload(
        self,
        *,
        user_id: int,
        project_id: int,
        date_from: date | None = None,
        date_to: date | None = None,
        granularity: str | Granularity | None = None,
    ) -> WorkloadSummary:
        resolved = Granularity.parse(granularity)
        self._ensure_project_owned(user_id=user_id, project_id=project_id)
        tasks = self.repo.list_project_tasks(project_id)
        logger.debug("project workload project_id=%s tasks=%s granularity=%s", project_id, len(tasks), resolved.value)
        return summarize_workload(
            tasks,
            project_id=project_id,
            granularity=resolved,
            generated_at=self.clock(),
            date_from=date_from,
            date_to=date_to,
        )
