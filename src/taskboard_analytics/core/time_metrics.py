"""Time-in-status aggregation: elapsed days of finished tasks."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import timedelta

from taskboard_analytics.core.models import (
    AggregationTask,
    MemberTime,
    StatusTime,
    TaskStatus,
    TimeReport,
)
from taskboard_analytics.core.rounding import round_metric

_MS_PER_DAY = 24 * 60 * 60 * 1000
_ONE_MS = timedelta(milliseconds=1)


@dataclass
class _TimeAccumulator:
    total_days: int = 0
    count: int = 0
    total_hours: float = 0.0

    @property
    def avg_days(self) -> float:
        return round_metric(self.total_days / self.count) if self.count else 0.0


def elapsed_days(task: AggregationTask) -> int | None:
    """Whole days from start to due date, any partial day counting as a full one.

    Returns None when either date is missing. A due date before the start date
    gives a negative count; it is reported as-is.
    """
    if task.start_date is None or task.due_date is None:
        return None
    millis = (task.due_date - task.start_date) // _ONE_MS
    return math.ceil(millis / _MS_PER_DAY)


def aggregate_time(tasks: Iterable[AggregationTask]) -> TimeReport:
    """Average elapsed days of DONE tasks, by status and by assignee.

    Tasks that are not DONE, or lack a start or due date, contribute nothing.
    """
    statuses: dict[TaskStatus, _TimeAccumulator] = {}
    members: dict[str, tuple[str, _TimeAccumulator]] = {}

    for task in tasks:
        if not task.is_done:
            continue
        days = elapsed_days(task)
        if days is None:
            continue

        status = statuses.setdefault(task.status, _TimeAccumulator())
        status.total_days += days
        status.count += 1

        if task.assignee is not None:
            _, member = members.setdefault(task.assignee.id, (task.assignee.name, _TimeAccumulator()))
            member.total_days += days
            member.count += 1
            member.total_hours += task.worked_hours

    return TimeReport(
        by_status=tuple(
            StatusTime(status=status, avg_days=acc.avg_days, count=acc.count)
            for status, acc in statuses.items()
        ),
        by_member=tuple(
            MemberTime(
                key=key,
                name=name,
                avg_days=acc.avg_days,
                count=acc.count,
                total_hours=round_metric(acc.total_hours),
            )
            for key, (name, acc) in members.items()
        ),
    )
