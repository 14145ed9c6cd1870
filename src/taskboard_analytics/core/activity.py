"""Activity heatmap: tasks created per UTC calendar day."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import timezone

from taskboard_analytics.core.models import ActivityDay, ActivityReport, AggregationTask, TaskStatus

_IN_FLIGHT = frozenset({TaskStatus.IN_PROGRESS, TaskStatus.REVIEW})


@dataclass
class _DayAccumulator:
    created: int = 0
    completed: int = 0
    in_progress: int = 0


def aggregate_activity(tasks: Iterable[AggregationTask]) -> ActivityReport:
    """Bucket tasks by creation date, counting current DONE and in-flight statuses."""
    days: dict[str, _DayAccumulator] = {}
    for task in tasks:
        date_key = task.created_at.astimezone(timezone.utc).date().isoformat()
        day = days.setdefault(date_key, _DayAccumulator())
        day.created += 1
        if task.is_done:
            day.completed += 1
        elif task.status in _IN_FLIGHT:
            day.in_progress += 1

    # ISO dates sort chronologically as strings.
    return ActivityReport(
        heatmap=tuple(
            ActivityDay(
                date=date_key,
                created=acc.created,
                completed=acc.completed,
                in_progress=acc.in_progress,
            )
            for date_key, acc in sorted(days.items())
        )
    )
