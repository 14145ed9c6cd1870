"""Quality aggregation: completion and block rates."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from taskboard_analytics.core.models import (
    AggregationTask,
    QualityReport,
    QualityTotals,
    SprintQuality,
)
from taskboard_analytics.core.rounding import percentage


@dataclass
class _QualityAccumulator:
    sprint_name: str
    total_tasks: int = 0
    completed_tasks: int = 0
    blocked_tasks: int = 0


def aggregate_quality(tasks: Iterable[AggregationTask]) -> QualityReport:
    """Count done and blocked tasks overall and per sprint."""
    total_tasks = 0
    completed_tasks = 0
    blocked_tasks = 0
    sprints: dict[str, _QualityAccumulator] = {}

    for task in tasks:
        total_tasks += 1
        if task.is_done:
            completed_tasks += 1
        elif task.is_blocked:
            blocked_tasks += 1

        if task.sprint is None:
            continue
        sprint = sprints.setdefault(task.sprint.id, _QualityAccumulator(task.sprint.name))
        sprint.total_tasks += 1
        if task.is_done:
            sprint.completed_tasks += 1
        elif task.is_blocked:
            sprint.blocked_tasks += 1

    return QualityReport(
        general=QualityTotals(
            total_tasks=total_tasks,
            completed_tasks=completed_tasks,
            blocked_tasks=blocked_tasks,
            completion_rate=percentage(completed_tasks, total_tasks),
            block_rate=percentage(blocked_tasks, total_tasks),
        ),
        by_sprint=tuple(
            SprintQuality(
                key=key,
                sprint_name=acc.sprint_name,
                total_tasks=acc.total_tasks,
                completed_tasks=acc.completed_tasks,
                blocked_tasks=acc.blocked_tasks,
                completion_rate=percentage(acc.completed_tasks, acc.total_tasks),
            )
            for key, acc in sprints.items()
        ),
    )
