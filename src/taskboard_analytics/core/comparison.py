"""Side-by-side project comparison for one company."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from taskboard_analytics.core.cost import planned_cost, task_cost
from taskboard_analytics.core.models import (
    AggregationTask,
    ComparisonReport,
    ProjectComparison,
    ProjectRef,
)
from taskboard_analytics.core.rounding import percentage, round_metric


def compare_projects(
    projects: Sequence[ProjectRef],
    tasks: Iterable[AggregationTask],
) -> ComparisonReport:
    """Build one comparison row per project, in the order ``projects`` is given.

    Projects without tasks still get a zeroed row. Tasks whose project is not
    in ``projects`` are ignored.
    """
    by_project: dict[str, list[AggregationTask]] = {project.id: [] for project in projects}
    for task in tasks:
        bucket = by_project.get(task.project.id)
        if bucket is not None:
            bucket.append(task)

    return ComparisonReport(
        comparison=tuple(_compare_one(project, by_project[project.id]) for project in projects)
    )


def _compare_one(project: ProjectRef, tasks: list[AggregationTask]) -> ProjectComparison:
    completed = sum(1 for task in tasks if task.is_done)
    total_planned = sum(planned_cost(task) for task in tasks)
    total_actual = sum(task_cost(task) for task in tasks)
    planned_hours = sum(task.estimate_hours or 0.0 for task in tasks)
    actual_hours = sum(task.actual_hours or 0.0 for task in tasks)
    return ProjectComparison(
        project_id=project.id,
        project_name=project.name,
        total_tasks=len(tasks),
        completed_tasks=completed,
        completion_rate=percentage(completed, len(tasks)),
        total_planned=round_metric(total_planned),
        total_actual=round_metric(total_actual),
        cost_variance=round_metric(total_actual - total_planned),
        total_planned_hours=round_metric(planned_hours),
        total_actual_hours=round_metric(actual_hours),
        hours_variance=round_metric(actual_hours - planned_hours),
    )
