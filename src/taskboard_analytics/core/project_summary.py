"""Per-project summary: status counts, cost and hour totals, date span."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

from taskboard_analytics.core.cost import planned_cost, task_cost
from taskboard_analytics.core.models import (
    AggregationTask,
    ProjectRef,
    ProjectSummary,
    ProjectSummaryReport,
    StatusCount,
    TaskStatus,
)
from taskboard_analytics.core.rounding import percentage, round_metric


def summarize_projects(
    projects: Sequence[ProjectRef],
    tasks: Iterable[AggregationTask],
    *,
    assignee_id: str | None = None,
    search: str | None = None,
) -> ProjectSummaryReport:
    """Summarize each project, in the order ``projects`` is given.

    ``search`` keeps only projects whose name contains it (case-insensitive).
    ``assignee_id`` restricts the counted tasks to that assignee; projects with
    none of their tasks left still get a zeroed row.
    """
    needle = (search or "").strip().casefold()
    selected = [project for project in projects if needle in project.name.casefold()]

    by_project: dict[str, list[AggregationTask]] = {project.id: [] for project in selected}
    for task in tasks:
        if assignee_id and (task.assignee is None or task.assignee.id != assignee_id):
            continue
        bucket = by_project.get(task.project.id)
        if bucket is not None:
            bucket.append(task)

    return ProjectSummaryReport(
        projects=tuple(_summarize_one(project, by_project[project.id]) for project in selected)
    )


def _summarize_one(project: ProjectRef, tasks: list[AggregationTask]) -> ProjectSummary:
    counts = Counter(task.status for task in tasks)
    dates = [
        value
        for task in tasks
        for value in (task.start_date, task.due_date)
        if value is not None
    ]
    return ProjectSummary(
        project_id=project.id,
        project_name=project.name,
        owner_id=project.owner_id,
        total_tasks=len(tasks),
        tasks_by_status=tuple(
            StatusCount(status=status, count=counts[status])
            for status in TaskStatus
            if counts[status]
        ),
        completion_percentage=percentage(counts[TaskStatus.DONE], len(tasks)),
        total_planned=round_metric(sum(planned_cost(task) for task in tasks)),
        total_actual=round_metric(sum(task_cost(task) for task in tasks)),
        # Recorded hours only; no estimate fallback.
        total_planned_hours=round_metric(sum(task.estimate_hours or 0.0 for task in tasks)),
        total_actual_hours=round_metric(sum(task.actual_hours or 0.0 for task in tasks)),
        start_date=min(dates) if dates else None,
        end_date=max(dates) if dates else None,
    )
