"""Productivity aggregation: throughput and hours per company, member and sprint."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from taskboard_analytics.core.models import (
    AggregationTask,
    ProductivityGroup,
    ProductivityReport,
    ProductivityTotals,
)
from taskboard_analytics.core.rounding import percentage, round_metric


@dataclass
class _GroupAccumulator:
    label: str
    total_tasks: int = 0
    completed_tasks: int = 0
    planned_hours: float = 0.0
    actual_hours: float = 0.0
    velocity: float = 0.0

    def add(self, task: AggregationTask) -> None:
        self.total_tasks += 1
        self.planned_hours += task.estimate_hours or 0.0
        self.actual_hours += task.actual_hours or 0.0
        if task.is_done:
            self.completed_tasks += 1
            self.velocity += task.worked_hours

    def finish(self, key: str) -> ProductivityGroup:
        return ProductivityGroup(
            key=key,
            label=self.label,
            total_tasks=self.total_tasks,
            completed_tasks=self.completed_tasks,
            planned_hours=round_metric(self.planned_hours),
            actual_hours=round_metric(self.actual_hours),
            velocity=round_metric(self.velocity),
            completion_rate=percentage(self.completed_tasks, self.total_tasks),
        )


def aggregate_productivity(tasks: Iterable[AggregationTask]) -> ProductivityReport:
    """Reduce a filtered task set into general, per-member and per-sprint productivity.

    Unassigned tasks count towards the general totals but not ``by_member``;
    tasks outside any sprint count towards the totals but not ``by_sprint``.
    Groups are returned in first-seen order.
    """
    total_tasks = 0
    completed_tasks = 0
    planned_hours = 0.0
    actual_hours = 0.0
    members: dict[str, _GroupAccumulator] = {}
    sprints: dict[str, _GroupAccumulator] = {}

    for task in tasks:
        total_tasks += 1
        planned_hours += task.estimate_hours or 0.0
        actual_hours += task.actual_hours or 0.0
        if task.is_done:
            completed_tasks += 1

        if task.assignee is not None:
            members.setdefault(task.assignee.id, _GroupAccumulator(task.assignee.name)).add(task)
        if task.sprint is not None:
            sprints.setdefault(task.sprint.id, _GroupAccumulator(task.sprint.name)).add(task)

    general = ProductivityTotals(
        total_tasks=total_tasks,
        completed_tasks=completed_tasks,
        total_planned_hours=round_metric(planned_hours),
        total_actual_hours=round_metric(actual_hours),
        completion_rate=percentage(completed_tasks, total_tasks),
        efficiency=percentage(actual_hours, planned_hours),
    )
    return ProductivityReport(
        general=general,
        by_member=tuple(acc.finish(key) for key, acc in members.items()),
        by_sprint=tuple(acc.finish(key) for key, acc in sprints.items()),
    )
