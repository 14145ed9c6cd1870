"""Cost aggregation: planned vs actual spend per company, project and member."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from taskboard_analytics.core.cost import planned_cost, task_cost
from taskboard_analytics.core.models import AggregationTask, CostGroup, CostReport, CostTotals
from taskboard_analytics.core.rounding import round_metric


@dataclass
class _CostAccumulator:
    label: str
    planned: float = 0.0
    actual: float = 0.0

    def finish(self, key: str) -> CostGroup:
        # Variance is taken from the unrounded sums.
        return CostGroup(
            key=key,
            label=self.label,
            planned=round_metric(self.planned),
            actual=round_metric(self.actual),
            variance=round_metric(self.actual - self.planned),
        )


def aggregate_costs(tasks: Iterable[AggregationTask]) -> CostReport:
    """Reduce a filtered task set into cost totals, per-project and per-member groups.

    ``variance = actual - planned``: positive means an overrun.
    """
    total_planned = 0.0
    total_actual = 0.0
    projects: dict[str, _CostAccumulator] = {}
    members: dict[str, _CostAccumulator] = {}

    for task in tasks:
        planned = planned_cost(task)
        actual = task_cost(task)
        total_planned += planned
        total_actual += actual

        project = projects.setdefault(task.project.id, _CostAccumulator(task.project.name))
        project.planned += planned
        project.actual += actual

        if task.assignee is not None:
            member = members.setdefault(task.assignee.id, _CostAccumulator(task.assignee.name))
            member.planned += planned
            member.actual += actual

    return CostReport(
        total=CostTotals(
            planned=round_metric(total_planned),
            actual=round_metric(total_actual),
            variance=round_metric(total_actual - total_planned),
        ),
        by_project=tuple(acc.finish(key) for key, acc in projects.items()),
        by_member=tuple(acc.finish(key) for key, acc in members.items()),
    )
