"""Project financial summary grouped by sprint, assignee, resource or status."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from taskboard_analytics.core.cost import planned_cost, task_cost
from taskboard_analytics.core.errors import ValidationError
from taskboard_analytics.core.models import (
    AggregationTask,
    FinancialGroup,
    FinancialGrouping,
    FinancialReport,
)
from taskboard_analytics.core.rounding import round_metric

NO_SPRINT_LABEL = "No Sprint"
UNASSIGNED_LABEL = "Unassigned"
NO_RESOURCE_LABEL = "No Resource"


@dataclass
class _FinancialAccumulator:
    planned: float = 0.0
    actual: float = 0.0
    items: list[str] = field(default_factory=list)


def _sprint_label(task: AggregationTask) -> str:
    return task.sprint.name if task.sprint is not None else NO_SPRINT_LABEL


def _assignee_label(task: AggregationTask) -> str:
    return task.assignee.name if task.assignee is not None else UNASSIGNED_LABEL


def _resource_label(task: AggregationTask) -> str:
    if task.resource is None:
        return NO_RESOURCE_LABEL
    return f"{task.resource.name} ({task.resource.type})"


def _status_label(task: AggregationTask) -> str:
    return task.status.value


_LABELLERS: dict[FinancialGrouping, Callable[[AggregationTask], str]] = {
    FinancialGrouping.SPRINT: _sprint_label,
    FinancialGrouping.ASSIGNEE: _assignee_label,
    FinancialGrouping.RESOURCE: _resource_label,
    FinancialGrouping.STATUS: _status_label,
}


def parse_grouping(value: str | None) -> FinancialGrouping:
    """Map a ``groupBy`` query value to a grouping; absent means sprint."""
    if value is None or not value.strip():
        return FinancialGrouping.SPRINT
    try:
        return FinancialGrouping(value.strip().lower())
    except ValueError as exc:
        known = ", ".join(grouping.value for grouping in FinancialGrouping)
        raise ValidationError(f"Invalid groupBy: {value!r}. Use one of: {known}") from exc


def financial_summary(
    tasks: Iterable[AggregationTask],
    group_by: FinancialGrouping = FinancialGrouping.SPRINT,
) -> FinancialReport:
    """Planned vs actual cost per group, listing the task titles in each group.

    Groups are keyed by display label, so two sprints with the same name share
    a row.
    """
    label_of = _LABELLERS[group_by]
    groups: dict[str, _FinancialAccumulator] = {}
    for task in tasks:
        acc = groups.setdefault(label_of(task), _FinancialAccumulator())
        acc.planned += planned_cost(task)
        acc.actual += task_cost(task)
        acc.items.append(task.title)

    return FinancialReport(
        group_by=group_by,
        groups=tuple(
            FinancialGroup(
                group=label,
                planned=round_metric(acc.planned),
                actual=round_metric(acc.actual),
                variance=round_metric(acc.actual - acc.planned),
                items=tuple(acc.items),
            )
            for label, acc in groups.items()
        ),
    )
