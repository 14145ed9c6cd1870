"""Hourly rate and monetary cost resolution for a single task.

Every view that reports money goes through these functions, so the cost
analytics, project comparison and financial summary always agree.
"""

from __future__ import annotations

from taskboard_analytics.core.models import AggregationTask


def effective_rate(task: AggregationTask) -> float:
    """Resolve the hourly rate used for a task.

    Precedence (first set, non-zero value wins):
        task override -> assignee rate -> project default rate -> 0
    """
    if task.hourly_rate_override:
        return float(task.hourly_rate_override)
    if task.assignee is not None and task.assignee.hourly_rate:
        return float(task.assignee.hourly_rate)
    if task.project.default_hourly_rate:
        return float(task.project.default_hourly_rate)
    return 0.0


def task_cost(task: AggregationTask) -> float:
    """Return the actual monetary cost of a task.

    A cost override bypasses rate and hours entirely. Otherwise actual hours
    are used when strictly positive, else the estimate. An explicit
    ``actual_hours == 0`` therefore falls back to the estimate.
    """
    if task.cost_override:
        return float(task.cost_override)
    if task.actual_hours is not None and task.actual_hours > 0:
        hours = float(task.actual_hours)
    else:
        hours = float(task.estimate_hours or 0)
    return hours * effective_rate(task)


def planned_cost(task: AggregationTask) -> float:
    """Return the planned cost: estimated hours at the effective rate."""
    return float(task.estimate_hours or 0) * effective_rate(task)
