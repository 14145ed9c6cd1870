"""Sprint velocity and project velocity history with a next-sprint forecast."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from taskboard_analytics.core.models import (
    AggregationTask,
    ProjectVelocityReport,
    SprintRef,
    SprintVelocity,
    VelocityMetrics,
)
from taskboard_analytics.core.rounding import percentage, round_metric

#: Number of most recent sprints averaged for the forecast.
RECENT_SPRINT_WINDOW = 3


def sprint_velocity(sprint: SprintRef, tasks: Iterable[AggregationTask]) -> SprintVelocity:
    """Velocity of one sprint: worked hours of its DONE tasks.

    Tasks belonging to other sprints are ignored.
    """
    total = 0
    completed = 0
    velocity = 0.0
    planned_hours = 0.0
    actual_hours = 0.0
    for task in tasks:
        if task.sprint is None or task.sprint.id != sprint.id:
            continue
        total += 1
        planned_hours += task.estimate_hours or 0.0
        actual_hours += task.actual_hours or 0.0
        if task.is_done:
            completed += 1
            velocity += task.worked_hours

    return SprintVelocity(
        sprint_id=sprint.id,
        sprint_name=sprint.name,
        start_date=sprint.start_date,
        end_date=sprint.end_date,
        velocity=round_metric(velocity),
        planned_hours=round_metric(planned_hours),
        actual_hours=round_metric(actual_hours),
        completed_tasks=completed,
        total_tasks=total,
        completion_rate=percentage(completed, total),
    )


def project_velocity(
    sprints: Sequence[SprintRef],
    tasks: Iterable[AggregationTask],
) -> ProjectVelocityReport:
    """Velocity history of a project's sprints, oldest first, plus summary metrics.

    Sprints without a start date sort last. Sprints without tasks appear with
    zero velocity and count towards the averages.
    """
    task_list = list(tasks)
    ordered = sorted(sprints, key=_sprint_order)
    history = tuple(sprint_velocity(sprint, task_list) for sprint in ordered)
    return ProjectVelocityReport(history=history, metrics=velocity_metrics(history))


def velocity_metrics(history: Sequence[SprintVelocity]) -> VelocityMetrics:
    """Summarise a chronological velocity history.

    ``forecast`` is the recent average when positive, else the overall
    average. ``trend`` compares the recent average against the overall
    average as a percentage and is 0 with fewer than two sprints.
    """
    velocities = [entry.velocity for entry in history]
    if not velocities:
        return VelocityMetrics(
            average_velocity=0.0,
            recent_average=0.0,
            forecast=0.0,
            trend=0.0,
            total_sprints=0,
        )

    average = sum(velocities) / len(velocities)
    recent = velocities[-RECENT_SPRINT_WINDOW:]
    recent_average = sum(recent) / len(recent)
    forecast = recent_average if recent_average > 0 else average
    trend = 0.0
    if len(velocities) >= 2:
        trend = percentage(recent_average - average, average or 1)

    return VelocityMetrics(
        average_velocity=round_metric(average),
        recent_average=round_metric(recent_average),
        forecast=round_metric(forecast),
        trend=trend,
        total_sprints=len(velocities),
    )


def _sprint_order(sprint: SprintRef) -> tuple[bool, datetime | None]:
    return (sprint.start_date is None, sprint.start_date)
