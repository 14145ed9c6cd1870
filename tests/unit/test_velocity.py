"""Unit tests for sprint and project velocity."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from taskboard_analytics.core.models import SprintRef, SprintVelocity, TaskStatus
from taskboard_analytics.core.velocity import project_velocity, sprint_velocity, velocity_metrics


def _sprint(sprint_id: str, day: int | None) -> SprintRef:
    start = datetime(2024, 1, day, tzinfo=timezone.utc) if day is not None else None
    return SprintRef(id=sprint_id, name=f"Sprint {sprint_id}", start_date=start)


def _history(*velocities: float) -> tuple[SprintVelocity, ...]:
    return tuple(
        SprintVelocity(
            sprint_id=str(index),
            sprint_name=f"Sprint {index}",
            start_date=None,
            end_date=None,
            velocity=velocity,
            planned_hours=0.0,
            actual_hours=0.0,
            completed_tasks=0,
            total_tasks=0,
            completion_rate=0.0,
        )
        for index, velocity in enumerate(velocities)
    )


def test_sprint_velocity_counts_only_its_own_tasks(task_factory) -> None:
    sprint = _sprint("a", 1)
    other = _sprint("b", 15)
    tasks = [
        task_factory(sprint=sprint, status=TaskStatus.DONE, estimate_hours=8.0, actual_hours=6.0),
        task_factory(sprint=sprint, status=TaskStatus.DONE, estimate_hours=3.0),
        task_factory(sprint=sprint, status=TaskStatus.TODO, estimate_hours=5.0),
        task_factory(sprint=other, status=TaskStatus.DONE, estimate_hours=40.0),
        task_factory(status=TaskStatus.DONE, estimate_hours=40.0),
    ]

    result = sprint_velocity(sprint, tasks)

    assert result.sprint_id == "a"
    assert result.velocity == pytest.approx(9.0)
    assert result.planned_hours == pytest.approx(16.0)
    assert result.actual_hours == pytest.approx(6.0)
    assert result.completed_tasks == 2
    assert result.total_tasks == 3
    assert result.completion_rate == 66.67


def test_project_history_is_chronological_with_undated_sprints_last(task_factory) -> None:
    sprints = [_sprint("late", 20), _sprint("undated", None), _sprint("early", 1)]

    report = project_velocity(sprints, [])

    assert [entry.sprint_id for entry in report.history] == ["early", "late", "undated"]
    assert all(entry.velocity == 0.0 for entry in report.history)
    assert report.metrics.total_sprints == 3


def test_metrics_use_last_three_sprints_for_recent_average() -> None:
    metrics = velocity_metrics(_history(10.0, 20.0, 30.0, 40.0))

    assert metrics.average_velocity == pytest.approx(25.0)
    assert metrics.recent_average == pytest.approx(30.0)
    assert metrics.forecast == pytest.approx(30.0)
    assert metrics.trend == pytest.approx(20.0)
    assert metrics.total_sprints == 4


def test_forecast_falls_back_to_average_when_recent_is_zero() -> None:
    metrics = velocity_metrics(_history(30.0, 0.0, 0.0, 0.0))

    assert metrics.recent_average == 0.0
    assert metrics.forecast == pytest.approx(7.5)
    assert metrics.trend == pytest.approx(-100.0)


def test_single_sprint_has_no_trend() -> None:
    metrics = velocity_metrics(_history(12.0))

    assert metrics.average_velocity == pytest.approx(12.0)
    assert metrics.trend == 0.0


def test_empty_history_is_all_zero() -> None:
    metrics = velocity_metrics(())

    assert metrics.average_velocity == 0.0
    assert metrics.forecast == 0.0
    assert metrics.total_sprints == 0
