"""Unit tests for productivity aggregation."""

from __future__ import annotations

import pytest

from taskboard_analytics.core.models import AssigneeRef, SprintRef, TaskStatus
from taskboard_analytics.core.productivity import aggregate_productivity

ALICE = AssigneeRef(id="u-1", name="Alice")
BOB = AssigneeRef(id="u-2", name="Bob")
SPRINT_1 = SprintRef(id="s-1", name="Sprint 1")


def test_empty_task_set_is_well_formed() -> None:
    report = aggregate_productivity([])

    assert report.general.total_tasks == 0
    assert report.general.completed_tasks == 0
    assert report.general.total_planned_hours == 0.0
    assert report.general.completion_rate == 0.0
    assert report.general.efficiency == 0.0
    assert report.by_member == ()
    assert report.by_sprint == ()


def test_one_of_three_done_is_33_33_percent(task_factory) -> None:
    tasks = [
        task_factory(status=TaskStatus.DONE),
        task_factory(status=TaskStatus.TODO),
        task_factory(status=TaskStatus.IN_PROGRESS),
    ]
    assert aggregate_productivity(tasks).general.completion_rate == 33.33


def test_general_totals_and_efficiency(task_factory) -> None:
    tasks = [
        task_factory(status=TaskStatus.DONE, estimate_hours=10.0, actual_hours=12.0),
        task_factory(estimate_hours=5.0),
        task_factory(estimate_hours=12.0, actual_hours=3.0),
    ]

    general = aggregate_productivity(tasks).general

    assert general.total_tasks == 3
    assert general.completed_tasks == 1
    assert general.total_planned_hours == pytest.approx(27.0)
    assert general.total_actual_hours == pytest.approx(15.0)
    assert general.efficiency == 55.56


def test_unassigned_and_unsprinted_tasks_only_count_in_totals(task_factory) -> None:
    tasks = [
        task_factory(status=TaskStatus.DONE, assignee=ALICE, sprint=SPRINT_1, estimate_hours=4.0),
        task_factory(status=TaskStatus.DONE, estimate_hours=6.0),
    ]

    report = aggregate_productivity(tasks)

    assert report.general.total_tasks == 2
    assert len(report.by_member) == 1
    assert report.by_member[0].total_tasks == 1
    assert len(report.by_sprint) == 1
    assert report.by_sprint[0].total_tasks == 1


def test_member_velocity_uses_actual_then_estimate(task_factory) -> None:
    tasks = [
        task_factory(status=TaskStatus.DONE, assignee=ALICE, estimate_hours=10.0, actual_hours=12.0),
        task_factory(status=TaskStatus.DONE, assignee=ALICE, estimate_hours=5.0),
        task_factory(status=TaskStatus.REVIEW, assignee=ALICE, estimate_hours=8.0, actual_hours=2.0),
        task_factory(status=TaskStatus.DONE, assignee=BOB),
    ]

    report = aggregate_productivity(tasks)
    alice, bob = report.by_member

    assert alice.key == "u-1"
    assert alice.label == "Alice"
    assert alice.total_tasks == 3
    assert alice.completed_tasks == 2
    assert alice.planned_hours == pytest.approx(23.0)
    assert alice.actual_hours == pytest.approx(14.0)
    assert alice.velocity == pytest.approx(17.0)
    assert alice.completion_rate == 66.67
    assert bob.velocity == 0.0
    assert bob.completion_rate == 100.0


def test_explicit_zero_actual_hours_counts_as_zero_velocity(task_factory) -> None:
    task = task_factory(
        status=TaskStatus.DONE, assignee=ALICE, estimate_hours=5.0, actual_hours=0.0
    )
    assert aggregate_productivity([task]).by_member[0].velocity == 0.0


def test_sprint_groups_keep_first_seen_order(task_factory) -> None:
    sprint_2 = SprintRef(id="s-2", name="Sprint 2")
    tasks = [
        task_factory(sprint=sprint_2),
        task_factory(sprint=SPRINT_1),
        task_factory(sprint=sprint_2, status=TaskStatus.DONE, estimate_hours=3.0),
    ]

    by_sprint = aggregate_productivity(tasks).by_sprint

    assert [group.label for group in by_sprint] == ["Sprint 2", "Sprint 1"]
    assert by_sprint[0].total_tasks == 2
    assert by_sprint[0].velocity == pytest.approx(3.0)
    assert by_sprint[0].completion_rate == 50.0
