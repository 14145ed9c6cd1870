"""Unit tests for the per-project summary."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from taskboard_analytics.core.models import AssigneeRef, ProjectRef, StatusCount, TaskStatus
from taskboard_analytics.core.project_summary import summarize_projects

APOLLO = ProjectRef(
    id="p-1", name="Apollo", company_id="acme", default_hourly_rate=50.0, owner_id="u-1"
)
ZEUS = ProjectRef(id="p-2", name="Zeus", company_id="acme")
ALICE = AssigneeRef(id="u-1", name="Alice", hourly_rate=100.0)
BOB = AssigneeRef(id="u-2", name="Bob")


def test_counts_costs_hours_and_dates(task_factory) -> None:
    tasks = [
        task_factory(
            project=APOLLO,
            assignee=ALICE,
            status=TaskStatus.DONE,
            estimate_hours=10.0,
            actual_hours=12.0,
            start_date=datetime(2024, 1, 2, tzinfo=timezone.utc),
            due_date=datetime(2024, 1, 4, tzinfo=timezone.utc),
        ),
        task_factory(project=APOLLO, assignee=BOB, status=TaskStatus.IN_PROGRESS, estimate_hours=5.0),
        task_factory(
            project=APOLLO,
            status=TaskStatus.DONE,
            estimate_hours=4.0,
            actual_hours=3.0,
            cost_override=500.0,
            due_date=datetime(2024, 1, 20, tzinfo=timezone.utc),
        ),
    ]

    (summary,) = summarize_projects([APOLLO], tasks).projects

    assert summary.owner_id == "u-1"
    assert summary.total_tasks == 3
    assert summary.tasks_by_status == (
        StatusCount(status=TaskStatus.IN_PROGRESS, count=1),
        StatusCount(status=TaskStatus.DONE, count=2),
    )
    assert summary.completion_percentage == 66.67
    # 10*100 + 5*50 + 4*50 planned; 12*100 + 5*50 + 500 actual.
    assert summary.total_planned == pytest.approx(1450.0)
    assert summary.total_actual == pytest.approx(1950.0)
    assert summary.total_planned_hours == pytest.approx(19.0)
    assert summary.total_actual_hours == pytest.approx(15.0)
    assert summary.start_date == datetime(2024, 1, 2, tzinfo=timezone.utc)
    assert summary.end_date == datetime(2024, 1, 20, tzinfo=timezone.utc)


def test_override_at_zero_rate_counts_as_actual_only(task_factory) -> None:
    tasks = [task_factory(project=ZEUS, estimate_hours=6.0, cost_override=250.0)]

    (summary,) = summarize_projects([ZEUS], tasks).projects

    assert summary.total_planned == 0.0
    assert summary.total_actual == pytest.approx(250.0)


def test_empty_project_gets_zeroed_row(task_factory) -> None:
    tasks = [task_factory(project=APOLLO, estimate_hours=1.0)]

    _, zeus = summarize_projects([APOLLO, ZEUS], tasks).projects

    assert zeus.total_tasks == 0
    assert zeus.tasks_by_status == ()
    assert zeus.completion_percentage == 0.0
    assert zeus.total_planned == 0.0
    assert zeus.start_date is None
    assert zeus.end_date is None


def test_assignee_filter_keeps_every_project(task_factory) -> None:
    tasks = [
        task_factory(project=APOLLO, assignee=ALICE, estimate_hours=2.0),
        task_factory(project=APOLLO, assignee=BOB, estimate_hours=3.0),
        task_factory(project=APOLLO, estimate_hours=4.0),
    ]

    apollo, zeus = summarize_projects([APOLLO, ZEUS], tasks, assignee_id="u-2").projects

    assert apollo.total_tasks == 1
    assert apollo.total_planned_hours == pytest.approx(3.0)
    assert zeus.total_tasks == 0


@pytest.mark.parametrize(
    ("search", "names"),
    [("apo", ["Apollo"]), ("ZEU", ["Zeus"]), ("  ", ["Apollo", "Zeus"]), ("mars", [])],
)
def test_search_matches_project_name(search, names) -> None:
    report = summarize_projects([APOLLO, ZEUS], [], search=search)

    assert [summary.project_name for summary in report.projects] == names
