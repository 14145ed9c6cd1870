"""Report commands, one per analytics view."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from taskboard_analytics.cli.commands._common import (
    COMPANY_OPTION,
    CONFIG_OPTION,
    DB_OPTION,
    END_OPTION,
    FORMAT_OPTION,
    PROJECT_OPTION,
    START_OPTION,
    USER_OPTION,
    _error,
    check_format,
    emit,
    run_query,
)
from taskboard_analytics.core.models import RequestContext


def run_productivity(
    db: Optional[Path] = DB_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    company: Optional[str] = COMPANY_OPTION,
    user: Optional[str] = USER_OPTION,
    project: Optional[str] = PROJECT_OPTION,
    start: Optional[str] = START_OPTION,
    end: Optional[str] = END_OPTION,
    format: str = FORMAT_OPTION,
) -> None:
    """Task counts, hours, velocity and completion per member and sprint."""
    check_format(format)
    context = RequestContext(user_id=user, company_id=company)
    report = run_query(
        config,
        db,
        lambda service: service.productivity(
            context, project_id=project, start_date=start, end_date=end
        ),
    )
    emit(report, format)


def run_costs(
    db: Optional[Path] = DB_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    company: Optional[str] = COMPANY_OPTION,
    user: Optional[str] = USER_OPTION,
    project: Optional[str] = PROJECT_OPTION,
    start: Optional[str] = START_OPTION,
    end: Optional[str] = END_OPTION,
    format: str = FORMAT_OPTION,
) -> None:
    """Planned vs actual cost, per project and per member."""
    check_format(format)
    context = RequestContext(user_id=user, company_id=company)
    report = run_query(
        config,
        db,
        lambda service: service.costs(context, project_id=project, start_date=start, end_date=end),
    )
    emit(report, format)


def run_time(
    db: Optional[Path] = DB_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    company: Optional[str] = COMPANY_OPTION,
    user: Optional[str] = USER_OPTION,
    project: Optional[str] = PROJECT_OPTION,
    start: Optional[str] = START_OPTION,
    end: Optional[str] = END_OPTION,
    format: str = FORMAT_OPTION,
) -> None:
    """Average start-to-due days of completed tasks."""
    check_format(format)
    context = RequestContext(user_id=user, company_id=company)
    report = run_query(
        config,
        db,
        lambda service: service.time(context, project_id=project, start_date=start, end_date=end),
    )
    emit(report, format)


def run_quality(
    db: Optional[Path] = DB_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    company: Optional[str] = COMPANY_OPTION,
    user: Optional[str] = USER_OPTION,
    project: Optional[str] = PROJECT_OPTION,
    start: Optional[str] = START_OPTION,
    end: Optional[str] = END_OPTION,
    format: str = FORMAT_OPTION,
) -> None:
    """Completion and block rates, overall and per sprint."""
    check_format(format)
    context = RequestContext(user_id=user, company_id=company)
    report = run_query(
        config,
        db,
        lambda service: service.quality(
            context, project_id=project, start_date=start, end_date=end
        ),
    )
    emit(report, format)


def run_heatmap(
    db: Optional[Path] = DB_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    company: Optional[str] = COMPANY_OPTION,
    user: Optional[str] = USER_OPTION,
    project: Optional[str] = PROJECT_OPTION,
    format: str = FORMAT_OPTION,
) -> None:
    """Tasks created, completed and in progress per creation day."""
    check_format(format)
    context = RequestContext(user_id=user, company_id=company)
    report = run_query(
        config, db, lambda service: service.activity_heatmap(context, project_id=project)
    )
    emit(report, format)


def run_compare(
    db: Optional[Path] = DB_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    company: Optional[str] = COMPANY_OPTION,
    user: Optional[str] = USER_OPTION,
    format: str = FORMAT_OPTION,
) -> None:
    """Side-by-side totals for every project of the company."""
    check_format(format)
    context = RequestContext(user_id=user, company_id=company)
    report = run_query(config, db, lambda service: service.compare_projects(context))
    emit(report, format)


def run_summary(
    db: Optional[Path] = DB_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    company: Optional[str] = COMPANY_OPTION,
    user: Optional[str] = USER_OPTION,
    assignee: Optional[str] = typer.Option(
        None, "--assignee", "-a", help="Count only tasks assigned to this user id."
    ),
    search: Optional[str] = typer.Option(
        None, "--search", "-q", help="Keep projects whose name contains this text."
    ),
    format: str = FORMAT_OPTION,
) -> None:
    """Status counts, cost and hour totals and date span per project."""
    check_format(format)
    context = RequestContext(user_id=user, company_id=company)
    report = run_query(
        config,
        db,
        lambda service: service.projects_summary(context, assignee_id=assignee, search=search),
    )
    emit(report, format)


def run_velocity(
    db: Optional[Path] = DB_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    company: Optional[str] = COMPANY_OPTION,
    user: Optional[str] = USER_OPTION,
    sprint: Optional[str] = typer.Option(None, "--sprint", "-s", help="Sprint id."),
    project: Optional[str] = typer.Option(
        None, "--project", "-p", help="Project id (velocity history of all its sprints)."
    ),
    format: str = FORMAT_OPTION,
) -> None:
    """Velocity of one sprint, or velocity history and forecast of a project."""
    check_format(format)
    if (sprint is None) == (project is None):
        _error("Provide exactly one of --sprint or --project.", 2)
    context = RequestContext(user_id=user, company_id=company)
    if sprint is not None:
        report = run_query(config, db, lambda service: service.sprint_velocity(context, sprint))
    else:
        report = run_query(config, db, lambda service: service.project_velocity(context, project))
    emit(report, format)


def run_financial(
    project: str = typer.Option(..., "--project", "-p", help="Project id."),
    db: Optional[Path] = DB_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    company: Optional[str] = COMPANY_OPTION,
    user: Optional[str] = USER_OPTION,
    group_by: str = typer.Option(
        "sprint", "--group-by", "-g", help="Grouping: sprint, assignee, resource or status."
    ),
    format: str = FORMAT_OPTION,
) -> None:
    """Planned vs actual cost of one project, grouped."""
    check_format(format)
    context = RequestContext(user_id=user, company_id=company)
    report = run_query(
        config,
        db,
        lambda service: service.financial_summary(context, project, group_by=group_by),
    )
    emit(report, format)
