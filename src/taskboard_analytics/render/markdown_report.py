"""Markdown report renderer."""

from __future__ import annotations

from datetime import datetime

from taskboard_analytics.core.models import (
    ActivityReport,
    ComparisonReport,
    CostGroup,
    CostReport,
    FinancialReport,
    ProductivityGroup,
    ProductivityReport,
    ProjectSummaryReport,
    ProjectVelocityReport,
    QualityReport,
    SprintVelocity,
    TimeReport,
)
from taskboard_analytics.render.json_report import AnalyticsReport


def render_markdown_report(report: AnalyticsReport, title: str | None = None) -> str:
    """Render any analytics view as GitHub-compatible Markdown."""
    if isinstance(report, ProductivityReport):
        sections = _render_productivity(report)
        default_title = "Productivity"
    elif isinstance(report, CostReport):
        sections = _render_costs(report)
        default_title = "Costs"
    elif isinstance(report, TimeReport):
        sections = _render_time(report)
        default_title = "Time in Status"
    elif isinstance(report, QualityReport):
        sections = _render_quality(report)
        default_title = "Quality"
    elif isinstance(report, ActivityReport):
        sections = _render_activity(report)
        default_title = "Activity Heatmap"
    elif isinstance(report, ComparisonReport):
        sections = _render_comparison(report)
        default_title = "Project Comparison"
    elif isinstance(report, ProjectSummaryReport):
        sections = _render_project_summary(report)
        default_title = "Project Summary"
    elif isinstance(report, SprintVelocity):
        sections = [_render_velocity_table((report,))]
        default_title = f"Sprint Velocity: {report.sprint_name}"
    elif isinstance(report, ProjectVelocityReport):
        sections = _render_project_velocity(report)
        default_title = "Project Velocity"
    elif isinstance(report, FinancialReport):
        sections = _render_financial(report)
        default_title = "Financial Summary"
    else:
        raise TypeError(f"No markdown renderer for {type(report).__name__}")

    lines: list[str] = [f"# {_escape_cell(title or default_title)}", ""]
    for section in sections:
        lines.extend(section)
        lines.append("")
    return "\n".join(lines)


def _render_productivity(report: ProductivityReport) -> list[list[str]]:
    general = report.general
    summary = [
        "## Summary",
        "",
        "| Metric | Value |",
        "| --- | --- |",
        f"| Total tasks | {general.total_tasks} |",
        f"| Completed tasks | {general.completed_tasks} |",
        f"| Planned hours | {_format_number(general.total_planned_hours)} |",
        f"| Actual hours | {_format_number(general.total_actual_hours)} |",
        f"| Completion rate | {_format_percent(general.completion_rate)} |",
        f"| Efficiency | {_format_percent(general.efficiency)} |",
    ]
    return [
        summary,
        _productivity_table("By Member", "Member", report.by_member),
        _productivity_table("By Sprint", "Sprint", report.by_sprint),
    ]


def _productivity_table(
    heading: str, label_header: str, groups: tuple[ProductivityGroup, ...]
) -> list[str]:
    lines = [f"## {heading}", ""]
    if not groups:
        lines.append("No data.")
        return lines
    lines.extend(
        [
            f"| {label_header} | Tasks | Completed | Planned Hours | Actual Hours | Velocity | Completion |",
            "| --- | --- | --- | --- | --- | --- | --- |",
        ]
    )
    for group in groups:
        lines.append(
            f"| {_escape_cell(group.label)} | {group.total_tasks} | {group.completed_tasks} | "
            f"{_format_number(group.planned_hours)} | {_format_number(group.actual_hours)} | "
            f"{_format_number(group.velocity)} | {_format_percent(group.completion_rate)} |"
        )
    return lines


def _render_costs(report: CostReport) -> list[list[str]]:
    total = report.total
    summary = [
        "## Total",
        "",
        "| Planned | Actual | Variance |",
        "| --- | --- | --- |",
        f"| {_format_money(total.planned)} | {_format_money(total.actual)} | "
        f"{_format_money(total.variance)} |",
    ]
    return [
        summary,
        _cost_table("By Project", "Project", report.by_project),
        _cost_table("By Member", "Member", report.by_member),
    ]


def _cost_table(heading: str, label_header: str, groups: tuple[CostGroup, ...]) -> list[str]:
    lines = [f"## {heading}", ""]
    if not groups:
        lines.append("No data.")
        return lines
    lines.extend([f"| {label_header} | Planned | Actual | Variance |", "| --- | --- | --- | --- |"])
    for group in groups:
        lines.append(
            f"| {_escape_cell(group.label)} | {_format_money(group.planned)} | "
            f"{_format_money(group.actual)} | {_format_money(group.variance)} |"
        )
    return lines


def _render_time(report: TimeReport) -> list[list[str]]:
    by_status = ["## By Status", ""]
    if report.by_status:
        by_status.extend(["| Status | Avg Days | Count |", "| --- | --- | --- |"])
        for entry in report.by_status:
            by_status.append(
                f"| {entry.status.value} | {_format_number(entry.avg_days)} | {entry.count} |"
            )
    else:
        by_status.append("No completed tasks with start and due dates.")

    by_member = ["## By Member", ""]
    if report.by_member:
        by_member.extend(
            ["| Member | Avg Days | Count | Total Hours |", "| --- | --- | --- | --- |"]
        )
        for entry in report.by_member:
            by_member.append(
                f"| {_escape_cell(entry.name)} | {_format_number(entry.avg_days)} | "
                f"{entry.count} | {_format_number(entry.total_hours)} |"
            )
    else:
        by_member.append("No data.")
    return [by_status, by_member]


def _render_quality(report: QualityReport) -> list[list[str]]:
    general = report.general
    summary = [
        "## Summary",
        "",
        "| Metric | Value |",
        "| --- | --- |",
        f"| Total tasks | {general.total_tasks} |",
        f"| Completed tasks | {general.completed_tasks} |",
        f"| Blocked tasks | {general.blocked_tasks} |",
        f"| Completion rate | {_format_percent(general.completion_rate)} |",
        f"| Block rate | {_format_percent(general.block_rate)} |",
    ]
    sprints = ["## By Sprint", ""]
    if report.by_sprint:
        sprints.extend(
            [
                "| Sprint | Tasks | Completed | Blocked | Completion |",
                "| --- | --- | --- | --- | --- |",
            ]
        )
        for sprint in report.by_sprint:
            sprints.append(
                f"| {_escape_cell(sprint.sprint_name)} | {sprint.total_tasks} | "
                f"{sprint.completed_tasks} | {sprint.blocked_tasks} | "
                f"{_format_percent(sprint.completion_rate)} |"
            )
    else:
        sprints.append("No data.")
    return [summary, sprints]


def _render_activity(report: ActivityReport) -> list[list[str]]:
    lines = ["## Daily Activity", ""]
    if not report.heatmap:
        lines.append("No activity.")
        return [lines]
    lines.extend(["| Date | Created | Completed | In Progress |", "| --- | --- | --- | --- |"])
    for day in report.heatmap:
        lines.append(f"| {day.date} | {day.created} | {day.completed} | {day.in_progress} |")
    return [lines]


def _render_comparison(report: ComparisonReport) -> list[list[str]]:
    lines = ["## Projects", ""]
    if not report.comparison:
        lines.append("No projects.")
        return [lines]
    lines.extend(
        [
            "| Project | Tasks | Completed | Completion | Planned | Actual | Cost Variance | "
            "Planned Hours | Actual Hours | Hours Variance |",
            "| --- | --- | --- | --- | --- | --- | --- | --- | --- | --- |",
        ]
    )
    for row in report.comparison:
        lines.append(
            f"| {_escape_cell(row.project_name)} | {row.total_tasks} | {row.completed_tasks} | "
            f"{_format_percent(row.completion_rate)} | {_format_money(row.total_planned)} | "
            f"{_format_money(row.total_actual)} | {_format_money(row.cost_variance)} | "
            f"{_format_number(row.total_planned_hours)} | {_format_number(row.total_actual_hours)} | "
            f"{_format_number(row.hours_variance)} |"
        )
    return [lines]


def _render_project_summary(report: ProjectSummaryReport) -> list[list[str]]:
    lines = ["## Projects", ""]
    if not report.projects:
        lines.append("No projects.")
        return [lines]
    lines.extend(
        [
            "| Project | Tasks | By Status | Completion | Planned | Actual | "
            "Planned Hours | Actual Hours | Start | End |",
            "| --- | --- | --- | --- | --- | --- | --- | --- | --- | --- |",
        ]
    )
    for summary in report.projects:
        statuses = ", ".join(
            f"{entry.status.value} {entry.count}" for entry in summary.tasks_by_status
        )
        lines.append(
            f"| {_escape_cell(summary.project_name)} | {summary.total_tasks} | {statuses or '-'} | "
            f"{_format_percent(summary.completion_percentage)} | "
            f"{_format_money(summary.total_planned)} | {_format_money(summary.total_actual)} | "
            f"{_format_number(summary.total_planned_hours)} | "
            f"{_format_number(summary.total_actual_hours)} | "
            f"{_format_day(summary.start_date)} | {_format_day(summary.end_date)} |"
        )
    return [lines]


def _render_project_velocity(report: ProjectVelocityReport) -> list[list[str]]:
    metrics = report.metrics
    summary = [
        "## Metrics",
        "",
        "| Metric | Value |",
        "| --- | --- |",
        f"| Sprints | {metrics.total_sprints} |",
        f"| Average velocity | {_format_number(metrics.average_velocity)} |",
        f"| Recent average | {_format_number(metrics.recent_average)} |",
        f"| Forecast | {_format_number(metrics.forecast)} |",
        f"| Trend | {_format_percent(metrics.trend)} |",
    ]
    history = ["## History", ""]
    if report.history:
        history.extend(_render_velocity_table(report.history))
    else:
        history.append("No sprints.")
    return [summary, history]


def _render_velocity_table(entries: tuple[SprintVelocity, ...]) -> list[str]:
    lines = [
        "| Sprint | Velocity | Planned Hours | Actual Hours | Completed | Tasks | Completion |",
        "| --- | --- | --- | --- | --- | --- | --- |",
    ]
    for entry in entries:
        lines.append(
            f"| {_escape_cell(entry.sprint_name)} | {_format_number(entry.velocity)} | "
            f"{_format_number(entry.planned_hours)} | {_format_number(entry.actual_hours)} | "
            f"{entry.completed_tasks} | {entry.total_tasks} | "
            f"{_format_percent(entry.completion_rate)} |"
        )
    return lines


def _render_financial(report: FinancialReport) -> list[list[str]]:
    lines = [f"## By {report.group_by.value.capitalize()}", ""]
    if not report.groups:
        lines.append("No tasks.")
        return [lines]
    lines.extend(
        ["| Group | Planned | Actual | Variance | Items |", "| --- | --- | --- | --- | --- |"]
    )
    for group in report.groups:
        lines.append(
            f"| {_escape_cell(group.group)} | {_format_money(group.planned)} | "
            f"{_format_money(group.actual)} | {_format_money(group.variance)} | "
            f"{group.items_count} |"
        )
    return [lines]


def _format_number(value: float) -> str:
    if abs(value - int(value)) < 1e-9:
        return str(int(value))
    return f"{value:.2f}"


def _format_percent(value: float) -> str:
    return f"{_format_number(value)}%"


def _format_money(value: float) -> str:
    if value < 0:
        return f"-${abs(value):,.2f}"
    return f"${value:,.2f}"


def _format_day(value: datetime | None) -> str:
    return value.date().isoformat() if value is not None else "-"


def _escape_cell(value: str) -> str:
    normalized = value.replace("\r\n", "\n").replace("\r", "\n").replace("\n", "<br>")
    return normalized.replace("|", "\\|")
