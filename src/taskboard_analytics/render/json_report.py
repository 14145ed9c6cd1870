"""JSON payload builders for every analytics view.

Payload keys are camelCase; they are the wire format of the HTTP surface and
of ``--format json`` on the CLI.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable

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

AnalyticsReport = (
    ProductivityReport
    | CostReport
    | TimeReport
    | QualityReport
    | ActivityReport
    | ComparisonReport
    | ProjectSummaryReport
    | SprintVelocity
    | ProjectVelocityReport
    | FinancialReport
)


def render_json_report(report: AnalyticsReport) -> str:
    """Render any analytics view as canonical JSON."""
    return json.dumps(build_payload(report), indent=2, sort_keys=True) + "\n"


def build_payload(report: AnalyticsReport) -> dict[str, Any]:
    builder = _BUILDERS.get(type(report))
    if builder is None:
        raise TypeError(f"No JSON payload for {type(report).__name__}")
    return builder(report)


def productivity_payload(report: ProductivityReport) -> dict[str, Any]:
    general = report.general
    return {
        "general": {
            "totalTasks": general.total_tasks,
            "completedTasks": general.completed_tasks,
            "totalPlannedHours": general.total_planned_hours,
            "totalActualHours": general.total_actual_hours,
            "completionRate": general.completion_rate,
            "efficiency": general.efficiency,
        },
        "byMember": [_productivity_group(group, "userId", "name") for group in report.by_member],
        "bySprint": [
            _productivity_group(group, "sprintId", "sprintName") for group in report.by_sprint
        ],
    }


def costs_payload(report: CostReport) -> dict[str, Any]:
    return {
        "total": {
            "planned": report.total.planned,
            "actual": report.total.actual,
            "variance": report.total.variance,
        },
        "byProject": [_cost_group(group, "projectId", "projectName") for group in report.by_project],
        "byMember": [_cost_group(group, "userId", "name") for group in report.by_member],
    }


def time_payload(report: TimeReport) -> dict[str, Any]:
    return {
        "byStatus": [
            {"status": entry.status.value, "avgDays": entry.avg_days, "count": entry.count}
            for entry in report.by_status
        ],
        "byMember": [
            {
                "userId": entry.key,
                "name": entry.name,
                "avgDays": entry.avg_days,
                "count": entry.count,
                "totalHours": entry.total_hours,
            }
            for entry in report.by_member
        ],
    }


def quality_payload(report: QualityReport) -> dict[str, Any]:
    general = report.general
    return {
        "general": {
            "totalTasks": general.total_tasks,
            "completedTasks": general.completed_tasks,
            "blockedTasks": general.blocked_tasks,
            "completionRate": general.completion_rate,
            "blockRate": general.block_rate,
        },
        "bySprint": [
            {
                "sprintId": sprint.key,
                "sprintName": sprint.sprint_name,
                "totalTasks": sprint.total_tasks,
                "completedTasks": sprint.completed_tasks,
                "blockedTasks": sprint.blocked_tasks,
                "completionRate": sprint.completion_rate,
            }
            for sprint in report.by_sprint
        ],
    }


def activity_payload(report: ActivityReport) -> dict[str, Any]:
    return {
        "heatmap": [
            {
                "date": day.date,
                "created": day.created,
                "completed": day.completed,
                "inProgress": day.in_progress,
            }
            for day in report.heatmap
        ]
    }


def comparison_payload(report: ComparisonReport) -> dict[str, Any]:
    return {
        "comparison": [
            {
                "projectId": row.project_id,
                "projectName": row.project_name,
                "totalTasks": row.total_tasks,
                "completedTasks": row.completed_tasks,
                "completionRate": row.completion_rate,
                "totalPlanned": row.total_planned,
                "totalActual": row.total_actual,
                "costVariance": row.cost_variance,
                "totalPlannedHours": row.total_planned_hours,
                "totalActualHours": row.total_actual_hours,
                "hoursVariance": row.hours_variance,
            }
            for row in report.comparison
        ]
    }


def project_summary_payload(report: ProjectSummaryReport) -> dict[str, Any]:
    return {
        "projects": [
            {
                "projectId": summary.project_id,
                "projectName": summary.project_name,
                "ownerId": summary.owner_id,
                "totalTasks": summary.total_tasks,
                "tasksByStatus": {
                    entry.status.value: entry.count for entry in summary.tasks_by_status
                },
                "completionPercentage": summary.completion_percentage,
                "totalPlanned": summary.total_planned,
                "totalActual": summary.total_actual,
                "totalPlannedHours": summary.total_planned_hours,
                "totalActualHours": summary.total_actual_hours,
                "startDate": _timestamp(summary.start_date),
                "endDate": _timestamp(summary.end_date),
            }
            for summary in report.projects
        ]
    }


def sprint_velocity_payload(velocity: SprintVelocity) -> dict[str, Any]:
    return {
        "sprintId": velocity.sprint_id,
        "sprintName": velocity.sprint_name,
        "startDate": _timestamp(velocity.start_date),
        "endDate": _timestamp(velocity.end_date),
        "velocity": velocity.velocity,
        "plannedHours": velocity.planned_hours,
        "actualHours": velocity.actual_hours,
        "completedTasks": velocity.completed_tasks,
        "totalTasks": velocity.total_tasks,
        "completionRate": velocity.completion_rate,
    }


def project_velocity_payload(report: ProjectVelocityReport) -> dict[str, Any]:
    metrics = report.metrics
    return {
        "velocityHistory": [sprint_velocity_payload(entry) for entry in report.history],
        "metrics": {
            "averageVelocity": metrics.average_velocity,
            "recentAverage": metrics.recent_average,
            "forecast": metrics.forecast,
            "trend": metrics.trend,
            "totalSprints": metrics.total_sprints,
        },
    }


def financial_payload(report: FinancialReport) -> dict[str, Any]:
    return {
        "groupBy": report.group_by.value,
        "groups": [
            {
                "group": group.group,
                "planned": group.planned,
                "actual": group.actual,
                "variance": group.variance,
                "itemsCount": group.items_count,
                "items": list(group.items),
            }
            for group in report.groups
        ],
    }


def _productivity_group(group: ProductivityGroup, key_name: str, label_name: str) -> dict[str, Any]:
    return {
        key_name: group.key,
        label_name: group.label,
        "totalTasks": group.total_tasks,
        "completedTasks": group.completed_tasks,
        "plannedHours": group.planned_hours,
        "actualHours": group.actual_hours,
        "velocity": group.velocity,
        "completionRate": group.completion_rate,
    }


def _cost_group(group: CostGroup, key_name: str, label_name: str) -> dict[str, Any]:
    return {
        key_name: group.key,
        label_name: group.label,
        "planned": group.planned,
        "actual": group.actual,
        "variance": group.variance,
    }


def _timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


_BUILDERS: dict[type, Callable[[Any], dict[str, Any]]] = {
    ProductivityReport: productivity_payload,
    CostReport: costs_payload,
    TimeReport: time_payload,
    QualityReport: quality_payload,
    ActivityReport: activity_payload,
    ComparisonReport: comparison_payload,
    ProjectSummaryReport: project_summary_payload,
    SprintVelocity: sprint_velocity_payload,
    ProjectVelocityReport: project_velocity_payload,
    FinancialReport: financial_payload,
}
