"""Core analytics models and aggregation passes."""

from taskboard_analytics.core.activity import aggregate_activity
from taskboard_analytics.core.comparison import compare_projects
from taskboard_analytics.core.cost import effective_rate, planned_cost, task_cost
from taskboard_analytics.core.costs import aggregate_costs
from taskboard_analytics.core.errors import (
    AnalyticsError,
    AuthenticationError,
    MembershipError,
    NotFoundError,
    ScopingError,
    ValidationError,
)
from taskboard_analytics.core.filters import TaskFilter, build_task_filter, parse_query_date
from taskboard_analytics.core.financial import financial_summary, parse_grouping
from taskboard_analytics.core.models import (
    ActivityDay,
    ActivityReport,
    AggregationTask,
    AnalyticsConfig,
    AssigneeRef,
    CompanyRole,
    ComparisonReport,
    CostGroup,
    CostReport,
    CostTotals,
    FinancialGroup,
    FinancialGrouping,
    FinancialReport,
    MemberTime,
    ProductivityGroup,
    ProductivityReport,
    ProductivityTotals,
    ProjectComparison,
    ProjectRef,
    ProjectSummary,
    ProjectSummaryReport,
    ProjectVelocityReport,
    QualityReport,
    QualityTotals,
    RequestContext,
    ResourceRef,
    SprintQuality,
    SprintRef,
    SprintVelocity,
    StatusTime,
    StatusCount,
    TaskStatus,
    TimeReport,
    VelocityMetrics,
)
from taskboard_analytics.core.productivity import aggregate_productivity
from taskboard_analytics.core.project_summary import summarize_projects
from taskboard_analytics.core.quality import aggregate_quality
from taskboard_analytics.core.rounding import percentage, round_metric
from taskboard_analytics.core.time_metrics import aggregate_time, elapsed_days
from taskboard_analytics.core.velocity import project_velocity, sprint_velocity, velocity_metrics

__all__ = [
    "ActivityDay",
    "ActivityReport",
    "AggregationTask",
    "AnalyticsConfig",
    "AnalyticsError",
    "AssigneeRef",
    "AuthenticationError",
    "CompanyRole",
    "ComparisonReport",
    "CostGroup",
    "CostReport",
    "CostTotals",
    "FinancialGroup",
    "FinancialGrouping",
    "FinancialReport",
    "MemberTime",
    "MembershipError",
    "NotFoundError",
    "ProductivityGroup",
    "ProductivityReport",
    "ProductivityTotals",
    "ProjectComparison",
    "ProjectRef",
    "ProjectSummary",
    "ProjectSummaryReport",
    "ProjectVelocityReport",
    "QualityReport",
    "QualityTotals",
    "RequestContext",
    "ResourceRef",
    "ScopingError",
    "SprintQuality",
    "SprintRef",
    "SprintVelocity",
    "StatusCount",
    "StatusTime",
    "TaskFilter",
    "TaskStatus",
    "TimeReport",
    "ValidationError",
    "VelocityMetrics",
    "aggregate_activity",
    "aggregate_costs",
    "aggregate_productivity",
    "aggregate_quality",
    "aggregate_time",
    "build_task_filter",
    "compare_projects",
    "effective_rate",
    "elapsed_days",
    "financial_summary",
    "parse_grouping",
    "parse_query_date",
    "percentage",
    "planned_cost",
    "project_velocity",
    "round_metric",
    "sprint_velocity",
    "summarize_projects",
    "task_cost",
    "velocity_metrics",
]
