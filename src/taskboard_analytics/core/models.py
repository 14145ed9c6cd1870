"""Pydantic models for service configuration and dataclasses for records and metric views."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StringConstraints

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def _upper_level(value: Any) -> Any:
    return value.strip().upper() if isinstance(value, str) else value


LogLevel = Annotated[
    Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], BeforeValidator(_upper_level)
]


# ---------------------------------------------------------------------------
# Pydantic config models (input validation)
# ---------------------------------------------------------------------------


class ApiSettings(BaseModel):
    """HTTP surface settings."""

    model_config = ConfigDict(extra="forbid")

    user_header: NonEmptyStr = "X-User-Id"
    company_header: NonEmptyStr = "X-Company-Id"
    host: NonEmptyStr = "127.0.0.1"
    port: Annotated[int, Field(ge=1, le=65535)] = 8000


class LoggingSettings(BaseModel):
    """Logging settings applied by the CLI and the server entrypoint."""

    model_config = ConfigDict(extra="forbid")

    level: LogLevel = "INFO"


class AnalyticsConfig(BaseModel):
    """Top-level config object for the analytics service."""

    model_config = ConfigDict(extra="forbid")

    database: Path
    api: ApiSettings = Field(default_factory=ApiSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TaskStatus(enum.Enum):
    """Board column a task currently sits in."""

    BACKLOG = "BACKLOG"
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEW = "REVIEW"
    DONE = "DONE"
    BLOCKED = "BLOCKED"


class CompanyRole(enum.Enum):
    """Role of a user inside a company.

    OWNER and ADMIN may read any project of the company, even projects they
    are not a member of.
    """

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"
    VIEWER = "VIEWER"

    @property
    def is_admin(self) -> bool:
        return self in (CompanyRole.OWNER, CompanyRole.ADMIN)


class FinancialGrouping(enum.Enum):
    """Grouping key for the project financial summary."""

    SPRINT = "sprint"
    ASSIGNEE = "assignee"
    RESOURCE = "resource"
    STATUS = "status"


# ---------------------------------------------------------------------------
# Read-model records (frozen, produced by the entity store)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RequestContext:
    """Acting user and active company, as resolved by the auth layer."""

    user_id: str | None
    company_id: str | None


@dataclass(frozen=True)
class AssigneeRef:
    id: str
    name: str
    hourly_rate: float | None = None


@dataclass(frozen=True)
class SprintRef:
    id: str
    name: str
    start_date: datetime | None = None
    end_date: datetime | None = None


@dataclass(frozen=True)
class ProjectRef:
    id: str
    name: str
    company_id: str
    default_hourly_rate: float | None = None
    owner_id: str | None = None


@dataclass(frozen=True)
class ResourceRef:
    id: str
    name: str
    type: str


@dataclass(frozen=True)
class AggregationTask:
    """One task joined with every relation an aggregation pass may read.

    ``created_at`` is always timezone-aware UTC. ``start_date`` and
    ``due_date`` are aware when present.
    """

    id: str
    title: str
    status: TaskStatus
    project: ProjectRef
    created_at: datetime
    estimate_hours: float | None = None
    actual_hours: float | None = None
    hourly_rate_override: float | None = None
    cost_override: float | None = None
    assignee: AssigneeRef | None = None
    sprint: SprintRef | None = None
    resource: ResourceRef | None = None
    start_date: datetime | None = None
    due_date: datetime | None = None

    @property
    def is_done(self) -> bool:
        return self.status is TaskStatus.DONE

    @property
    def is_blocked(self) -> bool:
        return self.status is TaskStatus.BLOCKED

    @property
    def worked_hours(self) -> float:
        """Actual hours, falling back to the estimate only when actual is unset."""
        if self.actual_hours is not None:
            return self.actual_hours
        if self.estimate_hours is not None:
            return self.estimate_hours
        return 0.0


# ---------------------------------------------------------------------------
# Metric views (frozen, output-only, floats already rounded)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProductivityTotals:
    total_tasks: int
    completed_tasks: int
    total_planned_hours: float
    total_actual_hours: float
    completion_rate: float
    efficiency: float


@dataclass(frozen=True)
class ProductivityGroup:
    """Per-member or per-sprint productivity; ``label`` is the member or sprint name."""

    key: str
    label: str
    total_tasks: int
    completed_tasks: int
    planned_hours: float
    actual_hours: float
    velocity: float
    completion_rate: float


@dataclass(frozen=True)
class ProductivityReport:
    general: ProductivityTotals
    by_member: tuple[ProductivityGroup, ...]
    by_sprint: tuple[ProductivityGroup, ...]


@dataclass(frozen=True)
class CostTotals:
    planned: float
    actual: float
    variance: float


@dataclass(frozen=True)
class CostGroup:
    """Per-project or per-member cost; positive ``variance`` is an overrun."""

    key: str
    label: str
    planned: float
    actual: float
    variance: float


@dataclass(frozen=True)
class CostReport:
    total: CostTotals
    by_project: tuple[CostGroup, ...]
    by_member: tuple[CostGroup, ...]


@dataclass(frozen=True)
class StatusTime:
    status: TaskStatus
    avg_days: float
    count: int


@dataclass(frozen=True)
class MemberTime:
    key: str
    name: str
    avg_days: float
    count: int
    total_hours: float


@dataclass(frozen=True)
class TimeReport:
    by_status: tuple[StatusTime, ...]
    by_member: tuple[MemberTime, ...]


@dataclass(frozen=True)
class QualityTotals:
    total_tasks: int
    completed_tasks: int
    blocked_tasks: int
    completion_rate: float
    block_rate: float


@dataclass(frozen=True)
class SprintQuality:
    key: str
    sprint_name: str
    total_tasks: int
    completed_tasks: int
    blocked_tasks: int
    completion_rate: float


@dataclass(frozen=True)
class QualityReport:
    general: QualityTotals
    by_sprint: tuple[SprintQuality, ...]


@dataclass(frozen=True)
class ActivityDay:
    date: str
    created: int
    completed: int
    in_progress: int


@dataclass(frozen=True)
class ActivityReport:
    heatmap: tuple[ActivityDay, ...]


@dataclass(frozen=True)
class ProjectComparison:
    project_id: str
    project_name: str
    total_tasks: int
    completed_tasks: int
    completion_rate: float
    total_planned: float
    total_actual: float
    cost_variance: float
    total_planned_hours: float
    total_actual_hours: float
    hours_variance: float


@dataclass(frozen=True)
class ComparisonReport:
    comparison: tuple[ProjectComparison, ...]


@dataclass(frozen=True)
class SprintVelocity:
    sprint_id: str
    sprint_name: str
    start_date: datetime | None
    end_date: datetime | None
    velocity: float
    planned_hours: float
    actual_hours: float
    completed_tasks: int
    total_tasks: int
    completion_rate: float


@dataclass(frozen=True)
class VelocityMetrics:
    """Summary over a project's sprint history.

    ``trend`` is a percentage; positive means recent sprints are faster than
    the overall average.
    """

    average_velocity: float
    recent_average: float
    forecast: float
    trend: float
    total_sprints: int


@dataclass(frozen=True)
class ProjectVelocityReport:
    history: tuple[SprintVelocity, ...]
    metrics: VelocityMetrics


@dataclass(frozen=True)
class FinancialGroup:
    group: str
    planned: float
    actual: float
    variance: float
    items: tuple[str, ...]

    @property
    def items_count(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class FinancialReport:
    group_by: FinancialGrouping
    groups: tuple[FinancialGroup, ...]


@dataclass(frozen=True)
class StatusCount:
    status: TaskStatus
    count: int


@dataclass(frozen=True)
class ProjectSummary:
    """One project's task counts, cost and hour totals and date span.

    ``start_date``/``end_date`` are the earliest and latest of every task's
    start and due dates, or None when no task has either.
    """

    project_id: str
    project_name: str
    owner_id: str | None
    total_tasks: int
    tasks_by_status: tuple[StatusCount, ...]
    completion_percentage: float
    total_planned: float
    total_actual: float
    total_planned_hours: float
    total_actual_hours: float
    start_date: datetime | None
    end_date: datetime | None


@dataclass(frozen=True)
class ProjectSummaryReport:
    projects: tuple[ProjectSummary, ...]
