"""Tenant-scoped task selection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from taskboard_analytics.core.errors import ScopingError, ValidationError
from taskboard_analytics.core.models import AggregationTask


@dataclass(frozen=True)
class TaskFilter:
    """Predicate selecting the tasks one aggregation runs over.

    Both date bounds apply to ``created_at`` and are inclusive.
    """

    company_id: str
    project_id: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None

    def matches(self, task: AggregationTask) -> bool:
        if task.project.company_id != self.company_id:
            return False
        if self.project_id is not None and task.project.id != self.project_id:
            return False
        if self.created_from is not None and task.created_at < self.created_from:
            return False
        if self.created_to is not None and task.created_at > self.created_to:
            return False
        return True


def build_task_filter(
    company_id: str | None,
    project_id: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> TaskFilter:
    """Build the task predicate for one request.

    Args:
        company_id: Active company; required.
        project_id: Optional project restriction. Callers must have checked it
            belongs to ``company_id`` already.
        start_date: ISO date or timestamp; lower bound on ``created_at``.
        end_date: ISO date or timestamp; upper bound on ``created_at``. A bare
            date means midnight UTC of that day.

    Raises:
        ScopingError: If ``company_id`` is missing.
        ValidationError: If a date cannot be parsed.
    """
    if not company_id or not company_id.strip():
        raise ScopingError()
    return TaskFilter(
        company_id=company_id,
        project_id=project_id or None,
        created_from=parse_query_date(start_date, "startDate"),
        created_to=parse_query_date(end_date, "endDate"),
    )


def parse_query_date(value: str | None, name: str = "date") -> datetime | None:
    """Parse an ISO date/timestamp query value into an aware UTC datetime."""
    if value is None or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValidationError(f"Invalid {name}: {value!r}") from exc
    return ensure_utc(parsed)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
