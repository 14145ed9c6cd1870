"""Load a YAML dataset of companies, projects, sprints and tasks into the entity store."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from taskboard_analytics.adapters.config_loader import format_validation_errors
from taskboard_analytics.adapters.sqlite_store import SQLiteEntityStore, TaskInput
from taskboard_analytics.core.models import CompanyRole, NonEmptyStr, TaskStatus

logger = logging.getLogger("taskboard_analytics")


def _coerce_timestamp(value: Any) -> Any:
    # YAML turns unquoted ISO dates into ``date`` objects.
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    return value


Timestamp = Annotated[datetime, BeforeValidator(_coerce_timestamp)]
Hours = Annotated[float, Field(ge=0)]


class CompanyMemberEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user: NonEmptyStr
    role: CompanyRole = CompanyRole.MEMBER


class CompanyEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: NonEmptyStr
    name: NonEmptyStr
    members: list[CompanyMemberEntry] = Field(default_factory=list)


class UserEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: NonEmptyStr
    name: NonEmptyStr
    hourly_rate: Hours | None = None


class ProjectEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: NonEmptyStr
    company: NonEmptyStr
    name: NonEmptyStr
    owner: NonEmptyStr | None = None
    default_hourly_rate: Hours | None = None
    members: list[NonEmptyStr] = Field(default_factory=list)


class SprintEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: NonEmptyStr
    project: NonEmptyStr
    name: NonEmptyStr
    start_date: Timestamp | None = None
    end_date: Timestamp | None = None


class ResourceEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: NonEmptyStr
    company: NonEmptyStr
    name: NonEmptyStr
    type: NonEmptyStr


class TaskEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: NonEmptyStr
    project: NonEmptyStr
    title: NonEmptyStr
    status: TaskStatus = TaskStatus.BACKLOG
    sprint: NonEmptyStr | None = None
    assignee: NonEmptyStr | None = None
    resource: NonEmptyStr | None = None
    estimate_hours: Hours | None = None
    actual_hours: Hours | None = None
    hourly_rate_override: float | None = None
    cost_override: float | None = None
    start_date: Timestamp | None = None
    due_date: Timestamp | None = None
    created_at: Timestamp | None = None


class Dataset(BaseModel):
    """Whole-file dataset; every section is optional."""

    model_config = ConfigDict(extra="forbid")

    users: list[UserEntry] = Field(default_factory=list)
    companies: list[CompanyEntry] = Field(default_factory=list)
    projects: list[ProjectEntry] = Field(default_factory=list)
    sprints: list[SprintEntry] = Field(default_factory=list)
    resources: list[ResourceEntry] = Field(default_factory=list)
    tasks: list[TaskEntry] = Field(default_factory=list)


@dataclass(frozen=True)
class LoadSummary:
    """Row counts inserted by one dataset load."""

    companies: int
    users: int
    projects: int
    sprints: int
    resources: int
    tasks: int


def read_dataset(path: str | Path) -> Dataset:
    """Parse and validate a dataset file without touching any store."""
    dataset_path = Path(path)
    if not dataset_path.exists():
        raise FileNotFoundError(f"Dataset file not found: {dataset_path}")

    try:
        raw_data = yaml.safe_load(dataset_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Failed to parse YAML dataset at {dataset_path}: {exc}") from exc

    if raw_data is None:
        raw_data = {}
    if not isinstance(raw_data, dict):
        raise ValueError(f"Invalid dataset at {dataset_path}: root must be a YAML mapping")

    try:
        return Dataset.model_validate(raw_data)
    except ValidationError as exc:
        detail_text = format_validation_errors(exc)
        raise ValueError(f"Invalid dataset at {dataset_path}:\n{detail_text}") from exc


def load_dataset(path: str | Path, store: SQLiteEntityStore) -> LoadSummary:
    """Insert a dataset into ``store``, parents before children.

    The load is one transaction: when any row fails nothing is written.

    Raises:
        FileNotFoundError: If the dataset file does not exist.
        ValueError: If the file is malformed or conflicts with stored rows
            (duplicate ids, references to unknown rows).
    """
    dataset = read_dataset(path)
    try:
        with store.transaction():
            _insert(dataset, store)
    except sqlite3.IntegrityError as exc:
        raise ValueError(f"Dataset {path} conflicts with stored data: {exc}") from exc

    summary = LoadSummary(
        companies=len(dataset.companies),
        users=len(dataset.users),
        projects=len(dataset.projects),
        sprints=len(dataset.sprints),
        resources=len(dataset.resources),
        tasks=len(dataset.tasks),
    )
    logger.info("Loaded dataset %s: %s", path, summary)
    return summary


def _insert(dataset: Dataset, store: SQLiteEntityStore) -> None:
    for user in dataset.users:
        store.add_user(user.id, user.name, hourly_rate=user.hourly_rate)
    for company in dataset.companies:
        store.add_company(company.id, company.name)
        for member in company.members:
            store.add_company_member(company.id, member.user, member.role)
    for project in dataset.projects:
        store.add_project(
            project.id,
            project.company,
            project.name,
            owner_id=project.owner,
            default_hourly_rate=project.default_hourly_rate,
        )
        for user_id in project.members:
            store.add_project_member(project.id, user_id)
    for sprint in dataset.sprints:
        store.add_sprint(
            sprint.id,
            sprint.project,
            sprint.name,
            start_date=sprint.start_date,
            end_date=sprint.end_date,
        )
    for resource in dataset.resources:
        store.add_resource(resource.id, resource.company, resource.name, resource.type)
    for task in dataset.tasks:
        if task.created_at is None:
            logger.warning("Task %s has no created_at; using the load time", task.id)
        store.add_task(
            TaskInput(
                id=task.id,
                project_id=task.project,
                title=task.title,
                status=task.status,
                sprint_id=task.sprint,
                assignee_id=task.assignee,
                resource_id=task.resource,
                estimate_hours=task.estimate_hours,
                actual_hours=task.actual_hours,
                hourly_rate_override=task.hourly_rate_override,
                cost_override=task.cost_override,
                start_date=task.start_date,
                due_date=task.due_date,
                created_at=task.created_at,
            )
        )
