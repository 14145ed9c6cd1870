"""SQLite read model for companies, projects, sprints and tasks."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any, Iterator

from taskboard_analytics.core.filters import TaskFilter, ensure_utc
from taskboard_analytics.core.models import (
    AggregationTask,
    AssigneeRef,
    CompanyRole,
    ProjectRef,
    ResourceRef,
    SprintRef,
    TaskStatus,
)

SCHEMA_VERSION = 1


@dataclass(frozen=True)
class TaskInput:
    """Input payload for one task row."""

    id: str
    project_id: str
    title: str
    status: TaskStatus = TaskStatus.BACKLOG
    sprint_id: str | None = None
    assignee_id: str | None = None
    resource_id: str | None = None
    estimate_hours: float | None = None
    actual_hours: float | None = None
    hourly_rate_override: float | None = None
    cost_override: float | None = None
    start_date: datetime | str | None = None
    due_date: datetime | str | None = None
    created_at: datetime | str | None = None


_TASK_SELECT = """
SELECT
  tasks.id,
  tasks.title,
  tasks.status,
  tasks.estimate_hours,
  tasks.actual_hours,
  tasks.hourly_rate_override,
  tasks.cost_override,
  tasks.start_date,
  tasks.due_date,
  tasks.created_at,
  projects.id AS project_id,
  projects.name AS project_name,
  projects.company_id AS project_company_id,
  projects.default_hourly_rate AS project_default_hourly_rate,
  projects.owner_id AS project_owner_id,
  users.id AS assignee_id,
  users.name AS assignee_name,
  users.hourly_rate AS assignee_hourly_rate,
  sprints.id AS sprint_id,
  sprints.name AS sprint_name,
  sprints.start_date AS sprint_start_date,
  sprints.end_date AS sprint_end_date,
  resources.id AS resource_id,
  resources.name AS resource_name,
  resources.type AS resource_type
FROM tasks
INNER JOIN projects ON projects.id = tasks.project_id
LEFT JOIN users ON users.id = tasks.assignee_id
LEFT JOIN sprints ON sprints.id = tasks.sprint_id
LEFT JOIN resources ON resources.id = tasks.resource_id
"""


class SQLiteEntityStore:
    """SQLite-backed entity store.

    Aggregations only read from it; the ``add_*`` methods exist to seed data.
    Every query re-reads the database, nothing is cached.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        if str(path) != ":memory:":
            self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = RLock()
        self._transaction_depth = 0
        self._connection = sqlite3.connect(str(path), check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._enable_pragmas()
        self._create_schema()

    def __enter__(self) -> SQLiteEntityStore:
        """Allow `with SQLiteEntityStore(...) as store:` usage."""
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    @property
    def path(self) -> Path:
        return self._path

    def close(self) -> None:
        """Close the backing SQLite connection."""
        with self._lock:
            self._connection.close()

    def journal_mode(self) -> str:
        """Return the active SQLite journal mode."""
        with self._lock:
            row = self._connection.execute("PRAGMA journal_mode").fetchone()
        if row is None:
            return ""
        return str(row[0]).lower()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Commit every ``add_*`` call inside the block together, or none of them.

        Nested blocks join the outermost one.
        """
        with self._lock:
            if self._transaction_depth:
                self._transaction_depth += 1
                try:
                    yield
                finally:
                    self._transaction_depth -= 1
                return
            self._transaction_depth = 1
            try:
                with self._connection:
                    yield
            finally:
                self._transaction_depth = 0

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def add_company(self, company_id: str, name: str) -> None:
        _require_text("company id", company_id)
        _require_text("company name", name)
        self._execute("INSERT INTO companies (id, name) VALUES (?, ?)", (company_id, name))

    def add_user(self, user_id: str, name: str, *, hourly_rate: float | None = None) -> None:
        _require_text("user id", user_id)
        _require_text("user name", name)
        _require_non_negative("hourly_rate", hourly_rate)
        self._execute(
            "INSERT INTO users (id, name, hourly_rate) VALUES (?, ?, ?)",
            (user_id, name, hourly_rate),
        )

    def add_company_member(
        self,
        company_id: str,
        user_id: str,
        role: CompanyRole = CompanyRole.MEMBER,
    ) -> None:
        self._execute(
            "INSERT INTO company_users (company_id, user_id, role) VALUES (?, ?, ?)",
            (company_id, user_id, role.value),
        )

    def add_project(
        self,
        project_id: str,
        company_id: str,
        name: str,
        *,
        owner_id: str | None = None,
        default_hourly_rate: float | None = None,
    ) -> None:
        _require_text("project id", project_id)
        _require_text("project name", name)
        _require_non_negative("default_hourly_rate", default_hourly_rate)
        self._execute(
            """
            INSERT INTO projects (id, company_id, name, owner_id, default_hourly_rate)
            VALUES (?, ?, ?, ?, ?)
            """,
            (project_id, company_id, name, owner_id, default_hourly_rate),
        )

    def add_project_member(self, project_id: str, user_id: str) -> None:
        self._execute(
            "INSERT INTO project_members (project_id, user_id) VALUES (?, ?)",
            (project_id, user_id),
        )

    def add_sprint(
        self,
        sprint_id: str,
        project_id: str,
        name: str,
        *,
        start_date: datetime | str | None = None,
        end_date: datetime | str | None = None,
    ) -> None:
        _require_text("sprint id", sprint_id)
        _require_text("sprint name", name)
        self._execute(
            """
            INSERT INTO sprints (id, project_id, name, start_date, end_date)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                sprint_id,
                project_id,
                name,
                _optional_timestamp(start_date),
                _optional_timestamp(end_date),
            ),
        )

    def add_resource(self, resource_id: str, company_id: str, name: str, type: str) -> None:  # noqa: A002
        _require_text("resource id", resource_id)
        _require_text("resource name", name)
        self._execute(
            "INSERT INTO resources (id, company_id, name, type) VALUES (?, ?, ?, ?)",
            (resource_id, company_id, name, type),
        )

    def add_task(self, task: TaskInput) -> None:
        _validate_task(task)
        self._execute(
            """
            INSERT INTO tasks (
              id,
              project_id,
              sprint_id,
              assignee_id,
              resource_id,
              title,
              status,
              estimate_hours,
              actual_hours,
              hourly_rate_override,
              cost_override,
              start_date,
              due_date,
              created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                task.id,
                task.project_id,
                task.sprint_id,
                task.assignee_id,
                task.resource_id,
                task.title,
                task.status.value,
                task.estimate_hours,
                task.actual_hours,
                task.hourly_rate_override,
                task.cost_override,
                _optional_timestamp(task.start_date),
                _optional_timestamp(task.due_date),
                _normalize_timestamp(task.created_at),
            ),
        )

    # ------------------------------------------------------------------
    # Access lookups
    # ------------------------------------------------------------------

    def company_role(self, company_id: str, user_id: str) -> CompanyRole | None:
        """Return the user's role in the company, or None if not a member."""
        row = self._fetchone(
            "SELECT role FROM company_users WHERE company_id = ? AND user_id = ?",
            (company_id, user_id),
        )
        return CompanyRole(row["role"]) if row is not None else None

    def is_project_member(self, project_id: str, user_id: str) -> bool:
        """True when the user is listed on the project or owns it."""
        row = self._fetchone(
            """
            SELECT 1 FROM project_members WHERE project_id = ? AND user_id = ?
            UNION ALL
            SELECT 1 FROM projects WHERE id = ? AND owner_id = ?
            LIMIT 1
            """,
            (project_id, user_id, project_id, user_id),
        )
        return row is not None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_project(self, project_id: str, company_id: str) -> ProjectRef | None:
        """Return the project only if it belongs to ``company_id``."""
        row = self._fetchone(
            """
            SELECT id, name, company_id, default_hourly_rate, owner_id
            FROM projects
            WHERE id = ? AND company_id = ?
            """,
            (project_id, company_id),
        )
        return _project_from_row(row) if row is not None else None

    def list_projects(self, company_id: str) -> list[ProjectRef]:
        rows = self._fetchall(
            """
            SELECT id, name, company_id, default_hourly_rate, owner_id
            FROM projects
            WHERE company_id = ?
            ORDER BY name ASC, id ASC
            """,
            (company_id,),
        )
        return [_project_from_row(row) for row in rows]

    def get_sprint(self, sprint_id: str, company_id: str) -> tuple[SprintRef, ProjectRef] | None:
        """Return a sprint with its project, only if the project belongs to ``company_id``."""
        row = self._fetchone(
            """
            SELECT
              sprints.id,
              sprints.name,
              sprints.start_date,
              sprints.end_date,
              projects.id AS project_id,
              projects.name AS project_name,
              projects.company_id AS project_company_id,
              projects.default_hourly_rate AS project_default_hourly_rate,
              projects.owner_id AS project_owner_id
            FROM sprints
            INNER JOIN projects ON projects.id = sprints.project_id
            WHERE sprints.id = ? AND projects.company_id = ?
            """,
            (sprint_id, company_id),
        )
        if row is None:
            return None
        return _sprint_from_row(row), _prefixed_project_from_row(row)

    def list_sprints(self, project_id: str) -> list[SprintRef]:
        rows = self._fetchall(
            """
            SELECT id, name, start_date, end_date
            FROM sprints
            WHERE project_id = ?
            ORDER BY start_date ASC, id ASC
            """,
            (project_id,),
        )
        return [_sprint_from_row(row) for row in rows]

    def fetch_tasks(self, task_filter: TaskFilter) -> list[AggregationTask]:
        """Return every task matching ``task_filter`` with its relations joined."""
        clauses = ["projects.company_id = ?"]
        params: list[Any] = [task_filter.company_id]

        if task_filter.project_id is not None:
            clauses.append("tasks.project_id = ?")
            params.append(task_filter.project_id)
        if task_filter.created_from is not None:
            clauses.append("tasks.created_at >= ?")
            params.append(_normalize_timestamp(task_filter.created_from))
        if task_filter.created_to is not None:
            clauses.append("tasks.created_at <= ?")
            params.append(_normalize_timestamp(task_filter.created_to))

        rows = self._fetchall(
            f"{_TASK_SELECT} WHERE {' AND '.join(clauses)} ORDER BY tasks.created_at ASC, tasks.id ASC",
            params,
        )
        return [_task_from_row(row) for row in rows]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _execute(self, sql: str, params: tuple[Any, ...]) -> None:
        with self._lock:
            if self._transaction_depth:
                self._connection.execute(sql, params)
                return
            with self._connection:
                self._connection.execute(sql, params)

    def _fetchone(self, sql: str, params: tuple[Any, ...]) -> sqlite3.Row | None:
        with self._lock:
            return self._connection.execute(sql, params).fetchone()

    def _fetchall(self, sql: str, params: tuple[Any, ...] | list[Any]) -> list[sqlite3.Row]:
        with self._lock:
            return self._connection.execute(sql, params).fetchall()

    def _enable_pragmas(self) -> None:
        with self._lock:
            self._connection.execute("PRAGMA journal_mode=WAL")
            self._connection.execute("PRAGMA foreign_keys=ON")
            self._connection.execute("PRAGMA busy_timeout=5000")

    def _create_schema(self) -> None:
        with self._lock:
            with self._connection:
                self._connection.executescript(
                    """
                    CREATE TABLE IF NOT EXISTS companies (
                      id TEXT PRIMARY KEY,
                      name TEXT NOT NULL
                    );
                    CREATE TABLE IF NOT EXISTS users (
                      id TEXT PRIMARY KEY,
                      name TEXT NOT NULL,
                      hourly_rate REAL
                    );
                    CREATE TABLE IF NOT EXISTS company_users (
                      company_id TEXT NOT NULL,
                      user_id TEXT NOT NULL,
                      role TEXT NOT NULL,
                      PRIMARY KEY (company_id, user_id),
                      FOREIGN KEY (company_id) REFERENCES companies(id) ON DELETE CASCADE,
                      FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
                    );
                    CREATE TABLE IF NOT EXISTS projects (
                      id TEXT PRIMARY KEY,
                      company_id TEXT NOT NULL,
                      name TEXT NOT NULL,
                      owner_id TEXT,
                      default_hourly_rate REAL,
                      FOREIGN KEY (company_id) REFERENCES companies(id) ON DELETE CASCADE,
                      FOREIGN KEY (owner_id) REFERENCES users(id) ON DELETE SET NULL
                    );
                    CREATE TABLE IF NOT EXISTS project_members (
                      project_id TEXT NOT NULL,
                      user_id TEXT NOT NULL,
                      PRIMARY KEY (project_id, user_id),
                      FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE CASCADE,
                      FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
                    );
                    CREATE TABLE IF NOT EXISTS sprints (
                      id TEXT PRIMARY KEY,
                      project_id TEXT NOT NULL,
                      name TEXT NOT NULL,
                      start_date TEXT,
                      end_date TEXT,
                      FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE CASCADE
                    );
                    CREATE TABLE IF NOT EXISTS resources (
                      id TEXT PRIMARY KEY,
                      company_id TEXT NOT NULL,
                      name TEXT NOT NULL,
                      type TEXT NOT NULL,
                      FOREIGN KEY (company_id) REFERENCES companies(id) ON DELETE CASCADE
                    );
                    CREATE TABLE IF NOT EXISTS tasks (
                      id TEXT PRIMARY KEY,
                      project_id TEXT NOT NULL,
                      sprint_id TEXT,
                      assignee_id TEXT,
                      resource_id TEXT,
                      title TEXT NOT NULL,
                      status TEXT NOT NULL,
                      estimate_hours REAL,
                      actual_hours REAL,
                      hourly_rate_override REAL,
                      cost_override REAL,
                      start_date TEXT,
                      due_date TEXT,
                      created_at TEXT NOT NULL,
                      FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE CASCADE,
                      FOREIGN KEY (sprint_id) REFERENCES sprints(id) ON DELETE SET NULL,
                      FOREIGN KEY (assignee_id) REFERENCES users(id) ON DELETE SET NULL,
                      FOREIGN KEY (resource_id) REFERENCES resources(id) ON DELETE SET NULL
                    );
                    CREATE INDEX IF NOT EXISTS idx_tasks_project_created
                      ON tasks (project_id, created_at);
                    CREATE TABLE IF NOT EXISTS schema_version (
                      version INTEGER PRIMARY KEY,
                      applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )
                self._connection.execute(
                    "INSERT OR IGNORE INTO schema_version (version) VALUES (?)",
                    (SCHEMA_VERSION,),
                )


def _validate_task(task: TaskInput) -> None:
    for name, value in (("id", task.id), ("project_id", task.project_id), ("title", task.title)):
        _require_text(f"task {name}", value)
    for name, value in (
        ("estimate_hours", task.estimate_hours),
        ("actual_hours", task.actual_hours),
    ):
        _require_non_negative(name, value)


def _require_text(name: str, value: str | None) -> None:
    if value is None or not str(value).strip():
        raise ValueError(f"{name} must be non-empty")


def _require_non_negative(name: str, value: float | None) -> None:
    if value is not None and value < 0:
        raise ValueError(f"{name} must be >= 0")


def _normalize_timestamp(value: datetime | str | None) -> str:
    """Store timestamps in one fixed UTC format so string comparison is chronological."""
    if value is None:
        dt = datetime.now(timezone.utc)
    elif isinstance(value, datetime):
        dt = ensure_utc(value)
    else:
        dt = ensure_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    return dt.isoformat(timespec="milliseconds")


def _optional_timestamp(value: datetime | str | None) -> str | None:
    if value is None:
        return None
    return _normalize_timestamp(value)


def _parse_timestamp(value: str | None) -> datetime | None:
    if value is None:
        return None
    return ensure_utc(datetime.fromisoformat(value))


def _project_from_row(row: sqlite3.Row) -> ProjectRef:
    return ProjectRef(
        id=row["id"],
        name=row["name"],
        company_id=row["company_id"],
        default_hourly_rate=row["default_hourly_rate"],
        owner_id=row["owner_id"],
    )


def _prefixed_project_from_row(row: sqlite3.Row) -> ProjectRef:
    return ProjectRef(
        id=row["project_id"],
        name=row["project_name"],
        company_id=row["project_company_id"],
        default_hourly_rate=row["project_default_hourly_rate"],
        owner_id=row["project_owner_id"],
    )


def _sprint_from_row(row: sqlite3.Row) -> SprintRef:
    return SprintRef(
        id=row["id"],
        name=row["name"],
        start_date=_parse_timestamp(row["start_date"]),
        end_date=_parse_timestamp(row["end_date"]),
    )


def _task_from_row(row: sqlite3.Row) -> AggregationTask:
    assignee = None
    if row["assignee_id"] is not None:
        assignee = AssigneeRef(
            id=row["assignee_id"],
            name=row["assignee_name"],
            hourly_rate=row["assignee_hourly_rate"],
        )
    sprint = None
    if row["sprint_id"] is not None:
        sprint = SprintRef(
            id=row["sprint_id"],
            name=row["sprint_name"],
            start_date=_parse_timestamp(row["sprint_start_date"]),
            end_date=_parse_timestamp(row["sprint_end_date"]),
        )
    resource = None
    if row["resource_id"] is not None:
        resource = ResourceRef(
            id=row["resource_id"],
            name=row["resource_name"],
            type=row["resource_type"],
        )
    created_at = _parse_timestamp(row["created_at"])
    assert created_at is not None
    return AggregationTask(
        id=row["id"],
        title=row["title"],
        status=TaskStatus(row["status"]),
        project=_prefixed_project_from_row(row),
        created_at=created_at,
        estimate_hours=row["estimate_hours"],
        actual_hours=row["actual_hours"],
        hourly_rate_override=row["hourly_rate_override"],
        cost_override=row["cost_override"],
        assignee=assignee,
        sprint=sprint,
        resource=resource,
        start_date=_parse_timestamp(row["start_date"]),
        due_date=_parse_timestamp(row["due_date"]),
    )
