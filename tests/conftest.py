"""Shared fixtures for the taskboard_analytics test suite.

The seeded store holds two companies:

* ``acme`` with projects Apollo (four tasks, two sprints) and Zeus (no tasks).
  Alice and Bob are on Apollo, Carol is a company ADMIN, Dave a VIEWER with no
  project membership.
* ``globex`` with project Hermes (one task), readable only by Eve.

``tests/fixtures/dataset.yaml`` describes the same data for the loader and
CLI tests.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from taskboard_analytics.adapters.sqlite_store import SQLiteEntityStore, TaskInput
from taskboard_analytics.core.models import (
    AggregationTask,
    CompanyRole,
    ProjectRef,
    RequestContext,
    TaskStatus,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"

DEFAULT_PROJECT = ProjectRef(id="p-1", name="Apollo", company_id="acme", default_hourly_rate=None)


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def task_factory() -> Callable[..., AggregationTask]:
    """Build in-memory tasks; every field not given takes a neutral default."""
    counter = {"n": 0}

    def _make(**overrides: Any) -> AggregationTask:
        counter["n"] += 1
        fields: dict[str, Any] = {
            "id": f"t-{counter['n']}",
            "title": f"Task {counter['n']}",
            "status": TaskStatus.TODO,
            "project": DEFAULT_PROJECT,
            "created_at": utc(2024, 1, 1, 12),
        }
        fields.update(overrides)
        return AggregationTask(**fields)

    return _make


def seed_store(store: SQLiteEntityStore) -> None:
    for user_id, name, rate in (
        ("alice", "Alice", 100.0),
        ("bob", "Bob", None),
        ("carol", "Carol", None),
        ("dave", "Dave", None),
        ("eve", "Eve", 60.0),
    ):
        store.add_user(user_id, name, hourly_rate=rate)

    store.add_company("acme", "Acme Corp")
    store.add_company_member("acme", "alice", CompanyRole.MEMBER)
    store.add_company_member("acme", "bob", CompanyRole.MEMBER)
    store.add_company_member("acme", "carol", CompanyRole.ADMIN)
    store.add_company_member("acme", "dave", CompanyRole.VIEWER)
    store.add_company("globex", "Globex")
    store.add_company_member("globex", "eve", CompanyRole.OWNER)

    store.add_project("p-apollo", "acme", "Apollo", owner_id="alice", default_hourly_rate=50.0)
    store.add_project_member("p-apollo", "alice")
    store.add_project_member("p-apollo", "bob")
    store.add_project("p-zeus", "acme", "Zeus")
    store.add_project("p-hermes", "globex", "Hermes", owner_id="eve", default_hourly_rate=80.0)

    store.add_sprint(
        "s-1", "p-apollo", "Sprint 1", start_date=utc(2024, 1, 1), end_date=utc(2024, 1, 14)
    )
    store.add_sprint(
        "s-2", "p-apollo", "Sprint 2", start_date=utc(2024, 1, 15), end_date=utc(2024, 1, 28)
    )
    store.add_sprint("s-hermes", "p-hermes", "Hermes Sprint", start_date=utc(2024, 1, 1))
    store.add_resource("r-laptop", "acme", "Laptop", "equipment")

    store.add_task(
        TaskInput(
            id="t-1",
            project_id="p-apollo",
            title="Design schema",
            status=TaskStatus.DONE,
            sprint_id="s-1",
            assignee_id="alice",
            resource_id="r-laptop",
            estimate_hours=10.0,
            actual_hours=12.0,
            start_date=utc(2024, 1, 2, 9),
            due_date=utc(2024, 1, 4, 10),
            created_at=utc(2024, 1, 2, 8),
        )
    )
    store.add_task(
        TaskInput(
            id="t-2",
            project_id="p-apollo",
            title="Build API",
            status=TaskStatus.IN_PROGRESS,
            sprint_id="s-1",
            assignee_id="bob",
            estimate_hours=5.0,
            created_at=utc(2024, 1, 2, 12),
        )
    )
    store.add_task(
        TaskInput(
            id="t-3",
            project_id="p-apollo",
            title="Vendor contract",
            status=TaskStatus.BLOCKED,
            estimate_hours=8.0,
            created_at=utc(2024, 1, 10),
        )
    )
    store.add_task(
        TaskInput(
            id="t-4",
            project_id="p-apollo",
            title="Load testing",
            status=TaskStatus.DONE,
            sprint_id="s-2",
            assignee_id="bob",
            estimate_hours=4.0,
            actual_hours=3.0,
            cost_override=500.0,
            start_date=utc(2024, 1, 16),
            due_date=utc(2024, 1, 18),
            created_at=utc(2024, 1, 16),
        )
    )
    store.add_task(
        TaskInput(
            id="t-hermes",
            project_id="p-hermes",
            title="Secret launch",
            status=TaskStatus.DONE,
            sprint_id="s-hermes",
            assignee_id="eve",
            estimate_hours=7.0,
            actual_hours=7.0,
            created_at=utc(2024, 1, 3),
        )
    )


@pytest.fixture
def store(tmp_path: Path) -> Generator[SQLiteEntityStore, None, None]:
    entity_store = SQLiteEntityStore(tmp_path / "analytics.db")
    yield entity_store
    entity_store.close()


@pytest.fixture
def seeded_store(store: SQLiteEntityStore) -> SQLiteEntityStore:
    seed_store(store)
    return store


@pytest.fixture
def seeded_db(tmp_path: Path) -> Path:
    """Path to a closed, seeded database file for CLI tests."""
    db_path = tmp_path / "seeded.db"
    with SQLiteEntityStore(db_path) as entity_store:
        seed_store(entity_store)
    return db_path


@pytest.fixture
def alice() -> RequestContext:
    return RequestContext(user_id="alice", company_id="acme")
