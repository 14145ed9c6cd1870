"""HTTP integration tests using FastAPI's TestClient."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from taskboard_analytics.adapters.sqlite_store import SQLiteEntityStore
from taskboard_analytics.api.app import create_app
from taskboard_analytics.core.models import ApiSettings
from taskboard_analytics.version import __version__

ALICE = {"X-User-Id": "alice", "X-Company-Id": "acme"}
DAVE = {"X-User-Id": "dave", "X-Company-Id": "acme"}
EVE = {"X-User-Id": "eve", "X-Company-Id": "globex"}


@pytest.fixture
def client(seeded_store: SQLiteEntityStore) -> TestClient:
    return TestClient(create_app(seeded_store))


class TestHealth:
    def test_health_needs_no_headers(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": __version__}


class TestAnalyticsEndpoints:
    def test_productivity(self, client: TestClient) -> None:
        resp = client.get("/analytics/productivity", headers=ALICE)

        assert resp.status_code == 200
        data = resp.json()
        assert data["general"]["totalTasks"] == 4
        assert data["general"]["completionRate"] == 50.0
        assert data["general"]["efficiency"] == 55.56
        assert [m["name"] for m in data["byMember"]] == ["Alice", "Bob"]
        assert [s["sprintName"] for s in data["bySprint"]] == ["Sprint 1", "Sprint 2"]

    def test_query_parameters_use_camel_case(self, client: TestClient) -> None:
        resp = client.get(
            "/analytics/quality",
            headers=ALICE,
            params={"projectId": "p-apollo", "startDate": "2024-01-10", "endDate": "2024-01-31"},
        )

        assert resp.status_code == 200
        assert resp.json()["general"] == {
            "totalTasks": 2,
            "completedTasks": 1,
            "blockedTasks": 1,
            "completionRate": 50.0,
            "blockRate": 50.0,
        }

    def test_costs(self, client: TestClient) -> None:
        data = client.get("/analytics/costs", headers=ALICE).json()

        assert data["total"] == {"planned": 1850.0, "actual": 2350.0, "variance": 500.0}
        assert data["byProject"][0]["projectName"] == "Apollo"

    def test_time(self, client: TestClient) -> None:
        data = client.get("/analytics/time", headers=ALICE).json()

        assert data["byStatus"] == [{"status": "DONE", "avgDays": 2.5, "count": 2}]
        assert data["byMember"][0]["totalHours"] == 12.0

    def test_activity_heatmap(self, client: TestClient) -> None:
        data = client.get("/analytics/activity-heatmap", headers=ALICE).json()

        assert data["heatmap"][0] == {
            "date": "2024-01-02",
            "created": 2,
            "completed": 1,
            "inProgress": 1,
        }

    def test_compare_projects(self, client: TestClient) -> None:
        data = client.get("/analytics/compare-projects", headers=ALICE).json()

        assert [row["projectName"] for row in data["comparison"]] == ["Apollo", "Zeus"]
        assert data["comparison"][1]["totalTasks"] == 0

    def test_sprint_velocity(self, client: TestClient) -> None:
        data = client.get("/sprints/s-1/velocity", headers=ALICE).json()

        assert data["sprintName"] == "Sprint 1"
        assert data["velocity"] == 12.0
        assert data["startDate"] == "2024-01-01T00:00:00.000Z"

    def test_project_velocity(self, client: TestClient) -> None:
        data = client.get("/projects/p-apollo/velocity", headers=ALICE).json()

        assert len(data["velocityHistory"]) == 2
        assert data["metrics"]["averageVelocity"] == 7.5

    def test_financial_group_by(self, client: TestClient) -> None:
        data = client.get(
            "/projects/p-apollo/financial", headers=ALICE, params={"groupBy": "assignee"}
        ).json()

        assert data["groupBy"] == "assignee"
        assert [g["group"] for g in data["groups"]] == ["Alice", "Bob", "Unassigned"]
        assert data["groups"][1]["itemsCount"] == 2

    def test_projects_summary(self, client: TestClient) -> None:
        resp = client.get("/projects/summary", headers=ALICE)

        assert resp.status_code == 200
        apollo, zeus = resp.json()["projects"]
        assert apollo["projectName"] == "Apollo"
        assert apollo["ownerId"] == "alice"
        assert apollo["tasksByStatus"] == {"IN_PROGRESS": 1, "DONE": 2, "BLOCKED": 1}
        assert apollo["completionPercentage"] == 50.0
        assert apollo["totalPlanned"] == 1850.0
        assert apollo["totalActual"] == 2350.0
        assert apollo["startDate"] == "2024-01-02T09:00:00.000Z"
        assert apollo["endDate"] == "2024-01-18T00:00:00.000Z"
        assert zeus["totalTasks"] == 0
        assert zeus["tasksByStatus"] == {}
        assert zeus["startDate"] is None

    def test_projects_summary_query_parameters(self, client: TestClient) -> None:
        data = client.get(
            "/projects/summary", headers=ALICE, params={"assigneeId": "bob", "q": "apo"}
        ).json()

        (apollo,) = data["projects"]
        assert apollo["totalTasks"] == 2
        assert apollo["tasksByStatus"] == {"IN_PROGRESS": 1, "DONE": 1}

    def test_tenant_isolation(self, client: TestClient) -> None:
        data = client.get("/analytics/productivity", headers=EVE).json()

        assert data["general"]["totalTasks"] == 1
        assert [m["name"] for m in data["byMember"]] == ["Eve"]


class TestErrors:
    def test_missing_company_header(self, client: TestClient) -> None:
        resp = client.get("/analytics/productivity", headers={"X-User-Id": "alice"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Company context required", "kind": "scoping"}

    def test_missing_user_header(self, client: TestClient) -> None:
        resp = client.get("/analytics/costs", headers={"X-Company-Id": "acme"})

        assert resp.status_code == 401
        assert resp.json()["kind"] == "authentication"

    def test_non_member(self, client: TestClient) -> None:
        resp = client.get("/analytics/time", headers={"X-User-Id": "eve", "X-Company-Id": "acme"})

        assert resp.status_code == 403
        assert resp.json()["kind"] == "membership"

    def test_cross_tenant_project_is_not_found(self, client: TestClient) -> None:
        resp = client.get("/analytics/productivity", headers=ALICE, params={"projectId": "p-hermes"})

        assert resp.status_code == 404
        assert resp.json() == {"error": "Project not found", "kind": "not_found"}

    def test_cross_tenant_sprint_is_not_found(self, client: TestClient) -> None:
        resp = client.get("/sprints/s-hermes/velocity", headers=ALICE)
        assert resp.status_code == 404

    def test_project_access_denied_for_viewer(self, client: TestClient) -> None:
        resp = client.get("/projects/p-apollo/financial", headers=DAVE)
        assert resp.status_code == 403

    def test_invalid_date(self, client: TestClient) -> None:
        resp = client.get("/analytics/costs", headers=ALICE, params={"startDate": "13/01/2024"})

        assert resp.status_code == 400
        assert resp.json()["kind"] == "validation"

    def test_invalid_group_by(self, client: TestClient) -> None:
        resp = client.get(
            "/projects/p-apollo/financial", headers=ALICE, params={"groupBy": "priority"}
        )
        assert resp.status_code == 400

    def test_invalid_group_by_without_access_is_forbidden(self, client: TestClient) -> None:
        resp = client.get(
            "/projects/p-apollo/financial", headers=DAVE, params={"groupBy": "priority"}
        )
        assert resp.status_code == 403

    def test_projects_summary_needs_membership(self, client: TestClient) -> None:
        resp = client.get(
            "/projects/summary", headers={"X-User-Id": "eve", "X-Company-Id": "acme"}
        )
        assert resp.status_code == 403

    def test_unexpected_failure_hides_details(self, seeded_store: SQLiteEntityStore) -> None:
        class BrokenStore:
            def __getattr__(self, name: str):
                return getattr(seeded_store, name)

            def fetch_tasks(self, task_filter):
                raise RuntimeError("disk on fire")

        client = TestClient(create_app(BrokenStore()), raise_server_exceptions=False)

        resp = client.get("/analytics/productivity", headers=ALICE)

        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error", "kind": "unexpected"}


class TestCustomHeaders:
    def test_configured_header_names(self, seeded_store: SQLiteEntityStore) -> None:
        settings = ApiSettings(user_header="X-Auth-User", company_header="X-Tenant")
        client = TestClient(create_app(seeded_store, settings))

        ok = client.get("/analytics/quality", headers={"X-Auth-User": "alice", "X-Tenant": "acme"})
        default_names = client.get("/analytics/quality", headers=ALICE)

        assert ok.status_code == 200
        assert default_names.status_code == 400
