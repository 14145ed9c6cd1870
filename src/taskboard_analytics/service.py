"""Analytics service: tenant and access checks, one store read, one aggregation pass."""

from __future__ import annotations

import logging
from typing import Protocol

from taskboard_analytics.core import (
    ActivityReport,
    AggregationTask,
    CompanyRole,
    ComparisonReport,
    CostReport,
    FinancialReport,
    ProductivityReport,
    ProjectRef,
    ProjectSummaryReport,
    ProjectVelocityReport,
    QualityReport,
    RequestContext,
    SprintRef,
    SprintVelocity,
    TaskFilter,
    TimeReport,
    aggregate_activity,
    aggregate_costs,
    aggregate_productivity,
    aggregate_quality,
    aggregate_time,
    build_task_filter,
    compare_projects,
    financial_summary,
    parse_grouping,
    project_velocity,
    sprint_velocity,
    summarize_projects,
)
from taskboard_analytics.core.errors import (
    AuthenticationError,
    MembershipError,
    NotFoundError,
    ScopingError,
)

logger = logging.getLogger("taskboard_analytics")


class EntityStore(Protocol):
    """Read interface the service needs from persistence."""

    def company_role(self, company_id: str, user_id: str) -> CompanyRole | None: ...

    def is_project_member(self, project_id: str, user_id: str) -> bool: ...

    def get_project(self, project_id: str, company_id: str) -> ProjectRef | None: ...

    def list_projects(self, company_id: str) -> list[ProjectRef]: ...

    def get_sprint(self, sprint_id: str, company_id: str) -> tuple[SprintRef, ProjectRef] | None: ...

    def list_sprints(self, project_id: str) -> list[SprintRef]: ...

    def fetch_tasks(self, task_filter: TaskFilter) -> list[AggregationTask]: ...


class AnalyticsService:
    """Entry point for every analytics view.

    Each call checks, in order: active company, user identity, company
    membership (or project access), project ownership by the company. Only
    then is the store queried. Nothing is cached between calls.
    """

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Date-filterable views
    # ------------------------------------------------------------------

    def productivity(
        self,
        context: RequestContext,
        *,
        project_id: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> ProductivityReport:
        tasks = self._scoped_tasks(context, project_id, start_date, end_date)
        return aggregate_productivity(tasks)

    def costs(
        self,
        context: RequestContext,
        *,
        project_id: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> CostReport:
        tasks = self._scoped_tasks(context, project_id, start_date, end_date)
        return aggregate_costs(tasks)

    def time(
        self,
        context: RequestContext,
        *,
        project_id: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> TimeReport:
        tasks = self._scoped_tasks(context, project_id, start_date, end_date)
        return aggregate_time(tasks)

    def quality(
        self,
        context: RequestContext,
        *,
        project_id: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> QualityReport:
        tasks = self._scoped_tasks(context, project_id, start_date, end_date)
        return aggregate_quality(tasks)

    # ------------------------------------------------------------------
    # Other views
    # ------------------------------------------------------------------

    def activity_heatmap(
        self,
        context: RequestContext,
        *,
        project_id: str | None = None,
    ) -> ActivityReport:
        """Daily activity; project-scoped calls need project access, not just membership."""
        company_id, user_id = self._identify(context)
        if project_id:
            self._ensure_project_access(company_id, user_id, project_id)
        else:
            self._ensure_membership(company_id, user_id)
        task_filter = build_task_filter(company_id, project_id)
        return aggregate_activity(self._fetch(task_filter, "activity_heatmap"))

    def compare_projects(self, context: RequestContext) -> ComparisonReport:
        company_id, user_id = self._identify(context)
        self._ensure_membership(company_id, user_id)
        projects = self._store.list_projects(company_id)
        tasks = self._fetch(build_task_filter(company_id), "compare_projects")
        return compare_projects(projects, tasks)

    def projects_summary(
        self,
        context: RequestContext,
        *,
        assignee_id: str | None = None,
        search: str | None = None,
    ) -> ProjectSummaryReport:
        company_id, user_id = self._identify(context)
        self._ensure_membership(company_id, user_id)
        projects = self._store.list_projects(company_id)
        tasks = self._fetch(build_task_filter(company_id), "projects_summary")
        return summarize_projects(projects, tasks, assignee_id=assignee_id, search=search)

    def sprint_velocity(self, context: RequestContext, sprint_id: str) -> SprintVelocity:
        company_id, user_id = self._identify(context)
        self._ensure_membership(company_id, user_id)
        found = self._store.get_sprint(sprint_id, company_id)
        if found is None:
            raise NotFoundError("Sprint not found")
        sprint, project = found
        tasks = self._fetch(build_task_filter(company_id, project.id), "sprint_velocity")
        return sprint_velocity(sprint, tasks)

    def project_velocity(self, context: RequestContext, project_id: str) -> ProjectVelocityReport:
        company_id, user_id = self._identify(context)
        self._ensure_membership(company_id, user_id)
        project = self._ensure_project_in_company(project_id, company_id)
        sprints = self._store.list_sprints(project.id)
        tasks = self._fetch(build_task_filter(company_id, project.id), "project_velocity")
        return project_velocity(sprints, tasks)

    def financial_summary(
        self,
        context: RequestContext,
        project_id: str,
        *,
        group_by: str | None = None,
    ) -> FinancialReport:
        company_id, user_id = self._identify(context)
        self._ensure_project_access(company_id, user_id, project_id)
        grouping = parse_grouping(group_by)
        tasks = self._fetch(build_task_filter(company_id, project_id), "financial_summary")
        return financial_summary(tasks, grouping)

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def _scoped_tasks(
        self,
        context: RequestContext,
        project_id: str | None,
        start_date: str | None,
        end_date: str | None,
    ) -> list[AggregationTask]:
        company_id, user_id = self._identify(context)
        self._ensure_membership(company_id, user_id)
        if project_id:
            self._ensure_project_in_company(project_id, company_id)
        task_filter = build_task_filter(company_id, project_id, start_date, end_date)
        return self._fetch(task_filter, "scoped")

    def _identify(self, context: RequestContext) -> tuple[str, str]:
        # Tenant context is checked before identity, always.
        company_id = (context.company_id or "").strip()
        user_id = (context.user_id or "").strip()
        if not company_id:
            raise ScopingError()
        if not user_id:
            raise AuthenticationError()
        return company_id, user_id

    def _ensure_membership(self, company_id: str, user_id: str) -> CompanyRole:
        role = self._store.company_role(company_id, user_id)
        if role is None:
            raise MembershipError("User does not belong to the company")
        return role

    def _ensure_project_in_company(self, project_id: str, company_id: str) -> ProjectRef:
        project = self._store.get_project(project_id, company_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    def _ensure_project_access(self, company_id: str, user_id: str, project_id: str) -> ProjectRef:
        """Project must be in the company; caller must be on it, own it, or administer the company."""
        project = self._ensure_project_in_company(project_id, company_id)
        if self._store.is_project_member(project.id, user_id):
            return project
        role = self._store.company_role(company_id, user_id)
        if role is None or not role.is_admin:
            raise MembershipError()
        return project

    def _fetch(self, task_filter: TaskFilter, view: str) -> list[AggregationTask]:
        tasks = self._store.fetch_tasks(task_filter)
        logger.debug(
            "%s: company=%s project=%s from=%s to=%s tasks=%d",
            view,
            task_filter.company_id,
            task_filter.project_id,
            task_filter.created_from,
            task_filter.created_to,
            len(tasks),
        )
        return tasks
