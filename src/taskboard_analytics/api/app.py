"""FastAPI application exposing the analytics views over HTTP.

The acting user and active company come from two request headers
(``X-User-Id`` and ``X-Company-Id`` unless configured otherwise), standing in
for an upstream authentication layer.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from taskboard_analytics.core.errors import AnalyticsError
from taskboard_analytics.core.models import ApiSettings, RequestContext
from taskboard_analytics.render.json_report import (
    activity_payload,
    comparison_payload,
    costs_payload,
    financial_payload,
    productivity_payload,
    project_summary_payload,
    project_velocity_payload,
    quality_payload,
    sprint_velocity_payload,
    time_payload,
)
from taskboard_analytics.service import AnalyticsService, EntityStore
from taskboard_analytics.version import __version__

logger = logging.getLogger("taskboard_analytics")

INTERNAL_ERROR_MESSAGE = "Internal server error"


def create_app(store: EntityStore, settings: ApiSettings | None = None) -> FastAPI:
    """Build the HTTP application around one entity store."""
    api_settings = settings or ApiSettings()
    service = AnalyticsService(store)
    request_context = _context_dependency(api_settings)

    app = FastAPI(
        title="Taskboard Analytics",
        description="Productivity, cost, time, quality and velocity analytics per company.",
        version=__version__,
    )

    @app.exception_handler(AnalyticsError)
    async def _analytics_error(_: Request, exc: AnalyticsError) -> JSONResponse:
        logger.debug("Request rejected (%s): %s", exc.kind, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": INTERNAL_ERROR_MESSAGE, "kind": "unexpected"},
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @app.get("/analytics/productivity")
    def productivity(
        context: RequestContext = Depends(request_context),
        project_id: Optional[str] = Query(None, alias="projectId"),
        start_date: Optional[str] = Query(None, alias="startDate"),
        end_date: Optional[str] = Query(None, alias="endDate"),
    ) -> dict[str, Any]:
        report = service.productivity(
            context, project_id=project_id, start_date=start_date, end_date=end_date
        )
        return productivity_payload(report)

    @app.get("/analytics/costs")
    def costs(
        context: RequestContext = Depends(request_context),
        project_id: Optional[str] = Query(None, alias="projectId"),
        start_date: Optional[str] = Query(None, alias="startDate"),
        end_date: Optional[str] = Query(None, alias="endDate"),
    ) -> dict[str, Any]:
        report = service.costs(
            context, project_id=project_id, start_date=start_date, end_date=end_date
        )
        return costs_payload(report)

    @app.get("/analytics/time")
    def time_in_status(
        context: RequestContext = Depends(request_context),
        project_id: Optional[str] = Query(None, alias="projectId"),
        start_date: Optional[str] = Query(None, alias="startDate"),
        end_date: Optional[str] = Query(None, alias="endDate"),
    ) -> dict[str, Any]:
        report = service.time(
            context, project_id=project_id, start_date=start_date, end_date=end_date
        )
        return time_payload(report)

    @app.get("/analytics/quality")
    def quality(
        context: RequestContext = Depends(request_context),
        project_id: Optional[str] = Query(None, alias="projectId"),
        start_date: Optional[str] = Query(None, alias="startDate"),
        end_date: Optional[str] = Query(None, alias="endDate"),
    ) -> dict[str, Any]:
        report = service.quality(
            context, project_id=project_id, start_date=start_date, end_date=end_date
        )
        return quality_payload(report)

    @app.get("/analytics/activity-heatmap")
    def activity_heatmap(
        context: RequestContext = Depends(request_context),
        project_id: Optional[str] = Query(None, alias="projectId"),
    ) -> dict[str, Any]:
        return activity_payload(service.activity_heatmap(context, project_id=project_id))

    @app.get("/analytics/compare-projects")
    def compare_projects(context: RequestContext = Depends(request_context)) -> dict[str, Any]:
        return comparison_payload(service.compare_projects(context))

    @app.get("/projects/summary")
    def projects_summary(
        assignee_id: Optional[str] = Query(None, alias="assigneeId"),
        search: Optional[str] = Query(None, alias="q"),
        context: RequestContext = Depends(request_context),
    ) -> dict[str, Any]:
        report = service.projects_summary(context, assignee_id=assignee_id, search=search)
        return project_summary_payload(report)

    @app.get("/sprints/{sprint_id}/velocity")
    def sprint_velocity(
        sprint_id: str, context: RequestContext = Depends(request_context)
    ) -> dict[str, Any]:
        return sprint_velocity_payload(service.sprint_velocity(context, sprint_id))

    @app.get("/projects/{project_id}/velocity")
    def project_velocity(
        project_id: str, context: RequestContext = Depends(request_context)
    ) -> dict[str, Any]:
        return project_velocity_payload(service.project_velocity(context, project_id))

    @app.get("/projects/{project_id}/financial")
    def financial(
        project_id: str,
        context: RequestContext = Depends(request_context),
        group_by: Optional[str] = Query(None, alias="groupBy"),
    ) -> dict[str, Any]:
        return financial_payload(service.financial_summary(context, project_id, group_by=group_by))

    return app


def _context_dependency(settings: ApiSettings) -> Callable[[Request], RequestContext]:
    user_header = settings.user_header
    company_header = settings.company_header

    def request_context(request: Request) -> RequestContext:
        return RequestContext(
            user_id=_header_value(request, user_header),
            company_id=_header_value(request, company_header),
        )

    return request_context


def _header_value(request: Request, name: str) -> str | None:
    value = request.headers.get(name)
    if value is None:
        return None
    return value.strip() or None
