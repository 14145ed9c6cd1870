"""Output rendering modules."""

from taskboard_analytics.render.json_report import (
    AnalyticsReport,
    build_payload,
    render_json_report,
)
from taskboard_analytics.render.markdown_report import render_markdown_report

__all__ = [
    "AnalyticsReport",
    "build_payload",
    "render_json_report",
    "render_markdown_report",
]
