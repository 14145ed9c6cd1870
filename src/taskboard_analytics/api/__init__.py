"""HTTP surface."""

from taskboard_analytics.api.app import create_app

__all__ = ["create_app"]
