"""Multi-tenant analytics aggregation for agile project boards."""

from taskboard_analytics.version import __version__

__all__ = ["__version__"]
