"""Shared plumbing for CLI commands (config, store, error mapping, output)."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, NoReturn, Optional, TypeVar

import typer

from taskboard_analytics.adapters.config_loader import load_config, load_default_config
from taskboard_analytics.adapters.sqlite_store import SQLiteEntityStore
from taskboard_analytics.core.errors import AnalyticsError, ScopingError, ValidationError
from taskboard_analytics.core.models import AnalyticsConfig
from taskboard_analytics.render import AnalyticsReport, render_json_report, render_markdown_report
from taskboard_analytics.service import AnalyticsService

logger = logging.getLogger("taskboard_analytics")

T = TypeVar("T")

OUTPUT_FORMATS = ("markdown", "json")

DB_OPTION = typer.Option(None, "--db", help="Path to the analytics database (overrides config).")
CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Path to config YAML.")
COMPANY_OPTION = typer.Option(
    None, "--company", envvar="TASKBOARD_COMPANY", help="Active company id."
)
USER_OPTION = typer.Option(None, "--user", envvar="TASKBOARD_USER", help="Acting user id.")
PROJECT_OPTION = typer.Option(None, "--project", "-p", help="Restrict to one project id.")
START_OPTION = typer.Option(None, "--start", help="Earliest task creation date (ISO).")
END_OPTION = typer.Option(None, "--end", help="Latest task creation date (ISO).")
FORMAT_OPTION = typer.Option("markdown", "--format", help="Output format: markdown or json.")


def _error(message: str, exit_code: int) -> NoReturn:
    """Print error to stderr and exit."""
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=exit_code)


def resolve_config(config: Optional[Path], db: Optional[Path] = None) -> AnalyticsConfig:
    """Load ``config`` (or the packaged default) and apply a ``--db`` override."""
    try:
        cfg = load_config(config) if config else load_default_config()
    except FileNotFoundError:
        _error(f"Config file not found: {config}", 2)
    except ValueError as exc:
        _error(f"Config validation error: {exc}", 2)
    if db is not None:
        cfg = cfg.model_copy(update={"database": db})
    return cfg


@contextmanager
def open_existing_store(cfg: AnalyticsConfig) -> Iterator[SQLiteEntityStore]:
    """Open the configured database, refusing to create an empty one."""
    if not cfg.database.exists():
        typer.echo("Error: No analytics database found.", err=True)
        typer.echo(f"Expected: {cfg.database}", err=True)
        raise typer.Exit(code=1)
    with SQLiteEntityStore(cfg.database) as store:
        yield store


def check_format(format: str) -> str:
    if format not in OUTPUT_FORMATS:
        _error(f"Unknown format: {format!r}. Use markdown or json.", 2)
    return format


def run_query(
    config: Optional[Path],
    db: Optional[Path],
    query: Callable[[AnalyticsService], T],
) -> T:
    """Run one service call against the configured store.

    Scoping and validation failures exit with code 2; authentication,
    membership and not-found failures with code 1.
    """
    cfg = resolve_config(config, db)
    with open_existing_store(cfg) as store:
        service = AnalyticsService(store)
        try:
            return query(service)
        except (ScopingError, ValidationError) as exc:
            _error(exc.message, 2)
        except AnalyticsError as exc:
            _error(exc.message, 1)


def emit(report: AnalyticsReport, format: str) -> None:
    if format == "json":
        typer.echo(render_json_report(report), nl=False)
    else:
        typer.echo(render_markdown_report(report))
