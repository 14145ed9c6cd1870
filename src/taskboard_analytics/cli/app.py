"""Typer application entrypoint."""

import logging
from typing import Optional

import typer

from taskboard_analytics.cli.commands.load import run as run_load
from taskboard_analytics.cli.commands.reports import (
    run_compare,
    run_costs,
    run_financial,
    run_heatmap,
    run_productivity,
    run_quality,
    run_summary,
    run_time,
    run_velocity,
)
from taskboard_analytics.cli.commands.serve import run as run_serve
from taskboard_analytics.version import __version__

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Productivity, cost, time, quality and velocity analytics for project boards.",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"taskboard-analytics {__version__}")
        raise typer.Exit()


@app.callback()
def _global_options(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
    version: Optional[bool] = typer.Option(  # noqa: ARG001
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Global options for taskboard-analytics."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s", force=True)


app.command("productivity")(run_productivity)
app.command("costs")(run_costs)
app.command("time")(run_time)
app.command("quality")(run_quality)
app.command("heatmap")(run_heatmap)
app.command("compare")(run_compare)
app.command("summary")(run_summary)
app.command("velocity")(run_velocity)
app.command("financial")(run_financial)
app.command("load")(run_load)
app.command("serve")(run_serve)


def main() -> None:
    """Run the CLI app."""
    app()


if __name__ == "__main__":
    main()
