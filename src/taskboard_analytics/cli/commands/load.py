"""Load command: seed the analytics database from a YAML dataset."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from taskboard_analytics.adapters.dataset_loader import load_dataset
from taskboard_analytics.adapters.sqlite_store import SQLiteEntityStore
from taskboard_analytics.cli.commands._common import CONFIG_OPTION, DB_OPTION, _error, resolve_config


def run(
    dataset_file: Path = typer.Argument(..., help="Path to dataset YAML file."),
    db: Optional[Path] = DB_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Insert companies, users, projects, sprints, resources and tasks."""
    if not dataset_file.exists():
        _error(f"File not found: {dataset_file}", 2)

    cfg = resolve_config(config, db)
    cfg.database.parent.mkdir(parents=True, exist_ok=True)

    try:
        with SQLiteEntityStore(cfg.database) as store:
            summary = load_dataset(dataset_file, store)
    except ValueError as exc:
        _error(str(exc), 2)

    typer.echo(
        f"Loaded {summary.companies} companies, {summary.users} users, "
        f"{summary.projects} projects, {summary.sprints} sprints, "
        f"{summary.resources} resources, {summary.tasks} tasks into {cfg.database}"
    )
