"""Serve command: run the HTTP API with uvicorn."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
import uvicorn

from taskboard_analytics.api.app import create_app
from taskboard_analytics.cli.commands._common import (
    CONFIG_OPTION,
    DB_OPTION,
    open_existing_store,
    resolve_config,
)

logger = logging.getLogger("taskboard_analytics")


def run(
    db: Optional[Path] = DB_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (overrides config)."),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port (overrides config)."),
) -> None:
    """Serve the analytics API."""
    cfg = resolve_config(config, db)
    # No-op when --verbose already configured logging.
    logging.basicConfig(level=cfg.logging.level, format="%(levelname)s: %(message)s")

    bind_host = host or cfg.api.host
    bind_port = port or cfg.api.port
    with open_existing_store(cfg) as store:
        logger.info("Serving %s on http://%s:%d", cfg.database, bind_host, bind_port)
        uvicorn.run(
            create_app(store, cfg.api),
            host=bind_host,
            port=bind_port,
            log_level=cfg.logging.level.lower(),
        )
