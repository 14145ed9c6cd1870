"""YAML-backed configuration loader."""

from __future__ import annotations

from importlib.resources import as_file, files
from pathlib import Path

import yaml
from pydantic import ValidationError

from taskboard_analytics.core.models import AnalyticsConfig

DEFAULT_CONFIG_FILENAME = "default_config.yaml"


def load_config(path: str | Path) -> AnalyticsConfig:
    """Load and validate a service configuration file.

    A relative ``database`` path is resolved against the config file's
    directory.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        raw_data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Failed to parse YAML config at {config_path}: {exc}") from exc
    except OSError as exc:
        raise OSError(f"Failed to read config file {config_path}: {exc}") from exc

    if raw_data is None:
        raw_data = {}
    if not isinstance(raw_data, dict):
        raise ValueError(f"Invalid config file at {config_path}: root must be a YAML mapping")

    try:
        config = AnalyticsConfig.model_validate(raw_data)
    except ValidationError as exc:
        detail_text = format_validation_errors(exc)
        raise ValueError(f"Invalid config file at {config_path}:\n{detail_text}") from exc

    database = config.database.expanduser()
    if not database.is_absolute():
        database = config_path.parent / database
    return config.model_copy(update={"database": database})


def load_default_config() -> AnalyticsConfig:
    """Load the packaged default configuration.

    The packaged file points at a home-directory database, so no path
    resolution against the package directory is wanted here.
    """
    resource = files("taskboard_analytics").joinpath(DEFAULT_CONFIG_FILENAME)
    with as_file(resource) as default_path:
        raw_data = yaml.safe_load(default_path.read_text(encoding="utf-8")) or {}
    config = AnalyticsConfig.model_validate(raw_data)
    return config.model_copy(update={"database": config.database.expanduser()})


def format_validation_errors(exc: ValidationError) -> str:
    details: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        details.append(f"{location}: {error['msg']}")
    return "\n".join(f"- {line}" for line in details)
