"""Unit tests for config models and task records."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from taskboard_analytics.core.models import (
    AnalyticsConfig,
    ApiSettings,
    CompanyRole,
    TaskStatus,
)


def test_config_defaults() -> None:
    config = AnalyticsConfig.model_validate({"database": "a.db"})

    assert config.api == ApiSettings()
    assert config.logging.level == "INFO"


def test_config_rejects_unknown_keys() -> None:
    with pytest.raises(ValidationError):
        AnalyticsConfig.model_validate({"database": "a.db", "cache": True})


@pytest.mark.parametrize("port", [0, 70000])
def test_port_range(port: int) -> None:
    with pytest.raises(ValidationError):
        ApiSettings(port=port)


def test_blank_header_name_is_rejected() -> None:
    with pytest.raises(ValidationError):
        ApiSettings(user_header="  ")


@pytest.mark.parametrize(
    ("role", "is_admin"),
    [
        (CompanyRole.OWNER, True),
        (CompanyRole.ADMIN, True),
        (CompanyRole.MEMBER, False),
        (CompanyRole.VIEWER, False),
    ],
)
def test_company_role_admin_flag(role: CompanyRole, is_admin: bool) -> None:
    assert role.is_admin is is_admin


def test_worked_hours_prefers_actual_even_when_zero(task_factory) -> None:
    assert task_factory(actual_hours=0.0, estimate_hours=5.0).worked_hours == 0.0
    assert task_factory(estimate_hours=5.0).worked_hours == 5.0
    assert task_factory().worked_hours == 0.0


def test_status_flags(task_factory) -> None:
    assert task_factory(status=TaskStatus.DONE).is_done
    assert task_factory(status=TaskStatus.BLOCKED).is_blocked
    assert not task_factory(status=TaskStatus.REVIEW).is_done
