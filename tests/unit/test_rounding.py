"""Unit tests for metric rounding."""

from __future__ import annotations

import pytest

from taskboard_analytics.core.rounding import percentage, round_metric


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1.005, 1.01),
        (2.675, 2.68),
        (33.333333, 33.33),
        (66.666666, 66.67),
        (-1.005, -1.01),
        (10, 10.0),
    ],
)
def test_round_metric_half_up(value: float, expected: float) -> None:
    assert round_metric(value) == expected


def test_percentage_of_zero_whole_is_zero() -> None:
    assert percentage(5, 0) == 0.0


def test_percentage_one_of_three() -> None:
    assert percentage(1, 3) == 33.33
