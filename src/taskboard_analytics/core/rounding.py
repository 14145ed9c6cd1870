"""Presentation rounding shared by every metric view."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

METRIC_DECIMALS = 2
_QUANTUM = Decimal(1).scaleb(-METRIC_DECIMALS)


def round_metric(value: float) -> float:
    """Round half-up to two decimals.

    Goes through ``repr`` so that binary drift such as ``1.005`` stored as
    ``1.00499999...`` still rounds the way it reads.
    """
    return float(Decimal(repr(float(value))).quantize(_QUANTUM, rounding=ROUND_HALF_UP))


def percentage(part: float, whole: float) -> float:
    """Return ``part / whole * 100`` rounded, or 0 when ``whole`` is 0."""
    if not whole:
        return 0.0
    return round_metric(part / whole * 100)
