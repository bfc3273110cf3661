"""Numeric helpers shared by the models and the editing engine."""

import math
from numbers import Real
from typing import Any

DISCRETE_UNIT_MARKER = "bag"


def is_discrete_unit(unit: str) -> bool:
    """Whether a unit label denotes whole, countable units (e.g. bags)."""
    return DISCRETE_UNIT_MARKER in (unit or "").lower()


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's round() uses banker's rounding (round(30.5) == 30), which is
    not what people expect when typing a quantity.
    """
    return int(math.floor(value + 0.5))


def is_valid_amount(value: Any) -> bool:
    """Whether value is a finite, non-negative number usable as a quantity or price."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value) and value >= 0
