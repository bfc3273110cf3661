"""Utility modules for BuildPlan.

- numbers: unit and rounding helpers shared by models and engine
- edit_logger: structured log events for plan edits (import it directly;
  it depends on the models package)
"""

from buildplan.utils.numbers import is_discrete_unit, is_valid_amount, round_half_up

__all__ = [
    "is_discrete_unit",
    "is_valid_amount",
    "round_half_up",
]
