"""
Quantity Allocation for BuildPlan.

Redistributes a material's total quantity across its per-floor entries
when the user edits the aggregate.

Architecture:
- Discrete units (bags) use the largest-remainder (Hare quota) method:
  every floor gets the floor of its proportional share, and the leftover
  units go to the floors with the largest fractional remainders
- Shares are computed with exact rationals so ties and remainders do not
  depend on float noise
- Continuous units are scaled by target / current
- A zero current total cannot be apportioned and leaves entries unchanged
"""

import math
from dataclasses import dataclass, field
from fractions import Fraction
from typing import List, Optional, Sequence, Union

import structlog

from buildplan.utils.numbers import round_half_up

logger = structlog.get_logger(__name__)

Quantity = Union[int, float]


# =============================================================================
# Data Models
# =============================================================================


@dataclass
class AllocationResult:
    """
    Outcome of a redistribution.

    Attributes:
        quantities: New per-entry quantities, same order as the input
        target: Total the quantities were asked to sum to
        current_total: Sum of the input quantities
        zero_baseline: True when the input summed to zero and nothing moved
        ideal_shares: Exact proportional share of each entry (discrete only)
    """

    quantities: List[Quantity]
    target: Quantity
    current_total: float
    zero_baseline: bool = False
    ideal_shares: List[Fraction] = field(default_factory=list)

    @property
    def total(self) -> Quantity:
        return sum(self.quantities)


# =============================================================================
# Allocation
# =============================================================================


def allocate_discrete(
    quantities: Sequence[Quantity],
    target: int,
    tie_order: Optional[Sequence[int]] = None
) -> AllocationResult:
    """Apportion an integer target across entries, largest remainder first.

    Args:
        quantities: Current per-entry quantities.
        target: Non-negative integer total the result must sum to.
        tie_order: Sort key used when two remainders are equal (lower
            wins). Defaults to the entry position; callers pass floor
            numbers so lower floors win ties.

    Returns:
        AllocationResult whose quantities are non-negative ints summing to
        ``target``, or the unchanged input when it sums to zero.
    """
    if target < 0 or int(target) != target:
        raise ValueError(f"Discrete target must be a non-negative integer, got {target!r}")
    target = int(target)

    current = sum(Fraction(q) for q in quantities)
    if current == 0:
        logger.debug("allocation_zero_baseline", target=target, entries=len(quantities))
        return AllocationResult(
            quantities=list(quantities),
            target=target,
            current_total=0.0,
            zero_baseline=True,
        )

    order = list(tie_order) if tie_order is not None else list(range(len(quantities)))
    if len(order) != len(quantities):
        raise ValueError("tie_order must have one key per quantity")

    shares = [Fraction(q) * target / current for q in quantities]
    floors = [math.floor(share) for share in shares]
    deficit = target - sum(floors)

    ranked = sorted(
        range(len(shares)),
        key=lambda i: (-(shares[i] - floors[i]), order[i])
    )
    for i in ranked[:deficit]:
        floors[i] += 1

    return AllocationResult(
        quantities=floors,
        target=target,
        current_total=float(current),
        ideal_shares=shares,
    )


def allocate_continuous(quantities: Sequence[Quantity], target: float) -> AllocationResult:
    """Scale entries by target / current so they sum to target."""
    current = sum(quantities)
    if current == 0:
        return AllocationResult(
            quantities=list(quantities),
            target=target,
            current_total=0.0,
            zero_baseline=True,
        )
    ratio = target / current
    return AllocationResult(
        quantities=[q * ratio for q in quantities],
        target=target,
        current_total=float(current),
    )


def redistribute(
    quantities: Sequence[Quantity],
    target: float,
    is_discrete: bool,
    tie_order: Optional[Sequence[int]] = None
) -> AllocationResult:
    """Redistribute a new total across entries, preserving their proportions.

    Discrete targets are rounded half-up to a whole number first.

    Args:
        quantities: Current per-entry quantities.
        target: Requested new total (non-negative).
        is_discrete: Whether the unit is counted in whole units.
        tie_order: Tie-break keys for equal remainders (discrete only).

    Returns:
        AllocationResult with the new quantities.

    Raises:
        ValueError: If target is negative.
    """
    if target < 0:
        raise ValueError(f"Target total must be non-negative, got {target!r}")
    if is_discrete:
        return allocate_discrete(quantities, round_half_up(target), tie_order)
    return allocate_continuous(quantities, target)
