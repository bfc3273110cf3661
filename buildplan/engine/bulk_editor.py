"""Bulk percentage edits for BuildPlan.

Raises or lowers the quantity or unit price of several materials at once.
"""

from enum import Enum
from typing import Iterable, List, Optional

import structlog

from buildplan.config.errors import ErrorCode
from buildplan.config.settings import settings
from buildplan.engine.allocation import allocate_discrete
from buildplan.engine.mutation import PlanDraft
from buildplan.engine.recalculator import recalculate_costs
from buildplan.models.project_plan import MaterialQuantity
from buildplan.utils.numbers import is_valid_amount, round_half_up

logger = structlog.get_logger()

MIN_PERCENTAGE = 1
MAX_PERCENTAGE = 100


class BulkAction(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


class BulkField(str, Enum):
    QUANTITY = "quantity"
    PRICE = "price"


def bulk_factor(action: BulkAction, percentage: float) -> float:
    """Multiplier for a percentage increase or decrease."""
    if BulkAction(action) == BulkAction.INCREASE:
        return 1 + percentage / 100
    return 1 - percentage / 100


def _scale_discrete_conserving(entries: List[MaterialQuantity], factor: float) -> None:
    current = sum(entry.quantity for entry in entries)
    if current == 0:
        return
    result = allocate_discrete(
        [entry.quantity for entry in entries],
        round_half_up(current * factor),
        tie_order=[entry.floor for entry in entries],
    )
    for entry, quantity in zip(entries, result.quantities):
        entry.quantity = quantity


def _scale_discrete_per_entry(draft: PlanDraft, material: str,
                              entries: List[MaterialQuantity], factor: float) -> None:
    exact_total = sum(entry.quantity for entry in entries) * factor
    for entry in entries:
        entry.quantity = round_half_up(entry.quantity * factor)

    drift = sum(entry.quantity for entry in entries) - round_half_up(exact_total)
    if drift != 0:
        logger.warning("bulk_rounding_drift", material=material, drift=drift)
        draft.add_issue(
            ErrorCode.ROUNDING_DRIFT,
            f"{material} total drifted by {drift:+d} units from per-floor rounding",
            material=material,
            drift=drift,
            exact_total=exact_total,
        )


def bulk_edit(
    draft: PlanDraft,
    material_names: Iterable[str],
    action: BulkAction,
    field: BulkField,
    percentage: float,
    conserve_totals: Optional[bool] = None
) -> None:
    """Apply a percentage change to every floor entry of the named materials.

    Args:
        draft: Working copy being edited.
        material_names: Materials to change. A single name is one material.
        action: increase or decrease.
        field: quantity or price.
        percentage: Size of the change, between 1 and 100.
        conserve_totals: For discrete quantities, keep each material's total
            at the rounded scaled value by redistributing across floors.
            When False every floor is rounded on its own and any drift is
            reported. Defaults to the BULK_ROUNDING setting.

    Raises:
        ValueError: If action or field is not a known value.
    """
    if isinstance(material_names, str):
        material_names = [material_names]
    action = BulkAction(action)
    field = BulkField(field)
    if conserve_totals is None:
        conserve_totals = settings.conserve_bulk_totals

    if not is_valid_amount(percentage) or not MIN_PERCENTAGE <= percentage <= MAX_PERCENTAGE:
        draft.add_issue(
            ErrorCode.INVALID_PERCENTAGE,
            f"Percentage must be between {MIN_PERCENTAGE} and {MAX_PERCENTAGE}, got {percentage!r}",
            value=percentage,
        )
        return

    factor = bulk_factor(action, percentage)
    edited = []

    for material in dict.fromkeys(material_names):
        entries = draft.material_entries(material)
        if not entries:
            draft.add_issue(
                ErrorCode.MATERIAL_NOT_FOUND,
                f"Material {material!r} is not part of this plan",
                material=material,
            )
            continue

        if field == BulkField.PRICE:
            for entry in entries:
                entry.unit_price *= factor
        elif not entries[0].is_discrete:
            for entry in entries:
                entry.quantity *= factor
        elif conserve_totals:
            _scale_discrete_conserving(entries, factor)
        else:
            _scale_discrete_per_entry(draft, material, entries, factor)
        edited.append(material)

    logger.debug(
        "bulk_edit_scaled",
        materials=edited,
        action=action.value,
        field=field.value,
        factor=factor,
    )
    if edited:
        recalculate_costs(draft, edited)
