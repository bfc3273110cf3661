"""Aggregate quantity edits for BuildPlan.

Setting a material's total spreads the new total over its floors with the
allocation algorithm, so discrete totals stay exact.
"""

import structlog

from buildplan.config.errors import ErrorCode
from buildplan.engine.allocation import redistribute
from buildplan.engine.mutation import PlanDraft
from buildplan.engine.recalculator import recalculate_costs
from buildplan.utils.numbers import is_valid_amount

logger = structlog.get_logger()


def edit_total_quantity(draft: PlanDraft, material: str, new_total: float) -> None:
    """Set the total quantity of a material across all of its floors.

    The unit of the first entry decides whether the material is discrete.
    A material whose floors currently sum to zero is left unchanged and a
    ZERO_BASELINE issue is reported.
    """
    entries = draft.material_entries(material)
    if not entries:
        draft.add_issue(
            ErrorCode.MATERIAL_NOT_FOUND,
            f"Material {material!r} is not part of this plan",
            material=material,
        )
        return

    if not is_valid_amount(new_total):
        draft.add_issue(
            ErrorCode.INVALID_QUANTITY,
            f"Ignored total quantity {new_total!r} for {material}",
            material=material,
            value=new_total,
        )
        return

    is_discrete = entries[0].is_discrete
    result = redistribute(
        [entry.quantity for entry in entries],
        new_total,
        is_discrete,
        tie_order=[entry.floor for entry in entries],
    )

    if result.zero_baseline:
        logger.warning("redistribution_zero_baseline", material=material, target=new_total)
        draft.add_issue(
            ErrorCode.ZERO_BASELINE,
            f"{material} has no quantity to scale from; floors left unchanged",
            material=material,
            target=result.target,
        )
        return

    for entry, quantity in zip(entries, result.quantities):
        entry.quantity = quantity

    recalculate_costs(draft, [material])
