"""Single floor entry edits for BuildPlan."""

from typing import Optional

from buildplan.config.errors import ErrorCode
from buildplan.engine.mutation import PlanDraft
from buildplan.engine.recalculator import recalculate_costs
from buildplan.utils.numbers import is_valid_amount, round_half_up


def edit_floor_entry(
    draft: PlanDraft,
    material: str,
    floor: int,
    new_quantity: Optional[float] = None,
    new_unit_price: Optional[float] = None
) -> None:
    """Change the quantity and/or unit price of one (material, floor) entry.

    Omitted values leave the field alone. Negative or non-numeric values
    are ignored for that field and reported as issues. Discrete quantities
    are rounded to whole units. Costs are recalculated for this material
    only when at least one value was applied.
    """
    if not draft.has_material(material):
        draft.add_issue(
            ErrorCode.MATERIAL_NOT_FOUND,
            f"Material {material!r} is not part of this plan",
            material=material,
            floor=floor,
        )
        return

    entry = draft.material_entry(material, floor)
    if entry is None:
        draft.add_issue(
            ErrorCode.MATERIAL_NOT_FOUND,
            f"Material {material!r} has no entry for floor {floor}",
            material=material,
            floor=floor,
        )
        return

    applied = False
    if new_quantity is not None:
        if is_valid_amount(new_quantity):
            entry.quantity = round_half_up(new_quantity) if entry.is_discrete else new_quantity
            applied = True
        else:
            draft.add_issue(
                ErrorCode.INVALID_QUANTITY,
                f"Ignored quantity {new_quantity!r} for {material} on floor {floor}",
                material=material,
                floor=floor,
                value=new_quantity,
            )
    if new_unit_price is not None:
        if is_valid_amount(new_unit_price):
            entry.unit_price = new_unit_price
            applied = True
        else:
            draft.add_issue(
                ErrorCode.INVALID_PRICE,
                f"Ignored unit price {new_unit_price!r} for {material} on floor {floor}",
                material=material,
                floor=floor,
                value=new_unit_price,
            )

    # Rejected input leaves the plan untouched, derived totals included.
    if applied:
        recalculate_costs(draft, [material])
