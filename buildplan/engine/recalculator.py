"""Cost recalculation for BuildPlan.

Keeps every derived number consistent after quantities or prices change:
material line items, the Materials section total, the plan total and the
cost per sq ft.
"""

from typing import Iterable, Optional

import structlog

from buildplan.config.errors import ErrorCode
from buildplan.engine.mutation import PlanDraft
from buildplan.models.project_plan import BudgetItem, BudgetSection, BudgetSectionName

logger = structlog.get_logger()

MATERIALS_SECTION = BudgetSectionName.MATERIALS.value


def find_material_item(section: BudgetSection, material: str) -> Optional[BudgetItem]:
    """Find the item linked to a material through its material key."""
    key = material.lower()
    for item in section.items:
        if item.material_key is not None and item.material_key.lower() == key:
            return item
    return None


def set_item_cost(item: BudgetItem, cost: float) -> None:
    """Overwrite an item's cost, rescaling its floor breakdown to match.

    The breakdown keeps its proportions. A breakdown that summed to zero
    is spread evenly.
    """
    item.cost = cost
    if not item.has_floor_breakdown:
        return
    old_total = sum(part.cost for part in item.floor_breakdown)
    if old_total > 0:
        ratio = cost / old_total
        for part in item.floor_breakdown:
            part.cost *= ratio
    else:
        share = cost / len(item.floor_breakdown)
        for part in item.floor_breakdown:
            part.cost = share


def recalculate_totals(draft: PlanDraft) -> None:
    """Refresh section, plan and per-area totals from the item costs.

    Only the Materials section total is rederived; other sections are
    never touched by material edits. Cost per sq ft follows the plan total
    proportionally from the baseline snapshot.
    """
    section = draft.section(MATERIALS_SECTION)
    if section is not None:
        section.total_cost = sum(item.cost for item in section.items)

    draft.total_cost = sum(draft.section_totals())

    baseline = draft.baseline
    if baseline.total_cost > 0:
        draft.cost_per_sq_ft = baseline.cost_per_sq_ft * (draft.total_cost / baseline.total_cost)


def recalculate_costs(draft: PlanDraft, materials: Iterable[str]) -> None:
    """Recompute costs after the given materials changed.

    Args:
        draft: Working copy being edited.
        materials: Names of the materials whose entries changed.
    """
    section = draft.section(MATERIALS_SECTION)

    for material in dict.fromkeys(materials):
        cost = sum(entry.line_cost for entry in draft.material_entries(material))
        item = find_material_item(section, material) if section is not None else None
        if item is None:
            logger.warning("budget_item_unmatched", material=material, plan_id=draft.id)
            draft.add_issue(
                ErrorCode.BUDGET_ITEM_UNMATCHED,
                f"No Materials budget item is linked to {material!r}",
                material=material,
                material_cost=cost,
            )
            continue
        set_item_cost(item, cost)

    recalculate_totals(draft)
