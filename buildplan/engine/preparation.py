"""Initial plan preparation for BuildPlan.

Runs once on a freshly generated plan before it becomes history[0]:
stamps the original quantities, makes floor breakdowns and item costs
agree, links each material to the Materials budget item it drives and
reconciles the plan total with the quantities.
"""

from typing import List, Optional, Tuple

import structlog

from buildplan.config.errors import ErrorCode
from buildplan.engine.mutation import PlanDraft
from buildplan.engine.recalculator import MATERIALS_SECTION, find_material_item, recalculate_costs
from buildplan.models.edit_result import EditIssue
from buildplan.models.project_plan import BudgetItem, BudgetSection, ProjectPlan

logger = structlog.get_logger()


def _link_material(draft: PlanDraft, section: BudgetSection, material: str) -> Optional[BudgetItem]:
    linked = find_material_item(section, material)
    if linked is not None:
        return linked

    needle = material.lower()
    candidates = [
        item for item in section.items
        if item.material_key is None and needle in item.item.lower()
    ]
    if not candidates:
        draft.add_issue(
            ErrorCode.BUDGET_ITEM_UNMATCHED,
            f"No Materials budget item mentions {material!r}",
            material=material,
        )
        return None

    chosen = candidates[0]
    if len(candidates) > 1:
        draft.add_issue(
            ErrorCode.AMBIGUOUS_BUDGET_MATCH,
            f"{len(candidates)} budget items mention {material!r}; linked {chosen.item!r}",
            material=material,
            linked_item=chosen.item,
            candidates=[item.item for item in candidates],
        )
    chosen.material_key = material
    return chosen


def link_materials(draft: PlanDraft) -> None:
    """Link every material to one Materials budget item by name.

    Items that already carry a material key keep it. Otherwise the first
    unlinked item whose label contains the material name (ignoring case)
    is linked; further candidates are reported as ambiguous.
    """
    section = draft.section(MATERIALS_SECTION)
    materials = draft.material_names()
    if section is None:
        if materials:
            draft.add_issue(
                ErrorCode.BUDGET_ITEM_UNMATCHED,
                "Plan has materials but no Materials budget section",
                materials=materials,
            )
        return

    for material in materials:
        _link_material(draft, section, material)


def normalize_floor_breakdowns(draft: PlanDraft) -> None:
    """Make every item with a floor breakdown cost exactly its breakdown sum."""
    for section in draft.budget_breakdown:
        changed = False
        for item in section.items:
            if item.has_floor_breakdown:
                breakdown_total = sum(part.cost for part in item.floor_breakdown)
                if breakdown_total != item.cost:
                    item.cost = breakdown_total
                    changed = True
        if changed:
            section.total_cost = sum(item.cost for item in section.items)


def reconcile_costs(draft: PlanDraft) -> None:
    """Rederive linked item costs and the plan total from the quantities.

    Generated plans do not always add up. Reconciling here means the first
    edit only moves costs for what it changed. Cost per sq ft keeps its
    generated rate per rupee of total.
    """
    section = draft.section(MATERIALS_SECTION)
    linked = []
    if section is not None:
        linked = [m for m in draft.material_names() if find_material_item(section, m) is not None]

    generated_total = draft.total_cost
    recalculate_costs(draft, linked)
    if draft.total_cost != generated_total:
        logger.info(
            "plan_total_reconciled",
            plan_id=draft.id,
            generated_total=generated_total,
            reconciled_total=draft.total_cost,
        )


def stamp_original_quantities(draft: PlanDraft) -> None:
    for entry in draft.material_quantities:
        entry.original_quantity = entry.quantity


def prepare_initial_plan(plan: ProjectPlan) -> Tuple[ProjectPlan, List[EditIssue]]:
    """Prepare a generated plan for editing.

    Linked material items and the plan total are reconciled with the
    quantities, so the prepared plan is already self-consistent.

    Returns:
        Tuple of the prepared plan and any linking issues.
    """
    draft = PlanDraft(plan)
    stamp_original_quantities(draft)
    normalize_floor_breakdowns(draft)
    link_materials(draft)
    reconcile_costs(draft)
    prepared = draft.commit()

    logger.info(
        "plan_prepared",
        plan_id=prepared.id,
        materials=len(prepared.material_names()),
        issues=[issue.code for issue in draft.issues],
    )
    return prepared, draft.issues
