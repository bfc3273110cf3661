"""Mutation engine for BuildPlan.

Derives a new snapshot from the current one by running an edit function
against a copy-on-write draft.

The draft copies a container the first time an edit reaches into it and
splices the copy into a freshly built root on commit. Containers the edit
never touched stay shared with the previous snapshot, which is safe
because snapshots are never mutated after they are committed.
"""

from typing import Any, Callable, Dict, List, NamedTuple, Optional

import structlog

from buildplan.models.edit_result import EditIssue, EditResult
from buildplan.models.project_plan import (
    BudgetSection,
    ChatMessage,
    MaterialQuantity,
    PaymentMilestone,
    ProjectPlan,
    SnagListItem,
    SupportTicket,
    TimelineEvent,
    WeeklyUpdate,
)

logger = structlog.get_logger()


class CostBaseline(NamedTuple):
    """Totals of the first snapshot, the fixed reference for cost per sq ft."""

    total_cost: float
    cost_per_sq_ft: float

    @classmethod
    def from_plan(cls, plan: ProjectPlan) -> "CostBaseline":
        return cls(total_cost=plan.total_cost, cost_per_sq_ft=plan.cost_per_sq_ft)


class PlanDraft:
    """Mutable working copy of a ProjectPlan.

    Scalars are read through to the base snapshot until assigned. Lists
    are copied on first access; budget sections and material entries are
    copied one at a time so an edit to Cement does not copy Steel.

    Edits record non-fatal problems with ``add_issue``.
    """

    def __init__(self, base: ProjectPlan, baseline: Optional[CostBaseline] = None):
        self._base = base
        self._scalars: Dict[str, Any] = {}
        self._lists: Dict[str, List[Any]] = {}
        self._sections: Optional[List[BudgetSection]] = None
        self._copied_sections: set = set()
        self._materials: Optional[List[MaterialQuantity]] = None
        self._copied_materials: set = set()
        self.baseline = baseline or CostBaseline.from_plan(base)
        self.issues: List[EditIssue] = []

    # ------------------------------------------------------------------
    # Scalars
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._base.id

    def _get_scalar(self, name: str) -> Any:
        if name in self._scalars:
            return self._scalars[name]
        return getattr(self._base, name)

    @property
    def total_cost(self) -> float:
        return self._get_scalar("total_cost")

    @total_cost.setter
    def total_cost(self, value: float) -> None:
        self._scalars["total_cost"] = value

    @property
    def cost_per_sq_ft(self) -> float:
        return self._get_scalar("cost_per_sq_ft")

    @cost_per_sq_ft.setter
    def cost_per_sq_ft(self, value: float) -> None:
        self._scalars["cost_per_sq_ft"] = value

    @property
    def payment_status(self) -> str:
        return self._get_scalar("payment_status")

    @payment_status.setter
    def payment_status(self, value: str) -> None:
        self._scalars["payment_status"] = value

    # ------------------------------------------------------------------
    # Budget sections
    # ------------------------------------------------------------------

    def _section_list(self) -> List[BudgetSection]:
        if self._sections is None:
            self._sections = list(self._base.budget_breakdown)
        return self._sections

    def section(self, name: str) -> Optional[BudgetSection]:
        """Get a private copy of the named budget section, or None."""
        sections = self._section_list()
        for index, section in enumerate(sections):
            if section.section_name == name:
                if index not in self._copied_sections:
                    sections[index] = section.model_copy(deep=True)
                    self._copied_sections.add(index)
                return sections[index]
        return None

    def section_totals(self) -> List[float]:
        sections = self._sections if self._sections is not None else self._base.budget_breakdown
        return [section.total_cost for section in sections]

    @property
    def budget_breakdown(self) -> List[BudgetSection]:
        """All budget sections, each a private copy."""
        sections = self._section_list()
        for index, section in enumerate(sections):
            if index not in self._copied_sections:
                sections[index] = section.model_copy(deep=True)
                self._copied_sections.add(index)
        return sections

    # ------------------------------------------------------------------
    # Material quantities
    # ------------------------------------------------------------------

    def _material_list(self) -> List[MaterialQuantity]:
        if self._materials is None:
            self._materials = list(self._base.material_quantities)
        return self._materials

    def _copy_material(self, index: int) -> MaterialQuantity:
        materials = self._material_list()
        if index not in self._copied_materials:
            materials[index] = materials[index].model_copy()
            self._copied_materials.add(index)
        return materials[index]

    def material_entries(self, material: str) -> List[MaterialQuantity]:
        """Private copies of every floor entry of a material, in plan order."""
        return [
            self._copy_material(index)
            for index, entry in enumerate(self._material_list())
            if entry.material == material
        ]

    def material_entry(self, material: str, floor: int) -> Optional[MaterialQuantity]:
        for index, entry in enumerate(self._material_list()):
            if entry.material == material and entry.floor == floor:
                return self._copy_material(index)
        return None

    def has_material(self, material: str) -> bool:
        return any(entry.material == material for entry in self._material_list())

    def material_names(self) -> List[str]:
        return list(dict.fromkeys(entry.material for entry in self._material_list()))

    @property
    def material_quantities(self) -> List[MaterialQuantity]:
        """All material entries, each a private copy."""
        return [self._copy_material(index) for index in range(len(self._material_list()))]

    # ------------------------------------------------------------------
    # Collaborator-owned lists
    # ------------------------------------------------------------------

    def _copied_list(self, name: str) -> List[Any]:
        if name not in self._lists:
            self._lists[name] = [item.model_copy(deep=True) for item in getattr(self._base, name)]
        return self._lists[name]

    @property
    def chat_history(self) -> List[ChatMessage]:
        return self._copied_list("chat_history")

    @property
    def payment_schedule(self) -> List[PaymentMilestone]:
        return self._copied_list("payment_schedule")

    @property
    def timeline(self) -> List[TimelineEvent]:
        return self._copied_list("timeline")

    @property
    def weekly_updates(self) -> List[WeeklyUpdate]:
        return self._copied_list("weekly_updates")

    @property
    def support_tickets(self) -> List[SupportTicket]:
        return self._copied_list("support_tickets")

    @property
    def snag_list(self) -> List[SnagListItem]:
        return self._copied_list("snag_list")

    # ------------------------------------------------------------------
    # Issues and commit
    # ------------------------------------------------------------------

    def add_issue(self, code: str, message: str, **details: Any) -> None:
        self.issues.append(EditIssue(code=code, message=message, details=details))

    def commit(self) -> ProjectPlan:
        """Build the new snapshot from the base and every touched container."""
        update: Dict[str, Any] = dict(self._scalars)
        update.update(self._lists)
        if self._sections is not None:
            update["budget_breakdown"] = self._sections
        if self._materials is not None:
            update["material_quantities"] = self._materials
        return self._base.model_copy(update=update)


EditFn = Callable[[PlanDraft], None]


class MutationEngine:
    """Applies edit functions to snapshots and hands tracked results to history.

    The engine never mutates a snapshot it was given. A committed snapshot
    that equals its predecessor is returned as the predecessor and never
    recorded, so no-op edits do not create empty undo steps.
    """

    def __init__(self, history):
        """Initialize MutationEngine.

        Args:
            history: PlanHistory receiving tracked snapshots; its baseline
                snapshot anchors cost-per-area recalculation.
        """
        self.history = history

    def apply(
        self,
        current_plan: Optional[ProjectPlan],
        edit_fn: EditFn,
        tracked: bool = True,
        kind: str = "edit"
    ) -> EditResult:
        """Apply an edit function to the current snapshot.

        Args:
            current_plan: Snapshot to derive from. None means no active plan.
            edit_fn: Callable mutating the PlanDraft it receives.
            tracked: Record the new snapshot in history. Replays pass False.
            kind: Edit name used in log events.

        Returns:
            EditResult with the new (or unchanged) snapshot and any issues.
        """
        if current_plan is None:
            return EditResult(plan=None, recorded=False, changed=False)

        baseline_plan = self.history.baseline or current_plan
        draft = PlanDraft(current_plan, CostBaseline.from_plan(baseline_plan))
        edit_fn(draft)
        new_plan = draft.commit()

        if new_plan == current_plan:
            logger.debug("edit_no_change", kind=kind, plan_id=current_plan.id)
            return EditResult(plan=current_plan, issues=draft.issues, recorded=False, changed=False)

        if tracked:
            self.history.record(new_plan)

        logger.info(
            "edit_applied",
            kind=kind,
            plan_id=new_plan.id,
            tracked=tracked,
            total_cost=round(new_plan.total_cost, 2),
            issue_count=len(draft.issues),
        )
        return EditResult(plan=new_plan, issues=draft.issues, recorded=tracked, changed=True)
