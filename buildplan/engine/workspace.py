"""Plan workspace for BuildPlan.

The single object the UI layer talks to. Owns the history, routes every
edit through the mutation engine, and implements the Absent/Active plan
lifecycle.
"""

from datetime import datetime
from enum import Enum
from functools import partial
from typing import Iterable, List, Optional

from buildplan.config.errors import ErrorCode
from buildplan.config.settings import settings
from buildplan.engine import collaborator_edits
from buildplan.engine.bulk_editor import BulkAction, BulkField, bulk_edit
from buildplan.engine.debounce import EditDebouncer
from buildplan.engine.floor_editor import edit_floor_entry
from buildplan.engine.history import PlanHistory
from buildplan.engine.mutation import EditFn, MutationEngine
from buildplan.engine.preparation import prepare_initial_plan
from buildplan.engine.total_quantity import edit_total_quantity
from buildplan.models.edit_result import EditIssue, EditResult
from buildplan.models.project_plan import ProjectPlan, TicketCategory, WizardData
from buildplan.utils.edit_logger import (
    log_edit_result,
    log_history_move,
    log_plan_created,
    log_plan_reset,
)

FIELD_QUANTITY = "quantity"
FIELD_PRICE = "price"


class PlanState(str, Enum):
    """Lifecycle state of the workspace."""

    ABSENT = "absent"
    ACTIVE = "active"


class PlanWorkspace:
    """Editing session over one project plan.

    Every edit is synchronous and runs to completion. Edits while no plan
    is active return a NO_ACTIVE_PLAN issue instead of raising.
    """

    def __init__(
        self,
        history: Optional[PlanHistory] = None,
        debounce_ms: Optional[int] = None,
        conserve_bulk_totals: Optional[bool] = None
    ):
        """Initialize PlanWorkspace.

        Args:
            history: History to use (default: a new, empty one).
            debounce_ms: Idle period for queued field edits (default from settings).
            conserve_bulk_totals: Bulk rounding policy (default from settings).
        """
        self.history = history or PlanHistory()
        self.engine = MutationEngine(self.history)
        self.debouncer = EditDebouncer(
            debounce_ms if debounce_ms is not None else settings.edit_debounce_ms
        )
        self.conserve_bulk_totals = (
            conserve_bulk_totals if conserve_bulk_totals is not None
            else settings.conserve_bulk_totals
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlanState:
        return PlanState.ACTIVE if self.history.current is not None else PlanState.ABSENT

    @property
    def current_plan(self) -> Optional[ProjectPlan]:
        return self.history.current

    def create_history(self, initial_plan: ProjectPlan) -> EditResult:
        """Start a new session from a generated plan.

        The prepared plan becomes history[0] and the cost baseline. Any
        previous plan and history are discarded.
        """
        self.reset()
        prepared, issues = prepare_initial_plan(initial_plan)
        self.history.record(prepared)
        log_plan_created(prepared, issues)
        return EditResult(plan=prepared, issues=issues, recorded=True, changed=True)

    async def generate_plan(self, wizard_data: WizardData, generator) -> EditResult:
        """Generate a plan from wizard data and make it the active plan.

        Args:
            wizard_data: Intake parameters.
            generator: Object with an async ``create_project_plan(wizard_data)``,
                normally a PlanGenerationService.

        Raises:
            PlanGenerationError: If generation fails. The workspace is left
                Absent.
        """
        self.reset()
        plan = await generator.create_project_plan(wizard_data)
        return self.create_history(plan)

    def reset(self) -> None:
        """Discard the plan, its history and any queued edits."""
        plan = self.history.current
        if plan is not None:
            log_plan_reset(plan.id, len(self.history))
        self.history.clear()
        self.debouncer.clear()

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def _apply(self, kind: str, edit_fn: EditFn, **context) -> EditResult:
        plan = self.history.current
        if plan is None:
            result = EditResult(
                plan=None,
                issues=[EditIssue(
                    code=ErrorCode.NO_ACTIVE_PLAN,
                    message=f"Cannot apply {kind}: no plan is active",
                )],
            )
        else:
            result = self.engine.apply(plan, edit_fn, tracked=True, kind=kind)
        log_edit_result(kind, result, **context)
        return result

    def apply_floor_edit(
        self,
        material: str,
        floor: int,
        new_quantity: Optional[float] = None,
        new_unit_price: Optional[float] = None
    ) -> EditResult:
        """Change the quantity and/or unit price of one material on one floor."""
        return self._apply(
            "floor_edit",
            partial(
                edit_floor_entry,
                material=material,
                floor=floor,
                new_quantity=new_quantity,
                new_unit_price=new_unit_price,
            ),
            material=material,
            floor=floor,
        )

    def apply_total_quantity_edit(self, material: str, new_total: float) -> EditResult:
        """Set a material's total quantity, redistributed over its floors."""
        return self._apply(
            "total_quantity_edit",
            partial(edit_total_quantity, material=material, new_total=new_total),
            material=material,
            new_total=new_total,
        )

    def apply_bulk_edit(
        self,
        material_names: Iterable[str],
        action: BulkAction,
        field: BulkField,
        percentage: float
    ) -> EditResult:
        """Raise or lower quantity or price of several materials by a percentage."""
        if isinstance(material_names, str):
            material_names = [material_names]
        names = list(material_names)
        return self._apply(
            "bulk_edit",
            partial(
                bulk_edit,
                material_names=names,
                action=action,
                field=field,
                percentage=percentage,
                conserve_totals=self.conserve_bulk_totals,
            ),
            materials=names,
            percentage=percentage,
        )

    # ------------------------------------------------------------------
    # Debounced field edits
    # ------------------------------------------------------------------

    def queue_floor_edit(
        self,
        material: str,
        floor: int,
        new_quantity: Optional[float] = None,
        new_unit_price: Optional[float] = None,
        now: Optional[float] = None
    ) -> None:
        """Queue raw input for a floor entry; only the last value per field survives."""
        if new_quantity is not None:
            self.debouncer.submit((material, floor, FIELD_QUANTITY), new_quantity, now)
        if new_unit_price is not None:
            self.debouncer.submit((material, floor, FIELD_PRICE), new_unit_price, now)

    def flush_pending_edits(self, now: Optional[float] = None) -> List[EditResult]:
        """Apply every queued field edit whose idle period has elapsed."""
        results = []
        for pending in self.debouncer.due(now):
            material, floor, field = pending.key
            if field == FIELD_QUANTITY:
                results.append(self.apply_floor_edit(material, floor, new_quantity=pending.value))
            else:
                results.append(self.apply_floor_edit(material, floor, new_unit_price=pending.value))
        return results

    # ------------------------------------------------------------------
    # Collaborator data
    # ------------------------------------------------------------------

    def send_message(self, text: str, now: Optional[datetime] = None) -> EditResult:
        return self._apply("send_message", partial(collaborator_edits.send_message, text=text, now=now))

    def add_advisor_message(self, text: str, now: Optional[datetime] = None) -> EditResult:
        return self._apply(
            "advisor_message",
            partial(collaborator_edits.add_advisor_message, text=text, now=now),
        )

    def record_booking_payment(self) -> EditResult:
        return self._apply("booking_payment", collaborator_edits.record_booking_payment)

    def mark_milestone_paid(self, milestone_name: str) -> EditResult:
        return self._apply(
            "milestone_paid",
            partial(collaborator_edits.mark_milestone_paid, milestone_name=milestone_name),
            milestone=milestone_name,
        )

    def raise_ticket(
        self,
        subject: str,
        category: TicketCategory,
        description: str,
        now: Optional[datetime] = None
    ) -> EditResult:
        return self._apply(
            "raise_ticket",
            partial(
                collaborator_edits.raise_ticket,
                subject=subject,
                category=category,
                description=description,
                now=now,
            ),
        )

    def add_user_note(self, update_date: str, note: str) -> EditResult:
        return self._apply(
            "user_note",
            partial(collaborator_edits.add_user_note, update_date=update_date, note=note),
        )

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> Optional[ProjectPlan]:
        """Step back one snapshot; a no-op at the first snapshot or with no plan.

        History moves swap in a recorded snapshot as-is. They bypass the
        MutationEngine, so nothing is recalculated and nothing is recorded.
        """
        moved = self.history.can_undo
        plan = self.history.undo()
        log_history_move("undo", moved, self.history.index, len(self.history))
        return plan

    def redo(self) -> Optional[ProjectPlan]:
        """Step forward one snapshot; a no-op at the last snapshot or with no plan.

        Like undo, this bypasses the MutationEngine.
        """
        moved = self.history.can_redo
        plan = self.history.redo()
        log_history_move("redo", moved, self.history.index, len(self.history))
        return plan

    def can_undo(self) -> bool:
        return self.history.can_undo

    def can_redo(self) -> bool:
        return self.history.can_redo
