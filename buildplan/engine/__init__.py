"""Plan mutation and recalculation engine.

Editing flows through PlanWorkspace, which opens a PlanDraft over the
current snapshot via MutationEngine, runs an editor, recalculates costs
and records the new snapshot in PlanHistory.
"""

from buildplan.engine.allocation import AllocationResult, redistribute
from buildplan.engine.bulk_editor import BulkAction, BulkField
from buildplan.engine.history import PlanHistory
from buildplan.engine.mutation import CostBaseline, MutationEngine, PlanDraft
from buildplan.engine.workspace import PlanState, PlanWorkspace

__all__ = [
    "AllocationResult",
    "redistribute",
    "BulkAction",
    "BulkField",
    "PlanHistory",
    "CostBaseline",
    "MutationEngine",
    "PlanDraft",
    "PlanState",
    "PlanWorkspace",
]
