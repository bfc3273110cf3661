"""Edit Logger for BuildPlan.

Structured log events for the plan lifecycle, applied edits, history moves
and edit issues, plus a visible banner when a new plan becomes active.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from buildplan.models.edit_result import EditIssue, EditResult
from buildplan.models.project_plan import ProjectPlan

logger = structlog.get_logger()

BANNER_WIDTH = 80
PLAN_BANNER_CHAR = "█"


def _create_banner(char: str, text: str, width: int = BANNER_WIDTH) -> str:
    """Create a centered banner with given character."""
    text_with_spaces = f" {text} "
    padding = (width - len(text_with_spaces)) // 2
    return char * padding + text_with_spaces + char * (width - padding - len(text_with_spaces))


def _issue_summaries(issues: List[EditIssue]) -> List[Dict[str, Any]]:
    return [{"code": issue.code, "message": issue.message} for issue in issues]


def log_plan_created(plan: ProjectPlan, issues: Optional[List[EditIssue]] = None) -> None:
    """Log a plan becoming active with a prominent banner."""
    timestamp = datetime.now(timezone.utc).isoformat()
    location = plan.wizard_data.location or "unknown"

    print("\n")
    print(PLAN_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(PLAN_BANNER_CHAR, "PROJECT PLAN ACTIVE"))
    print(PLAN_BANNER_CHAR * BANNER_WIDTH)
    print(f"║ Plan ID     : {plan.id}")
    print(f"║ Timestamp   : {timestamp}")
    print(f"║ Location    : {location}")
    print(f"║ Total Cost  : {plan.total_cost:,.2f}")
    print(f"║ Materials   : {', '.join(plan.material_names()) or 'None'}")
    print(PLAN_BANNER_CHAR * BANNER_WIDTH)
    print("\n")

    logger.info(
        "plan_created",
        plan_id=plan.id,
        total_cost=plan.total_cost,
        cost_per_sq_ft=plan.cost_per_sq_ft,
        material_entries=len(plan.material_quantities),
        issues=_issue_summaries(issues or []),
    )


def log_edit_result(kind: str, result: EditResult, **context: Any) -> None:
    """Log the outcome of a workspace edit and warn about each issue."""
    plan_id = result.plan.id if result.plan is not None else None
    for issue in result.issues:
        logger.warning(
            "edit_issue",
            kind=kind,
            plan_id=plan_id,
            code=issue.code,
            message=issue.message,
            **issue.details,
        )
    logger.info(
        "edit_result",
        kind=kind,
        plan_id=plan_id,
        changed=result.changed,
        recorded=result.recorded,
        issue_count=len(result.issues),
        **context,
    )


def log_history_move(direction: str, moved: bool, index: int, length: int) -> None:
    logger.info("history_move", direction=direction, moved=moved, index=index, length=length)


def log_plan_reset(plan_id: Optional[str], snapshots: int) -> None:
    logger.info("plan_reset", plan_id=plan_id, discarded_snapshots=snapshots)
