"""Edit outcome models for BuildPlan.

Plan edits never raise for bad input. Every degraded case becomes an
EditIssue on the EditResult so callers can surface or log it.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from buildplan.models.project_plan import ProjectPlan


class EditIssue(BaseModel):
    """A non-fatal problem encountered while applying an edit."""

    code: str = Field(description="Error code from ErrorCode constants")
    message: str = Field(description="Human-readable description")
    details: Dict[str, Any] = Field(default_factory=dict)


class EditResult(BaseModel):
    """Outcome of applying an edit to the current snapshot.

    ``plan`` is the snapshot the caller should display afterwards: the new
    snapshot when the edit changed something, otherwise the unchanged
    input. ``recorded`` tells whether a history entry was appended.
    """

    plan: Optional[ProjectPlan] = None
    issues: List[EditIssue] = Field(default_factory=list)
    recorded: bool = False
    changed: bool = False

    @property
    def ok(self) -> bool:
        return not self.issues

    def has_issue(self, code: str) -> bool:
        return any(issue.code == code for issue in self.issues)

    def issue_codes(self) -> List[str]:
        return [issue.code for issue in self.issues]
