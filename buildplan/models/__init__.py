"""BuildPlan data models."""

from buildplan.models.project_plan import (
    BudgetItem,
    BudgetSection,
    BudgetSectionName,
    ChatMessage,
    ConstructionQuality,
    FloorCost,
    MaterialQuantity,
    MessageSender,
    MilestoneStatus,
    PaymentMilestone,
    PaymentStatus,
    ProjectPlan,
    SnagListItem,
    SupportTicket,
    TicketActivity,
    TicketCategory,
    TicketStatus,
    TimelineEvent,
    WeeklyUpdate,
    WizardData,
)
from buildplan.models.edit_result import EditIssue, EditResult

__all__ = [
    "BudgetItem",
    "BudgetSection",
    "BudgetSectionName",
    "ChatMessage",
    "ConstructionQuality",
    "FloorCost",
    "MaterialQuantity",
    "MessageSender",
    "MilestoneStatus",
    "PaymentMilestone",
    "PaymentStatus",
    "ProjectPlan",
    "SnagListItem",
    "SupportTicket",
    "TicketActivity",
    "TicketCategory",
    "TicketStatus",
    "TimelineEvent",
    "WeeklyUpdate",
    "WizardData",
    "EditIssue",
    "EditResult",
]
