"""Project plan models for BuildPlan.

Pydantic models for the project plan snapshot produced by the plan
generation service and edited by the engine. Field aliases follow the
camelCase JSON the generation service returns.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from buildplan.utils.numbers import is_discrete_unit, round_half_up


# =============================================================================
# ENUMS
# =============================================================================


class ConstructionQuality(str, Enum):
    """Quality tier chosen in the intake wizard."""

    BASIC = "Basic"
    STANDARD = "Standard"
    PREMIUM = "Premium"
    ECO_FRIENDLY = "Eco-Friendly"
    LUXURY = "Luxury"


class BudgetSectionName(str, Enum):
    """Cost buckets of the budget breakdown."""

    STRUCTURE = "Structure"
    MATERIALS = "Materials"
    LABOUR = "Labour"
    ELECTRICAL = "Electrical"
    PLUMBING = "Plumbing"
    FINISHING = "Finishing"
    MISCELLANEOUS = "Miscellaneous"


class MessageSender(str, Enum):
    USER = "user"
    ADVISOR = "advisor"


class MilestoneStatus(str, Enum):
    COMPLETED = "Completed"
    DUE = "Due"
    PENDING = "Pending"


class PaymentStatus(str, Enum):
    PENDING_BOOKING = "Pending Booking"
    BOOKING_PAID = "Booking Paid"
    FULLY_PAID = "Fully Paid"


class TimelineStatus(str, Enum):
    COMPLETED = "Completed"
    IN_PROGRESS = "In Progress"
    PENDING = "Pending"
    DELAYED = "Delayed"


class TicketCategory(str, Enum):
    """Support ticket categories, shared with the ticket classifier."""

    MATERIAL = "Material"
    WORK_QUALITY = "Work Quality"
    DELAY = "Delay"
    SAFETY = "Safety"
    OTHER = "Other"


class TicketStatus(str, Enum):
    OPEN = "Open"
    ASSIGNED = "Assigned"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"


class SnagStatus(str, Enum):
    REPORTED = "Reported"
    FIXED = "Fixed"
    VERIFIED = "Verified"


# =============================================================================
# INTAKE
# =============================================================================


class WizardData(BaseModel):
    """Requirements collected by the intake wizard.

    Every field is optional: plans keep whatever subset the wizard
    collected.
    """

    location: Optional[str] = Field(default=None, description="City or locality")
    plot_area: Optional[float] = Field(
        default=None, alias="plotArea", ge=0, description="Plot area in sq ft"
    )
    floors: Optional[int] = Field(default=None, ge=0, description="Number of floors")
    is_duplex: Optional[bool] = Field(default=None, alias="isDuplex")
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)
    additional_rooms: List[str] = Field(default_factory=list, alias="additionalRooms")
    construction_quality: Optional[ConstructionQuality] = Field(
        default=None, alias="constructionQuality"
    )
    foundation_type: Optional[str] = Field(default=None, alias="foundationType")
    wall_type: Optional[str] = Field(default=None, alias="wallType")
    flooring_type: Optional[str] = Field(default=None, alias="flooringType")
    has_false_ceiling: Optional[bool] = Field(default=None, alias="hasFalseCeiling")
    kitchen_type: Optional[str] = Field(default=None, alias="kitchenType")
    door_window_material: Optional[str] = Field(default=None, alias="doorWindowMaterial")
    electrical_spec: Optional[str] = Field(default=None, alias="electricalSpec")
    has_sump: Optional[bool] = Field(default=None, alias="hasSump")
    has_solar: Optional[bool] = Field(default=None, alias="hasSolar")
    has_compound_wall: Optional[bool] = Field(default=None, alias="hasCompoundWall")
    additional_notes: Optional[str] = Field(default=None, alias="additionalNotes")

    class Config:
        populate_by_name = True
        use_enum_values = True


# =============================================================================
# BUDGET
# =============================================================================


class FloorCost(BaseModel):
    """Cost of a budget item on one level ("Foundation", "Ground Floor", ...)."""

    floor: str
    cost: float


class BudgetItem(BaseModel):
    """A budget line item.

    When ``floor_breakdown`` is present, ``cost`` is the sum of it.
    ``material_key`` links the item to the material whose quantities
    drive its cost; it is set once when the plan is prepared.
    """

    item: str = Field(description="Line item label")
    cost: float = Field(description="Line item cost")
    details: Optional[str] = Field(default=None)
    floor_breakdown: Optional[List[FloorCost]] = Field(default=None, alias="floorBreakdown")
    material_key: Optional[str] = Field(
        default=None,
        alias="materialKey",
        description="Material name this item is costed from"
    )

    class Config:
        populate_by_name = True

    @property
    def has_floor_breakdown(self) -> bool:
        return bool(self.floor_breakdown)


class BudgetSection(BaseModel):
    """A named cost bucket owning an ordered list of items."""

    section_name: BudgetSectionName = Field(alias="sectionName")
    total_cost: float = Field(alias="totalCost")
    items: List[BudgetItem] = Field(default_factory=list)

    class Config:
        populate_by_name = True
        use_enum_values = True


# =============================================================================
# MATERIALS
# =============================================================================


class MaterialQuantity(BaseModel):
    """Quantity of one material on one floor.

    Floor 0 is foundation/common works, floor n the n-th level. Quantities
    of discrete units (anything sold by the bag) are whole numbers.
    """

    material: str = Field(description="Material name, e.g. Cement")
    floor: int = Field(ge=0, description="0 for foundation, 1 for ground floor, ...")
    quantity: float = Field(ge=0)
    unit: str = Field(description="e.g. bags, tonnes, pieces")
    unit_price: float = Field(alias="unitPrice", ge=0)
    original_quantity: Optional[float] = Field(
        default=None,
        alias="originalQuantity",
        description="Quantity when the plan was generated"
    )

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def whole_discrete_quantity(self) -> "MaterialQuantity":
        if self.is_discrete:
            self.quantity = round_half_up(self.quantity)
        return self

    @property
    def is_discrete(self) -> bool:
        return is_discrete_unit(self.unit)

    @property
    def line_cost(self) -> float:
        return self.quantity * self.unit_price


# =============================================================================
# COLLABORATOR-OWNED DATA
# =============================================================================


class ChatMessage(BaseModel):
    sender: MessageSender
    text: str
    timestamp: str = Field(description="ISO 8601 timestamp")

    class Config:
        use_enum_values = True


class PaymentMilestone(BaseModel):
    milestone: str
    percentage: float
    amount: float
    status: MilestoneStatus

    class Config:
        use_enum_values = True


class TimelineEvent(BaseModel):
    stage: str
    expected_date: str = Field(alias="expectedDate")
    actual_date: Optional[str] = Field(default=None, alias="actualDate")
    status: TimelineStatus

    class Config:
        populate_by_name = True
        use_enum_values = True


class WeeklyUpdate(BaseModel):
    date: str
    engineer_notes: str = Field(alias="engineerNotes")
    photos: List[str] = Field(default_factory=list)
    videos: Optional[List[str]] = Field(default=None)
    material_logs: str = Field(alias="materialLogs")
    user_notes: Optional[str] = Field(default=None, alias="userNotes")

    class Config:
        populate_by_name = True


class TicketActivity(BaseModel):
    update: str
    timestamp: str


class SupportTicket(BaseModel):
    id: str
    subject: str
    category: TicketCategory
    status: TicketStatus
    assigned_to: str = Field(alias="assignedTo")
    expected_resolution: str = Field(alias="expectedResolution")
    activity: List[TicketActivity] = Field(default_factory=list)

    class Config:
        populate_by_name = True
        use_enum_values = True


class SnagListItem(BaseModel):
    description: str
    status: SnagStatus

    class Config:
        use_enum_values = True


# =============================================================================
# PROJECT PLAN
# =============================================================================


class ProjectPlan(BaseModel):
    """One complete, self-consistent snapshot of a project's costs and materials.

    Snapshots are never mutated once they are handed to the history; the
    engine derives new snapshots through a draft (see engine.mutation).
    """

    id: str = Field(description="Unique project ID")
    wizard_data: WizardData = Field(default_factory=WizardData, alias="wizardData")
    total_cost: float = Field(alias="totalCost", description="Total cost")
    cost_per_sq_ft: float = Field(alias="costPerSqFt", description="Average cost per sq ft")
    budget_breakdown: List[BudgetSection] = Field(default_factory=list, alias="budgetBreakdown")
    material_quantities: List[MaterialQuantity] = Field(
        default_factory=list, alias="materialQuantities"
    )

    # Pass-through data owned by collaborators; cost recalculation ignores it
    chat_history: List[ChatMessage] = Field(default_factory=list, alias="chatHistory")
    payment_schedule: List[PaymentMilestone] = Field(default_factory=list, alias="paymentSchedule")
    payment_status: PaymentStatus = Field(
        default=PaymentStatus.PENDING_BOOKING, alias="paymentStatus"
    )
    timeline: List[TimelineEvent] = Field(default_factory=list)
    weekly_updates: List[WeeklyUpdate] = Field(default_factory=list, alias="weeklyUpdates")
    support_tickets: List[SupportTicket] = Field(default_factory=list, alias="supportTickets")
    snag_list: List[SnagListItem] = Field(default_factory=list, alias="snagList")

    class Config:
        populate_by_name = True
        use_enum_values = True

    @model_validator(mode="after")
    def unique_material_floors(self) -> "ProjectPlan":
        seen = set()
        for entry in self.material_quantities:
            key = (entry.material, entry.floor)
            if key in seen:
                raise ValueError(
                    f"Duplicate material entry for {entry.material!r} on floor {entry.floor}"
                )
            seen.add(key)
        return self

    def section(self, name: str) -> Optional[BudgetSection]:
        """Get a budget section by name."""
        for section in self.budget_breakdown:
            if section.section_name == name:
                return section
        return None

    def material_names(self) -> List[str]:
        """Material names in order of first appearance."""
        return list(dict.fromkeys(entry.material for entry in self.material_quantities))

    def entries_for(self, material: str) -> List[MaterialQuantity]:
        return [entry for entry in self.material_quantities if entry.material == material]

    def material_total(self, material: str) -> float:
        return sum(entry.quantity for entry in self.entries_for(material))

    def material_cost(self, material: str) -> float:
        return sum(entry.line_cost for entry in self.entries_for(material))

    def to_dict(self) -> Dict:
        """Convert to the camelCase dict the UI layer consumes."""
        return self.model_dump(by_alias=True, exclude_none=True)
