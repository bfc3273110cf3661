"""Plan generation service for BuildPlan.

Turns the intake wizard's answers into a fully populated ProjectPlan using
the LLM, and tells malformed answers apart from an unavailable service.
"""

from typing import Any, Dict, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from buildplan.config.errors import BuildPlanError, ErrorCode, PlanGenerationError
from buildplan.config.settings import settings
from buildplan.models.project_plan import BudgetSectionName, ProjectPlan, WizardData
from buildplan.services.llm_service import LLMService

logger = structlog.get_logger()

PLANNER_SYSTEM_PROMPT = """You are an expert construction project planner for the Indian market, acting as a "Digital Constructor".
Create a complete, multi-stage project plan from the wizard specifications. All cost estimates for materials and labour MUST follow current market rates in the given city.

Respond with one JSON object with these keys:
- id: a unique project ID
- totalCost: total estimated construction cost in INR
- costPerSqFt: average cost per square foot in INR
- budgetBreakdown: list of sections {sectionName, totalCost, items}. sectionName is one of: """ + ", ".join(
    section.value for section in BudgetSectionName
) + """.
  Each item is {item, cost, details, floorBreakdown}. Items such as Brickwork, Concrete Work, Flooring and Plastering MUST have a floorBreakdown list of {floor, cost} ("Foundation", "Ground Floor", "First Floor", ...).
  The Materials section has one item per key material whose label contains the material name.
- chatHistory: one welcome message {sender: "advisor", text, timestamp}
- paymentSchedule: milestones {milestone, percentage, amount, status}. The first is "Booking Amount" (10% of total) with status "Due"; all others "Pending".
- paymentStatus: "Pending Booking"
- timeline: stages {stage, expectedDate, status}; the first "In Progress", the rest "Pending"
- weeklyUpdates: 1-2 updates {date, engineerNotes, photos, materialLogs}
- supportTickets: 1-2 sample tickets {id, subject, category, status, assignedTo, expectedResolution, activity}
- snagList: a few {description, status} items
- materialQuantities: key materials (Cement, Steel, Bricks, Sand, Aggregate) broken down by floor, one entry per material per floor {material, quantity, unit, unitPrice, floor}: floor 0 is the foundation, floor 1 the ground floor, and so on up to the number of floors. Quantities in bags MUST be whole numbers."""


def build_plan_prompt(wizard: WizardData) -> str:
    """Describe the wizard specifications for the planner."""
    rooms = ", ".join(wizard.additional_rooms) or "None"
    return f"""Wizard Specifications:
- Location: {wizard.location}
- Plot Area: {wizard.plot_area} sq ft
- Floors: {wizard.floors}, Duplex: {wizard.is_duplex}
- Rooms: {wizard.bedrooms} Bed, {wizard.bathrooms} Bath, Additional: {rooms}
- Quality: {wizard.construction_quality}
- Structure: Foundation: {wizard.foundation_type}, Walls: {wizard.wall_type}
- Finishing: Flooring: {wizard.flooring_type}, Kitchen: {wizard.kitchen_type}, Doors/Windows: {wizard.door_window_material}, False Ceiling: {wizard.has_false_ceiling}
- Utilities: Electrical: {wizard.electrical_spec}, Sump: {wizard.has_sump}, Solar: {wizard.has_solar}, Compound Wall: {wizard.has_compound_wall}
- Notes: {wizard.additional_notes or ""}

All prices must reflect market rates in {wizard.location}."""


class PlanGenerationService:
    """Generates the initial ProjectPlan for a set of wizard answers."""

    def __init__(self, llm_service: Optional[LLMService] = None):
        self.llm = llm_service or LLMService()

    def parse_plan(self, content: Any, wizard: WizardData) -> ProjectPlan:
        """Validate a raw JSON answer into a ProjectPlan.

        Raises:
            PlanGenerationError: PLAN_MALFORMED_RESPONSE if the answer is
                not a usable plan.
        """
        if not isinstance(content, dict):
            raise PlanGenerationError(
                ErrorCode.PLAN_MALFORMED_RESPONSE,
                "Plan response is not a JSON object",
                {"type": type(content).__name__},
            )
        if not content.get("totalCost") or not content.get("budgetBreakdown"):
            raise PlanGenerationError(
                ErrorCode.PLAN_MALFORMED_RESPONSE,
                "Plan response is missing totalCost or budgetBreakdown",
                {"keys": sorted(content.keys())},
            )

        data: Dict[str, Any] = dict(content)
        data["wizardData"] = wizard.model_dump(by_alias=True, exclude_none=True)
        try:
            return ProjectPlan.model_validate(data)
        except PydanticValidationError as e:
            raise PlanGenerationError(
                ErrorCode.PLAN_MALFORMED_RESPONSE,
                "Plan response does not match the plan schema",
                {"errors": e.errors(include_url=False)[:10]},
            )

    async def create_project_plan(self, wizard: WizardData) -> ProjectPlan:
        """Generate a project plan from wizard answers.

        Raises:
            PlanGenerationError: PLAN_MALFORMED_RESPONSE or SERVICE_UNAVAILABLE.
        """
        logger.info("plan_generation_started", location=wizard.location, floors=wizard.floors)
        try:
            result = await self.llm.generate_json(
                PLANNER_SYSTEM_PROMPT,
                build_plan_prompt(wizard),
                temperature=settings.llm_plan_temperature,
            )
        except BuildPlanError as e:
            code = (
                ErrorCode.PLAN_MALFORMED_RESPONSE if e.code == ErrorCode.LLM_INVALID_JSON
                else ErrorCode.SERVICE_UNAVAILABLE
            )
            logger.error("plan_generation_failed", code=code, cause=e.code, error=e.message)
            raise PlanGenerationError(code, e.message, {**e.details, "cause": e.code}) from e

        try:
            plan = self.parse_plan(result["content"], wizard)
        except PlanGenerationError as e:
            logger.error("plan_generation_failed", code=e.code, error=e.message)
            raise

        logger.info(
            "plan_generation_completed",
            plan_id=plan.id,
            total_cost=plan.total_cost,
            tokens_used=result["tokens_used"],
        )
        return plan
