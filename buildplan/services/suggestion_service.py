"""Suggestion service for BuildPlan.

Free-text advice on an active plan: cost savings, material alternatives
and design improvements.
"""

import json
from typing import Optional

import structlog

from buildplan.config.settings import settings
from buildplan.models.project_plan import ProjectPlan
from buildplan.services.llm_service import LLMService

logger = structlog.get_logger()

SUGGESTION_COST_SAVING = "cost_saving"
SUGGESTION_MATERIAL_ALTERNATIVES = "material_alternatives"
SUGGESTION_DESIGN_IMPROVEMENTS = "design_improvements"

TONE_INSTRUCTION = (
    "Present your suggestions in a friendly, conversational tone, as a single "
    "coherent message using markdown."
)

COST_CONSULTANT_PROMPT = f"""You are an expert Indian construction cost consultant. A user has generated a project plan and is looking for ways to reduce the total cost.
Analyze their plan, especially the budget breakdown and wizard specifications, and give actionable, specific and practical cost-saving suggestions without significantly compromising the specified quality level.
{TONE_INSTRUCTION} Start with "I've analyzed your plan and here are a few ideas to optimize the budget:"."""

MATERIALS_ENGINEER_PROMPT = f"""You are an expert Indian construction materials engineer. A user is reviewing their project plan.
Analyze their specifications (quality, wall type, flooring) and suggest 1-2 alternative materials that offer better value, durability or aesthetics for their quality level, for example AAC blocks instead of red bricks.
{TONE_INSTRUCTION} Start with "Considering your project goals, here are some interesting material alternatives to think about:"."""

ARCHITECT_PROMPT = f"""You are an innovative Indian architect. A user is reviewing their project plan.
Analyze their specifications (plot area, floors, rooms) and suggest 1-2 creative design improvements focused on space utilization, natural light or aesthetics that suit a modern Indian home.
{TONE_INSTRUCTION} Start with "From an architectural perspective, here are a couple of ideas to enhance your home's design and feel:"."""


def _key_specs(plan: ProjectPlan) -> str:
    return json.dumps(plan.wizard_data.model_dump(by_alias=True, exclude_none=True), indent=2)


def build_cost_saving_context(plan: ProjectPlan) -> str:
    wizard = plan.wizard_data
    sections = [
        {"section": section.section_name, "cost": section.total_cost}
        for section in plan.budget_breakdown
    ]
    return f"""Project Context:
- Location: {wizard.location}
- Quality: {wizard.construction_quality}
- Total Cost: {plan.total_cost}
- Budget Breakdown: {json.dumps(sections, indent=2)}
- Key Specs: {_key_specs(plan)}"""


def build_material_context(plan: ProjectPlan) -> str:
    wizard = plan.wizard_data
    return f"""Project Context:
- Location: {wizard.location}
- Quality: {wizard.construction_quality}
- Walls: {wizard.wall_type}
- Flooring: {wizard.flooring_type}
- Key Specs: {_key_specs(plan)}"""


def build_design_context(plan: ProjectPlan) -> str:
    wizard = plan.wizard_data
    return f"""Project Context:
- Location: {wizard.location}
- Plot Area: {wizard.plot_area} sq ft
- Floors: {wizard.floors}
- Rooms: {wizard.bedrooms} Bed, {wizard.bathrooms} Bath
- Key Specs: {_key_specs(plan)}"""


SUGGESTION_PROMPTS = {
    SUGGESTION_COST_SAVING: (COST_CONSULTANT_PROMPT, build_cost_saving_context),
    SUGGESTION_MATERIAL_ALTERNATIVES: (MATERIALS_ENGINEER_PROMPT, build_material_context),
    SUGGESTION_DESIGN_IMPROVEMENTS: (ARCHITECT_PROMPT, build_design_context),
}


class SuggestionService:
    """Asks the LLM for advice on a project plan."""

    def __init__(self, llm_service: Optional[LLMService] = None):
        self.llm = llm_service or LLMService()

    async def suggest(self, kind: str, plan: ProjectPlan) -> str:
        """Generate one kind of suggestion for a plan.

        Raises:
            ValueError: If ``kind`` is not a known suggestion kind.
            BuildPlanError: If the LLM call fails.
        """
        if kind not in SUGGESTION_PROMPTS:
            raise ValueError(f"Unknown suggestion kind: {kind}")

        system_prompt, build_context = SUGGESTION_PROMPTS[kind]
        result = await self.llm.generate_with_system_prompt(
            system_prompt,
            build_context(plan),
            temperature=settings.llm_suggestion_temperature,
        )
        text = result["content"].strip()
        logger.info("suggestion_generated", kind=kind, plan_id=plan.id, length=len(text))
        return text

    async def cost_saving(self, plan: ProjectPlan) -> str:
        return await self.suggest(SUGGESTION_COST_SAVING, plan)

    async def material_alternatives(self, plan: ProjectPlan) -> str:
        return await self.suggest(SUGGESTION_MATERIAL_ALTERNATIVES, plan)

    async def design_improvements(self, plan: ProjectPlan) -> str:
        return await self.suggest(SUGGESTION_DESIGN_IMPROVEMENTS, plan)
