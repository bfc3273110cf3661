"""Support ticket triage for BuildPlan.

Turns a free-text site issue description into a ticket subject and
category before the ticket is raised on the plan.
"""

from typing import Optional

import structlog
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from buildplan.config.errors import ValidationError
from buildplan.config.settings import settings
from buildplan.models.project_plan import TicketCategory
from buildplan.services.llm_service import LLMService

logger = structlog.get_logger()

MAX_SUBJECT_WORDS = 10

TICKET_SYSTEM_PROMPT = f"""Analyze a user-provided description of an issue at a construction site.
Generate a short, clear subject line (no more than {MAX_SUBJECT_WORDS} words) and select the best category for the support ticket.

Respond with a JSON object {{"subject": "...", "category": "..."}} where category is one of: """ + ", ".join(
    category.value for category in TicketCategory
) + "."


class TicketAnalysis(BaseModel):
    """Subject and category suggested for a support ticket."""

    subject: str = Field(..., min_length=1)
    category: TicketCategory

    class Config:
        use_enum_values = True


class TicketService:
    """Classifies site issues into support tickets."""

    def __init__(self, llm_service: Optional[LLMService] = None):
        self.llm = llm_service or LLMService()

    async def analyze_support_ticket(self, description: str) -> TicketAnalysis:
        """Suggest a subject and category for an issue description.

        Raises:
            ValidationError: If the description is empty or the answer does
                not contain a usable subject and category.
            BuildPlanError: If the LLM call fails.
        """
        if not description or not description.strip():
            raise ValidationError("Issue description is required", field="description")

        result = await self.llm.generate_json(
            TICKET_SYSTEM_PROMPT,
            f'Issue Description: "{description.strip()}"',
            temperature=settings.llm_ticket_temperature,
        )

        content = result["content"]
        if not isinstance(content, dict):
            raise ValidationError("Ticket analysis is not a JSON object")
        try:
            analysis = TicketAnalysis.model_validate(content)
        except PydanticValidationError as e:
            raise ValidationError(
                "Ticket analysis is missing a valid subject or category",
                details={"errors": e.errors(include_url=False)},
            )

        logger.info("ticket_analyzed", category=analysis.category, subject=analysis.subject)
        return analysis
