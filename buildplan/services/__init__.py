"""BuildPlan service clients."""

from buildplan.services.llm_service import LLMService
from buildplan.services.plan_generation_service import PlanGenerationService
from buildplan.services.suggestion_service import SuggestionService
from buildplan.services.ticket_service import TicketAnalysis, TicketService

__all__ = [
    "LLMService",
    "PlanGenerationService",
    "SuggestionService",
    "TicketAnalysis",
    "TicketService",
]
