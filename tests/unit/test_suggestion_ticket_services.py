"""Unit tests for the suggestion and ticket triage services."""

import pytest
from unittest.mock import MagicMock

from buildplan.config.errors import ValidationError
from buildplan.services.suggestion_service import (
    SUGGESTION_COST_SAVING,
    SuggestionService,
    build_cost_saving_context,
    build_design_context,
)
from buildplan.services.ticket_service import TicketAnalysis, TicketService


def _respond(service, content):
    service._client.ainvoke.return_value = MagicMock(
        content=content,
        response_metadata={"token_usage": {"total_tokens": 80}}
    )


class TestSuggestionService:
    """Tests for SuggestionService."""

    def test_cost_context_lists_sections(self, sample_plan):
        context = build_cost_saving_context(sample_plan)

        assert "Total Cost: 1264000" in context
        assert '"section": "Materials"' in context

    def test_design_context(self, sample_plan):
        context = build_design_context(sample_plan)

        assert "Rooms: 3 Bed, 2 Bath" in context

    @pytest.mark.asyncio
    async def test_cost_saving(self, mock_llm_service, mock_settings, sample_plan):
        _respond(mock_llm_service, "  I've analyzed your plan and here are a few ideas...  ")
        service = SuggestionService(llm_service=mock_llm_service)

        text = await service.cost_saving(sample_plan)

        assert text.startswith("I've analyzed your plan")
        _, kwargs = mock_llm_service._client.ainvoke.call_args
        assert kwargs["temperature"] == mock_settings.llm_suggestion_temperature

    @pytest.mark.asyncio
    async def test_each_kind_uses_its_own_prompt(self, mock_llm_service, sample_plan):
        service = SuggestionService(llm_service=mock_llm_service)

        await service.material_alternatives(sample_plan)
        materials_messages = mock_llm_service._client.ainvoke.call_args[0][0]
        await service.design_improvements(sample_plan)
        design_messages = mock_llm_service._client.ainvoke.call_args[0][0]

        assert "materials engineer" in materials_messages[0].content
        assert "architect" in design_messages[0].content

    @pytest.mark.asyncio
    async def test_unknown_kind(self, mock_llm_service, sample_plan):
        service = SuggestionService(llm_service=mock_llm_service)

        with pytest.raises(ValueError):
            await service.suggest("landscaping", sample_plan)

    def test_known_kinds(self):
        assert SUGGESTION_COST_SAVING == "cost_saving"


class TestTicketService:
    """Tests for TicketService."""

    @pytest.mark.asyncio
    async def test_analyze_support_ticket(self, mock_llm_service):
        _respond(mock_llm_service, '{"subject": "Cement bags damaged by rain", "category": "Material"}')
        service = TicketService(llm_service=mock_llm_service)

        analysis = await service.analyze_support_ticket("Rain soaked 10 cement bags at the site")

        assert isinstance(analysis, TicketAnalysis)
        assert analysis.subject == "Cement bags damaged by rain"
        assert analysis.category == "Material"

    @pytest.mark.asyncio
    async def test_empty_description_rejected(self, mock_llm_service):
        service = TicketService(llm_service=mock_llm_service)

        with pytest.raises(ValidationError) as exc_info:
            await service.analyze_support_ticket("   ")

        assert exc_info.value.details["field"] == "description"
        mock_llm_service._client.ainvoke.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_category_rejected(self, mock_llm_service):
        _respond(mock_llm_service, '{"subject": "Noise", "category": "Neighbours"}')
        service = TicketService(llm_service=mock_llm_service)

        with pytest.raises(ValidationError):
            await service.analyze_support_ticket("Neighbours complain about noise")
