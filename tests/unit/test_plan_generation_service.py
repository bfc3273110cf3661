"""Unit tests for the plan generation service."""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from buildplan.config.errors import BuildPlanError, ErrorCode, PlanGenerationError
from buildplan.models.project_plan import WizardData
from buildplan.services.plan_generation_service import (
    PLANNER_SYSTEM_PROMPT,
    PlanGenerationService,
    build_plan_prompt,
)
from tests.fixtures.sample_plans import get_sample_plan_data, get_wizard_data


@pytest.fixture
def wizard():
    return WizardData.model_validate(get_wizard_data())


@pytest.fixture
def generated_plan_json():
    """Plan as the model writes it: no wizardData."""
    data = get_sample_plan_data()
    del data["wizardData"]
    return data


def _respond(service, content):
    service._client.ainvoke.return_value = MagicMock(
        content=content,
        response_metadata={"token_usage": {"total_tokens": 1200}}
    )


class TestPrompts:

    def test_prompt_includes_wizard_answers(self, wizard):
        prompt = build_plan_prompt(wizard)

        assert "Location: Bengaluru" in prompt
        assert "Plot Area: 1000" in prompt
        assert "Additional: Pooja Room" in prompt

    def test_system_prompt_lists_sections(self):
        assert "Materials" in PLANNER_SYSTEM_PROMPT
        assert "Miscellaneous" in PLANNER_SYSTEM_PROMPT


class TestPlanGenerationService:
    """Tests for create_project_plan()."""

    @pytest.mark.asyncio
    async def test_creates_plan_with_wizard_data(self, mock_llm_service, mock_settings, wizard, generated_plan_json):
        _respond(mock_llm_service, json.dumps(generated_plan_json))
        service = PlanGenerationService(llm_service=mock_llm_service)

        plan = await service.create_project_plan(wizard)

        assert plan.id == "PRJ-BLR-001"
        assert plan.total_cost == 1264000
        assert plan.wizard_data.location == "Bengaluru"
        _, kwargs = mock_llm_service._client.ainvoke.call_args
        assert kwargs["temperature"] == mock_settings.llm_plan_temperature

    @pytest.mark.asyncio
    async def test_invalid_json_is_malformed(self, mock_llm_service, wizard):
        _respond(mock_llm_service, "I could not build a plan, sorry.")
        service = PlanGenerationService(llm_service=mock_llm_service)

        with pytest.raises(PlanGenerationError) as exc_info:
            await service.create_project_plan(wizard)

        assert exc_info.value.is_malformed
        assert exc_info.value.details["cause"] == ErrorCode.LLM_INVALID_JSON

    @pytest.mark.asyncio
    async def test_missing_total_cost_is_malformed(self, mock_llm_service, wizard, generated_plan_json):
        del generated_plan_json["totalCost"]
        _respond(mock_llm_service, json.dumps(generated_plan_json))
        service = PlanGenerationService(llm_service=mock_llm_service)

        with pytest.raises(PlanGenerationError) as exc_info:
            await service.create_project_plan(wizard)

        assert exc_info.value.code == ErrorCode.PLAN_MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_schema_mismatch_is_malformed(self, mock_llm_service, wizard, generated_plan_json):
        generated_plan_json["materialQuantities"][0]["quantity"] = "lots"
        _respond(mock_llm_service, json.dumps(generated_plan_json))
        service = PlanGenerationService(llm_service=mock_llm_service)

        with pytest.raises(PlanGenerationError) as exc_info:
            await service.create_project_plan(wizard)

        assert exc_info.value.is_malformed

    @pytest.mark.asyncio
    async def test_json_array_is_malformed(self, mock_llm_service, wizard):
        _respond(mock_llm_service, "[1, 2, 3]")
        service = PlanGenerationService(llm_service=mock_llm_service)

        with pytest.raises(PlanGenerationError) as exc_info:
            await service.create_project_plan(wizard)

        assert exc_info.value.is_malformed

    @pytest.mark.asyncio
    async def test_llm_failure_is_unavailable(self, wizard):
        llm = MagicMock()
        llm.generate_json = AsyncMock(
            side_effect=BuildPlanError(ErrorCode.LLM_RATE_LIMIT, "LLM rate limit exceeded")
        )
        service = PlanGenerationService(llm_service=llm)

        with pytest.raises(PlanGenerationError) as exc_info:
            await service.create_project_plan(wizard)

        assert exc_info.value.is_unavailable
        assert "unavailable" in exc_info.value.user_message()
