"""Pytest configuration and shared fixtures for BuildPlan tests."""

import os
import sys
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from typing import Dict, Any


# ============================================================================
# Ensure local imports work (buildplan/, tests/fixtures/)
# ============================================================================
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


from tests.fixtures.sample_plans import get_sample_plan_data  # noqa: E402


# ============================================================================
# Plan Fixtures
# ============================================================================

@pytest.fixture
def sample_plan_data() -> Dict[str, Any]:
    """Raw camelCase plan as the generation service returns it."""
    return get_sample_plan_data()


@pytest.fixture
def sample_plan(sample_plan_data):
    """Validated, unprepared ProjectPlan."""
    from buildplan.models.project_plan import ProjectPlan

    return ProjectPlan.model_validate(sample_plan_data)


@pytest.fixture
def unbalanced_plan(sample_plan_data):
    """Generated plan whose totalCost is 12345 more than its section totals."""
    from buildplan.models.project_plan import ProjectPlan

    sample_plan_data["totalCost"] += 12345
    return ProjectPlan.model_validate(sample_plan_data)


@pytest.fixture
def prepared_plan(sample_plan):
    """Plan with material keys linked and original quantities stamped."""
    from buildplan.engine.preparation import prepare_initial_plan

    plan, _ = prepare_initial_plan(sample_plan)
    return plan


@pytest.fixture
def workspace(sample_plan):
    """Active workspace seeded with the sample plan."""
    from buildplan.engine.workspace import PlanWorkspace

    ws = PlanWorkspace(debounce_ms=500, conserve_bulk_totals=True)
    ws.create_history(sample_plan)
    return ws


# ============================================================================
# LLM Mocks
# ============================================================================

@pytest.fixture
def mock_chat_openai():
    """Mock ChatOpenAI client."""
    mock = AsyncMock()
    mock.ainvoke.return_value = MagicMock(
        content="Mock response content",
        response_metadata={"token_usage": {"total_tokens": 100}}
    )
    return mock


@pytest.fixture
def mock_llm_service(mock_chat_openai):
    """LLMService wired to the mocked client, retrying without delay."""
    from buildplan.services.llm_service import LLMService

    with patch('buildplan.services.llm_service.ChatOpenAI', return_value=mock_chat_openai):
        service = LLMService(api_key="test-api-key", max_retries=3, retry_base_seconds=0)
        service._client = mock_chat_openai
        return service


# ============================================================================
# Settings
# ============================================================================

@pytest.fixture
def mock_settings(monkeypatch):
    """Override settings for a test; modules share the one settings object."""
    from buildplan.config.settings import settings

    monkeypatch.setattr(settings, "openai_api_key", "test-api-key")
    monkeypatch.setattr(settings, "llm_model", "gpt-4o")
    monkeypatch.setattr(settings, "llm_max_retries", 3)
    monkeypatch.setattr(settings, "llm_retry_base_seconds", 0)
    monkeypatch.setattr(settings, "edit_debounce_ms", 500)
    monkeypatch.setattr(settings, "bulk_rounding", "conserve")
    monkeypatch.setattr(settings, "log_level", "INFO")
    return settings
