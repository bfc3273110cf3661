"""Unit tests for LLM service."""

import pytest
from unittest.mock import MagicMock, patch

from buildplan.config.errors import BuildPlanError, ErrorCode
from buildplan.services.llm_service import LLMService, classify_llm_error, strip_code_fences


class TestLLMService:
    """Tests for LLMService."""

    def test_initialization(self):
        """Test LLMService initialization."""
        service = LLMService(model="gpt-4-turbo", api_key="test-key", max_retries=5)

        assert service.model == "gpt-4-turbo"
        assert service.api_key == "test-key"
        assert service.max_retries == 5

    def test_default_initialization(self, mock_settings):
        """Test LLMService uses settings defaults."""
        service = LLMService()

        assert service.model == "gpt-4o"
        assert service.api_key == "test-api-key"
        assert service.max_retries == 3

    def test_client_created_lazily(self):
        with patch('buildplan.services.llm_service.ChatOpenAI') as mock_chat:
            service = LLMService(model="gpt-4o", api_key="test-key")
            mock_chat.assert_not_called()

            client = service.client

            mock_chat.assert_called_once_with(model="gpt-4o", api_key="test-key")
            assert service.client is client

    @pytest.mark.asyncio
    async def test_generate(self, mock_llm_service):
        """Test generate method."""
        from langchain_core.messages import HumanMessage

        result = await mock_llm_service.generate([HumanMessage(content="Hello")])

        assert result == {"content": "Mock response content", "tokens_used": 100}
        assert mock_llm_service.total_tokens_used == 100

    @pytest.mark.asyncio
    async def test_generate_passes_temperature(self, mock_llm_service):
        await mock_llm_service.generate_with_system_prompt(
            system_prompt="You are a helpful assistant.",
            user_message="What is 2+2?",
            temperature=0.5,
            max_tokens=200,
        )

        _, kwargs = mock_llm_service._client.ainvoke.call_args
        assert kwargs == {"temperature": 0.5, "max_tokens": 200}

    @pytest.mark.asyncio
    async def test_generate_json(self, mock_llm_service):
        """Test generate_json method."""
        mock_llm_service._client.ainvoke.return_value = MagicMock(
            content='{"result": "success", "value": 42}',
            response_metadata={"token_usage": {"total_tokens": 50}}
        )

        result = await mock_llm_service.generate_json(
            system_prompt="Return JSON.",
            user_message="Give me a number."
        )

        assert result["content"] == {"result": "success", "value": 42}
        assert result["tokens_used"] == 50

    @pytest.mark.asyncio
    async def test_generate_json_handles_markdown(self, mock_llm_service):
        """Test generate_json handles markdown code blocks."""
        mock_llm_service._client.ainvoke.return_value = MagicMock(
            content='```json\n{"result": "success"}\n```',
            response_metadata={"token_usage": {"total_tokens": 50}}
        )

        result = await mock_llm_service.generate_json(
            system_prompt="Return JSON.",
            user_message="Give me JSON."
        )

        assert result["content"]["result"] == "success"

    @pytest.mark.asyncio
    async def test_generate_json_invalid_response(self, mock_llm_service):
        """Test generate_json handles invalid JSON."""
        mock_llm_service._client.ainvoke.return_value = MagicMock(
            content='This is not valid JSON',
            response_metadata={"token_usage": {"total_tokens": 50}}
        )

        with pytest.raises(BuildPlanError) as exc_info:
            await mock_llm_service.generate_json(
                system_prompt="Return JSON.",
                user_message="Give me JSON."
            )

        assert exc_info.value.code == ErrorCode.LLM_INVALID_JSON

    @pytest.mark.asyncio
    async def test_rate_limit_retried(self, mock_llm_service):
        ok = MagicMock(content="done", response_metadata={"token_usage": {"total_tokens": 10}})
        mock_llm_service._client.ainvoke.side_effect = [Exception("Error code: 429 rate_limit"), ok]

        result = await mock_llm_service.generate_with_system_prompt("sys", "hi")

        assert result["content"] == "done"
        assert mock_llm_service._client.ainvoke.await_count == 2

    @pytest.mark.asyncio
    async def test_unavailable_gives_up_after_max_retries(self, mock_llm_service):
        mock_llm_service._client.ainvoke.side_effect = Exception("503 Service Unavailable")

        with pytest.raises(BuildPlanError) as exc_info:
            await mock_llm_service.generate_with_system_prompt("sys", "hi")

        assert exc_info.value.code == ErrorCode.SERVICE_UNAVAILABLE
        assert mock_llm_service._client.ainvoke.await_count == 3

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self, mock_llm_service):
        mock_llm_service._client.ainvoke.side_effect = Exception("invalid api key")

        with pytest.raises(BuildPlanError) as exc_info:
            await mock_llm_service.generate_with_system_prompt("sys", "hi")

        assert exc_info.value.code == ErrorCode.LLM_ERROR
        assert mock_llm_service._client.ainvoke.await_count == 1

    def test_token_tracking(self, mock_llm_service):
        """Test token usage tracking."""
        assert mock_llm_service.total_tokens_used == 0


class TestHelpers:

    @pytest.mark.parametrize("message,code", [
        ("Rate limit reached", ErrorCode.LLM_RATE_LIMIT),
        ("This model's maximum context length is 128000", ErrorCode.LLM_CONTEXT_TOO_LONG),
        ("Connection error", ErrorCode.SERVICE_UNAVAILABLE),
        ("Request timed out", ErrorCode.SERVICE_UNAVAILABLE),
        ("something odd", ErrorCode.LLM_ERROR),
    ])
    def test_classify_llm_error(self, message, code):
        assert classify_llm_error(Exception(message)).code == code

    def test_strip_code_fences(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'
