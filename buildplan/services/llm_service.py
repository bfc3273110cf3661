"""LLM service for BuildPlan.

Wraps LangChain's ChatOpenAI with token tracking, error classification,
exponential-backoff retries for transient failures, and JSON parsing.
"""

import json
from typing import Any, Dict, List, Optional

import structlog
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from buildplan.config.errors import BuildPlanError, ErrorCode
from buildplan.config.settings import settings

logger = structlog.get_logger()

RETRYABLE_CODES = (ErrorCode.LLM_RATE_LIMIT, ErrorCode.SERVICE_UNAVAILABLE)
MAX_RETRY_WAIT_SECONDS = 10

JSON_ONLY_INSTRUCTION = (
    "IMPORTANT: You MUST respond with valid JSON only. No markdown, no explanation, just JSON."
)


def classify_llm_error(error: Exception) -> BuildPlanError:
    """Map a provider exception to a BuildPlanError with a specific code."""
    error_msg = str(error)
    lowered = error_msg.lower()
    details = {"original_error": error_msg}

    if "rate_limit" in lowered or "rate limit" in lowered or "429" in lowered:
        return BuildPlanError(ErrorCode.LLM_RATE_LIMIT, "LLM rate limit exceeded", details)
    if "context_length" in lowered or "maximum context" in lowered:
        return BuildPlanError(ErrorCode.LLM_CONTEXT_TOO_LONG, "Input too long for model context", details)
    if (
        "503" in lowered
        or "overloaded" in lowered
        or "unavailable" in lowered
        or "timed out" in lowered
        or "connection" in lowered
    ):
        return BuildPlanError(ErrorCode.SERVICE_UNAVAILABLE, "LLM service unavailable", details)
    return BuildPlanError(ErrorCode.LLM_ERROR, f"LLM generation failed: {error_msg}", details)


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, BuildPlanError) and error.code in RETRYABLE_CODES


def strip_code_fences(content: str) -> str:
    """Remove a surrounding markdown code block from an LLM answer."""
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


class LLMService:
    """Service for LLM operations using LangChain.

    Rate-limit and availability failures are retried with exponential
    backoff; anything else fails immediately.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        max_retries: Optional[int] = None,
        retry_base_seconds: Optional[float] = None
    ):
        """Initialize LLMService.

        Args:
            model: Model name (default from settings).
            api_key: OpenAI API key (default from settings).
            max_retries: Attempts per call (default from settings).
            retry_base_seconds: First backoff delay (default from settings).
        """
        self.model = model or settings.llm_model
        self.api_key = api_key or settings.openai_api_key
        self.max_retries = max_retries if max_retries is not None else settings.llm_max_retries
        self.retry_base_seconds = (
            retry_base_seconds if retry_base_seconds is not None
            else settings.llm_retry_base_seconds
        )

        self._client: Optional[ChatOpenAI] = None
        self._total_tokens_used = 0

    @property
    def client(self) -> ChatOpenAI:
        """Get LangChain ChatOpenAI client (lazy initialization)."""
        if self._client is None:
            self._client = ChatOpenAI(model=self.model, api_key=self.api_key)
        return self._client

    @property
    def total_tokens_used(self) -> int:
        return self._total_tokens_used

    async def _invoke_once(self, messages: List[BaseMessage], **kwargs: Any):
        try:
            return await self.client.ainvoke(messages, **kwargs)
        except Exception as e:
            raise classify_llm_error(e) from e

    async def generate(
        self,
        messages: List[BaseMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> Dict[str, Any]:
        """Generate a response from the LLM.

        Args:
            messages: List of LangChain messages.
            temperature: Optional sampling temperature for this call.
            max_tokens: Optional max tokens for response.

        Returns:
            Dict with content and token usage.

        Raises:
            BuildPlanError: If the call fails after retries.
        """
        kwargs: Dict[str, Any] = {}
        if temperature is not None:
            kwargs["temperature"] = temperature
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(1, self.max_retries)),
            wait=wait_exponential(multiplier=self.retry_base_seconds, max=MAX_RETRY_WAIT_SECONDS),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        "llm_retrying",
                        model=self.model,
                        attempt=attempt.retry_state.attempt_number,
                    )
                response = await self._invoke_once(messages, **kwargs)

        metadata = getattr(response, "response_metadata", None) or {}
        usage = metadata.get("token_usage", {})
        tokens_used = usage.get("total_tokens", 0)
        self._total_tokens_used += tokens_used

        logger.info(
            "llm_generated",
            model=self.model,
            tokens_used=tokens_used,
            content_length=len(response.content)
        )

        return {
            "content": response.content,
            "tokens_used": tokens_used
        }

    async def generate_with_system_prompt(
        self,
        system_prompt: str,
        user_message: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> Dict[str, Any]:
        """Generate a response with a system prompt."""
        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_message)
        ]
        return await self.generate(messages, temperature=temperature, max_tokens=max_tokens)

    async def generate_json(
        self,
        system_prompt: str,
        user_message: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> Dict[str, Any]:
        """Generate a JSON response.

        Returns:
            Dict with parsed JSON content and token usage.

        Raises:
            BuildPlanError: LLM_INVALID_JSON if the answer is not valid JSON,
                or the generation error.
        """
        result = await self.generate_with_system_prompt(
            f"{system_prompt}\n\n{JSON_ONLY_INSTRUCTION}",
            user_message,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        try:
            parsed = json.loads(strip_code_fences(result["content"]))
        except json.JSONDecodeError as e:
            raise BuildPlanError(
                code=ErrorCode.LLM_INVALID_JSON,
                message="LLM did not return valid JSON",
                details={
                    "parse_error": str(e),
                    "raw_content": result["content"][:500]
                }
            )

        return {
            "content": parsed,
            "tokens_used": result["tokens_used"]
        }
