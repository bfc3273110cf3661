"""BuildPlan configuration settings.

Loads configuration from environment variables with sensible defaults.
The OpenAI key is read from the environment (or a local .env file).
"""

import logging
import os
from typing import Optional
from dataclasses import dataclass, field

import structlog
from dotenv import load_dotenv

# Load .env file for local development (API key, model overrides, etc.)
load_dotenv()


BULK_ROUNDING_CONSERVE = "conserve"
BULK_ROUNDING_PER_ENTRY = "per_entry"


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # LLM Configuration
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o"))
    llm_plan_temperature: float = field(
        default_factory=lambda: float(os.getenv("LLM_PLAN_TEMPERATURE", "0.2"))
    )
    llm_suggestion_temperature: float = field(
        default_factory=lambda: float(os.getenv("LLM_SUGGESTION_TEMPERATURE", "0.5"))
    )
    llm_ticket_temperature: float = field(
        default_factory=lambda: float(os.getenv("LLM_TICKET_TEMPERATURE", "0.1"))
    )
    llm_max_retries: int = field(default_factory=lambda: int(os.getenv("LLM_MAX_RETRIES", "3")))
    llm_retry_base_seconds: float = field(
        default_factory=lambda: float(os.getenv("LLM_RETRY_BASE_SECONDS", "1"))
    )
    openai_api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY"), repr=False
    )

    # Editing Configuration
    edit_debounce_ms: int = field(default_factory=lambda: int(os.getenv("EDIT_DEBOUNCE_MS", "500")))
    bulk_rounding: str = field(
        default_factory=lambda: os.getenv("BULK_ROUNDING", BULK_ROUNDING_CONSERVE).lower()
    )

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    def validate(self) -> None:
        """Validate required settings are present.

        Raises:
            ValueError: If required settings are missing or malformed.
        """
        if not self.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required for plan generation")
        if self.bulk_rounding not in (BULK_ROUNDING_CONSERVE, BULK_ROUNDING_PER_ENTRY):
            raise ValueError(
                f"BULK_ROUNDING must be '{BULK_ROUNDING_CONSERVE}' or "
                f"'{BULK_ROUNDING_PER_ENTRY}', got {self.bulk_rounding!r}"
            )

    @property
    def conserve_bulk_totals(self) -> bool:
        """Whether bulk quantity edits keep discrete material totals exact."""
        return self.bulk_rounding != BULK_ROUNDING_PER_ENTRY


def configure_logging(level: Optional[str] = None) -> None:
    """Configure structlog for console output at the given level."""
    level_name = (level or settings.log_level).upper()
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level_name, logging.INFO)
        ),
    )


# Singleton settings instance
settings = Settings()
