"""BuildPlan error handling.

Error codes, exceptions raised by the service clients, and the issue
records that plan edits report instead of raising.
"""

from typing import Optional, Dict, Any


# Error Codes
class ErrorCode:
    """Error code constants."""

    # Edit Issues (1xxx) - reported on EditResult, never raised
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_PRICE = "INVALID_PRICE"
    INVALID_PERCENTAGE = "INVALID_PERCENTAGE"
    ZERO_BASELINE = "ZERO_BASELINE"
    MATERIAL_NOT_FOUND = "MATERIAL_NOT_FOUND"
    ROUNDING_DRIFT = "ROUNDING_DRIFT"
    NO_ACTIVE_PLAN = "NO_ACTIVE_PLAN"

    # Budget Linking (2xxx)
    AMBIGUOUS_BUDGET_MATCH = "AMBIGUOUS_BUDGET_MATCH"
    BUDGET_ITEM_UNMATCHED = "BUDGET_ITEM_UNMATCHED"

    # Validation Errors (3xxx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_FIELD = "INVALID_FIELD"

    # Plan Generation (4xxx)
    PLAN_MALFORMED_RESPONSE = "PLAN_MALFORMED_RESPONSE"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    # LLM Errors (5xxx)
    LLM_ERROR = "LLM_ERROR"
    LLM_RATE_LIMIT = "LLM_RATE_LIMIT"
    LLM_CONTEXT_TOO_LONG = "LLM_CONTEXT_TOO_LONG"
    LLM_INVALID_JSON = "LLM_INVALID_JSON"


class BuildPlanError(Exception):
    """Base exception for BuildPlan errors.

    Provides structured error information for callers.

    Attributes:
        code: Error code from ErrorCode constants
        message: Human-readable error message
        details: Additional error context
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }

    def __repr__(self) -> str:
        return f"BuildPlanError(code={self.code!r}, message={self.message!r})"


class ValidationError(BuildPlanError):
    """Validation-specific error."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            details={**(details or {}), "field": field} if field else details
        )


class PlanGenerationError(BuildPlanError):
    """Plan generation failed.

    ``code`` is either PLAN_MALFORMED_RESPONSE (the service answered with
    something that is not a usable plan) or SERVICE_UNAVAILABLE (the
    service could not be reached or kept failing).
    """

    @property
    def is_malformed(self) -> bool:
        return self.code == ErrorCode.PLAN_MALFORMED_RESPONSE

    @property
    def is_unavailable(self) -> bool:
        return self.code == ErrorCode.SERVICE_UNAVAILABLE

    def user_message(self) -> str:
        """Message suitable for showing to the person who filled the wizard."""
        if self.is_malformed:
            return (
                "The estimator returned an incomplete blueprint. This can be a "
                "temporary issue. Please adjust your inputs or try again in a moment."
            )
        if self.is_unavailable:
            return (
                "The estimation service seems to be unavailable or overloaded. "
                "Please check your connection and try again shortly."
            )
        return "An unexpected error occurred while generating the blueprint. Please try again."
