"""BuildPlan configuration.

This package contains:
- settings: Environment variables and configuration
- errors: Custom exceptions and error codes
"""

from buildplan.config.settings import settings, configure_logging
from buildplan.config.errors import BuildPlanError, ErrorCode

__all__ = [
    "settings",
    "configure_logging",
    "BuildPlanError",
    "ErrorCode",
]
