"""
Core module for the Tool Plan Engine.

This module contains configuration, exceptions, and shared utilities.
"""

from toolplan.core.config import Settings, get_settings
from toolplan.core.exceptions import (
    AuditSinkError,
    ConfigurationError,
    ErrorCode,
    PlanGenerationError,
    ProviderError,
    ReferenceSyntaxError,
    ResolutionError,
    ToolInvocationError,
    ToolPlanException,
    ToolValidationWarning,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "ErrorCode",
    "ToolPlanException",
    "PlanGenerationError",
    "ResolutionError",
    "ReferenceSyntaxError",
    "ToolInvocationError",
    "ProviderError",
    "AuditSinkError",
    "ConfigurationError",
    "ToolValidationWarning",
]
