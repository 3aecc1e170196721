"""
Custom exceptions for the Tool Plan Engine.

This module provides a hierarchy of custom exceptions. All exceptions inherit
from ToolPlanException and carry an error code for consistent logging and
API responses.

Propagation rules:
- PlanGenerationError aborts the whole cycle for one email.
- ResolutionError and ToolInvocationError are fatal to a single plan step
  only; the executor converts them into recorded step results.
- ToolValidationWarning never leaves the generator; it is logged and returned
  alongside the plan when a step is dropped.
"""

from enum import Enum
from typing import Any, Optional


# =============================================================================
# Error Codes Enum
# =============================================================================


class ErrorCode(str, Enum):
    """
    Error codes for Tool Plan Engine exceptions.

    These codes provide a consistent way to identify error types
    across the API and in logging.
    """

    ENGINE_ERROR = "ENGINE_ERROR"
    PLAN_GENERATION_ERROR = "PLAN_GENERATION_ERROR"
    RESOLUTION_ERROR = "RESOLUTION_ERROR"
    TOOL_INVOCATION_ERROR = "TOOL_INVOCATION_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    AUDIT_SINK_ERROR = "AUDIT_SINK_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


# =============================================================================
# Base Exception
# =============================================================================


class ToolPlanException(Exception):
    """
    Base exception for all Tool Plan Engine errors.

    Attributes:
        message: Human-readable error message.
        error_code: Machine-readable error code from ErrorCode enum.
    """

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.ENGINE_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            **kwargs: Additional attributes to set on the exception.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code

        for key, value in kwargs.items():
            setattr(self, key, value)


# =============================================================================
# PlanGenerationError
# =============================================================================


class PlanGenerationError(ToolPlanException):
    """
    Exception for a failed planning attempt.

    Raised when the completion call fails, the model finishes for any reason
    other than STOP, or its text cannot be parsed into a plan array. Carries
    the same diagnostics that were written to the audit sink.

    Attributes:
        prompt: The planning prompt that was sent.
        raw_response: Raw provider response (None if the call never returned).
        model: Model identifier used for the attempt.
    """

    def __init__(
        self,
        message: str,
        prompt: Optional[str] = None,
        raw_response: Any = None,
        model: Optional[str] = None,
        error_code: str = ErrorCode.PLAN_GENERATION_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.prompt = prompt
        self.raw_response = raw_response
        self.model = model


# =============================================================================
# ResolutionError
# =============================================================================


class ResolutionError(ToolPlanException):
    """
    Exception for a reference expression that could not be resolved.

    Attributes:
        expression: The reference expression text (e.g. "steps[0].outputs.id").
        path: The portion of the path walked before the failure.
        reason: Short machine-friendly reason, e.g. "missing_field".
    """

    def __init__(
        self,
        message: str,
        expression: Optional[str] = None,
        path: Optional[str] = None,
        reason: Optional[str] = None,
        error_code: str = ErrorCode.RESOLUTION_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.expression = expression
        self.path = path
        self.reason = reason


class ReferenceSyntaxError(ResolutionError):
    """Raised when a {{steps...}} token does not match the reference grammar."""

    def __init__(self, message: str, expression: Optional[str] = None) -> None:
        super().__init__(message, expression=expression, reason="syntax")


# =============================================================================
# ToolInvocationError
# =============================================================================


class ToolInvocationError(ToolPlanException):
    """
    Exception for a failed tool HTTP call.

    Covers transport errors, timeouts, non-2xx responses and 2xx responses
    whose body is not JSON.

    Attributes:
        tool_name: Name of the tool that failed.
        status_code: HTTP status code (None for transport errors).
        raw_response: Raw response text, if any was received.
    """

    def __init__(
        self,
        message: str,
        tool_name: str,
        status_code: Optional[int] = None,
        raw_response: str = "",
        error_code: str = ErrorCode.TOOL_INVOCATION_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.tool_name = tool_name
        self.status_code = status_code
        self.raw_response = raw_response


# =============================================================================
# ProviderError
# =============================================================================


class ProviderError(ToolPlanException):
    """
    Exception for completion model provider issues.

    Attributes:
        provider: Name of the provider (e.g., "gemini").
        status_code: HTTP status code from the provider API (if applicable).
        raw_response: Decoded error body from the provider (if any).
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: Optional[int] = None,
        raw_response: Any = None,
        error_code: str = ErrorCode.PROVIDER_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.provider = provider
        self.status_code = status_code
        self.raw_response = raw_response


# =============================================================================
# AuditSinkError / ConfigurationError
# =============================================================================


class AuditSinkError(ToolPlanException):
    """Exception raised when an audit record cannot be stored."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, ErrorCode.AUDIT_SINK_ERROR, **kwargs)


class ConfigurationError(ToolPlanException):
    """Exception raised for invalid engine configuration (e.g. missing API key)."""

    def __init__(self, message: str, setting: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, **kwargs)
        self.setting = setting


# =============================================================================
# ToolValidationWarning
# =============================================================================


class ToolValidationWarning(UserWarning):
    """
    Warning for a plan step that was dropped during validation.

    Raised inside the generator only. Instances are logged and collected on
    the generation result so callers can see why the executed plan is shorter
    than the model output.

    Attributes:
        index: Position of the step in the raw model output.
        tool_name: Tool name the step referred to (if any).
        reason: Short reason, e.g. "unknown_tool" or "forward_reference".
    """

    def __init__(
        self,
        message: str,
        index: int,
        tool_name: Optional[str] = None,
        reason: str = "invalid_step",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.index = index
        self.tool_name = tool_name
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses and audit output."""
        return {
            "index": self.index,
            "tool_name": self.tool_name,
            "reason": self.reason,
            "message": self.message,
        }
