"""
Response Models - API payloads returned by the planning endpoints.
"""

from typing import Any

from pydantic import BaseModel, Field

from toolplan.models.domain import StepResult


class PlanResponse(BaseModel):
    """Generated plan in the planner's array format plus dropped-step warnings."""

    plan: list[dict[str, Any]] = Field(default_factory=list)
    warnings: list[dict[str, Any]] = Field(default_factory=list)


class ExecuteResponse(BaseModel):
    """One result per executed step, in plan order."""

    results: list[StepResult] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error body for failed requests."""

    error_code: str
    message: str
