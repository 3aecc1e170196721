"""
Request Models - API payloads for the planning endpoints.

Tool definitions arrive inline with every request: the engine does not own
agent or tool configuration, it only plans and executes against what the
caller supplies.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from toolplan.models.domain import InboundEmail, PlanStep, ToolDefinition


class PlanRequest(BaseModel):
    """
    Request body for POST /v1/plans.

    Attributes:
        email: Sender identity and body.
        tools: The agent's tool catalog for this cycle.
        interaction_id: Correlates logs and audit records with the email.
    """

    email: InboundEmail
    tools: list[ToolDefinition] = Field(default_factory=list)
    interaction_id: Optional[str] = None


class ExecuteRequest(BaseModel):
    """
    Request body for POST /v1/plans/execute.

    Attributes:
        plan: Steps to run, in the planner's array format.
        tools: Tool definitions the steps refer to.
        secrets: Credentials keyed by provider name (overrides tool credentials).
        interaction_id: Correlates logs and audit records with the email.
    """

    plan: list[PlanStep] = Field(default_factory=list)
    tools: list[ToolDefinition] = Field(default_factory=list)
    secrets: Optional[dict[str, Any]] = None
    interaction_id: Optional[str] = None


class RunRequest(PlanRequest):
    """Request body for POST /v1/plans/run (plan, execute, digest)."""

    secrets: Optional[dict[str, Any]] = None
