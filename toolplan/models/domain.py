"""
Domain Models - tool definitions, plans, step results and audit records.

These are the internal value objects passed between the planner, the
executor and the audit sink. JSON payloads (tool arguments and outputs) are
typed with pydantic's JsonValue, a tagged union of the JSON kinds, so
that no component needs ad hoc casts.

Pattern: Domain models as value objects (frozen pydantic models)
Pattern: Pydantic for validation at the model-output boundary
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, JsonValue, SecretStr


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ToolDefinition
# =============================================================================


class AuthScheme(str, Enum):
    """How a tool's credential is attached to the outbound request."""

    BEARER = "bearer"
    HEADER = "header"
    BODY = "body"
    NONE = "none"


class ToolDefinition(BaseModel):
    """
    An externally registered tool the planner may call.

    Owned by the configuration subsystem; treated as immutable for one
    planning and execution cycle.

    Attributes:
        id: Identifier assigned by the configuration subsystem.
        name: Unique name within a catalog, used verbatim in plans.
        category: Integration category (e.g. "shopify", "custom").
        invocation_url: Endpoint receiving a JSON POST.
        credential: Opaque secret for the endpoint.
        auth_scheme: How the credential is attached.
        auth_header: Header name for the "header" scheme.
        instructions: Human-readable usage instructions shown to the planner.
        input_shape: Schema describing the argument object.
        output_shape: Schema describing the response (optional).
        provider_name: Provider the tool belongs to, used for shared secrets.
        active: Inactive tools are hidden from the planner.

    Example:
        >>> tool = ToolDefinition(
        ...     name="getOrders",
        ...     invocation_url="https://tools.example.com/orders",
        ...     input_shape={
        ...         "type": "object",
        ...         "properties": {"customerId": {"type": "string"}},
        ...     },
        ... )
    """

    id: Optional[str] = Field(default=None, description="Tool identifier")
    name: str = Field(..., min_length=1, description="Unique tool name")
    category: str = Field(default="custom", description="Integration category")
    invocation_url: str = Field(..., description="Endpoint receiving a JSON POST")
    credential: Optional[SecretStr] = Field(
        default=None, description="Opaque secret for the endpoint"
    )
    auth_scheme: AuthScheme = Field(
        default=AuthScheme.BEARER, description="How the credential is attached"
    )
    auth_header: str = Field(
        default="x-api-key", description="Header name for the header scheme"
    )
    instructions: Optional[str] = Field(
        default=None, description="Usage instructions for the planner"
    )
    input_shape: Optional[dict[str, Any]] = Field(
        default=None, description="Schema of the argument object"
    )
    output_shape: Optional[dict[str, Any]] = Field(
        default=None, description="Schema of the response"
    )
    provider_name: Optional[str] = Field(
        default=None, description="Provider used to look up shared secrets"
    )
    active: bool = Field(default=True, description="Whether the tool is offered")

    model_config = {"frozen": True}


# =============================================================================
# Plan
# =============================================================================


class PlanStep(BaseModel):
    """
    One planned tool invocation.

    Arguments may hold literal JSON or strings containing reference
    expressions such as "{{steps[0].outputs.id}}".

    The model emits the tool name as "tool"; "toolName" and "tool_name"
    are accepted as well.
    """

    tool_name: str = Field(
        ...,
        validation_alias=AliasChoices("tool", "toolName", "tool_name"),
        serialization_alias="tool",
        description="Name of a tool in the catalog",
    )
    args: dict[str, JsonValue] = Field(
        default_factory=dict, description="Tool arguments"
    )
    reasoning: str = Field(default="", description="Why the planner chose this step")

    model_config = {"frozen": True, "populate_by_name": True}


class Plan(BaseModel):
    """An ordered sequence of plan steps (possibly empty)."""

    steps: list[PlanStep] = Field(default_factory=list)

    model_config = {"frozen": True}

    def __len__(self) -> int:
        return len(self.steps)

    def tool_names(self) -> list[str]:
        """Tool names in plan order."""
        return [step.tool_name for step in self.steps]

    def to_json_list(self) -> list[dict[str, Any]]:
        """Serialize to the array shape the planner produces."""
        return [step.model_dump(by_alias=True) for step in self.steps]


# =============================================================================
# StepResult
# =============================================================================


class StepStatus(str, Enum):
    """Two-valued outcome of one executed step."""

    SUCCESS = "success"
    ERROR = "error"


class StepResult(BaseModel):
    """
    Recorded outcome of one plan step.

    Created exactly once per step during execution. The collection of results
    keyed by index is the resolution context for later steps.

    Attributes:
        index: Position of the step in the plan.
        tool_name: Tool the step targeted.
        status: success or error.
        output: Parsed JSON body on success, None otherwise.
        error_message: Resolution or invocation failure detail.
        raw_response: Raw response text (truncated by the executor on error).
        arguments: Resolved arguments actually sent, None if never sent.
    """

    index: int = Field(..., ge=0)
    tool_name: str
    status: StepStatus
    output: JsonValue = None
    error_message: Optional[str] = None
    raw_response: str = ""
    arguments: Optional[dict[str, JsonValue]] = None

    model_config = {"frozen": True}

    @property
    def succeeded(self) -> bool:
        return self.status == StepStatus.SUCCESS

    @classmethod
    def success(
        cls,
        index: int,
        tool_name: str,
        output: Any,
        raw_response: str = "",
        arguments: Optional[dict[str, Any]] = None,
    ) -> "StepResult":
        return cls(
            index=index,
            tool_name=tool_name,
            status=StepStatus.SUCCESS,
            output=output,
            raw_response=raw_response,
            arguments=arguments,
        )

    @classmethod
    def failure(
        cls,
        index: int,
        tool_name: str,
        error_message: str,
        raw_response: str = "",
        arguments: Optional[dict[str, Any]] = None,
    ) -> "StepResult":
        return cls(
            index=index,
            tool_name=tool_name,
            status=StepStatus.ERROR,
            error_message=error_message,
            raw_response=raw_response,
            arguments=arguments,
        )


# =============================================================================
# Audit Records
# =============================================================================


class PlanningAuditRecord(BaseModel):
    """
    Request/response pair of one planning attempt.

    Written once per attempt whether it succeeded or not.
    """

    interaction_id: Optional[str] = None
    prompt_payload: Any = None
    raw_model_response: Any = None
    final_plan: Optional[list[dict[str, Any]]] = None
    model_identifier: str = ""
    error_message: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": True}


class ExecutionAuditRecord(BaseModel):
    """Step-by-step outcome of one executed plan."""

    interaction_id: Optional[str] = None
    results: list[StepResult] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": True}


# =============================================================================
# InboundEmail
# =============================================================================


class InboundEmail(BaseModel):
    """The parts of an inbound email the planner needs."""

    body: str = Field(default="", description="Plain-text email body")
    sender_email: str = Field(default="", description="Sender address")
    sender_name: str = Field(default="", description="Sender display name")

    model_config = {"frozen": True}
