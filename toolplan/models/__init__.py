"""
Models Package - domain value objects.
"""

from toolplan.models.domain import (
    AuthScheme,
    ExecutionAuditRecord,
    InboundEmail,
    Plan,
    PlanningAuditRecord,
    PlanStep,
    StepResult,
    StepStatus,
    ToolDefinition,
)

__all__ = [
    "AuthScheme",
    "ToolDefinition",
    "PlanStep",
    "Plan",
    "StepStatus",
    "StepResult",
    "PlanningAuditRecord",
    "ExecutionAuditRecord",
    "InboundEmail",
]
