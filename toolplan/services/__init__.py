"""
Services Package - reply planning cycle orchestration.
"""

from toolplan.services.pipeline import (
    CycleOutcome,
    ReplyPlanningService,
    create_audit_sink,
    create_completion_model,
    create_reply_planning_service,
)

__all__ = [
    "CycleOutcome",
    "ReplyPlanningService",
    "create_audit_sink",
    "create_completion_model",
    "create_reply_planning_service",
]
