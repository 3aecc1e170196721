"""
Action digest - plain-text summary of executed steps for reply generation.

The reply stage receives this text instead of raw step results. Each step
becomes one block:

    Action 1: getOrders
    Description: Fetch orders for a customer.
    Arguments: {"customerId": "C1"}
    Status: success
    Output: [{"id": "O-7"}]
    ---
"""

import json
from typing import Any, Sequence

from toolplan.models.domain import Plan, StepResult
from toolplan.planning.catalog import ToolCatalog

NO_DESCRIPTION = "No description found."
NO_ACTIONS_MESSAGE = "No tool actions were deemed necessary based on the email content."
PLAN_FAILED_MESSAGE = "Tool plan generation failed."
NO_TOOLS_MESSAGE = "Tool planning skipped: Agent has no tools configured."
LENGTH_MISMATCH_MESSAGE = "Error: Tool plan and results length mismatch. Digest could not be generated."


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def build_action_digest(
    plan: Plan, results: Sequence[StepResult], catalog: ToolCatalog
) -> str:
    """
    Render one digest block per executed step.

    Args:
        plan: The executed plan.
        results: Results in plan order, one per step.
        catalog: Used for each tool's description.

    Returns:
        The digest text, NO_ACTIONS_MESSAGE for an empty plan, or
        LENGTH_MISMATCH_MESSAGE when plan and results disagree in length.
    """
    if len(plan) == 0:
        return NO_ACTIONS_MESSAGE
    if len(plan) != len(results):
        return LENGTH_MISMATCH_MESSAGE

    blocks = []
    for i, (step, result) in enumerate(zip(plan.steps, results)):
        tool = catalog.get(step.tool_name) if step.tool_name in catalog else None
        description = (tool.instructions if tool else None) or NO_DESCRIPTION
        output = _compact(result.output) if result.succeeded else result.error_message
        blocks.append(
            f"Action {i + 1}: {step.tool_name}\n"
            f"Description: {description}\n"
            f"Arguments: {_compact(step.args)}\n"
            f"Status: {result.status.value}\n"
            f"Output: {output}\n"
            "---"
        )
    return "\n".join(blocks)
