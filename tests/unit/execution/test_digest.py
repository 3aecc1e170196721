"""
Unit tests for toolplan/execution/digest.py - build_action_digest.
"""

from toolplan.execution.digest import (
    LENGTH_MISMATCH_MESSAGE,
    NO_ACTIONS_MESSAGE,
    NO_DESCRIPTION,
    build_action_digest,
)
from toolplan.models.domain import Plan, PlanStep, StepResult


def test_success_and_error_blocks(catalog):
    plan = Plan(
        steps=[
            PlanStep(tool_name="getCustomerByEmail", args={"email": "jane@example.com"}),
            PlanStep(tool_name="getOrders", args={"customerId": "{{steps[0].outputs.id}}"}),
        ]
    )
    results = [
        StepResult.success(0, "getCustomerByEmail", {"id": "C1"}),
        StepResult.failure(1, "getOrders", "Tool getOrders failed with status 500: boom"),
    ]

    digest = build_action_digest(plan, results, catalog)

    assert digest == (
        "Action 1: getCustomerByEmail\n"
        "Description: Look up a customer record by email address.\n"
        'Arguments: {"email":"jane@example.com"}\n'
        "Status: success\n"
        'Output: {"id":"C1"}\n'
        "---\n"
        "Action 2: getOrders\n"
        "Description: Fetch orders for a customer.\n"
        'Arguments: {"customerId":"{{steps[0].outputs.id}}"}\n'
        "Status: error\n"
        "Output: Tool getOrders failed with status 500: boom\n"
        "---"
    )


def test_missing_description(catalog):
    plan = Plan(steps=[PlanStep(tool_name="getTrackingInfo", args={})])
    results = [StepResult.success(0, "getTrackingInfo", None)]

    digest = build_action_digest(plan, results, catalog)

    assert f"Description: {NO_DESCRIPTION}" in digest
    assert "Output: null" in digest


def test_empty_plan(catalog):
    assert build_action_digest(Plan(), [], catalog) == NO_ACTIONS_MESSAGE


def test_length_mismatch(catalog):
    plan = Plan(steps=[PlanStep(tool_name="getOrders")])
    assert build_action_digest(plan, [], catalog) == LENGTH_MISMATCH_MESSAGE
