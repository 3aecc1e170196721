"""
Unit tests for toolplan/models/domain.py - Domain value objects.
"""

import pytest
from pydantic import ValidationError

from toolplan.models.domain import (
    AuthScheme,
    ExecutionAuditRecord,
    Plan,
    PlanStep,
    StepResult,
    StepStatus,
    ToolDefinition,
)


class TestToolDefinition:
    def test_defaults(self):
        tool = ToolDefinition(name="getOrders", invocation_url="https://t.example.com")
        assert tool.auth_scheme == AuthScheme.BEARER
        assert tool.auth_header == "x-api-key"
        assert tool.active is True
        assert tool.category == "custom"

    def test_credential_is_masked(self):
        tool = ToolDefinition(name="t", invocation_url="https://t", credential="s3cret")
        assert "s3cret" not in repr(tool)
        assert tool.credential.get_secret_value() == "s3cret"

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            ToolDefinition(name="", invocation_url="https://t")

    def test_is_frozen(self):
        tool = ToolDefinition(name="t", invocation_url="https://t")
        with pytest.raises(ValidationError):
            tool.name = "other"


class TestPlanStep:
    @pytest.mark.parametrize("key", ["tool", "toolName", "tool_name"])
    def test_accepts_tool_name_aliases(self, key):
        step = PlanStep.model_validate({key: "getOrders", "args": {"a": 1}})
        assert step.tool_name == "getOrders"

    def test_serializes_as_tool(self):
        step = PlanStep(tool_name="getOrders", args={"customerId": "C1"}, reasoning="why")
        assert step.model_dump(by_alias=True) == {
            "tool": "getOrders",
            "args": {"customerId": "C1"},
            "reasoning": "why",
        }


class TestPlan:
    def test_empty_plan(self):
        plan = Plan()
        assert len(plan) == 0
        assert plan.tool_names() == []

    def test_to_json_list_keeps_order(self):
        plan = Plan(steps=[PlanStep(tool_name="a"), PlanStep(tool_name="b")])
        assert [s["tool"] for s in plan.to_json_list()] == ["a", "b"]


class TestStepResult:
    def test_success_factory(self):
        result = StepResult.success(0, "getOrders", {"orders": []}, raw_response='{"orders": []}')
        assert result.status == StepStatus.SUCCESS
        assert result.succeeded
        assert result.output == {"orders": []}
        assert result.error_message is None

    def test_failure_factory(self):
        result = StepResult.failure(1, "getOrders", "timed out")
        assert result.status == StepStatus.ERROR
        assert not result.succeeded
        assert result.output is None
        assert result.error_message == "timed out"

    def test_negative_index_rejected(self):
        with pytest.raises(ValidationError):
            StepResult.success(-1, "t", None)

    def test_audit_record_round_trips_results(self):
        record = ExecutionAuditRecord(
            interaction_id="i-1", results=[StepResult.success(0, "t", {"id": "C1"})]
        )
        restored = ExecutionAuditRecord.model_validate_json(record.model_dump_json())
        assert restored.results[0].output == {"id": "C1"}
