"""
Integration test for one complete email cycle.

Wires the real generator, executor, digest and RedisAuditSink together from
Settings. Only the edges are replaced: the completion model is scripted,
tool endpoints run on httpx.MockTransport and Redis is fakeredis.
"""

import json

import httpx
import pytest

from toolplan.audit.sink import RedisAuditSink
from toolplan.core.config import Settings
from toolplan.execution.executor import GATEWAY_KEY_HEADER, PlanExecutor
from toolplan.models.domain import InboundEmail, StepStatus
from toolplan.planning.generator import PlanGenerator
from toolplan.providers.fake import FakeCompletionModel
from toolplan.services.pipeline import ReplyPlanningService, create_audit_sink

pytestmark = pytest.mark.integration

CUSTOMER_URL = "https://tools.example.com/customers/by-email"
ORDERS_URL = "https://tools.example.com/orders"
TRACKING_URL = "https://tools.example.com/tracking"

MODEL_OUTPUT = """```json
[
  {"tool": "getCustomerByEmail", "args": {"email": "jane@example.com"},
   "reasoning": "Identify the customer."},
  {"tool": "getOrders", "args": {"customerId": "{{steps[0].outputs.id}}"},
   "reasoning": "Find the latest order."},
  {"tool": "getTrackingInfo", "args": {"orderId": "{{steps[1].outputs.orders[0].id}}"},
   "reasoning": "Look up shipping status."},
  {"tool": "issueRefund", "args": {"orderId": "{{steps[1].outputs.orders[0].id}}"},
   "reasoning": "Not a registered tool."}
]
```"""


@pytest.fixture
def settings() -> Settings:
    return Settings(
        audit_backend="redis",
        tool_gateway_api_key="gw-secret",
        strict_argument_names=True,
    )


@pytest.mark.asyncio
async def test_where_is_my_order(settings, catalog, tool_server, fake_redis):
    tool_server.route(CUSTOMER_URL, {"id": "C1", "name": "Jane"})
    tool_server.route(ORDERS_URL, {"orders": [{"id": "O-7", "total": 42.5}]})
    tool_server.route(TRACKING_URL, httpx.Response(500, text="carrier API unavailable"))

    sink = create_audit_sink(settings, redis_client=fake_redis)
    assert isinstance(sink, RedisAuditSink)

    client = httpx.AsyncClient(transport=httpx.MockTransport(tool_server.handler))
    service = ReplyPlanningService(
        PlanGenerator.from_settings(FakeCompletionModel([MODEL_OUTPUT]), settings, sink),
        PlanExecutor.from_settings(settings, audit_sink=sink, client=client),
    )

    email = InboundEmail(
        body="Hi, where is my latest order? Jane", sender_email="jane@example.com", sender_name="Jane"
    )
    try:
        outcome = await service.process(email, catalog, interaction_id="email-001")
    finally:
        await client.aclose()

    # Plan: the unregistered tool was dropped, the rest kept in order
    assert outcome.plan.tool_names() == ["getCustomerByEmail", "getOrders", "getTrackingInfo"]
    assert outcome.warnings[0]["reason"] == "unknown_tool"

    # Execution: outputs flowed forward, the tracking failure is step-local
    assert [r.status for r in outcome.results] == [
        StepStatus.SUCCESS,
        StepStatus.SUCCESS,
        StepStatus.ERROR,
    ]
    (orders_call,) = tool_server.calls_to(ORDERS_URL)
    assert json.loads(orders_call.content) == {"customerId": "C1"}
    assert orders_call.headers["Authorization"] == "Bearer orders-secret"
    assert orders_call.headers[GATEWAY_KEY_HEADER] == "gw-secret"
    (tracking_call,) = tool_server.calls_to(TRACKING_URL)
    assert json.loads(tracking_call.content) == {"orderId": "O-7"}
    assert "Authorization" not in tracking_call.headers

    # Digest
    assert "Action 3: getTrackingInfo" in outcome.digest
    assert "Status: error" in outcome.digest
    assert "carrier API unavailable" in outcome.digest

    # Audit trail in Redis
    (planning,) = await sink.planning_history("email-001")
    assert planning.error_message is None
    assert [s["tool"] for s in planning.final_plan] == outcome.plan.tool_names()
    (execution,) = await sink.execution_history("email-001")
    assert [r.status for r in execution.results] == [r.status for r in outcome.results]
