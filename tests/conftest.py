"""
Pytest configuration for the Tool Plan Engine test suite.

Shared fixtures follow the FakeRepository pattern: the completion model is a
FakeCompletionModel, tool endpoints are served by httpx.MockTransport, and
Redis is fakeredis. No test touches the network.
"""

import json
import sys
from pathlib import Path
from typing import Any, Callable

import fakeredis.aioredis
import httpx
import pytest
import pytest_asyncio

# Add project root to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from toolplan.audit.sink import InMemoryAuditSink  # noqa: E402
from toolplan.core.config import get_settings  # noqa: E402
from toolplan.models.domain import AuthScheme, ToolDefinition  # noqa: E402
from toolplan.planning.catalog import ToolCatalog  # noqa: E402
from toolplan.providers.fake import FakeCompletionModel  # noqa: E402


CUSTOMER_URL = "https://tools.example.com/customers/by-email"
ORDERS_URL = "https://tools.example.com/orders"
TRACKING_URL = "https://tools.example.com/tracking"


# =============================================================================
# Test Markers
# =============================================================================


def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for service interactions")


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Each test sees settings built from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Tool Catalog Fixtures
# =============================================================================


@pytest.fixture
def customer_tool() -> ToolDefinition:
    return ToolDefinition(
        id="tool-1",
        name="getCustomerByEmail",
        invocation_url=CUSTOMER_URL,
        credential="cust-secret",
        instructions="Look up a customer record by email address.",
        input_shape={
            "type": "object",
            "properties": {"email": {"type": "string", "format": "email"}},
            "required": ["email"],
        },
        output_shape={"type": "object", "properties": {"id": {"type": "string"}}},
        provider_name="crm",
    )


@pytest.fixture
def orders_tool() -> ToolDefinition:
    return ToolDefinition(
        id="tool-2",
        name="getOrders",
        invocation_url=ORDERS_URL,
        credential="orders-secret",
        instructions="Fetch orders for a customer.",
        input_shape={
            "type": "object",
            "properties": {"customerId": {"type": "string"}},
        },
        output_shape={
            "type": "object",
            "properties": {
                "orders": {
                    "type": "array",
                    "items": {"type": "object", "properties": {"id": {"type": "string"}}},
                }
            },
        },
        provider_name="shop",
    )


@pytest.fixture
def tracking_tool() -> ToolDefinition:
    return ToolDefinition(
        id="tool-3",
        name="getTrackingInfo",
        invocation_url=TRACKING_URL,
        auth_scheme=AuthScheme.NONE,
        input_shape={
            "typeName": "ZodObject",
            "shape": {"orderId": {"typeName": "ZodString", "checks": []}},
        },
    )


@pytest.fixture
def catalog(customer_tool, orders_tool, tracking_tool) -> ToolCatalog:
    """Three tools: customer lookup, orders (by customer id), tracking (no auth)."""
    return ToolCatalog([customer_tool, orders_tool, tracking_tool])


# =============================================================================
# Completion Model / Audit Fixtures
# =============================================================================


@pytest.fixture
def make_model() -> Callable[..., FakeCompletionModel]:
    """Factory for scripted FakeCompletionModel instances."""

    def _make(*responses: Any) -> FakeCompletionModel:
        scripted = [json.dumps(r) if isinstance(r, (dict, list)) else r for r in responses]
        return FakeCompletionModel(scripted or None)

    return _make


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    return InMemoryAuditSink()


@pytest.fixture
def fake_redis():
    """
    Fake Redis client (fakeredis), Redis-compatible without a server.

    Returns:
        FakeRedis: A fake Redis client with decode_responses=True
    """
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


# =============================================================================
# Tool Endpoint Fixtures (httpx.MockTransport)
# =============================================================================


class ToolServer:
    """
    Scripted tool endpoints keyed by URL.

    Each route is either a dict/list (returned as JSON 200), an
    httpx.Response, or a callable taking the request. Every request is
    recorded in .requests with its decoded JSON body.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    def route(self, url: str, response: Any) -> None:
        self.routes[url] = response

    def calls_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url) == url]

    def body_of(self, request: httpx.Request) -> Any:
        return json.loads(request.content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, text="no such tool")
        if callable(route):
            return route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)


@pytest.fixture
def tool_server() -> ToolServer:
    return ToolServer()


@pytest_asyncio.fixture
async def tool_client(tool_server):
    """httpx.AsyncClient whose transport is the scripted ToolServer."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(tool_server.handler)) as client:
        yield client
