"""
Tests for the HTTP Client Factory - toolplan/clients/http.py.
"""

import httpx
import pytest

from toolplan.clients.http import (
    DEFAULT_MAX_CONNECTIONS,
    DEFAULT_MAX_KEEPALIVE,
    DEFAULT_RETRY_COUNT,
    DEFAULT_TIMEOUT_SECONDS,
    USER_AGENT,
    create_http_client,
)


class TestDefaults:
    def test_default_values(self):
        assert DEFAULT_TIMEOUT_SECONDS == 30.0
        assert DEFAULT_MAX_CONNECTIONS == 100
        assert DEFAULT_MAX_KEEPALIVE == 20
        assert DEFAULT_RETRY_COUNT == 0

    def test_user_agent_carries_version(self):
        assert USER_AGENT == "tool-plan-engine/1.0.0"


class TestCreateHttpClient:
    @pytest.mark.asyncio
    async def test_returns_async_client(self):
        client = create_http_client()
        try:
            assert isinstance(client, httpx.AsyncClient)
            assert client.timeout.read == DEFAULT_TIMEOUT_SECONDS
            assert client.headers["User-Agent"] == USER_AGENT
            assert client.headers["Accept"] == "application/json"
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_custom_timeout_and_headers(self):
        client = create_http_client(timeout_seconds=5.0, extra_headers={"x-tenant": "acme"})
        try:
            assert client.timeout.connect == 5.0
            assert client.headers["x-tenant"] == "acme"
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_extra_headers_override_defaults(self):
        client = create_http_client(extra_headers={"Accept": "application/x-ndjson"})
        try:
            assert client.headers["Accept"] == "application/x-ndjson"
        finally:
            await client.aclose()
