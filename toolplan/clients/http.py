"""
HTTP Client Module - shared client for outbound tool calls

The executor POSTs every plan step through one httpx.AsyncClient so that all
steps of all plans share a connection pool. Tool URLs are absolute, so the
client carries no base URL.

Pattern: Factory pattern for creating configured HTTP clients
"""

from typing import Mapping, Optional

import httpx

from toolplan import __version__

DEFAULT_TIMEOUT_SECONDS: float = 30.0
"""Per-call timeout for tool invocations, in seconds."""

DEFAULT_MAX_CONNECTIONS: int = 100
DEFAULT_MAX_KEEPALIVE: int = 20

DEFAULT_RETRY_COUNT: int = 0
"""Connect retries. Tool calls may have side effects, so nothing is retried by default."""

USER_AGENT = f"tool-plan-engine/{__version__}"


def create_http_client(
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    max_connections: int = DEFAULT_MAX_CONNECTIONS,
    max_keepalive: int = DEFAULT_MAX_KEEPALIVE,
    retries: int = DEFAULT_RETRY_COUNT,
    extra_headers: Optional[Mapping[str, str]] = None,
) -> httpx.AsyncClient:
    """
    Build the pooled client used for tool invocations.

    Args:
        timeout_seconds: Connect/read/write/pool timeout for each call.
        max_connections: Pool size.
        max_keepalive: Idle connections kept open between calls.
        retries: Connect retries done by the transport (default: none).
        extra_headers: Headers added to every call (after the defaults).

    Returns:
        httpx.AsyncClient sending a tool-plan-engine User-Agent and
        accepting JSON.

    Example:
        >>> async with create_http_client(timeout_seconds=10.0) as client:
        ...     await client.post("https://tools.example.com/orders", json={})
    """
    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    headers.update(extra_headers or {})

    transport = httpx.AsyncHTTPTransport(
        retries=retries,
        limits=httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive,
        ),
    )
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds),
        headers=headers,
        transport=transport,
    )
