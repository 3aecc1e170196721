"""
Plan Executor - runs a validated plan step by step over HTTP.

Each step moves through:

    Pending -> Resolving -> ResolutionFailed
                         -> Resolved -> Invoking -> Success | InvocationFailed

Steps run strictly in plan order, one at a time. A step's failure is
recorded as an error StepResult and never aborts the plan: later steps run
unless their own references hit the failed step. The resolution context is
an immutable mapping from step index to StepResult, rebuilt after every
step, so a step can only ever see results that already exist.

Pattern: Command Executor (each step is an HTTP command)
Pattern: Fail-fast per step, graceful at plan level
"""

import json
import logging
import time
from types import MappingProxyType
from typing import Any, Mapping, Optional

import httpx

from toolplan.audit.sink import AuditSink
from toolplan.clients.http import DEFAULT_TIMEOUT_SECONDS, create_http_client
from toolplan.core.config import Settings
from toolplan.core.exceptions import ResolutionError, ToolInvocationError, ToolPlanException
from toolplan.execution.secrets import Credential, SecretsResolver, ToolCredentialResolver
from toolplan.models.domain import (
    AuthScheme,
    ExecutionAuditRecord,
    Plan,
    PlanStep,
    StepResult,
    ToolDefinition,
)
from toolplan.observability.metrics import record_step
from toolplan.planning.catalog import ToolCatalog, ToolNotFoundError
from toolplan.planning.references import resolve_arguments

logger = logging.getLogger(__name__)

GATEWAY_KEY_HEADER = "x-internal-api-key"
ERROR_BODY_PREVIEW_CHARS = 200


class PlanExecutor:
    """
    Executes plans against the real tool endpoints.

    Attributes:
        timeout_seconds: Per-call timeout; a timeout is a transport error.
        audit_sink: Receives one ExecutionAuditRecord per executed plan.

    Example:
        >>> async with PlanExecutor(timeout_seconds=10) as executor:
        ...     results = await executor.execute(plan, catalog)
        >>> [r.status for r in results]
        [<StepStatus.SUCCESS: 'success'>, <StepStatus.ERROR: 'error'>]
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        audit_sink: Optional[AuditSink] = None,
        gateway_api_key: Optional[str] = None,
    ) -> None:
        """
        Initialize the executor.

        Args:
            client: Shared HTTP client; one is created when omitted.
            timeout_seconds: Per-call timeout (default: 30).
            audit_sink: Optional audit sink for execution records.
            gateway_api_key: Shared key sent as x-internal-api-key on every call.
        """
        self.timeout_seconds = timeout_seconds
        self.audit_sink = audit_sink
        self._gateway_api_key = gateway_api_key or None
        self._owns_client = client is None
        self._client = client or create_http_client(timeout_seconds=timeout_seconds)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        audit_sink: Optional[AuditSink] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "PlanExecutor":
        return cls(
            client=client,
            timeout_seconds=settings.tool_timeout_seconds,
            audit_sink=audit_sink,
            gateway_api_key=settings.tool_gateway_api_key.get_secret_value(),
        )

    async def __aenter__(self) -> "PlanExecutor":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this executor created it."""
        if self._owns_client:
            await self._client.aclose()

    # =========================================================================
    # execute()
    # =========================================================================

    async def execute(
        self,
        plan: Plan,
        catalog: ToolCatalog,
        secrets_resolver: Optional[SecretsResolver] = None,
        interaction_id: Optional[str] = None,
    ) -> list[StepResult]:
        """
        Execute every step of a plan in order.

        Args:
            plan: The plan to run.
            catalog: Tool definitions for this cycle.
            secrets_resolver: Credential source (default: the tool's own credential).
            interaction_id: Correlates the audit record with the email.

        Returns:
            One StepResult per plan step, in plan order. Step failures are
            recorded, never raised.
        """
        resolver = secrets_resolver or ToolCredentialResolver()
        context: Mapping[int, StepResult] = MappingProxyType({})
        results: list[StepResult] = []

        if len(plan) == 0:
            logger.info("Plan is empty; nothing to execute")
            return results

        logger.info(f"Executing plan with {len(plan)} steps: {', '.join(plan.tool_names())}")
        for index, step in enumerate(plan.steps):
            result = await self._run_step(index, step, catalog, resolver, context)
            results.append(result)
            context = MappingProxyType({**context, index: result})

        succeeded = sum(1 for r in results if r.succeeded)
        logger.info(f"Plan execution finished: {succeeded}/{len(results)} steps succeeded")

        await self._audit(ExecutionAuditRecord(interaction_id=interaction_id, results=results))
        return results

    async def _run_step(
        self,
        index: int,
        step: PlanStep,
        catalog: ToolCatalog,
        resolver: SecretsResolver,
        context: Mapping[int, StepResult],
    ) -> StepResult:
        """Run one step; every failure becomes an error StepResult."""
        name = step.tool_name

        try:
            tool = catalog.get(name)
        except ToolNotFoundError:
            return self._failed(index, name, f"Tool not found in catalog: {name}")

        try:
            args = resolve_arguments(step.args, context, index)
        except ResolutionError as e:
            logger.warning(f"[Step {index}] Could not resolve arguments for {name}: {e.message}")
            return self._failed(index, name, e.message)

        try:
            credential = await resolver.resolve(tool)
        except ToolPlanException as e:
            return self._failed(
                index, name, f"Could not load credential for {name}: {e.message}", arguments=args
            )
        if tool.auth_scheme != AuthScheme.NONE and not credential:
            return self._failed(
                index,
                name,
                f"No credential available for tool {name} (auth scheme '{tool.auth_scheme.value}')",
                arguments=args,
            )

        logger.info(f"[Step {index}] Executing {name} via {tool.invocation_url}")
        started = time.perf_counter()
        try:
            output, raw = await self._invoke(tool, args, credential)
        except ToolInvocationError as e:
            duration = time.perf_counter() - started
            logger.error(f"[Step {index}] {e.message}")
            record_step(name, "error", duration)
            return StepResult.failure(
                index, name, e.message, raw_response=e.raw_response, arguments=args
            )

        record_step(name, "success", time.perf_counter() - started)
        logger.info(f"[Step {index}] {name} succeeded")
        return StepResult.success(index, name, output, raw_response=raw, arguments=args)

    def _failed(
        self,
        index: int,
        tool_name: str,
        message: str,
        arguments: Optional[dict[str, Any]] = None,
    ) -> StepResult:
        """Error result for a step that never reached the network."""
        record_step(tool_name, "error")
        return StepResult.failure(index, tool_name, message, arguments=arguments)

    # =========================================================================
    # HTTP invocation
    # =========================================================================

    def build_request(
        self,
        tool: ToolDefinition,
        args: dict[str, Any],
        credential: Optional[Credential],
    ) -> tuple[dict[str, str], Any]:
        """
        Headers and JSON body for a tool call.

        Raises:
            ToolInvocationError: If the credential does not fit the auth scheme.
        """
        headers = {"Content-Type": "application/json"}
        if self._gateway_api_key:
            headers[GATEWAY_KEY_HEADER] = self._gateway_api_key

        if tool.auth_scheme == AuthScheme.BODY:
            return headers, {"args": args, "auth": credential}
        if tool.auth_scheme == AuthScheme.NONE:
            return headers, args

        if not isinstance(credential, str):
            raise ToolInvocationError(
                f"Credential for {tool.name} must be a string for the "
                f"'{tool.auth_scheme.value}' auth scheme",
                tool_name=tool.name,
            )
        if tool.auth_scheme == AuthScheme.BEARER:
            headers["Authorization"] = f"Bearer {credential}"
        else:
            headers[tool.auth_header] = credential
        return headers, args

    async def _invoke(
        self,
        tool: ToolDefinition,
        args: dict[str, Any],
        credential: Optional[Credential],
    ) -> tuple[Any, str]:
        """
        POST the arguments and decode the JSON response.

        Returns:
            (parsed output, raw response text)

        Raises:
            ToolInvocationError: On transport errors, timeouts, non-2xx
                responses and non-JSON bodies.
        """
        headers, body = self.build_request(tool, args, credential)
        url = tool.invocation_url

        try:
            response = await self._client.post(
                url, json=body, headers=headers, timeout=self.timeout_seconds
            )
        except httpx.TimeoutException as e:
            raise ToolInvocationError(
                f"Tool {tool.name} timed out after {self.timeout_seconds}s calling {url}",
                tool_name=tool.name,
                raw_response=str(e),
            ) from e
        except httpx.HTTPError as e:
            raise ToolInvocationError(
                f"Network error calling {tool.name} at {url}: {e}",
                tool_name=tool.name,
                raw_response=str(e),
            ) from e

        text = response.text
        if not response.is_success:
            preview = text[:ERROR_BODY_PREVIEW_CHARS]
            raise ToolInvocationError(
                f"Tool {tool.name} failed with status {response.status_code}: {preview}",
                tool_name=tool.name,
                status_code=response.status_code,
                raw_response=preview,
            )

        if not text.strip():
            return None, text

        try:
            return json.loads(text), text
        except json.JSONDecodeError as e:
            raise ToolInvocationError(
                f"Tool {tool.name} returned status {response.status_code} but the "
                f"response was not valid JSON: {text[:100]}",
                tool_name=tool.name,
                status_code=response.status_code,
                raw_response=text[:ERROR_BODY_PREVIEW_CHARS],
            ) from e

    async def _audit(self, record: ExecutionAuditRecord) -> None:
        if self.audit_sink is None:
            return
        try:
            await self.audit_sink.record_execution(record)
        except Exception as e:
            logger.error(f"Failed to write execution audit record: {e}")
