"""
Reply Planning Service - one plan-and-execute cycle per inbound email.

Orchestrates the PlanGenerator and the PlanExecutor and condenses the
outcome into the action digest the reply stage consumes. A planning failure
is reported on the outcome's error field, with no results; it is never
turned into an empty-plan success.

Pattern: Service Layer (orchestrates domain operations)
Pattern: Dependency Injection (generator, executor)
"""

import logging
from typing import Any, Optional

import redis.asyncio as redis
from pydantic import BaseModel, Field

from toolplan.audit.sink import AuditSink, InMemoryAuditSink, LoggingAuditSink, RedisAuditSink
from toolplan.core.config import Settings
from toolplan.core.exceptions import ConfigurationError, PlanGenerationError
from toolplan.execution.digest import (
    NO_ACTIONS_MESSAGE,
    NO_TOOLS_MESSAGE,
    PLAN_FAILED_MESSAGE,
    build_action_digest,
)
from toolplan.execution.executor import PlanExecutor
from toolplan.execution.secrets import SecretsResolver
from toolplan.models.domain import InboundEmail, Plan, StepResult
from toolplan.observability.logging import correlation_id_context
from toolplan.planning.catalog import ToolCatalog
from toolplan.planning.generator import PlanGenerator
from toolplan.providers.base import CompletionModel
from toolplan.providers.gemini import GeminiCompletionModel

logger = logging.getLogger(__name__)


class CycleOutcome(BaseModel):
    """
    Result of one reply planning cycle.

    Attributes:
        plan: The executed plan; None when planning failed.
        results: One result per plan step (empty when nothing ran).
        digest: Plain-text summary for the reply stage.
        error: Planning failure message, if any.
        warnings: Steps dropped during plan validation.
    """

    plan: Optional[Plan] = None
    results: list[StepResult] = Field(default_factory=list)
    digest: str = ""
    error: Optional[str] = None
    warnings: list[dict[str, Any]] = Field(default_factory=list)


class ReplyPlanningService:
    """
    Runs generate -> execute -> digest for one email.

    Example:
        >>> service = ReplyPlanningService(generator, executor)
        >>> outcome = await service.process(email, catalog, interaction_id="i-1")
        >>> print(outcome.digest)
    """

    def __init__(self, generator: PlanGenerator, executor: PlanExecutor) -> None:
        self._generator = generator
        self._executor = executor

    @property
    def generator(self) -> PlanGenerator:
        return self._generator

    @property
    def executor(self) -> PlanExecutor:
        return self._executor

    async def process(
        self,
        email: InboundEmail,
        catalog: ToolCatalog,
        interaction_id: Optional[str] = None,
        secrets_resolver: Optional[SecretsResolver] = None,
    ) -> CycleOutcome:
        """
        Plan and execute tool calls for one email.

        Args:
            email: Sender identity and body.
            catalog: The agent's tools for this cycle.
            interaction_id: Correlates logs and audit records with the email.
            secrets_resolver: Credential source for the executor.

        Returns:
            CycleOutcome with plan, results, digest and any planning error.
        """
        with correlation_id_context(interaction_id):
            if len(catalog.active()) == 0:
                logger.info("Agent has no active tools; skipping tool planning")
                return CycleOutcome(plan=Plan(), digest=NO_TOOLS_MESSAGE)

            try:
                generation = await self._generator.generate_with_warnings(
                    email.body,
                    email.sender_email,
                    email.sender_name,
                    catalog,
                    interaction_id=interaction_id,
                )
            except PlanGenerationError as e:
                logger.warning(f"Tool plan generation failed: {e.message}")
                return CycleOutcome(plan=None, digest=PLAN_FAILED_MESSAGE, error=e.message)

            plan = generation.plan
            warnings = [w.to_dict() for w in generation.warnings]
            if len(plan) == 0:
                return CycleOutcome(plan=plan, digest=NO_ACTIONS_MESSAGE, warnings=warnings)

            results = await self._executor.execute(
                plan,
                catalog,
                secrets_resolver=secrets_resolver,
                interaction_id=interaction_id,
            )
            return CycleOutcome(
                plan=plan,
                results=results,
                digest=build_action_digest(plan, results, catalog),
                warnings=warnings,
            )

    async def aclose(self) -> None:
        await self._generator.model.aclose()
        await self._executor.aclose()


# =============================================================================
# Factories
# =============================================================================


def create_audit_sink(
    settings: Settings, redis_client: Optional[redis.Redis] = None
) -> AuditSink:
    """
    Build the audit sink selected by settings.audit_backend.

    Args:
        settings: Application settings.
        redis_client: Pre-built client for the redis backend (tests pass fakeredis).
    """
    if settings.audit_backend == "memory":
        return InMemoryAuditSink()
    if settings.audit_backend == "redis":
        client = redis_client or redis.from_url(settings.redis_url, decode_responses=True)
        return RedisAuditSink(client)
    return LoggingAuditSink()


def create_completion_model(settings: Settings) -> CompletionModel:
    """
    Build the Gemini planner model.

    Raises:
        ConfigurationError: If no API key is configured.
    """
    api_key = settings.gemini_api_key.get_secret_value()
    if not api_key:
        raise ConfigurationError(
            "Tool planning is unavailable: TOOLPLAN_GEMINI_API_KEY is not set",
            setting="gemini_api_key",
        )
    return GeminiCompletionModel(
        api_key=api_key,
        model=settings.gemini_model,
        api_base=settings.gemini_api_base,
        timeout_seconds=settings.planner_timeout_seconds,
    )


def create_reply_planning_service(
    settings: Settings,
    model: Optional[CompletionModel] = None,
    audit_sink: Optional[AuditSink] = None,
) -> ReplyPlanningService:
    """Wire generator and executor from settings."""
    sink = audit_sink or create_audit_sink(settings)
    generator = PlanGenerator.from_settings(
        model or create_completion_model(settings), settings, audit_sink=sink
    )
    executor = PlanExecutor.from_settings(settings, audit_sink=sink)
    return ReplyPlanningService(generator, executor)
