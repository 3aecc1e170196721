"""
Audit Sink - append-only record of planning and execution outcomes.

Each planning attempt writes one PlanningAuditRecord (successful or not) and
each executed plan may write one ExecutionAuditRecord. Records are keyed by
the originating interaction id so an operator can inspect a single email's
history.

Implementations:
- InMemoryAuditSink: process-local lists, for tests and local development
- LoggingAuditSink: one structured JSON log event per record (structlog)
- RedisAuditSink: RPUSH onto per-interaction lists

Pattern: Repository pattern (append-only variant)
Pattern: Dependency injection for the Redis client
"""

from abc import ABC, abstractmethod
from typing import Optional

from redis.asyncio import Redis

from toolplan.core.exceptions import AuditSinkError
from toolplan.models.domain import ExecutionAuditRecord, PlanningAuditRecord
from toolplan.observability.logging import get_logger

NO_INTERACTION = "unassigned"


class AuditSink(ABC):
    """Abstract append-only store for audit records."""

    @abstractmethod
    async def record_planning(self, record: PlanningAuditRecord) -> None:
        """
        Append a planning record.

        Raises:
            AuditSinkError: If the record could not be stored.
        """
        ...

    @abstractmethod
    async def record_execution(self, record: ExecutionAuditRecord) -> None:
        """
        Append an execution record.

        Raises:
            AuditSinkError: If the record could not be stored.
        """
        ...


# =============================================================================
# InMemoryAuditSink
# =============================================================================


class InMemoryAuditSink(AuditSink):
    """
    Process-local audit sink.

    Example:
        >>> sink = InMemoryAuditSink()
        >>> await sink.record_planning(record)
        >>> sink.planning_for("interaction-1")
        [PlanningAuditRecord(...)]
    """

    def __init__(self) -> None:
        self.planning: list[PlanningAuditRecord] = []
        self.executions: list[ExecutionAuditRecord] = []

    async def record_planning(self, record: PlanningAuditRecord) -> None:
        self.planning.append(record)

    async def record_execution(self, record: ExecutionAuditRecord) -> None:
        self.executions.append(record)

    def planning_for(self, interaction_id: Optional[str]) -> list[PlanningAuditRecord]:
        return [r for r in self.planning if r.interaction_id == interaction_id]

    def executions_for(self, interaction_id: Optional[str]) -> list[ExecutionAuditRecord]:
        return [r for r in self.executions if r.interaction_id == interaction_id]


# =============================================================================
# LoggingAuditSink
# =============================================================================


class LoggingAuditSink(AuditSink):
    """
    Emits audit records as structured log events.

    Log shippers pick the JSON lines up for the operator dashboards; the
    event names are "planning_audit" and "execution_audit".
    """

    def __init__(self, logger_name: str = "toolplan.audit") -> None:
        self._logger = get_logger(logger_name)

    async def record_planning(self, record: PlanningAuditRecord) -> None:
        self._logger.info(
            "planning_audit",
            interaction_id=record.interaction_id,
            record=record.model_dump(mode="json"),
        )

    async def record_execution(self, record: ExecutionAuditRecord) -> None:
        self._logger.info(
            "execution_audit",
            interaction_id=record.interaction_id,
            record=record.model_dump(mode="json"),
        )


# =============================================================================
# RedisAuditSink
# =============================================================================


class RedisAuditSink(AuditSink):
    """
    Redis-backed append-only audit log.

    Records are serialized to JSON and pushed onto
    "<prefix><interaction_id>:planning" or "<prefix><interaction_id>:execution".

    Example:
        >>> import redis.asyncio as redis
        >>> sink = RedisAuditSink(redis.from_url("redis://localhost:6379"))
        >>> await sink.record_planning(record)
        >>> await sink.planning_history("interaction-1")
    """

    def __init__(self, redis_client: Redis, key_prefix: str = "audit:") -> None:
        self._redis: Redis = redis_client
        self._key_prefix = key_prefix

    def _make_key(self, interaction_id: Optional[str], kind: str) -> str:
        return f"{self._key_prefix}{interaction_id or NO_INTERACTION}:{kind}"

    async def record_planning(self, record: PlanningAuditRecord) -> None:
        key = self._make_key(record.interaction_id, "planning")
        try:
            await self._redis.rpush(key, record.model_dump_json())
        except Exception as e:
            raise AuditSinkError(f"Failed to store planning record under {key}: {e}") from e

    async def record_execution(self, record: ExecutionAuditRecord) -> None:
        key = self._make_key(record.interaction_id, "execution")
        try:
            await self._redis.rpush(key, record.model_dump_json())
        except Exception as e:
            raise AuditSinkError(f"Failed to store execution record under {key}: {e}") from e

    async def planning_history(self, interaction_id: Optional[str]) -> list[PlanningAuditRecord]:
        """All planning records for an interaction, oldest first."""
        key = self._make_key(interaction_id, "planning")
        try:
            items = await self._redis.lrange(key, 0, -1)
        except Exception as e:
            raise AuditSinkError(f"Failed to read planning records under {key}: {e}") from e
        return [PlanningAuditRecord.model_validate_json(item) for item in items]

    async def execution_history(self, interaction_id: Optional[str]) -> list[ExecutionAuditRecord]:
        """All execution records for an interaction, oldest first."""
        key = self._make_key(interaction_id, "execution")
        try:
            items = await self._redis.lrange(key, 0, -1)
        except Exception as e:
            raise AuditSinkError(f"Failed to read execution records under {key}: {e}") from e
        return [ExecutionAuditRecord.model_validate_json(item) for item in items]
