"""
Structured Logging Module

JSON log lines for the engine, tagged with the interaction id of the email
being processed. ReplyPlanningService wraps each cycle in
correlation_id_context(interaction_id); every event logged inside it,
whether through structlog or through logging.getLogger(__name__), carries
that id as "correlation_id".

Pattern: Structured logging for observability
Pattern: Singleton configuration (configure once at startup)
"""

import contextvars
import logging
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional, TextIO

import structlog
from structlog.types import EventDict, Processor

ENGINE_LOGGER = "toolplan"

_configured: bool = False

_interaction_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "toolplan_correlation_id", default=None
)


# =============================================================================
# Correlation ID
# =============================================================================


def set_correlation_id(correlation_id: str) -> None:
    """Tag subsequent log events in this context with correlation_id."""
    _interaction_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    return _interaction_id.get()


def clear_correlation_id() -> None:
    _interaction_id.set(None)


@contextmanager
def correlation_id_context(correlation_id: Optional[str]) -> Iterator[None]:
    """
    Scope a correlation id to a block, restoring the previous one afterwards.

    Args:
        correlation_id: Interaction id of the email. None keeps whatever id
            is already set.

    Example:
        >>> with correlation_id_context("interaction-42"):
        ...     await service.process(email, catalog)
    """
    if correlation_id is None:
        yield
        return

    token = _interaction_id.set(correlation_id)
    try:
        yield
    finally:
        _interaction_id.reset(token)


# =============================================================================
# Processors
# =============================================================================


def add_correlation_id(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    correlation_id = _interaction_id.get()
    if correlation_id is not None:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def add_timestamp(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """UTC ISO 8601 timestamp."""
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def rename_level(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Emit the level under "level" whichever processor added it."""
    level = event_dict.pop("log_level", None)
    if level is not None:
        event_dict["level"] = level
    return event_dict


def _shared_processors() -> list[Processor]:
    return [structlog.stdlib.add_log_level, add_timestamp, add_correlation_id, rename_level]


# =============================================================================
# Configuration
# =============================================================================


def configure_logging(
    level: str = "INFO",
    stream: Optional[TextIO] = None,
    force: bool = False,
) -> None:
    """
    Route structlog and the "toolplan" stdlib logger tree to JSON lines.

    Runs once (at app startup or on first get_logger()); later calls are
    ignored unless force=True.

    Args:
        level: Minimum level name, e.g. "INFO".
        stream: Destination (default: sys.stdout).
        force: Reconfigure even if already configured (tests).
    """
    global _configured
    if _configured and not force:
        return

    out = stream or sys.stdout
    threshold = _level_to_int(level)

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=False,
    )

    # Records from logging.getLogger(__name__) go through the same chain.
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.stdlib.add_logger_name, *_shared_processors()],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
    )
    handler = logging.StreamHandler(out)
    handler.setFormatter(formatter)

    engine_logger = logging.getLogger(ENGINE_LOGGER)
    engine_logger.handlers = [handler]
    engine_logger.setLevel(threshold)
    engine_logger.propagate = False

    _configured = True


def reset_logging() -> None:
    """Forget that logging was configured. Tests only."""
    global _configured
    _configured = False


def get_logger(
    name: str,
    stream: Optional[TextIO] = None,
    level: str = "INFO",
) -> structlog.BoundLogger:
    """
    Structured logger bound to name, configuring logging first if needed.

    Example:
        >>> audit_log = get_logger("toolplan.audit")
        >>> audit_log.info("planning_audit", interaction_id="abc")
    """
    configure_logging(level=level, stream=stream)
    return structlog.get_logger().bind(logger=name)


def _level_to_int(level: str) -> int:
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO
