"""
API Dependencies

FastAPI dependency functions for the API layer. The planning service is
built lazily from settings on first use and shared afterwards; tests
replace it through app.dependency_overrides.

Pattern: Centralized dependency injection following FastAPI conventions
"""

import logging
from typing import Optional

from toolplan.core.config import Settings, get_settings as _get_settings
from toolplan.services.pipeline import ReplyPlanningService, create_reply_planning_service

logger = logging.getLogger(__name__)

_service: Optional[ReplyPlanningService] = None


def get_settings() -> Settings:
    """Application settings (cached singleton from core.config)."""
    return _get_settings()


def get_reply_planning_service() -> ReplyPlanningService:
    """
    Shared ReplyPlanningService.

    Raises:
        ConfigurationError: If the planner model cannot be configured.
    """
    global _service
    if _service is None:
        logger.info("Creating reply planning service from settings")
        _service = create_reply_planning_service(get_settings())
    return _service


async def shutdown_services() -> None:
    """Close the shared service's network clients."""
    global _service
    if _service is not None:
        await _service.aclose()
        _service = None


__all__ = [
    "get_settings",
    "get_reply_planning_service",
    "shutdown_services",
]
