"""
Health Router - liveness endpoint.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from toolplan import __version__

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness check.

    Returns:
        HealthResponse with status "healthy" and the service version.
    """
    return HealthResponse(status="healthy", version=__version__)
