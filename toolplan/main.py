"""
Tool Plan Engine - Main Application Entry Point

FastAPI application exposing plan generation and execution for the inbound
email pipeline.

Run with:
    uvicorn toolplan.main:app
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from toolplan import __version__
from toolplan.api.deps import get_settings, shutdown_services
from toolplan.api.routes.health import router as health_router
from toolplan.api.routes.plans import router as plans_router
from toolplan.core.exceptions import ConfigurationError, ToolPlanException
from toolplan.observability.logging import configure_logging
from toolplan.observability.metrics import get_metrics_app
from toolplan.planning.catalog import DuplicateToolError

logger = logging.getLogger(__name__)

APP_NAME = "Tool Plan Engine"
APP_DESCRIPTION = "Tool-call planning and execution for inbound email automation"


# =============================================================================
# Lifespan Context Manager
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging on startup; close shared clients on shutdown."""
    settings = get_settings()
    configure_logging(level=settings.log_level)
    logger.info(f"{APP_NAME} v{__version__} starting in {settings.environment} mode")
    app.state.environment = settings.environment

    yield

    logger.info(f"{APP_NAME} shutting down")
    await shutdown_services()


app = FastAPI(
    title=APP_NAME,
    description=APP_DESCRIPTION,
    version=__version__,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(plans_router)
app.mount("/metrics", get_metrics_app())


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error(f"Configuration error: {exc.message}")
    return JSONResponse(
        status_code=503,
        content={"error_code": exc.error_code, "message": exc.message},
    )


@app.exception_handler(ToolPlanException)
async def engine_error_handler(request: Request, exc: ToolPlanException) -> JSONResponse:
    logger.error(f"Unhandled engine error: {exc.message}")
    return JSONResponse(
        status_code=500,
        content={"error_code": exc.error_code, "message": exc.message},
    )


@app.exception_handler(DuplicateToolError)
async def duplicate_tool_handler(request: Request, exc: DuplicateToolError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error_code": "DUPLICATE_TOOL", "message": str(exc)},
    )


# =============================================================================
# Root Endpoint
# =============================================================================


@app.get("/", tags=["Info"])
async def root() -> dict[str, Any]:
    """Root endpoint returning basic service information."""
    return {"service": APP_NAME, "version": __version__, "docs": "/docs"}
