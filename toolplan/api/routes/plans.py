"""
Plans Router - plan generation and execution endpoints.

Endpoints:
- POST /v1/plans          generate a plan for an email
- POST /v1/plans/execute  execute a supplied plan
- POST /v1/plans/run      generate, execute and digest in one call

Planning failures are upstream (completion model) failures and are
translated to 502 Bad Gateway. Step failures are part of a normal 200
response.

Pattern: Dependency injection for the service layer
Pattern: Error translation (PlanGenerationError -> 502)
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from toolplan.api.deps import get_reply_planning_service
from toolplan.core.exceptions import PlanGenerationError
from toolplan.execution.secrets import ProviderSecretsResolver, SecretsResolver
from toolplan.models.domain import Plan
from toolplan.models.requests import ExecuteRequest, PlanRequest, RunRequest
from toolplan.models.responses import ErrorResponse, ExecuteResponse, PlanResponse
from toolplan.observability.logging import correlation_id_context
from toolplan.planning.catalog import ToolCatalog
from toolplan.services.pipeline import CycleOutcome, ReplyPlanningService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/plans", tags=["Plans"])


def _resolver(secrets: Optional[dict]) -> Optional[SecretsResolver]:
    return ProviderSecretsResolver(secrets) if secrets else None


@router.post(
    "",
    response_model=PlanResponse,
    responses={502: {"model": ErrorResponse}},
)
async def create_plan(
    request: PlanRequest,
    service: ReplyPlanningService = Depends(get_reply_planning_service),
) -> Union[PlanResponse, JSONResponse]:
    """
    Generate a validated plan for one email.

    Returns:
        PlanResponse with the plan and dropped-step warnings.
        JSONResponse 502 if plan generation failed.
    """
    catalog = ToolCatalog(request.tools)
    with correlation_id_context(request.interaction_id):
        try:
            result = await service.generator.generate_with_warnings(
                request.email.body,
                request.email.sender_email,
                request.email.sender_name,
                catalog,
                interaction_id=request.interaction_id,
            )
        except PlanGenerationError as e:
            logger.error(f"Plan generation failed: model={e.model}, message={e.message}")
            return JSONResponse(
                status_code=502,
                content={"error_code": e.error_code, "message": e.message},
            )

    return PlanResponse(
        plan=result.plan.to_json_list(),
        warnings=[w.to_dict() for w in result.warnings],
    )


@router.post("/execute", response_model=ExecuteResponse)
async def execute_plan(
    request: ExecuteRequest,
    service: ReplyPlanningService = Depends(get_reply_planning_service),
) -> ExecuteResponse:
    """Execute a supplied plan against the supplied tools."""
    with correlation_id_context(request.interaction_id):
        results = await service.executor.execute(
            Plan(steps=request.plan),
            ToolCatalog(request.tools),
            secrets_resolver=_resolver(request.secrets),
            interaction_id=request.interaction_id,
        )
    return ExecuteResponse(results=results)


@router.post("/run", response_model=CycleOutcome)
async def run_cycle(
    request: RunRequest,
    service: ReplyPlanningService = Depends(get_reply_planning_service),
) -> CycleOutcome:
    """Plan, execute and digest in one call; planning failures land in `error`."""
    return await service.process(
        request.email,
        ToolCatalog(request.tools),
        interaction_id=request.interaction_id,
        secrets_resolver=_resolver(request.secrets),
    )
