"""
Voice Concurrency Usage API Route

Description:
This module defines the FastAPI route reporting voice-session concurrency
against the provisioned limit, with a recommendation for extra slots.

Returns:
- A ConcurrencyUsageSnapshot serialised with its wire field names.

Dependencies:
- fastapi: For creating the FastAPI application and defining routes.
- app.services.concurrency: For the concurrency advisor.
- loguru: For logging information about the request and any errors that occur.
"""
from fastapi import APIRouter, Depends, Request
from loguru import logger
from app.core.dependencies import get_concurrency_advisor
from app.core.route_limiters import CONCURRENCY_RATE_LIMIT, limiter
from app.errors.exceptions import InternalServerError
from app.schemas.concurrency.concurrency_usage import ConcurrencyUsageSnapshot
from app.services.concurrency import ConcurrencyAdvisor

router = APIRouter(
    tags=["concurrency"],
)


@router.get("/vapiConcurrencyUsage", response_model=ConcurrencyUsageSnapshot, response_model_by_alias=True)
@limiter.limit(CONCURRENCY_RATE_LIMIT)
async def vapi_concurrency_usage(
    request: Request,
    advisor: ConcurrencyAdvisor = Depends(get_concurrency_advisor),
):
    """
    Recompute concurrency usage on demand.
    """
    try:
        return await advisor.refresh()
    except Exception as e:
        logger.error(f"Error fetching concurrency usage: {e}")
        raise InternalServerError("Failed to fetch concurrency usage.") from e
