"""
Health check endpoint for the application.

Description:
This module defines a FastAPI route for checking the health status of the service.

Arguments:
- request: An instance of Request, required for rate limiting.

Returns:
- A JSON response with the service status and the record store backend in use,
  e.g. {"status": "ok", "record_store": "firestore"}.

Dependencies:
- fastapi: For creating the FastAPI application and defining routes.
- app.core.route_limiters: For rate limiting functionality.
- app.schemas.health_response: For defining the response model.
- loguru: For logging information about the health check endpoint.
"""
from fastapi import APIRouter, Depends, Request
from app.core.dependencies import get_service_config
from app.core.route_limiters import limiter
from app.core.service_config import ServiceConfig
from app.schemas.health_response import HealthResponse
from loguru import logger

router = APIRouter(
    prefix="/api",
    tags=["health"],
    responses={404: {"description": "Not found"}}
)

@router.get("/health", response_model=HealthResponse)
@limiter.limit("10/minute")  # Custom limit for this endpoint
async def health(request: Request, config: ServiceConfig = Depends(get_service_config)):
    """
    Request parameter is required for rate limiting.
    """
    logger.debug("Health check endpoint called")
    return {"status": "ok", "record_store": config.record_store_backend.value}
