import asyncio
import contextlib
import random
import httpx
from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from contextlib import asynccontextmanager
from slowapi import _rate_limit_exceeded_handler
# Rate Limiter
from app.core.route_limiters import limiter
# Routers
from app.routes.health import router as health_router
from app.routes.interview_report import router as interview_report_router
from app.routes.concurrency_usage import router as concurrency_usage_router
from app.routes.interviews import router as interviews_router
from app.routes.interview_session_ws import router as interview_session_router
# CORS Middleware
from app.core.cors_middleware import add_cors_middleware
# Logger
from loguru import logger
# Configuration and components
from app.core.service_config import load_config
from app.database import close_record_store, create_record_store
from app.services.concurrency import ConcurrencyAdvisor, SessionUsageTracker
from app.services.report_generation import ReportGenerator, VapiConversationSource
# Error Handling
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.status import HTTP_422_UNPROCESSABLE_ENTITY
from app.errors.exceptions import RecordStoreError
from app.errors.handlers import http_exception_handler, generic_exception_handler, record_store_error_handler

# Load configuration (also loads .env)
config = load_config()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    # Startup
    try:
        app.state.config = config
        app.state.record_store = create_record_store(config)
        app.state.http_client = httpx.AsyncClient(timeout=10.0)
        app.state.report_generator = ReportGenerator(
            app.state.record_store,
            VapiConversationSource(app.state.http_client, config.vapi_base_url, config.vapi_api_key),
            random.Random(),
        )
        app.state.usage_tracker = SessionUsageTracker(config.vapi_concurrency_limit)
        app.state.concurrency_advisor = ConcurrencyAdvisor(app.state.usage_tracker)
        refresh_task = asyncio.create_task(
            app.state.concurrency_advisor.run_periodic(config.concurrency_refresh_seconds)
        )
        logger.info("Application startup completed successfully")
    except Exception as e:
        logger.error(f"Error during application startup: {e}")
        raise

    yield

    # Shutdown
    refresh_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await refresh_task
    await app.state.http_client.aclose()
    await close_record_store(app.state.record_store)
    logger.info("Application shutdown")

# Initialize FastAPI app
app = FastAPI(
    title="Interview Practice Service API",
    description="Interview sessions, reports and voice concurrency for the interview practice platform",
    version="0.1.0",
    lifespan=lifespan
)
# Add CORS middleware
add_cors_middleware(app, config.cors_origins)

# Centralized error handlers
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RecordStoreError, record_store_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder({"detail": exc.errors()}),
    )

# Add rate limiter to the app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Include routers
app.include_router(health_router)
app.include_router(interview_report_router)
app.include_router(concurrency_usage_router)
app.include_router(interviews_router)
app.include_router(interview_session_router)
