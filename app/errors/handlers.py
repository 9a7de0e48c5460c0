from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR
from loguru import logger
from app.errors.exceptions import RecordStoreError

def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )

def generic_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected error occurred."},
    )

def record_store_error_handler(request: Request, exc: RecordStoreError):
    """
    Handle record store failures that escaped the repository layer.

    Store errors carry backend details (document paths, SDK messages) that
    must not be returned to the client, so only a generic message is sent.

    Args:
        request: FastAPI request instance
        exc: RecordStoreError raised by a store backend

    Returns:
        JSONResponse with 500 status and a generic message
    """
    logger.error(f"Record store error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Failed to access the record store."},
    )
