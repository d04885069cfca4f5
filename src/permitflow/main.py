"""PermitFlow - Main FastAPI Application

Permit lifecycle engine: permit status/stage/billing state machine,
automated task generation, document version lineage and an append-only
activity log.

This module creates and configures the main FastAPI application, including:
- All API routers (permits, tasks, customers, contractors, documents, activity)
- Middleware (request ID correlation, CORS)
- Exception handlers mapping domain errors to HTTP responses
- Health and observability endpoints
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .config import get_settings
from .errors import (
    ConflictError,
    NotFoundError,
    PayloadTooLargeError,
    PermitFlowError,
    StorageError,
    ValidationError,
)

# Observability
from .observability.logging_config import configure_logging
from .observability.middleware import RequestIDMiddleware
from .observability.request_context import get_request_id
from .observability.router import router as observability_router

# Domain Routers
from .permits.router import router as permits_router
from .tasks.router import router as tasks_router
from .customers.router import router as customers_router
from .contractors.router import router as contractors_router
from .documents.router import router as documents_router
from .audit.router import router as activity_router

settings = get_settings()

# Configure logging
configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

logger = logging.getLogger(__name__)

# Checked most specific first
ERROR_STATUS_CODES = (
    (PayloadTooLargeError, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_502_BAD_GATEWAY),
)


def status_code_for(exc: PermitFlowError) -> int:
    for error_cls, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_cls):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler (startup/shutdown logging)."""
    logger.info("PermitFlow API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Storage backend: {settings.STORAGE_BACKEND}")

    yield

    logger.info("PermitFlow API shutting down...")


IS_PRODUCTION = settings.ENVIRONMENT == "production"

# Create FastAPI application
app = FastAPI(
    title="PermitFlow API",
    description="Permit lifecycle engine: status tracking, task automation and document versioning",
    version="0.1.0",
    docs_url=None if IS_PRODUCTION else "/docs",
    redoc_url=None if IS_PRODUCTION else "/redoc",
    openapi_url=None if IS_PRODUCTION else "/openapi.json",
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE CONFIGURATION
# =============================================================================

# Request ID Middleware (must be first for proper correlation)
app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(PermitFlowError)
async def domain_exception_handler(
    request: Request,
    exc: PermitFlowError
) -> JSONResponse:
    """Map domain errors to HTTP responses.

    ValidationError → 400, NotFoundError → 404, ConflictError → 409,
    StorageError → 502 (413 when the payload exceeds the size cap).
    """
    status_code = status_code_for(exc)
    log = logger.error if status_code >= 500 else logger.info
    log(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.error_code,
            "message": str(exc),
            "request_id": get_request_id(),
        },
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors.

    Returns a structured error response with field-level details.
    """
    logger.warning(f"Request validation error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=422,
        content={
            "error": "request_validation_error",
            "message": "Request validation failed",
            "details": jsonable_errors(exc),
            "request_id": get_request_id(),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Strip non-serializable context (e.g. raised exceptions) from errors."""
    return [
        {key: value for key, value in error.items() if key in ("loc", "msg", "type")}
        for error in exc.errors()
    ]


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    """Handle database errors.

    Logs the full error but returns a generic message to prevent
    information leakage.
    """
    logger.error(
        f"Database error on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "database_error",
            "message": "A database error occurred. Please try again later.",
            "request_id": get_request_id(),
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle uncaught exceptions.

    Full details are logged but not exposed to the client.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred. Please try again later.",
            "request_id": get_request_id(),
        },
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

# Observability (health, metrics, ready)
app.include_router(observability_router)

app.include_router(permits_router, prefix="/api/v1")
app.include_router(tasks_router, prefix="/api/v1")
app.include_router(customers_router, prefix="/api/v1")
app.include_router(contractors_router, prefix="/api/v1")
app.include_router(documents_router, prefix="/api/v1")
app.include_router(activity_router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root() -> dict[str, Any]:
    """Root endpoint - API information."""
    return {
        "name": "PermitFlow API",
        "version": "0.1.0",
        "status": "running",
        "docs": None if IS_PRODUCTION else "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "permitflow.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
