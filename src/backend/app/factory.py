"""
Application factory for FastAPI.

This module provides the create_app() function that creates and configures
the FastAPI application instance.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.v1 import api_router
from app.routes import health_router
from core.config import settings
from core.exceptions import (
    ConcurrentModificationError,
    NotFoundError,
    StoreError,
    ValidationError,
    WorkflowError,
)
from core.lifespan import lifespan
from core.middleware import CorrelationIdMiddleware

logger = logging.getLogger(__name__)

# Most specific first
ERROR_STATUS_CODES = (
    (NotFoundError, 404),
    (ValidationError, 422),
    (ConcurrentModificationError, 409),
    (StoreError, 503),
)


def status_code_for(exc: WorkflowError) -> int:
    """HTTP status for a workflow error."""
    for exc_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    """Render a workflow error with the record and operation it concerns."""
    status_code = status_code_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(f"{request.method} {request.url.path} -> {status_code}: {exc}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def create_app() -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application with middleware,
    exception handlers and routes.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.api.app_name,
        version=settings.api.app_version,
        description="Facility completion, order invoicing and customer deactivation workflows",
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.add_exception_handler(WorkflowError, workflow_error_handler)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Actor-ID", "X-Correlation-ID"],
        expose_headers=["X-Correlation-ID"],
    )

    # Added last so it wraps every other middleware
    app.add_middleware(CorrelationIdMiddleware)

    # Include routers
    app.include_router(health_router)
    app.include_router(api_router, prefix=settings.api.api_v1_prefix)

    return app
