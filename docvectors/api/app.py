"""FastAPI application entry point.

Configures the application with logging, exception handling, metrics and
health checks.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from docvectors import __version__
from docvectors.api.routes import get_vector_store, router
from docvectors.config import get_settings
from docvectors.exceptions import DocVectorsError, ErrorCode
from docvectors.logging_config import get_logger, setup_logging
from docvectors.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
)

logger = get_logger(__name__)

_STATUS_BY_CODE = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.TABLE_NOT_FOUND: 404,
    ErrorCode.SCHEMA_ERROR: 422,
    ErrorCode.DIMENSION_MISMATCH: 422,
    ErrorCode.QUERY_ERROR: 422,
    ErrorCode.CONNECTION_ERROR: 503,
}


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    setup_logging(level=settings.log_level)
    logger.info(
        "Starting vector store service",
        extra={
            "version": __version__,
            "environment": settings.environment.value,
            "storage_root": str(settings.vector_store.storage_root),
        },
    )

    yield

    logger.info("Shutting down vector store service")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="docvectors",
        description="Per-document vector similarity store backed by LanceDB",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(MetricsMiddleware)
    app.add_exception_handler(DocVectorsError, store_exception_handler)

    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/ready", readiness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/live", liveness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], tags=["Metrics"])
    app.include_router(router)

    return app


async def store_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle DocVectorsError exceptions.

    Converts exceptions to structured JSON responses.
    """
    if not isinstance(exc, DocVectorsError):
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": ErrorCode.INTERNAL_ERROR.value,
                    "message": str(exc),
                    "details": {},
                }
            },
        )

    logger.error(
        f"Request failed: {exc.message}",
        extra={
            "error_code": exc.code.value,
            "path": request.url.path,
        },
    )

    return JSONResponse(
        status_code=get_status_code(exc.code),
        content=exc.to_dict(),
    )


def get_status_code(code: ErrorCode) -> int:
    """Map an error code to an HTTP status code."""
    return _STATUS_BY_CODE.get(code, 500)


async def health_check() -> dict[str, Any]:
    """Basic health check endpoint.

    Returns:
        Health status with version and timestamp.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def readiness_check() -> dict[str, Any]:
    """Readiness probe.

    Checks the configured storage root can be opened.

    Returns:
        Readiness status with component checks.
    """
    checks: dict[str, str] = {"config": "ok"}

    storage_root = get_settings().vector_store.storage_root
    try:
        await get_vector_store().initialize(storage_root)
        checks["storage"] = "ok"
    except DocVectorsError as e:
        logger.warning(f"Storage root not ready: {e.message}")
        checks["storage"] = "unavailable"

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def liveness_check() -> dict[str, str]:
    """Liveness probe.

    Simple check that the service is running.

    Returns:
        Liveness status.
    """
    return {"status": "alive"}


async def metrics_endpoint() -> Response:
    """Prometheus metrics in text exposition format."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


# Create the application instance
app = create_app()
