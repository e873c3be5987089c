"""Prometheus metrics for the vector store.

Provides metrics instrumentation for:
- HTTP request latency and counts
- Vector store operation latency and outcomes
- Rows written per ingestion
- Search result counts and top scores
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from docvectors.logging_config import get_logger

logger = get_logger(__name__)

# HTTP Request Metrics
HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

HTTP_REQUEST_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

# Vector Store Metrics
VECTORSTORE_OPERATION_DURATION = Histogram(
    "vectorstore_operation_duration_seconds",
    "Vector store operation duration",
    ["operation", "status"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0],
)

VECTORSTORE_OPERATION_TOTAL = Counter(
    "vectorstore_operations_total",
    "Total vector store operations",
    ["operation", "status"],
)

VECTORSTORE_ROWS_WRITTEN = Histogram(
    "vectorstore_rows_written",
    "Rows written per ingestion",
    buckets=[0, 1, 10, 50, 100, 250, 500, 1000, 5000],
)

VECTORSTORE_SEARCH_RESULTS = Histogram(
    "vectorstore_search_results",
    "Number of results returned per search",
    buckets=[0, 1, 2, 3, 5, 10, 20, 50],
)

VECTORSTORE_SEARCH_TOP_SCORE = Histogram(
    "vectorstore_search_top_score",
    "Top relevance score per search",
    buckets=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics."""

    def __init__(self, app: ASGIApp) -> None:
        """Initialize the middleware."""
        super().__init__(app)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request and collect metrics."""
        # Skip metrics endpoint to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()

        response = await call_next(request)

        duration = time.perf_counter() - start_time
        endpoint = self._normalize_endpoint(request.url.path)

        HTTP_REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).observe(duration)

        HTTP_REQUEST_TOTAL.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()

        return response

    def _normalize_endpoint(self, path: str) -> str:
        """Normalize endpoint path to reduce cardinality.

        Document identifiers are collapsed so each route is one series.
        """
        if path.startswith("/health"):
            return "/health"
        if path.startswith("/api/v1/documents/"):
            parts = path.split("/")
            suffix = f"/{parts[5]}" if len(parts) > 5 else ""
            return f"/api/v1/documents/{{document_id}}{suffix}"
        return path


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST


def track_vectorstore_operation(
    operation: str,
    duration: float,
    success: bool = True,
) -> None:
    """Track a vector store operation.

    Args:
        operation: Operation name (e.g. add_chunks, search).
        duration: Operation duration in seconds.
        success: Whether the operation succeeded.
    """
    status = "success" if success else "error"

    VECTORSTORE_OPERATION_DURATION.labels(operation=operation, status=status).observe(
        duration
    )
    VECTORSTORE_OPERATION_TOTAL.labels(operation=operation, status=status).inc()


def track_rows_written(rows: int) -> None:
    """Track the number of rows written by one ingestion."""
    VECTORSTORE_ROWS_WRITTEN.observe(rows)


def track_search_results(
    results_returned: int,
    top_score: float,
) -> None:
    """Track search result metrics.

    Args:
        results_returned: Number of results returned.
        top_score: Highest relevance score.
    """
    VECTORSTORE_SEARCH_RESULTS.observe(results_returned)
    if top_score > 0:
        VECTORSTORE_SEARCH_TOP_SCORE.observe(top_score)
