"""Observability module for metrics and monitoring."""

from docvectors.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
    track_rows_written,
    track_search_results,
    track_vectorstore_operation,
)

__all__ = [
    "MetricsMiddleware",
    "get_metrics",
    "get_metrics_content_type",
    "track_rows_written",
    "track_search_results",
    "track_vectorstore_operation",
]
