"""Logging, tracing and metrics for index builds and queries."""

from archive_search.observability.logging import JsonFormatter, configure_logging
from archive_search.observability.metrics import (
    INDEX_BUILD_LATENCY,
    INDEX_DOC_COUNT,
    INDEX_TERM_COUNT,
    REGISTRY,
    SEARCH_LATENCY,
    SNAPSHOT_FALLBACK_COUNT,
    export_metrics,
    record_index_shape,
)
from archive_search.observability.tracing import configure_tracing, create_span


__all__ = [
    "INDEX_BUILD_LATENCY",
    "INDEX_DOC_COUNT",
    "INDEX_TERM_COUNT",
    "REGISTRY",
    "SEARCH_LATENCY",
    "SNAPSHOT_FALLBACK_COUNT",
    "JsonFormatter",
    "configure_logging",
    "configure_tracing",
    "create_span",
    "export_metrics",
    "record_index_shape",
]
