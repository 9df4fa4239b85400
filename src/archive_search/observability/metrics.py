"""Prometheus instruments for index builds, snapshot restores and queries.

Instruments live in a project registry rather than the process default, so the
exported text holds only archive-search series.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, write_to_textfile

from archive_search.errors import IndexIOError


if TYPE_CHECKING:
    from archive_search.search.models import InvertedIndex


REGISTRY = CollectorRegistry()

SEARCH_LATENCY = Histogram(
    "archive_search_query_latency_seconds",
    "Search query latency",
    ["source"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
    registry=REGISTRY,
)

INDEX_BUILD_LATENCY = Histogram(
    "archive_search_index_build_seconds",
    "Time spent producing an index, from records or from a snapshot",
    ["source"],
    buckets=(0.01, 0.1, 0.5, 1.0, 5.0, 15.0, 60.0, 300.0),
    registry=REGISTRY,
)

INDEX_DOC_COUNT = Gauge(
    "archive_search_index_documents",
    "Documents in the most recently built or published index",
    ["source"],
    registry=REGISTRY,
)

INDEX_TERM_COUNT = Gauge(
    "archive_search_index_terms",
    "Distinct terms in the most recently built or published index",
    ["source"],
    registry=REGISTRY,
)

SNAPSHOT_FALLBACK_COUNT = Counter(
    "archive_search_snapshot_fallbacks",
    "Snapshot restores that fell back to a full rebuild",
    ["reason"],
    registry=REGISTRY,
)


def record_index_shape(index: InvertedIndex, *, source: str) -> None:
    """Set the document and term gauges for ``source`` from ``index``."""
    INDEX_DOC_COUNT.labels(source=source).set(index.document_count)
    INDEX_TERM_COUNT.labels(source=source).set(index.term_count)


def export_metrics(path: Path) -> None:
    """Write the registry in text exposition format, e.g. for a node_exporter textfile collector."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        write_to_textfile(str(path), REGISTRY)
    except OSError as exc:
        raise IndexIOError(f"Cannot write metrics to {path}: {exc}") from exc
