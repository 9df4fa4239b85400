"""Index lifecycle orchestration.

Owns the single reference to the live index. Readers grab the reference once
per query and never lock; rebuilds happen off to the side and are published
with one attribute assignment, so in-flight queries finish against whichever
index they started with.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging
from pathlib import Path
import threading

from archive_search.config import Settings
from archive_search.domain.search import SearchResponse
from archive_search.errors import ArgumentError, IndexIOError, SnapshotCorruptError
from archive_search.observability import (
    INDEX_BUILD_LATENCY,
    SEARCH_LATENCY,
    SNAPSHOT_FALLBACK_COUNT,
    create_span,
    record_index_shape,
)
from archive_search.search.builder import build_index_from_file
from archive_search.search.engine import search_response
from archive_search.search.models import InvertedIndex
from archive_search.search.snapshot import SnapshotStore


logger = logging.getLogger(__name__)


class IndexService:
    """Serve queries from an atomically swappable index."""

    def __init__(
        self,
        snapshot_store: SnapshotStore,
        *,
        source_path: Path | None = None,
        record_limit: int | None = None,
    ) -> None:
        self.snapshot_store = snapshot_store
        self.source_path = source_path
        self.record_limit = record_limit
        self._index: InvertedIndex = InvertedIndex.empty()
        self._rebuild_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> IndexService:
        return cls(
            SnapshotStore(settings.snapshot_path),
            source_path=settings.archive_listing_path,
            record_limit=settings.record_limit,
        )

    @property
    def index(self) -> InvertedIndex:
        """Current index; callers keep this reference for the whole query."""
        return self._index

    def load(self, *, force_rebuild: bool = False) -> InvertedIndex:
        """Restore from the snapshot, or rebuild from source when needed.

        A missing, unreadable or corrupt snapshot degrades to a full rebuild
        followed by a fresh snapshot write.
        """

        if not force_rebuild:
            restored = self._restore_snapshot()
            if restored is not None:
                self._publish(restored, source="snapshot")
                return restored
        else:
            logger.info("Rebuild requested; ignoring snapshot %s", self.snapshot_store.path)

        return self.reload()

    def reload(self) -> InvertedIndex:
        """Rebuild from source, persist a new snapshot, then swap it in."""

        if self.source_path is None:
            raise ArgumentError("An archive listing path is required to build the index")

        with self._rebuild_lock:
            replacement = build_index_from_file(self.source_path, limit=self.record_limit)
            self.snapshot_store.save(replacement)
            self._publish(replacement, source="rebuild")
        return replacement

    def search(self, terms: Sequence[str]) -> SearchResponse:
        index = self._index
        with (
            create_span("index.search", attributes={"search.term_count": len(terms)}) as span,
            SEARCH_LATENCY.labels(source="service").time(),
        ):
            response = search_response(index, terms)
            span.set_attribute("search.result_count", response.total)
        return response

    def _restore_snapshot(self) -> InvertedIndex | None:
        path = self.snapshot_store.path
        with (
            create_span("index.restore", attributes={"snapshot.path": str(path)}) as span,
            INDEX_BUILD_LATENCY.labels(source="snapshot").time(),
        ):
            try:
                restored = self.snapshot_store.load()
            except SnapshotCorruptError as exc:
                self._record_fallback("corrupt", exc)
                return None
            except IndexIOError as exc:
                self._record_fallback("unreadable", exc)
                return None
            span.set_attribute("snapshot.found", restored is not None)

        if restored is None:
            self._record_fallback("missing")
        return restored

    def _record_fallback(self, reason: str, error: Exception | None = None) -> None:
        SNAPSHOT_FALLBACK_COUNT.labels(reason=reason).inc()
        extra = {"snapshot_path": str(self.snapshot_store.path), "fallback_reason": reason}
        if error is None:
            logger.info("No snapshot at %s, building from source", self.snapshot_store.path, extra=extra)
        else:
            logger.warning(
                "Snapshot %s is %s, rebuilding: %s", self.snapshot_store.path, reason, error, extra=extra
            )

    def _publish(self, index: InvertedIndex, *, source: str) -> None:
        self._index = index
        record_index_shape(index, source="live")
        logger.info(
            "Serving index from %s: %d documents, %d terms, %d term-docid pairs",
            source,
            index.document_count,
            index.term_count,
            index.posting_count,
            extra={
                "index_source": source,
                "document_count": index.document_count,
                "term_count": index.term_count,
                "pair_count": index.posting_count,
            },
        )
