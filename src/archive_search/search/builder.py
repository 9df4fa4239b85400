"""Build inverted indexes from archive listings.

An archive listing is newline-delimited JSON where each line names one zip
archive and lists its entry paths::

    {"name": "commons-io-2.4.jar", "files": ["org/apache/commons/io/IOUtils.class", ...]}

Every path is split on ``/`` and each segment becomes a term. Archives are
interned as dense integer ids in ingestion order. The builder is strictly
all-or-nothing: the first malformed record aborts the build and nothing is
returned.
"""

from __future__ import annotations

from array import array
from collections.abc import Iterable, Iterator, Mapping
from itertools import islice
import logging
from pathlib import Path
import time
from typing import Any

from pydantic import ValidationError

from archive_search.domain.search import ArchiveRecord
from archive_search.errors import ArgumentError, IndexIOError, ParseError
from archive_search.observability import INDEX_BUILD_LATENCY, create_span, record_index_shape
from archive_search.search.models import DocumentId, DocumentIdTable, InvertedIndex, Term, new_posting_list
from archive_search.search.stats import compute_idf


logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"


def split_terms(path: str) -> list[Term]:
    """Split an archive entry path into terms.

    Segments are kept verbatim, including empty ones produced by leading,
    trailing or doubled separators.
    """
    return path.split(PATH_SEPARATOR)


class IndexBuilder:
    """Accumulates postings for one ingestion pass."""

    def __init__(self) -> None:
        self._documents = DocumentIdTable()
        self._postings: dict[Term, array] = {}
        self._built = False

    @property
    def document_count(self) -> int:
        return len(self._documents)

    def add_document(self, name: str, paths: Iterable[str]) -> DocumentId:
        if self._built:
            raise RuntimeError("IndexBuilder.build() already called; start a new builder")

        doc_id = self._documents.assign(name)
        for path in paths:
            for term in split_terms(path):
                doc_ids = self._postings.get(term)
                if doc_ids is None:
                    doc_ids = new_posting_list()
                    self._postings[term] = doc_ids
                # Only the immediately preceding entry is checked.
                if doc_ids and doc_ids[-1] == doc_id:
                    continue
                doc_ids.append(doc_id)
        return doc_id

    def add_record(self, record: ArchiveRecord) -> DocumentId:
        return self.add_document(record.name, record.files)

    def build(self) -> InvertedIndex:
        self._built = True
        document_count = len(self._documents)
        return InvertedIndex(
            postings=self._postings,
            idf=compute_idf(self._postings, document_count),
            document_count=document_count,
            documents=self._documents,
        )


def coerce_record(raw: ArchiveRecord | Mapping[str, Any], *, position: int | None = None) -> ArchiveRecord:
    """Validate ``raw`` into an :class:`ArchiveRecord` or raise :class:`ParseError`."""

    if isinstance(raw, ArchiveRecord):
        return raw
    try:
        return ArchiveRecord.model_validate(raw)
    except ValidationError as exc:
        where = f"record {position}" if position is not None else "record"
        raise ParseError(f"Malformed {where}: {_summarize_validation_error(exc)}") from exc


def build_index(
    records: Iterable[ArchiveRecord | Mapping[str, Any]],
    limit: int | None = None,
) -> InvertedIndex:
    """Build an index from ``records``, stopping after ``limit`` records when given.

    Raises:
        ArgumentError: ``limit`` is negative.
        ParseError: a record does not have the ``{name, files}`` shape.
    """

    _validate_limit(limit)

    attributes = {} if limit is None else {"index.limit": limit}
    with (
        create_span("index.build", attributes=attributes) as span,
        INDEX_BUILD_LATENCY.labels(source="records").time(),
    ):
        started = time.perf_counter()
        builder = IndexBuilder()
        # islice never pulls a record past the limit, so lines beyond it are not parsed.
        for position, raw in enumerate(islice(records, limit), start=1):
            builder.add_record(coerce_record(raw, position=position))

        index = builder.build()
        elapsed = time.perf_counter() - started
        span.set_attribute("index.document_count", index.document_count)
        span.set_attribute("index.term_count", index.term_count)

        record_index_shape(index, source="records")
        logger.info(
            "Indexed %d documents, %d terms, %d term-docid pairs in %.2fs",
            index.document_count,
            index.term_count,
            index.posting_count,
            elapsed,
            extra={
                "document_count": index.document_count,
                "term_count": index.term_count,
                "pair_count": index.posting_count,
                "elapsed_seconds": round(elapsed, 4),
            },
        )
    return index


def iter_records(path: Path) -> Iterator[ArchiveRecord]:
    """Yield records from a newline-delimited JSON listing.

    Blank lines are skipped. The file handle is released when the iterator is
    exhausted, closed, or abandoned after an exception.

    Raises:
        IndexIOError: the listing cannot be opened or read.
        ParseError: a line is not a valid ``{name, files}`` object.
    """

    try:
        handle = path.open("rb")
    except OSError as exc:
        raise IndexIOError(f"Cannot open archive listing {path}: {exc}") from exc

    with handle:
        line_number = 0
        while True:
            try:
                line = handle.readline()
            except OSError as exc:
                raise IndexIOError(f"Failed reading {path} after line {line_number}: {exc}") from exc
            if not line:
                return
            line_number += 1
            if not line.strip():
                continue
            try:
                yield ArchiveRecord.model_validate_json(line)
            except ValidationError as exc:
                raise ParseError(f"{path}:{line_number}: {_summarize_validation_error(exc)}") from exc


def build_index_from_file(path: str | Path, limit: int | None = None) -> InvertedIndex:
    """Build an index from the archive listing at ``path``."""

    _validate_limit(limit)
    source = Path(path)
    logger.info("Loading archive listing %s", source)
    records = iter_records(source)
    try:
        return build_index(records, limit=limit)
    finally:
        records.close()


def _validate_limit(limit: int | None) -> None:
    if limit is None:
        return
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ArgumentError(f"Record limit must be an integer, got {limit!r}")
    if limit < 0:
        raise ArgumentError(f"Record limit must be non-negative, got {limit}")


def _summarize_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "<root>"
        parts.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)
