"""In-memory inverted index search over zip archive listings."""

from archive_search.domain.search import ArchiveRecord, SearchMatch, SearchResponse
from archive_search.search.builder import build_index, build_index_from_file
from archive_search.search.engine import search
from archive_search.search.models import DocumentIdTable, InvertedIndex
from archive_search.search.snapshot import SnapshotStore, decode, encode


__all__ = [
    "ArchiveRecord",
    "DocumentIdTable",
    "InvertedIndex",
    "SearchMatch",
    "SearchResponse",
    "SnapshotStore",
    "build_index",
    "build_index_from_file",
    "decode",
    "encode",
    "search",
]
