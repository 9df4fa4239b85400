"""Domain layer: value objects shared by the index and its callers."""

from archive_search.domain.search import ArchiveRecord, SearchMatch, SearchResponse


__all__ = ["ArchiveRecord", "SearchMatch", "SearchResponse"]
