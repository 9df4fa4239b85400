"""Exception hierarchy for the archive search stack."""


class ArchiveSearchError(Exception):
    """Base class for all errors raised by archive_search."""


class IndexIOError(ArchiveSearchError, OSError):
    """Raised when a source listing or snapshot file cannot be read or written."""


class ParseError(ArchiveSearchError, ValueError):
    """Raised when an ingestion record is malformed."""


class SnapshotCorruptError(ParseError):
    """Raised when snapshot bytes cannot be decoded into an index."""


class ArgumentError(ArchiveSearchError, ValueError):
    """Raised for invalid record limits or missing required inputs."""


class InconsistentIndexError(ArchiveSearchError, ValueError):
    """Raised when an index's tables disagree and it cannot be snapshotted."""
