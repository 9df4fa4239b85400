"""Binary snapshots of built indexes.

A snapshot is a self-contained little-endian blob::

    magic      4s   b"ASIX"
    version    u16
    doc_count  u32
    term_count u32
    doc_count x  (name_len u32, name utf-8)
    term_count x (term_len u32, term utf-8, idf f64, posting_len u32, posting_len x u32)
    crc32      u32  over every preceding byte

``SnapshotStore`` keeps one snapshot at a fixed path and replaces it atomically
on every save, so readers never see a partially written file.
"""

from __future__ import annotations

from array import array
from contextlib import suppress
import logging
import math
import os
from pathlib import Path
import struct
import sys
import zlib

from archive_search.errors import InconsistentIndexError, IndexIOError, SnapshotCorruptError
from archive_search.search.models import POSTING_TYPECODE, DocumentIdTable, InvertedIndex, new_posting_list


logger = logging.getLogger(__name__)

MAGIC = b"ASIX"
FORMAT_VERSION = 1

_HEADER = struct.Struct("<4sHII")
_U32 = struct.Struct("<I")
_F64 = struct.Struct("<d")
_MAX_U32 = 0xFFFFFFFF


def _little_endian_postings(doc_ids: array) -> bytes:
    if sys.byteorder == "little":
        return doc_ids.tobytes()
    swapped = array(POSTING_TYPECODE, doc_ids)
    swapped.byteswap()
    return swapped.tobytes()


def encode(index: InvertedIndex) -> bytes:
    """Serialize ``index`` into a snapshot blob."""

    if array(POSTING_TYPECODE).itemsize != _U32.size:  # pragma: no cover - platform guard
        raise RuntimeError("Posting lists must use 32-bit unsigned integers")
    if index.document_count > _MAX_U32 or len(index.postings) > _MAX_U32:
        raise InconsistentIndexError("Index too large for snapshot format")
    if index.document_count != len(index.documents):
        raise InconsistentIndexError(
            f"Index reports {index.document_count} documents but names {len(index.documents)}"
        )
    if index.postings.keys() != index.idf.keys():
        raise InconsistentIndexError("Index postings and IDF tables cover different terms")

    chunks: list[bytes] = [_HEADER.pack(MAGIC, FORMAT_VERSION, index.document_count, len(index.postings))]

    for _doc_id, name in index.documents:
        encoded_name = name.encode("utf-8")
        chunks.append(_U32.pack(len(encoded_name)))
        chunks.append(encoded_name)

    for term, doc_ids in index.postings.items():
        if doc_ids and max(doc_ids) >= index.document_count:
            raise InconsistentIndexError(f"Postings for term {term!r} reference an unknown document")
        encoded_term = term.encode("utf-8")
        chunks.append(_U32.pack(len(encoded_term)))
        chunks.append(encoded_term)
        chunks.append(_F64.pack(index.idf[term]))
        chunks.append(_U32.pack(len(doc_ids)))
        chunks.append(_little_endian_postings(doc_ids))

    body = b"".join(chunks)
    return body + _U32.pack(zlib.crc32(body))


class _Reader:
    """Bounds-checked cursor over snapshot bytes."""

    def __init__(self, data: memoryview) -> None:
        self._data = data
        self.offset = 0

    def take(self, size: int) -> memoryview:
        end = self.offset + size
        if end > len(self._data):
            raise SnapshotCorruptError(
                f"Snapshot truncated: needed {size} bytes at offset {self.offset}, "
                f"only {len(self._data) - self.offset} available"
            )
        chunk = self._data[self.offset : end]
        self.offset = end
        return chunk

    def u32(self) -> int:
        return _U32.unpack(self.take(_U32.size))[0]

    def f64(self) -> float:
        return _F64.unpack(self.take(_F64.size))[0]

    def text(self) -> str:
        length = self.u32()
        try:
            return str(self.take(length), "utf-8")
        except UnicodeDecodeError as exc:
            raise SnapshotCorruptError(f"Invalid UTF-8 string ending at offset {self.offset}") from exc

    @property
    def remaining(self) -> int:
        return len(self._data) - self.offset


def decode(data: bytes) -> InvertedIndex:
    """Restore an index from ``data``.

    Raises:
        SnapshotCorruptError: the blob is truncated, has the wrong magic or
            version, fails its checksum, or describes an inconsistent index.
    """

    view = memoryview(data)
    if len(view) < _HEADER.size + _U32.size:
        raise SnapshotCorruptError(f"Snapshot too short ({len(view)} bytes)")

    body, trailer = view[: -_U32.size], view[-_U32.size :]
    magic, version, document_count, term_count = _HEADER.unpack(body[: _HEADER.size])
    if magic != MAGIC:
        raise SnapshotCorruptError(f"Not an index snapshot (magic {bytes(magic)!r})")
    if version != FORMAT_VERSION:
        raise SnapshotCorruptError(f"Unsupported snapshot version {version}")

    expected_crc = _U32.unpack(trailer)[0]
    actual_crc = zlib.crc32(body)
    if actual_crc != expected_crc:
        raise SnapshotCorruptError(f"Snapshot checksum mismatch ({actual_crc:#010x} != {expected_crc:#010x})")

    reader = _Reader(body)
    reader.take(_HEADER.size)

    documents = DocumentIdTable()
    for _ in range(document_count):
        documents.assign(reader.text())

    postings: dict[str, array] = {}
    idf: dict[str, float] = {}
    for _ in range(term_count):
        term = reader.text()
        if term in postings:
            raise SnapshotCorruptError(f"Duplicate term {term!r} in snapshot")
        weight = reader.f64()
        if not math.isfinite(weight):
            raise SnapshotCorruptError(f"Non-finite IDF for term {term!r}")
        posting_len = reader.u32()
        doc_ids = new_posting_list()
        doc_ids.frombytes(reader.take(posting_len * _U32.size))
        if sys.byteorder != "little":
            doc_ids.byteswap()
        if doc_ids and max(doc_ids) >= document_count:
            raise SnapshotCorruptError(f"Posting for term {term!r} references unknown document")
        postings[term] = doc_ids
        idf[term] = weight

    if reader.remaining:
        raise SnapshotCorruptError(f"{reader.remaining} unexpected trailing bytes in snapshot")

    return InvertedIndex(postings=postings, idf=idf, document_count=document_count, documents=documents)


class SnapshotStore:
    """Persist a single index snapshot at a fixed path."""

    TMP_SUFFIX = ".tmp"

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, index: InvertedIndex) -> Path:
        """Encode ``index`` and atomically replace the snapshot file."""

        payload = encode(index)
        tmp_path = self.path.with_name(self.path.name + self.TMP_SUFFIX)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("wb") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            tmp_path.replace(self.path)
        except OSError as exc:
            with suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            raise IndexIOError(f"Failed to write snapshot {self.path}: {exc}") from exc

        logger.info("Wrote snapshot %s (%d bytes, %d documents)", self.path, len(payload), index.document_count)
        return self.path

    def load(self) -> InvertedIndex | None:
        """Return the stored index, or ``None`` when no snapshot exists."""

        try:
            data = self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise IndexIOError(f"Failed to read snapshot {self.path}: {exc}") from exc

        index = decode(data)
        logger.info("Restored snapshot %s (%d documents, %d terms)", self.path, index.document_count, index.term_count)
        return index

    def delete(self) -> None:
        self.path.unlink(missing_ok=True)
