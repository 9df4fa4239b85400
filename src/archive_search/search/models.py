"""Search data models."""

from __future__ import annotations

from array import array
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field


Term = str
DocumentId = int

POSTING_TYPECODE = "I"


def new_posting_list() -> array:
    return array(POSTING_TYPECODE)


@dataclass(slots=True)
class DocumentIdTable:
    """Dense integer handles for document names.

    Ids are assigned in ingestion order starting at 0. The same name may be
    ingested more than once; every ingestion gets a fresh id and the reverse
    lookup resolves to the first one.
    """

    names: list[str] = field(default_factory=list)
    _ids_by_name: dict[str, DocumentId] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for doc_id, name in enumerate(self.names):
            self._ids_by_name.setdefault(name, doc_id)

    @property
    def next_id(self) -> DocumentId:
        return len(self.names)

    def assign(self, name: str) -> DocumentId:
        doc_id = self.next_id
        self.names.append(name)
        self._ids_by_name.setdefault(name, doc_id)
        return doc_id

    def name_of(self, doc_id: DocumentId) -> str:
        return self.names[doc_id]

    def id_of(self, name: str) -> DocumentId | None:
        return self._ids_by_name.get(name)

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self) -> Iterator[tuple[DocumentId, str]]:
        return iter(enumerate(self.names))


@dataclass(frozen=True, slots=True)
class InvertedIndex:
    """Immutable term -> postings index with per-term IDF.

    Built once per ingestion pass and never mutated afterwards; rebuilds
    produce a new instance.
    """

    postings: Mapping[Term, array]
    idf: Mapping[Term, float]
    document_count: int
    documents: DocumentIdTable

    @classmethod
    def empty(cls) -> InvertedIndex:
        return cls(postings={}, idf={}, document_count=0, documents=DocumentIdTable())

    @property
    def term_count(self) -> int:
        return len(self.postings)

    @property
    def posting_count(self) -> int:
        """Total number of term/document pairs across all posting lists."""
        return sum(len(doc_ids) for doc_ids in self.postings.values())

    def get_postings(self, term: Term) -> array | None:
        return self.postings.get(term)

    def get_idf(self, term: Term) -> float | None:
        return self.idf.get(term)
