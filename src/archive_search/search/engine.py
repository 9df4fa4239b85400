"""Query engine over an immutable inverted index."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from archive_search.domain.search import SearchMatch, SearchResponse
from archive_search.search.models import InvertedIndex


def count_matches(index: InvertedIndex, terms: Sequence[str]) -> Counter[int]:
    """Count posting occurrences per document across all ``terms``.

    Unknown terms contribute nothing. A document listed twice in one posting
    list is counted twice.
    """

    counter: Counter[int] = Counter()
    for term in terms:
        doc_ids = index.get_postings(term)
        if doc_ids is None:
            continue
        counter.update(doc_ids)
    return counter


def search(index: InvertedIndex, terms: Sequence[str]) -> list[SearchMatch]:
    """Rank documents by the share of query terms they matched.

    ``score = matches / len(terms)``. Results are ordered by descending score;
    equal scores keep ingestion order (ascending document id). IDF is not
    consulted. An empty ``terms`` sequence yields no matches.
    """

    if not terms:
        return []

    counter = count_matches(index, terms)
    term_count = len(terms)
    ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    return [
        SearchMatch(document=index.documents.name_of(doc_id), score=count / term_count) for doc_id, count in ranked
    ]


def search_response(index: InvertedIndex, terms: Sequence[str]) -> SearchResponse:
    matches = search(index, terms)
    return SearchResponse(matches=matches, total=len(matches))
