"""Unit tests for ranked multi-term queries."""

from __future__ import annotations

from array import array

import pytest

from archive_search.domain.search import SearchMatch, SearchResponse
from archive_search.search.builder import build_index
from archive_search.search.engine import count_matches, search, search_response
from archive_search.search.models import DocumentIdTable, InvertedIndex


pytestmark = pytest.mark.unit


@pytest.fixture
def ab_index() -> InvertedIndex:
    return build_index(
        [
            {"name": "A", "files": ["a/b", "a/c"]},
            {"name": "B", "files": ["a/b"]},
            {"name": "C", "files": ["z/c"]},
        ]
    )


def test_shared_segment_matches_every_document(ab_index) -> None:
    matches = search(ab_index, ["a"])

    assert matches == [SearchMatch(document="A", score=1.0), SearchMatch(document="B", score=1.0)]


def test_term_matches_only_documents_containing_it(ab_index) -> None:
    matches = search(ab_index, ["c"])

    assert [match.document for match in matches] == ["A", "C"]


def test_scores_are_share_of_query_terms(ab_index) -> None:
    matches = search(ab_index, ["a", "c"])

    assert matches == [
        SearchMatch(document="A", score=1.0),
        SearchMatch(document="B", score=0.5),
        SearchMatch(document="C", score=0.5),
    ]


def test_equal_scores_keep_ingestion_order(ab_index) -> None:
    forward = search(ab_index, ["b", "z"])
    reverse = search(ab_index, ["z", "b"])

    assert [match.document for match in forward] == ["A", "B", "C"]
    assert forward == reverse


def test_unknown_terms_contribute_nothing(ab_index) -> None:
    matches = search(ab_index, ["a", "nope"])

    assert matches == [SearchMatch(document="A", score=0.5), SearchMatch(document="B", score=0.5)]


def test_all_unknown_terms_yield_empty_result(ab_index) -> None:
    response = search_response(ab_index, ["nope", "nada"])

    assert response == SearchResponse(matches=[], total=0)


def test_empty_query_returns_no_matches(ab_index) -> None:
    assert search(ab_index, []) == []
    assert search_response(ab_index, []).total == 0


def test_search_on_empty_index() -> None:
    assert search(InvertedIndex.empty(), ["a"]) == []


def test_repeated_query_terms_count_each_time(ab_index) -> None:
    matches = search(ab_index, ["b", "b"])

    assert matches == [SearchMatch(document="A", score=1.0), SearchMatch(document="B", score=1.0)]


def test_duplicate_posting_entries_are_counted_twice() -> None:
    index = InvertedIndex(
        postings={"x": array("I", [0, 1, 0])},
        idf={"x": 0.0},
        document_count=2,
        documents=DocumentIdTable(names=["A", "B"]),
    )

    assert count_matches(index, ["x"]) == {0: 2, 1: 1}
    assert search(index, ["x"]) == [SearchMatch(document="A", score=2.0), SearchMatch(document="B", score=1.0)]


def test_search_response_reports_total(ab_index) -> None:
    response = search_response(ab_index, ["a"])

    assert response.total == 2
    assert response.model_dump() == {
        "matches": [{"document": "A", "score": 1.0}, {"document": "B", "score": 1.0}],
        "total": 2,
    }


def test_search_ignores_idf(sample_records) -> None:
    index = build_index(sample_records)

    matches = search(index, ["META-INF", "lombok"])

    assert matches[0] == SearchMatch(document="lombok-1.18.jar", score=1.0)
    assert matches[1] == SearchMatch(document="commons-io-2.4.jar", score=0.5)
