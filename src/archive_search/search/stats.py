"""Inverse document frequency helpers.

The values are computed and persisted alongside postings but are not
consulted by the query engine, which ranks purely by the share of query
terms a document matched.
"""

from __future__ import annotations

from collections.abc import Mapping, Sized
import math


def calculate_idf(doc_freq: int, total_docs: int) -> float:
    """Return ``ln((N - df + 0.5) / (df + 0.5))``.

    ``doc_freq`` is the posting-list length, which equals the number of
    distinct documents only while the adjacent-duplicate guard holds.
    The result is negative for terms present in more than half the corpus.
    """

    return math.log((total_docs - doc_freq + 0.5) / (doc_freq + 0.5))


def compute_idf(postings: Mapping[str, Sized], total_docs: int) -> dict[str, float]:
    """Recompute IDF for every term in ``postings`` from scratch."""

    return {term: calculate_idf(len(doc_ids), total_docs) for term, doc_ids in postings.items()}
