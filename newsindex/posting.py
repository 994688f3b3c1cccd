"""
Posting, lexicon and inverted index data structures.

A posting records how often one term occurs in one document. Terms are
addressed by dense integer term ids (from the lexicon) and documents by dense
internal ids, both starting at 1 and assigned in corpus order.
"""

from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class Posting:
    """
    A term's occurrence in a document.
    - doc_id: internal document id
    - count: number of times the term occurs in that document
    """

    doc_id: int
    count: int


@dataclass
class DocumentMetadata:
    doc_no: str
    internal_id: int
    date: str
    headline: str


class Lexicon:
    """
    Term -> term id, insertion ordered.
    Ids are assigned in first-occurrence order starting at 1; they are not
    alphabetical.
    """

    def __init__(self) -> None:
        self._ids: dict[str, int] = {}

    def add(self, term: str) -> int:
        """Return the id of term, assigning the next id if it is new."""
        term_id = self._ids.get(term)
        if term_id is None:
            term_id = len(self._ids) + 1
            self._ids[term] = term_id
        return term_id

    def set(self, term: str, term_id: int) -> None:
        """Record a (term, id) pair read back from disk."""
        self._ids[term] = term_id

    def get(self, term: str) -> int | None:
        return self._ids.get(term)

    def items(self) -> Iterator[tuple[str, int]]:
        return iter(self._ids.items())

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, term: str) -> bool:
        return term in self._ids


class InvertedIndex:
    """
    Inverted index: map from term id -> list of postings.
    Postings stay in the order documents were indexed; add_posting appends
    without a duplicate check.
    """

    def __init__(self) -> None:
        self._index: dict[int, list[Posting]] = {}

    def add_posting(self, term_id: int, doc_id: int, count: int) -> None:
        """Append a posting for a term in a document."""
        if term_id not in self._index:
            self._index[term_id] = []
        self._index[term_id].append(Posting(doc_id=doc_id, count=count))

    def start_term(self, term_id: int) -> None:
        """Make sure term_id has a (possibly empty) postings list."""
        self._index.setdefault(term_id, [])

    def get_postings(self, term_id: int) -> list[Posting]:
        """Return the list of postings for a term id, or empty list."""
        return self._index.get(term_id, [])

    def document_frequency(self, term_id: int) -> int:
        return len(self._index.get(term_id, []))

    def term_ids(self) -> Iterator[int]:
        """Iterate over all term ids in the index."""
        return iter(self._index)

    def items(self) -> Iterator[tuple[int, list[Posting]]]:
        return iter(self._index.items())

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, term_id: int) -> bool:
        return term_id in self._index
