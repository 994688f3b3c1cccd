"""
BM25 ranking over a loaded IndexStore.

For each distinct query term found in the lexicon, with n_t its document
frequency and N the number of documents:

    idf(t)      = ln((N - n_t + 0.5) / (n_t + 0.5))
    score(d) += idf(t) * f_td / (f_td + k1 * (1 - b + b * dl / avgdl))

with k1 = 1.2 and b = 0.75. Query terms missing from the lexicon add
nothing. Results are ordered by score (descending), ties broken by docNo
(ascending), and ranked from 1.
"""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .index_store import IndexStore
from .stemmer import stem_tokens
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

K1 = 1.2
B = 0.75

# Batch runs keep the top 1000 documents per topic; interactive search the top 10.
RESULT_LIMIT = 1000
INTERACTIVE_LIMIT = 10


@dataclass(frozen=True)
class Query:
    topic_id: int
    text: str


@dataclass(frozen=True)
class ResultEntry:
    topic_id: int
    rank: int
    doc_no: str
    score: float
    run_tag: str

    def to_trec_line(self) -> str:
        """<topicId> Q0 <docNo> <rank> <score> <runTag>"""
        return f"{self.topic_id} Q0 {self.doc_no} {self.rank} {self.score!r} {self.run_tag}"


def default_run_tag(stemmed: bool) -> str:
    return "bm25_stem" if stemmed else "bm25_baseline"


def idf(total_docs: int, doc_freq: int) -> float:
    return math.log((total_docs - doc_freq + 0.5) / (doc_freq + 0.5))


def term_weight(tf: int, doc_length: float, avg_doc_length: float, k1: float = K1, b: float = B) -> float:
    """Length-normalized term frequency part of BM25 (no k1 + 1 factor)."""
    norm = doc_length / avg_doc_length if avg_doc_length else 0.0
    return tf / (tf + k1 * (1 - b + b * norm))


def order_results(scores: dict[int, float], store: IndexStore, limit: int | None) -> list[tuple[int, float]]:
    """Sort (internal id, score) by score descending, then docNo ascending."""
    ranked = sorted(scores.items(), key=lambda item: (-item[1], store.doc_no(item[0])))
    return ranked if limit is None else ranked[:limit]


class BM25Ranker:
    """
    Scores documents of an IndexStore against free-text queries.
    The store is only read, so one ranker can serve any number of queries.
    """

    def __init__(self, store: IndexStore, stem: bool | None = None, k1: float = K1, b: float = B) -> None:
        self.store = store
        self.stem = store.stemmed if stem is None else stem
        self.k1 = k1
        self.b = b

    def query_terms(self, text: str) -> list[str]:
        """Distinct query terms in first-occurrence order, stemmed when the index is."""
        tokens = tokenize(text)
        if self.stem:
            tokens = stem_tokens(tokens)
        return list(dict.fromkeys(tokens))

    def score(self, text: str) -> dict[int, float]:
        """Accumulated BM25 score per internal id for every document matching a query term."""
        store = self.store
        total_docs = store.total_docs
        avg_len = store.average_doc_length
        scores: dict[int, float] = {}
        for term in self.query_terms(text):
            term_id = store.lexicon.get(term)
            if term_id is None:
                logger.debug("Query term %r not in lexicon", term)
                continue
            postings = store.inverted_index.get_postings(term_id)
            term_idf = idf(total_docs, len(postings))
            for p in postings:
                weight = term_weight(p.count, store.doc_length(p.doc_id), avg_len, self.k1, self.b)
                scores[p.doc_id] = scores.get(p.doc_id, 0.0) + term_idf * weight
        return scores

    def rank(self, query: Query, run_tag: str, limit: int | None = RESULT_LIMIT) -> list[ResultEntry]:
        ranked = order_results(self.score(query.text), self.store, limit)
        return [
            ResultEntry(
                topic_id=query.topic_id,
                rank=rank,
                doc_no=self.store.doc_no(doc_id),
                score=score,
                run_tag=run_tag,
            )
            for rank, (doc_id, score) in enumerate(ranked, start=1)
        ]


def load_queries(path: Path) -> list[Query]:
    """
    Read a query file of alternating lines: topic id, then query text.
    A pair whose topic line is not an integer is skipped with a warning.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Queries file not found: {path}")
    queries: list[Query] = []
    with open(path, "r", encoding="utf-8") as f:
        lines = [line.strip() for line in f]
    while lines and not lines[-1]:
        lines.pop()
    for i in range(0, len(lines) - 1, 2):
        topic, text = lines[i], lines[i + 1]
        try:
            queries.append(Query(topic_id=int(topic), text=text))
        except ValueError:
            logger.warning("%s:%d: skipped query with non-integer topic %r", path, i + 1, topic)
    if len(lines) % 2:
        logger.warning("%s: topic %r has no query line", path, lines[-1])
    return queries


def run_queries(
    store: IndexStore,
    queries: Iterable[Query],
    run_tag: str | None = None,
    *,
    stem: bool | None = None,
    limit: int | None = RESULT_LIMIT,
) -> list[ResultEntry]:
    """Rank every query and return all result entries, topic by topic."""
    ranker = BM25Ranker(store, stem=stem)
    run_tag = run_tag or default_run_tag(ranker.stem)
    results: list[ResultEntry] = []
    for query in queries:
        entries = ranker.rank(query, run_tag, limit)
        logger.info("Topic %d: %d documents ranked", query.topic_id, len(entries))
        results.extend(entries)
    return results


def write_results(path: Path, results: Iterable[ResultEntry]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for entry in results:
            f.write(entry.to_trec_line() + "\n")
