"""
Boolean AND retrieval: documents containing every query term.

Uses the same lexicon and postings as BM25. A query term missing from the
lexicon means no document can match. Matching documents are listed in
internal id order and given the descending score num_retrieved - rank so the
result file stays in TREC format.
"""

import logging

from .bm25 import Query, ResultEntry
from .index_store import IndexStore
from .stemmer import stem_tokens
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

RUN_TAG = "booleanAND"


def matching_documents(store: IndexStore, text: str, stem: bool | None = None) -> list[int]:
    """Internal ids of the documents that contain all terms of text, ascending."""
    tokens = tokenize(text)
    if store.stemmed if stem is None else stem:
        tokens = stem_tokens(tokens)
    result: set[int] | None = None
    for term in tokens:
        postings = store.postings_for(term)
        if not postings:
            return []
        doc_ids = {p.doc_id for p in postings}
        result = doc_ids if result is None else result & doc_ids
        if not result:
            return []
    return sorted(result) if result else []


def run_boolean_and(
    store: IndexStore,
    queries: list[Query],
    run_tag: str = RUN_TAG,
    stem: bool | None = None,
) -> list[ResultEntry]:
    results: list[ResultEntry] = []
    for query in queries:
        doc_ids = matching_documents(store, query.text, stem)
        retrieved = len(doc_ids)
        for rank, doc_id in enumerate(doc_ids, start=1):
            results.append(
                ResultEntry(
                    topic_id=query.topic_id,
                    rank=rank,
                    doc_no=store.doc_no(doc_id),
                    score=float(retrieved - rank),
                    run_tag=run_tag,
                )
            )
        logger.info("Topic %d: %d documents matched", query.topic_id, retrieved)
    results.sort(key=lambda e: (e.topic_id, -e.score))
    return results
