"""
Interactive search with query-biased summaries.

Loads the index for ranking and reads the corpus once more to keep every
document's sentences for summaries. For each query it prints the top 10
documents with headline, date, a two-sentence summary and docNo, then lets
the user open a result by rank.

Usage (after building the index):
    newsindex-search latimes-index latimes.gz
"""

from __future__ import annotations

import argparse
import logging
import re
import sys
import time
from pathlib import Path
from typing import Iterable

from .bm25 import INTERACTIVE_LIMIT, BM25Ranker, Query
from .get_doc import DocumentNotFound, format_document, get_document
from .index_store import IncompleteIndexError, IndexStore, load_index
from .logging_config import add_logging_arguments, setup_logging_from_args
from .segmenter import CorpusDecodeError
from .summarizer import SummaryDocument, load_summary_documents, summarize

logger = logging.getLogger(__name__)

# Fallback headline length when a document has none.
HEADLINE_FALLBACK_CHARS = 50


def result_lines(rank: int, doc: SummaryDocument, query: str) -> list[str]:
    """The two display lines of one search result."""
    summary = summarize(doc.sentences, query)
    headline = doc.headline
    if not headline:
        headline = summary[:HEADLINE_FALLBACK_CHARS] + "..." if len(summary) > HEADLINE_FALLBACK_CHARS else summary
    date = re.sub(r"\s+", " ", doc.date).strip()
    return [f"{rank}. {headline} ({date})", f"{summary} ({doc.doc_no})"]


def search(ranker: BM25Ranker, query: str, top_k: int = INTERACTIVE_LIMIT) -> list[str]:
    """docNos of the top_k documents for query."""
    entries = ranker.rank(Query(topic_id=0, text=query), run_tag="interactive", limit=top_k)
    return [e.doc_no for e in entries]


def run_search_loop(
    store: IndexStore,
    documents: dict[str, SummaryDocument],
    top_k: int = INTERACTIVE_LIMIT,
) -> None:
    """
    Interactive command-line search loop.
    """
    ranker = BM25Ranker(store)
    while True:
        try:
            query = input("Enter your query (or type Q to quit): ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if query.upper() == "Q":
            print("Goodbye!")
            break
        if not query:
            continue

        start = time.perf_counter()
        doc_nos = search(ranker, query, top_k)
        elapsed = time.perf_counter() - start

        if not doc_nos:
            print("No documents matched the query.")
        for rank, doc_no in enumerate(doc_nos, start=1):
            doc = documents.get(doc_no)
            if doc is None:
                print(f"{rank}. <no summary available> ({doc_no})")
                continue
            for line in result_lines(rank, doc, query):
                print(line)
            print()
        print(f"Retrieval took {elapsed:.2f} seconds.")

        if not _browse_results(store, doc_nos):
            print("Goodbye!")
            return


def _browse_results(store: IndexStore, doc_nos: list[str]) -> bool:
    """Let the user open results by rank. Returns False when the user quits."""
    while True:
        try:
            choice = input("Type the rank of a document to view, 'N' for new query, or 'Q' to quit: ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return False
        if choice.upper() == "N":
            return True
        if choice.upper() == "Q":
            return False
        try:
            rank = int(choice)
        except ValueError:
            print("Invalid input. Please try again.")
            continue
        if not 1 <= rank <= len(doc_nos):
            print("Invalid rank. Please try again.")
            continue
        try:
            doc = get_document(store.index_dir, "docno", doc_nos[rank - 1])
        except (FileNotFoundError, DocumentNotFound) as e:
            print(f"Error: {e}")
            continue
        print(format_document(doc))


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Interactive BM25 search with query-biased summaries.")
    parser.add_argument("index", type=Path, help="Index directory.")
    parser.add_argument("corpus", type=Path, help="The corpus file the index was built from.")
    parser.add_argument("--top", type=int, default=INTERACTIVE_LIMIT, help="Number of top results to show.")
    parser.add_argument("--allow-incomplete", action="store_true",
                        help="Load an index directory that has no completion marker.")
    add_logging_arguments(parser)
    args = parser.parse_args(list(argv) if argv is not None else None)
    setup_logging_from_args(args)

    try:
        store = load_index(args.index, require_complete=not args.allow_incomplete)
        documents = load_summary_documents(args.corpus)
    except (FileNotFoundError, IncompleteIndexError, CorpusDecodeError) as e:
        logger.error(str(e))
        sys.exit(1)

    print(f"Loaded {store.total_docs} documents.")
    run_search_loop(store, documents, top_k=args.top)


if __name__ == "__main__":
    main()
