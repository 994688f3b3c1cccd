"""
Batch commands: build an index, run BM25 or Boolean AND over a query file,
evaluate a result file, and print a stored document.

Each command is a main(argv) function wired to a console script in
pyproject.toml. Missing inputs and unreadable corpora exit with status 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable

from .bm25 import RESULT_LIMIT, load_queries, run_queries, write_results
from .boolean_and import RUN_TAG as BOOLEAN_AND_RUN_TAG, run_boolean_and
from .evaluation import evaluate, load_qrels, load_results, write_scores
from .get_doc import IDENTIFIER_TYPES, DocumentNotFound, format_document, get_document
from .index_builder import IndexSummary, build_index
from .index_store import IncompleteIndexError, IndexStore, load_index
from .logging_config import add_logging_arguments, setup_logging_from_args
from .segmenter import CorpusDecodeError

logger = logging.getLogger(__name__)


def _fail(message: str) -> None:
    logger.error(message)
    sys.exit(1)


def _parse(parser: argparse.ArgumentParser, argv: Iterable[str] | None) -> argparse.Namespace:
    add_logging_arguments(parser)
    args = parser.parse_args(list(argv) if argv is not None else None)
    setup_logging_from_args(args)
    return args


def _load_store(index_dir: Path, stem: bool | None, allow_incomplete: bool) -> IndexStore:
    try:
        return load_index(index_dir, require_complete=not allow_incomplete, stemmed=stem)
    except (FileNotFoundError, IncompleteIndexError) as e:
        _fail(str(e))


def run_build(corpus: Path, output: Path, stem: bool) -> IndexSummary:
    """Build the index, turning the fatal error classes into exit status 1."""
    if not corpus.exists():
        _fail(f"Corpus path doesn't exist: {corpus}")
    try:
        return build_index(corpus, output, stem=stem)
    except FileExistsError as e:
        _fail(str(e))
    except CorpusDecodeError as e:
        _fail(f"{e}. The partial output in {output} is not a valid index.")


def build_main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Build the inverted index from a gzipped corpus.")
    parser.add_argument("corpus", type=Path, help="Path to the (gzipped) corpus file.")
    parser.add_argument("output", type=Path, help="Index directory to create (must not exist).")
    parser.add_argument("--stem", action="store_true", help="Stem tokens before indexing.")
    args = _parse(parser, argv)

    summary = run_build(args.corpus, args.output, args.stem)
    print(f"Indexed {summary.num_docs} documents, {summary.num_terms} unique terms into {args.output}")


def bm25_main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Rank documents for every query with BM25.")
    parser.add_argument("index", type=Path, help="Index directory.")
    parser.add_argument("queries", type=Path, help="Query file (topic line, then query line).")
    parser.add_argument("output", type=Path, help="Result file to write.")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--stem", dest="stem", action="store_true", default=None,
                      help="Stem queries (default: follow the index).")
    mode.add_argument("--baseline", dest="stem", action="store_false", help="Do not stem queries.")
    parser.add_argument("--run-tag", default=None, help="Run tag for the result file.")
    parser.add_argument("--limit", type=int, default=RESULT_LIMIT, help="Documents kept per topic.")
    parser.add_argument("--allow-incomplete", action="store_true",
                        help="Load an index directory that has no completion marker.")
    args = _parse(parser, argv)

    if not args.queries.exists():
        _fail(f"Queries path doesn't exist: {args.queries}")
    store = _load_store(args.index, args.stem, args.allow_incomplete)
    results = run_queries(store, load_queries(args.queries), args.run_tag, limit=args.limit)
    write_results(args.output, results)
    logger.info("Finished retrieval: %d result lines written to %s", len(results), args.output)


def boolean_and_main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Boolean AND retrieval for every query.")
    parser.add_argument("index", type=Path, help="Index directory.")
    parser.add_argument("queries", type=Path, help="Query file (topic line, then query line).")
    parser.add_argument("output", type=Path, help="Result file to write.")
    parser.add_argument("--run-tag", default=BOOLEAN_AND_RUN_TAG)
    parser.add_argument("--allow-incomplete", action="store_true")
    args = _parse(parser, argv)

    if not args.queries.exists():
        _fail(f"Queries path doesn't exist: {args.queries}")
    store = _load_store(args.index, None, args.allow_incomplete)
    results = run_boolean_and(store, load_queries(args.queries), args.run_tag)
    write_results(args.output, results)
    logger.info("Finished retrieval: %d result lines written to %s", len(results), args.output)


def evaluate_main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Compute AP, nDCG@10/1000 and P@10 for a result file.")
    parser.add_argument("results", type=Path, help="Result file to evaluate.")
    parser.add_argument("qrels", type=Path, help="Relevance judgments.")
    parser.add_argument("output", type=Path, help="Where to write the per-topic scores.")
    args = _parse(parser, argv)

    try:
        judgments = load_qrels(args.qrels)
        results = load_results(args.results)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))
    write_scores(args.output, evaluate(results, judgments))
    logger.info("Scores written to %s", args.output)


def get_doc_main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Print a stored document and its metadata.")
    parser.add_argument("index", type=Path, help="Index directory.")
    parser.add_argument("id_type", choices=IDENTIFIER_TYPES, help="Look up by docno or internal id.")
    parser.add_argument("identifier", help="The docno or internal id.")
    args = _parse(parser, argv)

    try:
        doc = get_document(args.index, args.id_type, args.identifier)
    except (FileNotFoundError, DocumentNotFound) as e:
        _fail(str(e))
    print(format_document(doc))
