"""
Build the news-wire index and print index analytics.

Usage:
    python build_index.py latimes.gz latimes-index [--stem]

Output (in the index directory):
  - docnos.txt, metadata/, <yy>/<mm>/<dd>/<docNo>.txt   (stored documents)
  - lexicon/lexicon.txt                                  (term:termId)
  - invertedIndex/invertedIndex.txt                      (postings per term id)
  - doc-lengths/doc-lengths.txt                          (tokens per document)
  - index-complete.txt                                   (written last)
  - Analytics table printed to console
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from newsindex.cli import run_build
from newsindex.logging_config import add_logging_arguments, setup_logging_from_args


def directory_size(path: Path) -> int:
    return sum(p.stat().st_size for p in path.rglob("*") if p.is_file())


def main() -> None:
    parser = argparse.ArgumentParser(description="Build the inverted index for a gzipped news-wire corpus")
    parser.add_argument("corpus", type=Path, help="Path to the gzipped corpus (e.g. latimes.gz)")
    parser.add_argument("output", type=Path, help="Index directory to create")
    parser.add_argument("--stem", action="store_true", help="Index stemmed tokens")
    add_logging_arguments(parser)
    args = parser.parse_args()
    setup_logging_from_args(args)

    summary = run_build(args.corpus, args.output, args.stem)
    if summary.num_docs == 0:
        print("No <DOC> blocks with a DOCNO found in the corpus.")
        sys.exit(1)

    index_size_kb = directory_size(args.output) / 1024

    print("\n" + "=" * 50)
    print("INDEX ANALYTICS")
    print("=" * 50)
    print()
    print("| Metric                      | Value |")
    print("|-----------------------------|-------|")
    print(f"| Number of indexed documents | {summary.num_docs} |")
    print(f"| Number of unique terms      | {summary.num_terms} |")
    print(f"| Stemmed                     | {'yes' if args.stem else 'no'} |")
    print(f"| Total size of index (KB)    | {index_size_kb:.2f} |")
    print()
    print("=" * 50)
    print(f"\nIndex saved to: {args.output}")
    print()


if __name__ == "__main__":
    main()
