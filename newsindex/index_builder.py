"""
Index builder: turns a news-wire corpus into an inverted index.

For every document: extract the HEADLINE/TEXT/GRAPHIC text, tokenize,
optionally stem, then record the document length, extend the lexicon with
unseen terms and append one posting per distinct term.

All build state lives on an IndexBuilder instance, so independent builds can
run side by side in one process.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from pathlib import Path

from .index_store import (
    DOCNOS_FILE,
    IndexStore,
    format_docno_line,
    write_completion_marker,
    write_doc_lengths,
    write_document,
    write_inverted_index,
    write_lexicon,
    write_metadata,
)
from .posting import DocumentMetadata, InvertedIndex, Lexicon
from .segmenter import RawRecord, read_corpus
from .stemmer import stem_tokens
from .tokenizer import extract_content, tokenize

logger = logging.getLogger(__name__)

# Log progress every this many documents.
PROGRESS_EVERY = 10_000


@dataclass
class IndexSummary:
    num_docs: int
    num_terms: int


class IndexBuilder:
    """
    Accumulates lexicon, postings, document lengths and metadata.
    Internal ids start at 1 and advance once per added record.
    """

    def __init__(self, stem: bool = False) -> None:
        self.stem = stem
        self.lexicon = Lexicon()
        self.inverted_index = InvertedIndex()
        self.doc_lengths: list[int] = []
        self.metadata: list[DocumentMetadata] = []
        self.next_internal_id = 1

    def document_tokens(self, raw_block: str) -> list[str]:
        """Tokens of a raw document block, stemmed when the builder stems."""
        tokens = tokenize(extract_content(raw_block))
        if self.stem:
            tokens = stem_tokens(tokens)
        return tokens

    def add_record(self, record: RawRecord) -> DocumentMetadata:
        """Index one document and return its metadata."""
        internal_id = self.next_internal_id
        tokens = self.document_tokens(record.body)

        self.doc_lengths.append(len(tokens))
        for token in tokens:
            self.lexicon.add(token)

        # Counter keeps first-occurrence order, so postings are appended in the
        # order terms appear in the document.
        for term, count in Counter(tokens).items():
            term_id = self.lexicon.get(term)
            if term_id is None:
                continue
            self.inverted_index.add_posting(term_id, internal_id, count)

        meta = DocumentMetadata(
            doc_no=record.doc_no,
            internal_id=internal_id,
            date=record.date,
            headline=record.headline,
        )
        self.metadata.append(meta)
        self.next_internal_id += 1
        return meta

    @property
    def num_docs(self) -> int:
        return len(self.metadata)

    def to_store(self) -> IndexStore:
        """An in-memory IndexStore over what has been indexed so far."""
        return IndexStore(
            lexicon=self.lexicon,
            inverted_index=self.inverted_index,
            doc_lengths={i: n for i, n in enumerate(self.doc_lengths, start=1)},
            metadata={m.internal_id: m for m in self.metadata},
            stemmed=self.stem,
        )

    def save(self, output_dir: Path) -> IndexSummary:
        """
        Write lexicon, postings and document lengths, then the completion
        marker. The marker goes last so an interrupted save is never
        mistaken for a finished index.
        """
        output_dir = Path(output_dir)
        write_lexicon(output_dir, self.lexicon)
        write_inverted_index(output_dir, self.inverted_index)
        write_doc_lengths(output_dir, self.doc_lengths)
        write_completion_marker(
            output_dir,
            stemmed=self.stem,
            num_docs=self.num_docs,
            num_terms=len(self.lexicon),
        )
        return IndexSummary(num_docs=self.num_docs, num_terms=len(self.lexicon))


def build_index(corpus_path: Path, output_dir: Path, *, stem: bool = False) -> IndexSummary:
    """
    Build a complete index directory from a (gzipped) corpus file.

    - Each raw document is stored verbatim under <yy>/<mm>/<dd>/<docNo>.txt
      and listed in docnos.txt.
    - One metadata file per document.
    - Lexicon, inverted index, document lengths and completion marker are
      written once the whole corpus has been read.
    Returns (num_docs, num_terms) as an IndexSummary.
    """
    corpus_path = Path(corpus_path)
    output_dir = Path(output_dir)
    records = read_corpus(corpus_path)
    if output_dir.exists():
        raise FileExistsError(f"Output directory already exists: {output_dir}")
    output_dir.mkdir(parents=True)

    builder = IndexBuilder(stem=stem)
    logger.info("Indexing %s into %s (stem=%s)", corpus_path, output_dir, stem)

    with open(output_dir / DOCNOS_FILE, "w", encoding="utf-8") as docnos:
        for record in records:
            if not record.doc_no:
                logger.warning("Skipping document without a DOCNO (%d bytes)", len(record.body))
                continue
            meta = builder.add_record(record)
            stored = write_document(output_dir, record.doc_no, record.body)
            docnos.write(format_docno_line(record.doc_no, stored))
            write_metadata(output_dir, meta)
            if builder.num_docs % PROGRESS_EVERY == 0:
                logger.info("Indexed %d documents, %d terms so far", builder.num_docs, len(builder.lexicon))

    summary = builder.save(output_dir)
    logger.info("Finished indexing: %d documents, %d terms", summary.num_docs, summary.num_terms)
    return summary
