"""
On-disk index artifacts: writers, tolerant line loaders and the read-only
IndexStore used for ranking.

Layout of an index directory:

    docnos.txt                          <docNo> <absolute path of stored doc>
    metadata/<docNo>-metadata.txt       docno: D internal id: N date: X headline: H
    lexicon/lexicon.txt                 <term>:<termId>
    invertedIndex/invertedIndex.txt     Term ID: n / "    DocID: d, Count: c" / ----------
    doc-lengths/doc-lengths.txt         one token count per line (line n = internal id n)
    index-complete.txt                  written last; records stemmed/documents/terms
    <yy>/<mm>/<dd>/<docNo>.txt          raw document blocks

Stemmed and baseline builds use the same file names; the completion marker
says which one a directory holds. Loaders skip and log lines that do not
match their grammar instead of aborting.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator

from .posting import DocumentMetadata, InvertedIndex, Lexicon, Posting

logger = logging.getLogger(__name__)

DOCNOS_FILE = "docnos.txt"
METADATA_DIR = "metadata"
METADATA_SUFFIX = "-metadata.txt"
LEXICON_FILE = Path("lexicon") / "lexicon.txt"
INVERTED_INDEX_FILE = Path("invertedIndex") / "invertedIndex.txt"
DOC_LENGTHS_FILE = Path("doc-lengths") / "doc-lengths.txt"
COMPLETE_MARKER = "index-complete.txt"

POSTINGS_SEPARATOR = "----------"

_METADATA_RE = re.compile(
    r"^docno: (?P<doc_no>\S*) internal id: (?P<internal_id>-?\d+) "
    r"date: (?P<date>.*?) headline: ?(?P<headline>.*)$"
)
_TERM_ID_RE = re.compile(r"^Term ID:\s*(\d+)$")
_POSTING_RE = re.compile(r"^DocID:\s*(\d+),\s*Count:\s*(\d+)$")
_DOCNO_DATE_RE = re.compile(r"^[A-Za-z]{2}(\d{2})(\d{2})(\d{2})")


class IncompleteIndexError(RuntimeError):
    """The index directory has no completion marker, so the build never finished."""


@dataclass(frozen=True)
class LineOutcome:
    """Result of parsing one artifact line: a value, or the reason it was skipped."""

    value: object = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def parsed(cls, value: object) -> "LineOutcome":
        return cls(value=value)

    @classmethod
    def skipped(cls, reason: str) -> "LineOutcome":
        return cls(reason=reason)


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

def document_path(index_dir: Path, doc_no: str) -> Path:
    """
    Where the raw block of doc_no is stored.
    LA010189-0001 -> <index_dir>/89/01/01/LA010189-0001.txt; doc numbers
    without an mmddyy part go under <index_dir>/misc/.
    """
    match = _DOCNO_DATE_RE.match(doc_no.split("-")[0].strip())
    if match is None:
        return Path(index_dir) / "misc" / f"{doc_no}.txt"
    month, day, year = match.groups()
    return Path(index_dir) / year / month / day / f"{doc_no}.txt"


def metadata_path(index_dir: Path, doc_no: str) -> Path:
    return Path(index_dir) / METADATA_DIR / f"{doc_no}{METADATA_SUFFIX}"


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------

def format_metadata_line(meta: DocumentMetadata) -> str:
    return (
        f"docno: {meta.doc_no} internal id: {meta.internal_id} "
        f"date: {meta.date} headline: {meta.headline}\n"
    )


def write_metadata(index_dir: Path, meta: DocumentMetadata) -> Path:
    """Append the metadata line of one document to its own metadata file."""
    path = metadata_path(index_dir, meta.doc_no)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        f.write(format_metadata_line(meta))
    return path


def write_document(index_dir: Path, doc_no: str, raw_block: str) -> Path:
    """Store a raw document block verbatim and return its absolute path."""
    path = document_path(index_dir, doc_no)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(raw_block, encoding="utf-8")
    return path.resolve()


def format_docno_line(doc_no: str, path: Path) -> str:
    return f"{doc_no} {path}\n"


def write_lexicon(index_dir: Path, lexicon: Lexicon) -> Path:
    path = Path(index_dir) / LEXICON_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for term, term_id in lexicon.items():
            f.write(f"{term}:{term_id}\n")
    return path


def write_inverted_index(index_dir: Path, index: InvertedIndex) -> Path:
    path = Path(index_dir) / INVERTED_INDEX_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for term_id, postings in index.items():
            f.write(f"Term ID: {term_id}\n")
            for p in postings:
                f.write(f"    DocID: {p.doc_id}, Count: {p.count}\n")
            f.write(POSTINGS_SEPARATOR + "\n")
    return path


def write_doc_lengths(index_dir: Path, doc_lengths: Iterable[int]) -> Path:
    path = Path(index_dir) / DOC_LENGTHS_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for length in doc_lengths:
            f.write(f"{length}\n")
    return path


def write_completion_marker(index_dir: Path, *, stemmed: bool, num_docs: int, num_terms: int) -> Path:
    path = Path(index_dir) / COMPLETE_MARKER
    path.write_text(
        f"stemmed: {str(stemmed).lower()}\ndocuments: {num_docs}\nterms: {num_terms}\n",
        encoding="utf-8",
    )
    return path


# ---------------------------------------------------------------------------
# Line parsers
# ---------------------------------------------------------------------------

def parse_lexicon_line(line: str) -> LineOutcome:
    """Parse "term:id" (or the tab/whitespace separated variant)."""
    text = line.strip()
    if not text:
        return LineOutcome.skipped("blank line")
    parts = text.split(":") if ":" in text else text.split()
    if len(parts) != 2:
        return LineOutcome.skipped("expected <term>:<termId>")
    term, raw_id = parts[0].strip(), parts[1].strip()
    if not term:
        return LineOutcome.skipped("empty term")
    try:
        term_id = int(raw_id)
    except ValueError:
        return LineOutcome.skipped(f"term id is not an integer: {raw_id!r}")
    return LineOutcome.parsed((term, term_id))


def parse_inverted_index_line(line: str) -> LineOutcome:
    """
    Parse one line of the postings file into ("term", id), ("posting",
    Posting) or ("separator", None).
    """
    text = line.strip()
    if text == POSTINGS_SEPARATOR:
        return LineOutcome.parsed(("separator", None))
    if text.startswith("Term ID:"):
        match = _TERM_ID_RE.match(text)
        if match is None:
            return LineOutcome.skipped("malformed Term ID header")
        return LineOutcome.parsed(("term", int(match.group(1))))
    if text.startswith("DocID:"):
        match = _POSTING_RE.match(text)
        if match is None:
            return LineOutcome.skipped("malformed posting")
        return LineOutcome.parsed(("posting", Posting(int(match.group(1)), int(match.group(2)))))
    return LineOutcome.skipped("unrecognized line")


def parse_doc_length_line(line: str) -> LineOutcome:
    text = line.strip()
    try:
        return LineOutcome.parsed(int(text))
    except ValueError:
        return LineOutcome.skipped(f"document length is not an integer: {text!r}")


def parse_metadata_line(line: str) -> LineOutcome:
    match = _METADATA_RE.match(line.rstrip("\r\n"))
    if match is None:
        return LineOutcome.skipped("expected 'docno: .. internal id: .. date: .. headline: ..'")
    return LineOutcome.parsed(
        DocumentMetadata(
            doc_no=match.group("doc_no"),
            internal_id=int(match.group("internal_id")),
            date=match.group("date"),
            headline=match.group("headline"),
        )
    )


def parse_docno_line(line: str) -> LineOutcome:
    parts = line.rstrip("\r\n").split(" ", 1)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return LineOutcome.skipped("expected '<docNo> <path>'")
    return LineOutcome.parsed((parts[0], Path(parts[1])))


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------

def _parsed_lines(
    path: Path,
    parse: Callable[[str], LineOutcome],
    *,
    skip_blank: bool = True,
) -> Iterator[tuple[int, object]]:
    """Yield (line number, value) for every line of path that parses; log the rest."""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for lineno, line in enumerate(f, start=1):
            if skip_blank and not line.strip():
                continue
            outcome = parse(line)
            if outcome.ok:
                yield lineno, outcome.value
            else:
                logger.warning("%s:%d: skipped line (%s): %r", path, lineno, outcome.reason, line.rstrip("\n"))


def _require_file(path: Path) -> Path:
    if not path.exists():
        raise FileNotFoundError(f"Index file not found: {path}")
    return path


def load_lexicon(path: Path) -> Lexicon:
    lexicon = Lexicon()
    for _, (term, term_id) in _parsed_lines(_require_file(Path(path)), parse_lexicon_line):
        lexicon.set(term, term_id)
    logger.info("Loaded lexicon: %d terms from %s", len(lexicon), path)
    return lexicon


def load_inverted_index(path: Path) -> InvertedIndex:
    path = _require_file(Path(path))
    index = InvertedIndex()
    current: int | None = None
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            outcome = parse_inverted_index_line(line)
            if not outcome.ok:
                if line.strip().startswith("Term ID:"):
                    # Postings that follow a broken header have no term to attach to.
                    current = None
                logger.warning("%s:%d: skipped line (%s): %r", path, lineno, outcome.reason, line.rstrip("\n"))
                continue
            kind, value = outcome.value
            if kind == "term":
                current = value
                index.start_term(current)
            elif kind == "posting":
                if current is None:
                    logger.warning("%s:%d: skipped posting outside a term block", path, lineno)
                    continue
                index.add_posting(current, value.doc_id, value.count)
    logger.info("Loaded inverted index: %d postings lists from %s", len(index), path)
    return index


def load_doc_lengths(path: Path) -> dict[int, int]:
    """
    Load document lengths keyed by internal id.
    The n-th non-blank line belongs to internal id n; a malformed line keeps
    its position so later documents are not shifted.
    """
    path = _require_file(Path(path))
    lengths: dict[int, int] = {}
    position = 0
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            position += 1
            outcome = parse_doc_length_line(line)
            if outcome.ok:
                lengths[position] = outcome.value
            else:
                logger.warning("%s:%d: skipped line (%s)", path, lineno, outcome.reason)
    return lengths


def load_metadata(index_dir: Path) -> dict[int, DocumentMetadata]:
    """Read every metadata/<docNo>-metadata.txt file, keyed by internal id."""
    metadata_dir = Path(index_dir) / METADATA_DIR
    if not metadata_dir.is_dir():
        raise FileNotFoundError(f"Metadata directory not found: {metadata_dir}")
    metadata: dict[int, DocumentMetadata] = {}
    for path in sorted(metadata_dir.glob(f"*{METADATA_SUFFIX}")):
        for _, meta in _parsed_lines(path, parse_metadata_line):
            metadata[meta.internal_id] = meta
    logger.info("Loaded metadata for %d documents", len(metadata))
    return metadata


def load_docno_mapping(index_dir: Path) -> dict[int, tuple[str, Path]]:
    """
    Load (docNo, stored path) pairs keyed by internal id.
    The n-th non-blank line of docnos.txt belongs to internal id n; like
    load_doc_lengths, a malformed line keeps its position.
    """
    path = _require_file(Path(index_dir) / DOCNOS_FILE)
    mapping: dict[int, tuple[str, Path]] = {}
    position = 0
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            position += 1
            outcome = parse_docno_line(line)
            if outcome.ok:
                mapping[position] = outcome.value
            else:
                logger.warning("%s:%d: skipped line (%s): %r", path, lineno, outcome.reason, line.rstrip("\n"))
    return mapping


def read_completion_marker(index_dir: Path) -> dict[str, str] | None:
    path = Path(index_dir) / COMPLETE_MARKER
    if not path.exists():
        return None
    info: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        key, sep, value = line.partition(":")
        if sep:
            info[key.strip()] = value.strip()
    return info


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

@dataclass
class IndexStore:
    """
    Everything ranking needs, joined by term id and internal id.
    Treated as read-only once loaded.
    """

    lexicon: Lexicon
    inverted_index: InvertedIndex
    doc_lengths: dict[int, int]
    metadata: dict[int, DocumentMetadata]
    stemmed: bool = False
    index_dir: Path | None = None
    _average_doc_length: float | None = field(default=None, repr=False)

    @property
    def total_docs(self) -> int:
        return len(self.metadata) if self.metadata else len(self.doc_lengths)

    @property
    def average_doc_length(self) -> float:
        if self._average_doc_length is None:
            lengths = list(self.doc_lengths.values())
            self._average_doc_length = sum(lengths) / len(lengths) if lengths else 0.0
        return self._average_doc_length

    def doc_length(self, internal_id: int) -> int:
        return self.doc_lengths.get(internal_id, 0)

    def doc_no(self, internal_id: int) -> str:
        meta = self.metadata.get(internal_id)
        return meta.doc_no if meta is not None else ""

    def postings_for(self, term: str) -> list[Posting]:
        term_id = self.lexicon.get(term)
        if term_id is None:
            return []
        return self.inverted_index.get_postings(term_id)


def load_index(
    index_dir: Path,
    *,
    require_complete: bool = True,
    stemmed: bool | None = None,
) -> IndexStore:
    """
    Load all artifacts of an index directory.

    stemmed overrides what the completion marker says; it is needed for
    directories built without a marker (require_complete=False).
    """
    index_dir = Path(index_dir)
    if not index_dir.is_dir():
        raise FileNotFoundError(f"Index directory not found: {index_dir}")

    marker = read_completion_marker(index_dir)
    if marker is None:
        if require_complete:
            raise IncompleteIndexError(
                f"{index_dir} has no {COMPLETE_MARKER}; the index build did not finish"
            )
        logger.warning("%s has no completion marker, loading anyway", index_dir)
    if stemmed is None:
        stemmed = marker is not None and marker.get("stemmed") == "true"

    store = IndexStore(
        lexicon=load_lexicon(index_dir / LEXICON_FILE),
        inverted_index=load_inverted_index(index_dir / INVERTED_INDEX_FILE),
        doc_lengths=load_doc_lengths(index_dir / DOC_LENGTHS_FILE),
        metadata=load_metadata(index_dir),
        stemmed=stemmed,
        index_dir=index_dir,
    )
    logger.info(
        "Index ready: %d documents, %d terms, avg length %.2f (stemmed=%s)",
        store.total_docs, len(store.lexicon), store.average_doc_length, store.stemmed,
    )
    return store
