"""
Streaming segmenter for tagged news-wire corpora.

The corpus is a sequence of <DOC> ... </DOC> blocks, one marker per line:

    <DOC>
    <DOCNO> LA010189-0001 </DOCNO>
    <DATE>
    <P>
    January 1, 1989, Sunday, Home Edition
    </P>
    </DATE>
    <HEADLINE>
    <P>
    A headline
    </P>
    </HEADLINE>
    <TEXT> ... </TEXT>
    </DOC>

Segmenter is a small finite-state machine fed one line at a time. It keeps the
whole raw block so the original document can be stored verbatim, and emits a
RawRecord when the closing </DOC> marker is seen.
"""

import gzip
import logging
import zlib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import IO, Iterable, Iterator

from .tokenizer import extract_headline

logger = logging.getLogger(__name__)

DOCNO_OPEN = "<DOCNO>"
DOCNO_CLOSE = "</DOCNO>"
DATE_OPEN = "<DATE>"
DATE_CLOSE = "</DATE>"
PARA_OPEN = "<P>"
HEADLINE_OPEN = "<HEADLINE>"
HEADLINE_CLOSE = "</HEADLINE>"
DOC_CLOSE = "</DOC>"

_GZIP_MAGIC = b"\x1f\x8b"


class CorpusDecodeError(ValueError):
    """The compressed corpus stream could not be decoded."""


class SegmenterState(Enum):
    OUTSIDE = "outside"
    IN_DOCNO = "in_docno"
    IN_DATE = "in_date"
    IN_HEADLINE = "in_headline"


@dataclass
class RawRecord:
    """One logical document as it appeared in the corpus stream."""

    doc_no: str
    date: str
    headline: str
    body: str


def clean_doc_no(text: str) -> str:
    return text.replace(DOCNO_OPEN, "").replace(DOCNO_CLOSE, "").strip()


def up_to_second_comma(text: str) -> str:
    """
    Cut a date phrase just before its second comma.
    "January 1, 1989, Sunday, Home Edition" -> "January 1, 1989"
    """
    first = text.find(",")
    if first == -1:
        return text
    second = text.find(",", first + 1)
    return text if second == -1 else text[:second]


class Segmenter:
    """
    Line-driven state machine that turns corpus lines into RawRecords.

    feed() appends the line to the current raw block, applies the transition
    for the current state and returns a RawRecord when the line closes a
    document, otherwise None.
    """

    def __init__(self) -> None:
        self.state = SegmenterState.OUTSIDE
        self.date_line_next = False
        self._reset_document()

    def _reset_document(self) -> None:
        self._block: list[str] = []
        self._doc_no_parts: list[str] = []
        self._headline_markup: list[str] = []
        self.doc_no = ""
        self.date = ""

    def feed(self, line: str) -> RawRecord | None:
        line = line.rstrip("\r\n")
        self._block.append(line + "\n")

        handler = self._handlers[self.state]
        self.state = handler(self, line)

        if DOC_CLOSE in line:
            return self._emit()
        return None

    def _emit(self) -> RawRecord:
        if self.state is not SegmenterState.OUTSIDE:
            logger.debug("Document %r closed while in state %s", self.doc_no, self.state.value)
        record = RawRecord(
            doc_no=self.doc_no,
            date=self.date,
            headline=extract_headline("\n".join(self._headline_markup)),
            body="".join(self._block),
        )
        self.state = SegmenterState.OUTSIDE
        self.date_line_next = False
        self._reset_document()
        return record

    # Transitions: each takes the current line and returns the next state.

    def _outside(self, line: str) -> SegmenterState:
        if DOCNO_OPEN in line:
            if DOCNO_CLOSE in line:
                self.doc_no = clean_doc_no(line)
                return SegmenterState.OUTSIDE
            self._doc_no_parts = [clean_doc_no(line)]
            return SegmenterState.IN_DOCNO
        if DATE_OPEN in line:
            self.date_line_next = PARA_OPEN in line
            return SegmenterState.IN_DATE
        if HEADLINE_OPEN in line:
            self._headline_markup.append(line)
            if HEADLINE_CLOSE in line:
                return SegmenterState.OUTSIDE
            return SegmenterState.IN_HEADLINE
        return SegmenterState.OUTSIDE

    def _in_docno(self, line: str) -> SegmenterState:
        self._doc_no_parts.append(clean_doc_no(line))
        if DOCNO_CLOSE in line:
            self.doc_no = " ".join(p for p in self._doc_no_parts if p)
            return SegmenterState.OUTSIDE
        return SegmenterState.IN_DOCNO

    def _in_date(self, line: str) -> SegmenterState:
        if self.date_line_next:
            self.date += up_to_second_comma(line.strip())
            self.date_line_next = False
            return SegmenterState.OUTSIDE
        if PARA_OPEN in line:
            self.date_line_next = True
            return SegmenterState.IN_DATE
        if DATE_CLOSE in line:
            return SegmenterState.OUTSIDE
        return SegmenterState.IN_DATE

    def _in_headline(self, line: str) -> SegmenterState:
        self._headline_markup.append(line)
        if HEADLINE_CLOSE in line:
            return SegmenterState.OUTSIDE
        return SegmenterState.IN_HEADLINE

    _handlers = {
        SegmenterState.OUTSIDE: _outside,
        SegmenterState.IN_DOCNO: _in_docno,
        SegmenterState.IN_DATE: _in_date,
        SegmenterState.IN_HEADLINE: _in_headline,
    }


def iter_records(lines: Iterable[str]) -> Iterator[RawRecord]:
    """Run a fresh Segmenter over lines and yield every completed document."""
    segmenter = Segmenter()
    for line in lines:
        record = segmenter.feed(line)
        if record is not None:
            yield record


def open_corpus(path: Path, encoding: str = "utf-8") -> IO[str]:
    """
    Open a corpus file as a text stream.
    Gzip files (detected by their magic bytes) are decompressed on the fly.
    """
    path = Path(path)
    with open(path, "rb") as f:
        magic = f.read(2)
    if magic == _GZIP_MAGIC:
        return gzip.open(path, "rt", encoding=encoding, errors="replace")
    return open(path, "r", encoding=encoding, errors="replace")


def read_corpus(path: Path) -> Iterator[RawRecord]:
    """
    Stream RawRecords from a corpus file.

    Raises FileNotFoundError immediately if the file does not exist. A corrupt
    compressed stream surfaces as CorpusDecodeError while iterating.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Corpus file not found: {path}")
    return _records_from(path)


def _records_from(path: Path) -> Iterator[RawRecord]:
    with open_corpus(path) as stream:
        try:
            yield from iter_records(stream)
        except (gzip.BadGzipFile, EOFError, zlib.error) as e:
            raise CorpusDecodeError(f"Could not decode corpus {path}: {e}") from e
