"""
Query-biased summaries.

A document's headline, body and graphic captions are split into sentences,
each sentence is scored with BM25 against the query using the document's own
sentences as the collection, and the best two sentences form the summary.
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path

from .bm25 import B, K1
from .segmenter import read_corpus
from .tokenizer import extract_paragraphs, tokenize

logger = logging.getLogger(__name__)

SUMMARY_SENTENCES = 2

# A period ending one of these does not end the sentence.
ABBREVIATIONS = frozenset(
    ["Dr.", "Mr.", "Mrs.", "Ms.", "Inc.", "U.S.", "e.g.", "i.e.", "etc.", "Jr.", "Sr.", "Prof.", "Rev."]
)

SENTENCE_END = ".!?"


def ends_with_abbreviation(text: str) -> bool:
    return any(text.endswith(abbr) for abbr in ABBREVIATIONS)


def split_sentences(paragraph: str) -> list[str]:
    """
    Split a paragraph after '.', '!' or '?' when the next character is
    whitespace, unless the text so far ends with a known abbreviation.
    """
    sentences: list[str] = []
    start = 0
    for i, ch in enumerate(paragraph):
        if ch not in SENTENCE_END:
            continue
        if i + 1 < len(paragraph) and paragraph[i + 1].isspace():
            sentence = paragraph[start : i + 1].strip()
            if not ends_with_abbreviation(sentence):
                if sentence:
                    sentences.append(sentence)
                start = i + 1
    rest = paragraph[start:].strip()
    if rest:
        sentences.append(rest)
    return sentences


def document_sentences(raw_block: str) -> list[str]:
    """Sentences of the headline, body text and graphic captions of a raw block."""
    sentences: list[str] = []
    for paragraph in extract_paragraphs(raw_block):
        sentences.extend(split_sentences(paragraph))
    return sentences


class SentenceScorer:
    """
    BM25 with sentences as the retrieval unit and one document's sentences as
    the collection:

        idf(t)   = ln((S - n_t + 0.5) / (n_t + 0.5) + 1)
        score(s) = sum_t idf(t) * f (k1 + 1) / (f + k1 (1 - b + b |s| / avg|s|))
    """

    def __init__(self, sentences: list[str], k1: float = K1, b: float = B) -> None:
        self.sentences = sentences
        self.k1 = k1
        self.b = b
        self._tokens = [tokenize(s) for s in sentences]
        self._token_sets = [set(t) for t in self._tokens]
        total = sum(len(t) for t in self._tokens)
        self.avg_length = total / len(sentences) if sentences else 0.0

    def sentence_frequency(self, term: str) -> int:
        return sum(1 for tokens in self._token_sets if term in tokens)

    def idf(self, term: str) -> float:
        n = self.sentence_frequency(term)
        count = len(self.sentences)
        return math.log((count - n + 0.5) / (n + 0.5) + 1)

    def scores(self, query_terms: list[str]) -> list[float]:
        idfs = {term: self.idf(term) for term in set(query_terms)}
        results: list[float] = []
        for tokens in self._tokens:
            length = len(tokens)
            norm = length / self.avg_length if self.avg_length else 0.0
            score = 0.0
            for term in query_terms:
                f = tokens.count(term)
                score += idfs[term] * (f * (self.k1 + 1)) / (f + self.k1 * (1 - self.b + self.b * norm))
            results.append(score)
        return results


def close_quote(sentence: str) -> str:
    """Close an opening quote that the sentence leaves unmatched."""
    if sentence.startswith('"') and sentence.count('"') % 2 == 1:
        return sentence + '"'
    return sentence


def summarize(sentences: list[str], query: str, num_sentences: int = SUMMARY_SENTENCES) -> str:
    """
    Return the num_sentences best sentences for query, best first, joined by
    a space. Equal scores keep document order.
    """
    if not sentences:
        return ""
    scores = SentenceScorer(sentences).scores(tokenize(query))
    order = sorted(range(len(sentences)), key=lambda i: -scores[i])
    return " ".join(close_quote(sentences[i]) for i in order[:num_sentences])


@dataclass
class SummaryDocument:
    doc_no: str
    headline: str
    date: str
    sentences: list[str] = field(default_factory=list)


def load_summary_documents(corpus_path: Path) -> dict[str, SummaryDocument]:
    """Read the corpus once and keep the sentences of every document by docNo."""
    documents: dict[str, SummaryDocument] = {}
    for record in read_corpus(corpus_path):
        if not record.doc_no:
            continue
        documents[record.doc_no] = SummaryDocument(
            doc_no=record.doc_no,
            headline=record.headline,
            date=record.date,
            sentences=document_sentences(record.body),
        )
    logger.info("Loaded %d documents for summaries", len(documents))
    return documents
