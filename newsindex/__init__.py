"""News-wire indexing and BM25 retrieval package."""

from .posting import Posting, Lexicon, InvertedIndex, DocumentMetadata
from .segmenter import RawRecord, Segmenter, SegmenterState, read_corpus
from .tokenizer import tokenize, extract_content
from .stemmer import stem
from .index_builder import IndexBuilder, build_index
from .index_store import IndexStore, load_index
from .bm25 import BM25Ranker, Query, ResultEntry
from .summarizer import summarize, split_sentences
