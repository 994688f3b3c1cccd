"""Shared fixtures: a tiny tagged news-wire corpus and an index built from it"""

import gzip
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from newsindex.index_builder import build_index
from newsindex.index_store import load_index


SAMPLE_CORPUS = """<DOC>
<DOCNO> LA010189-0001 </DOCNO>
<DOCID> 1 </DOCID>
<DATE>
<P>
January 1, 1989, Sunday, Home Edition
</P>
</DATE>
<SECTION>
<P>
Metro; Part 2; Page 1
</P>
</SECTION>
<HEADLINE>
<P>
Cat News
</P>
</HEADLINE>
<TEXT>
<P>
The cat sat on the mat. Dr. Smith saw the cat!
</P>
</TEXT>
</DOC>
<DOC>
<DOCNO> LA010289-0002 </DOCNO>
<DOCID> 2 </DOCID>
<DATE>
<P>
January 2, 1989, Monday, Home Edition
</P>
</DATE>
<HEADLINE>
<P>
Dog Report
</P>
</HEADLINE>
<TEXT>
<P>
The dog ran home.
</P>
<P>
The dog was happy.
</P>
</TEXT>
</DOC>
<DOC>
<DOCNO> LA010389-0003 </DOCNO>
<DOCID> 3 </DOCID>
<DATE>
<P>
January 3, 1989, Tuesday, Home Edition
</P>
</DATE>
<TEXT>
<P>
"Cats and dogs are friends, he said. Nobody argued.
</P>
</TEXT>
<GRAPHIC>
<P>
Photo: a cat and a dog.
</P>
</GRAPHIC>
</DOC>
"""

SAMPLE_DOC_NOS = ["LA010189-0001", "LA010289-0002", "LA010389-0003"]


def write_gzip_corpus(path: Path, text: str) -> Path:
    with gzip.open(path, "wt", encoding="utf-8") as f:
        f.write(text)
    return path


@pytest.fixture(autouse=True)
def reset_command_logging():
    """Commands install console/file handlers on the root logger; drop them after each test."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, RotatingFileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(logging.WARNING)


@pytest.fixture
def corpus_text() -> str:
    return SAMPLE_CORPUS


@pytest.fixture
def corpus_path(tmp_path) -> Path:
    """The sample corpus, gzipped."""
    return write_gzip_corpus(tmp_path / "latimes.gz", SAMPLE_CORPUS)


@pytest.fixture
def index_dir(tmp_path, corpus_path) -> Path:
    """A complete, unstemmed index of the sample corpus."""
    output = tmp_path / "latimes-index"
    build_index(corpus_path, output)
    return output


@pytest.fixture
def store(index_dir):
    return load_index(index_dir)
