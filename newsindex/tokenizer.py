"""
Markup extraction and tokenizer for the news-wire index.
Pulls the content fields out of a raw <DOC> block and splits text into
case-folded alphanumeric tokens.
"""

import re
import warnings

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning, XMLParsedAsHTMLWarning

warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)

# Fields whose inner text is indexed, in the order they are concatenated.
CONTENT_FIELDS = ("headline", "text", "graphic")

# A token is a maximal run of letters or digits (underscore is a delimiter).
_TOKEN_RE = re.compile(r"[^\W_]+")
_WHITESPACE_RE = re.compile(r"\s+")


def tokenize(text: str) -> list[str]:
    """
    Lower-case text and return its maximal runs of letters and digits.
    Every other character is a delimiter and is dropped.
    """
    if not text:
        return []
    return _TOKEN_RE.findall(text.lower())


def _parse_block(raw_block: str) -> BeautifulSoup:
    return BeautifulSoup(raw_block or "", "lxml")


def extract_content(raw_block: str) -> str:
    """
    Return the indexable text of a raw document block.

    The inner text of every HEADLINE, then TEXT, then GRAPHIC element is kept
    with all markup removed. Each field is trimmed and followed by one space.
    """
    soup = _parse_block(raw_block)
    parts: list[str] = []
    for field in CONTENT_FIELDS:
        for element in soup.find_all(field):
            parts.append(element.get_text().strip() + " ")
    return "".join(parts)


def extract_paragraphs(raw_block: str, fields: tuple[str, ...] = CONTENT_FIELDS) -> list[str]:
    """
    Return the whitespace-normalized <P> paragraphs of the given fields.
    Empty paragraphs are skipped.
    """
    soup = _parse_block(raw_block)
    paragraphs: list[str] = []
    for field in fields:
        for element in soup.find_all(field):
            for para in element.find_all("p"):
                text = _WHITESPACE_RE.sub(" ", para.get_text()).strip()
                if text:
                    paragraphs.append(text)
    return paragraphs


def extract_headline(headline_markup: str) -> str:
    """
    Join the trimmed <P> fragments of accumulated headline markup with spaces.
    """
    soup = _parse_block(headline_markup)
    fragments = [_WHITESPACE_RE.sub(" ", p.get_text()).strip() for p in soup.find_all("p")]
    return " ".join(f for f in fragments if f)
