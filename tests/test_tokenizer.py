"""
Unit tests for tokenization and markup extraction.
"""

from newsindex.tokenizer import extract_content, extract_headline, extract_paragraphs, tokenize


class TestTokenize:
    """Test case folding and delimiter handling"""

    def test_basic_tokens(self):
        assert tokenize("Hello, World! 123") == ["hello", "world", "123"]

    def test_only_punctuation(self):
        assert tokenize("!!! ... ---") == []

    def test_empty(self):
        assert tokenize("") == []

    def test_underscore_and_apostrophe_split(self):
        assert tokenize("don't snake_case") == ["don", "t", "snake", "case"]

    def test_mixed_letters_and_digits_stay_together(self):
        assert tokenize("B52 bomber, 1989-01-01") == ["b52", "bomber", "1989", "01", "01"]

    def test_unicode_letters(self):
        assert tokenize("Café Ñandú") == ["café", "ñandú"]


class TestExtractContent:
    """Test that only HEADLINE, TEXT and GRAPHIC text is indexed"""

    def test_content_fields_in_order(self, corpus_text):
        first_doc = corpus_text.split("</DOC>")[0] + "</DOC>"
        content = extract_content(first_doc)

        assert tokenize(content) == [
            "cat", "news", "the", "cat", "sat", "on", "the", "mat",
            "dr", "smith", "saw", "the", "cat",
        ]

    def test_other_fields_ignored(self, corpus_text):
        first_doc = corpus_text.split("</DOC>")[0] + "</DOC>"
        content = extract_content(first_doc)

        assert "Metro" not in content
        assert "January" not in content
        assert "LA010189" not in content

    def test_graphic_after_text(self):
        block = "<DOC>\n<GRAPHIC>\n<P>\ncaption\n</P>\n</GRAPHIC>\n<TEXT>\n<P>\nbody\n</P>\n</TEXT>\n</DOC>\n"
        assert tokenize(extract_content(block)) == ["body", "caption"]

    def test_entities_are_decoded(self):
        """The parser decodes &amp;, so no "amp" token is produced"""
        block = "<DOC>\n<TEXT>\n<P>\nAT&amp;T earnings\n</P>\n</TEXT>\n</DOC>\n"
        assert tokenize(extract_content(block)) == ["at", "t", "earnings"]

    def test_no_content_fields(self):
        assert extract_content("<DOC>\n<DOCNO> X </DOCNO>\n</DOC>\n") == ""


class TestExtractParagraphs:
    def test_paragraphs_normalized(self):
        block = "<DOC>\n<TEXT>\n<P>\nfirst   line\nsecond line\n</P>\n<P>\n</P>\n</TEXT>\n</DOC>\n"
        assert extract_paragraphs(block) == ["first line second line"]


class TestExtractHeadline:
    def test_fragments_joined(self):
        markup = "<HEADLINE>\n<P>\nFirst part\n</P>\n<P>\nsecond part\n</P>\n</HEADLINE>\n"
        assert extract_headline(markup) == "First part second part"

    def test_empty_markup(self):
        assert extract_headline("") == ""
