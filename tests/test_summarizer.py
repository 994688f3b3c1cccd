"""
Unit tests for sentence splitting and query-biased summaries.
"""

import math

import pytest

from newsindex.summarizer import (
    SentenceScorer,
    close_quote,
    document_sentences,
    load_summary_documents,
    split_sentences,
    summarize,
)


class TestSplitSentences:
    """Test sentence boundaries"""

    def test_abbreviation_does_not_end_sentence(self):
        assert split_sentences("The cat sat on the mat. Dr. Smith saw the cat!") == [
            "The cat sat on the mat.",
            "Dr. Smith saw the cat!",
        ]

    def test_question_and_exclamation(self):
        assert split_sentences("Who won? Nobody! The end") == ["Who won?", "Nobody!", "The end"]

    def test_punctuation_inside_token(self):
        assert split_sentences("It cost 3.5 million.") == ["It cost 3.5 million."]

    def test_empty(self):
        assert split_sentences("   ") == []


class TestSentenceScorer:
    def test_idf_uses_sentence_frequency(self):
        scorer = SentenceScorer(["a dog", "a cat", "a bird"])
        assert scorer.sentence_frequency("a") == 3
        assert scorer.idf("dog") == pytest.approx(math.log(2.5 / 1.5 + 1))
        assert scorer.idf("a") > 0

    def test_non_matching_sentence_scores_zero(self):
        scores = SentenceScorer(["a dog", "a cat"]).scores(["dog"])
        assert scores[0] > 0
        assert scores[1] == 0.0


class TestSummarize:
    """Test the two-sentence summary"""

    def test_best_sentences_first(self):
        sentences = ["The dog ran home.", "The dog was happy.", "Cats sleep."]
        assert summarize(sentences, "happy dog") == "The dog was happy. The dog ran home."

    def test_ties_keep_document_order(self):
        sentences = ["One.", "Two.", "Three."]
        assert summarize(sentences, "zebra") == "One. Two."

    def test_single_sentence(self):
        assert summarize(["Only one."], "one") == "Only one."

    def test_no_sentences(self):
        assert summarize([], "anything") == ""

    def test_opening_quote_is_closed(self):
        sentences = ['"Cats and dogs are friends, he said.', "Nobody argued."]
        assert summarize(sentences, "friends") == '"Cats and dogs are friends, he said." Nobody argued.'

    def test_closed_quote_left_alone(self):
        sentences = ['"We won," he said.', "Nothing else here."]
        assert summarize(sentences, "won") == '"We won," he said. Nothing else here.'

    def test_close_quote(self):
        assert close_quote('"Done."') == '"Done."'
        assert close_quote("Plain.") == "Plain."
        assert close_quote('"Yes," she said, "today.') == '"Yes," she said, "today."'
        assert close_quote('"Open') == '"Open"'


class TestDocumentSentences:
    def test_fields_in_order(self, corpus_text):
        third_doc = corpus_text.split("</DOC>\n")[2] + "</DOC>\n"
        assert document_sentences(third_doc) == [
            '"Cats and dogs are friends, he said.',
            "Nobody argued.",
            "Photo: a cat and a dog.",
        ]

    def test_load_summary_documents(self, corpus_path):
        documents = load_summary_documents(corpus_path)

        doc = documents["LA010189-0001"]
        assert doc.headline == "Cat News"
        assert doc.date == "January 1, 1989"
        assert doc.sentences == ["Cat News", "The cat sat on the mat.", "Dr. Smith saw the cat!"]
        assert documents["LA010389-0003"].headline == ""
