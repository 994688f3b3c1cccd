"""
Unit tests for the Porter-style stemmer.
"""

import pytest

from newsindex.stemmer import (
    contains_vowel,
    ends_with_cvc,
    ends_with_double_consonant,
    measure,
    stem,
    stem_tokens,
    step1a,
    step1b,
)


class TestPredicates:
    """Test the measure and letter-pattern helpers"""

    @pytest.mark.parametrize(
        "word, expected",
        [("tr", 0), ("ee", 0), ("tree", 0), ("trouble", 1), ("oats", 1), ("troubles", 2), ("private", 2)],
    )
    def test_measure(self, word, expected):
        assert measure(word) == expected

    def test_y_counts_for_contains_vowel_only(self):
        assert contains_vowel("sky")
        assert measure("sky") == 0

    def test_double_consonant(self):
        assert ends_with_double_consonant("hopp")
        assert not ends_with_double_consonant("hop")
        assert not ends_with_double_consonant("agree")

    def test_cvc(self):
        assert ends_with_cvc("fil")
        assert not ends_with_cvc("snow")
        assert not ends_with_cvc("box")
        assert not ends_with_cvc("ab")


class TestSteps:
    def test_step1a(self):
        assert step1a("caresses") == "caress"
        assert step1a("ponies") == "poni"
        assert step1a("caress") == "caress"
        assert step1a("cats") == "cat"

    def test_step1b_eed(self):
        assert step1b("agreed") == "agree"
        assert step1b("feed") == "feed"

    def test_step1b_ing_needs_vowel(self):
        assert step1b("sing") == "sing"
        assert step1b("running") == "run"


class TestStem:
    """Test whole-word stemming"""

    @pytest.mark.parametrize(
        "word, expected",
        [
            ("caresses", "caress"),
            ("ponies", "poni"),
            ("cats", "cat"),
            ("running", "run"),
            ("hopping", "hop"),
            ("filing", "file"),
            ("agreed", "agre"),
            ("happy", "happi"),
            ("sky", "sky"),
            ("relational", "relat"),
            ("conditional", "condit"),
        ],
    )
    def test_known_stems(self, word, expected):
        assert stem(word) == expected

    def test_empty_token(self):
        assert stem("") == ""

    def test_non_alphabetic_tokens_unchanged(self):
        assert stem("1989") == "1989"
        assert stem("b52s") == "b52s"

    def test_stem_tokens_keeps_order(self):
        assert stem_tokens(["cats", "running", "1989"]) == ["cat", "run", "1989"]
