"""
Porter-style suffix stripping used to conflate index and query terms.

The rules run in order: 1a, 1b (with its 1b2 clean-up), 1c, 2, 3, 4, 5a, 5b.
Within a step the first rule whose suffix and condition both hold is applied
and the step ends.

The predicates follow the rule set historical indexes were built with:
- only a, e, i, o, u are vowels when computing the measure m
- "contains a vowel" additionally accepts any y
- a rule's measure is taken over the word with `measure_cut` characters
  removed, which is not always the full suffix (e.g. ATIONAL tests m over
  the word minus five letters).

Examples:
- "caresses" -> "caress"
- "ponies" -> "poni"
- "running" -> "run"
- "relational" -> "relat"
"""

import logging

logger = logging.getLogger(__name__)

VOWELS = frozenset("aeiou")

# (suffix, measure_cut, strip, replacement): applies when the word ends with
# suffix and measure(word[:-measure_cut]) > 0; result is word[:-strip] + replacement.
STEP2_RULES = (
    ("ational", 5, 5, "e"),
    ("tional", 2, 2, ""),
    ("enci", 2, 2, ""),
    ("anci", 1, 1, "e"),
    ("izer", 1, 1, ""),
    ("abli", 1, 1, "e"),
    ("alli", 2, 2, ""),
    ("entli", 2, 2, ""),
    ("eli", 2, 2, ""),
    ("ousli", 2, 2, ""),
    ("ization", 5, 5, "e"),
    ("ation", 3, 3, "e"),
    ("ator", 2, 2, "e"),
    ("alism", 3, 3, ""),
    ("iveness", 4, 4, ""),
    ("fulness", 4, 4, ""),
    ("ousness", 4, 4, ""),
    ("aliti", 3, 3, ""),
    ("iviti", 3, 3, "e"),
    ("biliti", 5, 5, "le"),
)

STEP3_RULES = (
    ("icate", 3, 3, ""),
    ("ative", 5, 5, ""),
    ("alize", 3, 3, ""),
    ("iciti", 3, 3, ""),
    ("ical", 2, 2, ""),
    ("ful", 3, 3, ""),
    ("ness", 4, 4, ""),
)

# Step 4 removes the suffix when m > 1 over what is left. SION/TION only drop "ion".
STEP4_SUFFIXES = (
    "al", "ance", "ence", "er", "ic", "able", "ible", "ant", "ement",
    "ment", "ent", ("sion", "tion"), "ou", "ism", "ate", "iti", "ous",
    "ive", "ize",
)


def is_vowel(ch: str) -> bool:
    return ch in VOWELS


def contains_vowel(word: str) -> bool:
    return any(is_vowel(ch) for ch in word) or "y" in word


def measure(word: str) -> int:
    """Count vowel-to-consonant transitions (the m in [C](VC)^m[V])."""
    count = 0
    vowel_seen = False
    for ch in word:
        if is_vowel(ch):
            vowel_seen = True
        elif vowel_seen:
            count += 1
            vowel_seen = False
    return count


def ends_with_double_consonant(word: str) -> bool:
    if len(word) < 2:
        return False
    return word[-1] == word[-2] and not contains_vowel(word[-2:])


def ends_with_cvc(word: str) -> bool:
    """consonant-vowel-consonant ending where the last consonant is not w, x or y."""
    if len(word) < 3:
        return False
    c2, v, c = word[-3], word[-2], word[-1]
    if c in "wxy" or is_vowel(c):
        return False
    return is_vowel(v) and not is_vowel(c2)


def _apply_rules(word: str, rules, min_measure: int = 0) -> str:
    for suffix, measure_cut, strip, replacement in rules:
        if word.endswith(suffix) and measure(word[:-measure_cut]) > min_measure:
            return word[:-strip] + replacement
    return word


def step1a(word: str) -> str:
    if word.endswith("sses") or word.endswith("ies"):
        return word[:-2]
    if word.endswith("ss"):
        return word
    if word.endswith("s"):
        return word[:-1]
    return word


def step1b(word: str) -> str:
    if word.endswith("eed"):
        if measure(word[:-3]) > 0:
            return word[:-1]
        return word
    if word.endswith("ed") and contains_vowel(word[:-2]):
        return step1b2(word[:-2])
    if word.endswith("ing") and contains_vowel(word[:-3]):
        return step1b2(word[:-3])
    return word


def step1b2(word: str) -> str:
    if word.endswith(("at", "bl", "iz")):
        return word + "e"
    if ends_with_double_consonant(word) and not word.endswith(("l", "s", "z")):
        return word[:-1]
    if measure(word) == 1 and ends_with_cvc(word):
        return word + "e"
    return word


def step1c(word: str) -> str:
    if word.endswith("y") and contains_vowel(word[:-1]):
        return word[:-1] + "i"
    return word


def step2(word: str) -> str:
    return _apply_rules(word, STEP2_RULES)


def step3(word: str) -> str:
    return _apply_rules(word, STEP3_RULES)


def step4(word: str) -> str:
    for suffix in STEP4_SUFFIXES:
        if isinstance(suffix, tuple):
            if word.endswith(suffix) and measure(word[:-3]) > 1:
                return word[:-3]
        elif word.endswith(suffix) and measure(word[: -len(suffix)]) > 1:
            return word[: -len(suffix)]
    return word


def step5a(word: str) -> str:
    if not word.endswith("e"):
        return word
    stem_ = word[:-1]
    m = measure(stem_)
    if m > 1 or (m == 1 and not ends_with_cvc(stem_)):
        return stem_
    return word


def step5b(word: str) -> str:
    if word.endswith("l") and ends_with_double_consonant(word) and measure(word[:-1]) > 1:
        return word[:-1]
    return word


STEPS = (step1a, step1b, step1c, step2, step3, step4, step5a, step5b)


def stem(word: str) -> str:
    """
    Return the stem of a single token.

    Empty tokens and tokens containing anything other than letters come back
    unchanged, as does any token the rules fail on.
    """
    if not word or not word.isalpha():
        return word
    try:
        result = word
        for step in STEPS:
            result = step(result)
        return result
    except Exception:
        logger.debug("Stemming failed for %r, keeping token", word, exc_info=True)
        return word


def stem_tokens(tokens: list[str]) -> list[str]:
    """Stem a list of tokens."""
    return [stem(t) for t in tokens]
