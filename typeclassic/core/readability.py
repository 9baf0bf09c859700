"""Flesch–Kincaid readability scoring.

Sentences are split on ``.``, ``!`` and ``?``; syllables are estimated with
a vowel-group heuristic:

* every transition into a run of ``aeiouy`` starts a syllable,
* a trailing silent ``e`` is dropped when the word has more than one,
* a consonant + ``le`` ending (``table``, ``little``) adds one back,
* every word has at least one syllable.

The total syllable count is floored at the word count so that text made of
digits still scores as one syllable per word. Grade and ease round halves up.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from typeclassic.core.rounding import round_half_up

# Only ASCII letters and digits count as word characters; "naïve" is two words.
_NON_TEXT_RE = re.compile(r"[^\w\s.!?]", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s+")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_NON_LETTER_RE = re.compile(r"[^a-z]")
_VOWELS = "aeiouy"


@dataclass(frozen=True)
class ReadabilityScore:
    grade: float
    ease: float


def count_syllables(word: str) -> int:
    """Estimate the syllables in a single word. Words without letters count 0."""
    word = _NON_LETTER_RE.sub("", word.lower())
    if not word:
        return 0

    syllables = 0
    previous_was_vowel = False
    for char in word:
        is_vowel = char in _VOWELS
        if is_vowel and not previous_was_vowel:
            syllables += 1
        previous_was_vowel = is_vowel

    if word.endswith("e") and syllables > 1:
        syllables -= 1
    if word.endswith("le") and len(word) > 2 and word[-3] not in _VOWELS:
        syllables += 1

    return max(1, syllables)


def analyze(text: str) -> ReadabilityScore:
    """Return the Flesch–Kincaid grade level and reading ease of ``text``."""
    if not text or not text.strip():
        return ReadabilityScore(grade=0.0, ease=0.0)

    clean = _WHITESPACE_RE.sub(" ", _NON_TEXT_RE.sub(" ", text)).strip()

    sentences = [s for s in _SENTENCE_SPLIT_RE.split(clean) if s.strip()]
    sentence_count = len(sentences) or 1

    words = clean.split()
    word_count = len(words) or 1

    syllable_count = sum(count_syllables(w) for w in words)
    syllable_count = max(syllable_count, word_count)

    avg_sentence_length = word_count / sentence_count
    avg_syllables_per_word = syllable_count / word_count

    ease = 206.835 - 1.015 * avg_sentence_length - 84.6 * avg_syllables_per_word
    ease = max(0.0, min(100.0, ease))
    grade = max(0.0, 0.39 * avg_sentence_length + 11.8 * avg_syllables_per_word - 15.59)

    return ReadabilityScore(grade=round_half_up(grade, 1), ease=round_half_up(ease, 1))
