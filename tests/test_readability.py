"""Tests for typeclassic.core.readability – Flesch–Kincaid scoring."""

from __future__ import annotations

import pytest

from typeclassic.core.readability import ReadabilityScore, analyze, count_syllables


# ---------------------------------------------------------------------------
# count_syllables
# ---------------------------------------------------------------------------

class TestCountSyllables:
    @pytest.mark.parametrize(
        "word, expected",
        [
            ("cat", 1),
            ("the", 1),
            ("make", 1),
            ("table", 2),
            ("little", 2),
            ("beautiful", 3),
            ("rhythm", 1),
            ("Understanding", 4),
        ],
    )
    def test_heuristic(self, word, expected):
        assert count_syllables(word) == expected

    def test_no_letters_counts_zero(self):
        assert count_syllables("1632") == 0

    def test_punctuation_ignored(self):
        assert count_syllables("table,") == count_syllables("table")


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------

class TestAnalyze:
    def test_empty(self):
        assert analyze("") == ReadabilityScore(grade=0.0, ease=0.0)

    def test_whitespace_only(self):
        assert analyze("   \n\t ") == ReadabilityScore(grade=0.0, ease=0.0)

    def test_deterministic(self):
        text = "Robinson Crusoe was born in the city of York. His father was a merchant."
        assert analyze(text) == analyze(text)

    def test_simple_text(self):
        score = analyze("The cat sat on the mat with a hat and a bat.")
        # 12 words, 1 sentence, 12 syllables
        assert score.grade == 0.9
        assert score.ease == 100.0

    def test_grade_floored_at_zero(self):
        assert analyze("I ran. I sat. I ate.").grade == 0.0

    def test_complex_text(self):
        score = analyze("Understanding complicated situations requires patience.")
        # 5 words, 16 syllables -> 0.39*5 + 11.8*3.2 - 15.59
        assert score.grade == 24.1
        assert score.ease == 0.0

    def test_harder_text_scores_higher_grade(self):
        easy = analyze("The dog ran to the park. The cat sat on the mat.")
        hard = analyze(
            "Photosynthesis fundamentally transforms electromagnetic radiation into chemical energy."
        )
        assert hard.grade > easy.grade
        assert hard.ease <= easy.ease

    def test_other_punctuation_ignored(self):
        assert analyze("Hello, world; again!") == analyze("Hello world again!")

    def test_no_sentence_terminator(self):
        score = analyze("no punctuation here at all")
        assert score.ease >= 0.0

    def test_rounded_to_one_decimal(self):
        score = analyze("Natural selection acts solely by accumulating slight successive variations.")
        assert round(score.grade, 1) == score.grade
        assert round(score.ease, 1) == score.ease

    def test_ease_clamped(self):
        score = analyze("Go. Go. Go.")
        assert 0.0 <= score.ease <= 100.0

    def test_accented_letters_split_words(self):
        # Non-ASCII letters are dropped like punctuation
        text = "The naïve résumé writer understood complicated situations."
        score = analyze(text)
        assert score == analyze("The na ve r sum writer understood complicated situations.")
        # 9 words, 17 syllables
        assert score.grade == 10.2
