"""Tests for typeclassic.core.generator – locally generated fallback passages."""

from __future__ import annotations

import random

import pytest

from typeclassic.core.filters import fingerprint
from typeclassic.core.generator import (
    BEGINNER_MAX_LENGTH,
    BEGINNER_MIN_LENGTH,
    fallback_passage,
    generate_beginner_passage,
    load_wordbank,
    make_sentence,
)
from typeclassic.core.passages import Difficulty
from typeclassic.core.sanitizer import STRICT_CHARSET_RE


class TestWordbank:
    def test_templates_present(self):
        bank = load_wordbank()
        assert bank["templates"]

    def test_words_are_letters_only(self):
        bank = load_wordbank()
        for key, words in bank.items():
            if key == "templates":
                continue
            for word in words:
                assert STRICT_CHARSET_RE.fullmatch(word), (key, word)


class TestMakeSentence:
    def test_shape(self):
        rng = random.Random(5)
        bank = load_wordbank()
        for _ in range(50):
            sentence = make_sentence(bank, rng)
            assert sentence[0].isupper()
            assert sentence.endswith(".")
            assert "{" not in sentence and "}" not in sentence

    def test_deterministic_with_seed(self):
        bank = load_wordbank()
        assert make_sentence(bank, random.Random(9)) == make_sentence(bank, random.Random(9))


class TestGenerateBeginner:
    @pytest.mark.parametrize("seed", range(10))
    def test_bounds_and_charset(self, seed):
        passage = generate_beginner_passage(rng=random.Random(seed))
        assert BEGINNER_MIN_LENGTH <= passage.length <= BEGINNER_MAX_LENGTH
        assert STRICT_CHARSET_RE.fullmatch(passage.text)
        assert passage.difficulty is Difficulty.BEGINNER

    def test_metadata(self):
        passage = generate_beginner_passage(rng=random.Random(1))
        assert passage.id.startswith("generated_beginner_")
        assert passage.length == len(passage.text)
        assert passage.word_count == len(passage.text.split())
        assert passage.fingerprint == fingerprint(passage.text)

    def test_custom_bounds(self):
        passage = generate_beginner_passage(40, 90, rng=random.Random(2))
        assert 40 <= passage.length <= 90

    def test_impossible_bounds(self):
        with pytest.raises(ValueError):
            generate_beginner_passage(5000, 5001, rng=random.Random(0))


class TestFallbackPassage:
    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_requested_tier(self, difficulty):
        passage = fallback_passage(difficulty, rng=random.Random(0))
        assert passage.difficulty is difficulty
        assert passage.text

    def test_builtin_text_ids(self):
        passage = fallback_passage(Difficulty.INTERMEDIATE, rng=random.Random(0))
        assert passage.id.startswith("fallback_intermediate_")

    def test_intermediate_texts_strict(self):
        for seed in range(10):
            passage = fallback_passage(Difficulty.INTERMEDIATE, rng=random.Random(seed))
            assert STRICT_CHARSET_RE.fullmatch(passage.text)
