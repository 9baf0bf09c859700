"""Tests for typeclassic.core.sanitizer – per-tier character cleaning."""

from __future__ import annotations

import pytest

from typeclassic.core.passages import Difficulty
from typeclassic.core.sanitizer import (
    STRICT_CHARSET_RE,
    clean_passage_text,
    filter_allowed_chars,
    is_allowed_char,
    is_character_set_valid,
)

B = Difficulty.BEGINNER
I = Difficulty.INTERMEDIATE
E = Difficulty.EXPERT


# ---------------------------------------------------------------------------
# Code-point allow-list
# ---------------------------------------------------------------------------

class TestAllowList:
    @pytest.mark.parametrize("char", list("azAZ09 .,"))
    def test_allowed(self, char):
        assert is_allowed_char(char)

    @pytest.mark.parametrize("char", list("!?;:'\"-\n\té’“—") + ["\u00a0", "\u2024"])
    def test_rejected(self, char):
        assert not is_allowed_char(char)

    def test_filter(self):
        assert filter_allowed_chars("It’s — “fine”!") == "Its  fine"


# ---------------------------------------------------------------------------
# Beginner / intermediate cleaning
# ---------------------------------------------------------------------------

class TestCleanStrict:
    def test_quotes_and_marks_removed(self):
        text = 'He said, "Hello there!" and left the room quickly.'
        assert clean_passage_text(text, B) == "He said, Hello there and left the room quickly."

    def test_boilerplate_removed(self):
        text = "This text was produced by Project Gutenberg volunteers for everyone to read."
        cleaned = clean_passage_text(text, B)
        assert "gutenberg" not in cleaned.lower()
        assert "produced" not in cleaned.lower()
        assert cleaned == "This text was volunteers for everyone to read."

    def test_bracketed_spans_removed(self):
        text = "The old man [Illustration] walked slowly (very slowly) to the door."
        assert clean_passage_text(text, B) == "The old man walked slowly to the door."

    def test_asterisk_spans_removed(self):
        text = "The ship sailed on. *** END *** The crew slept below the deck."
        assert clean_passage_text(text, B) == "The ship sailed on. The crew slept below the deck."

    def test_too_short_rejected(self):
        assert clean_passage_text("Hi there.", B) == ""

    def test_no_letters_rejected(self):
        assert clean_passage_text("1234 5678 9012 3456 7890 1234.", B) == ""

    def test_accented_letters_dropped(self):
        cleaned = clean_passage_text("Café naïve résumé déjà vu is a phrase.", B)
        assert STRICT_CHARSET_RE.fullmatch(cleaned)
        assert cleaned == "Caf nave rsum dj vu is a phrase."

    def test_trailing_period_added(self):
        assert clean_passage_text("The quick brown fox jumps over the lazy dog", B).endswith("dog.")

    def test_trailing_comma_becomes_period(self):
        assert clean_passage_text("The quick brown fox jumps over the lazy dog,", B) == (
            "The quick brown fox jumps over the lazy dog."
        )

    def test_leading_punctuation_trimmed(self):
        assert clean_passage_text(", and then the quick brown fox jumped away.", B) == (
            "and then the quick brown fox jumped away."
        )

    def test_repeated_punctuation_collapsed(self):
        assert clean_passage_text("Wait... the quick brown fox jumped over it.", B) == (
            "Wait. the quick brown fox jumped over it."
        )

    def test_space_before_punctuation_removed(self):
        assert clean_passage_text("Hello , world and everyone in it .", B) == "Hello, world and everyone in it."

    def test_whitespace_collapsed(self):
        assert clean_passage_text("The  cat\n\nsat   on the\tlittle mat.", B) == "The cat sat on the little mat."

    def test_intermediate_matches_beginner(self):
        text = 'She cried, "Oh no!" -- and ran (quickly) home; it was late.'
        assert clean_passage_text(text, I) == clean_passage_text(text, B)

    def test_result_always_in_charset(self):
        text = "Ünïcödé “quotes” ‘single’ — dashes… and emoji 🙂 all over this sentence."
        cleaned = clean_passage_text(text, B)
        assert cleaned == "" or STRICT_CHARSET_RE.fullmatch(cleaned)

    def test_empty_input(self):
        assert clean_passage_text("", B) == ""


# ---------------------------------------------------------------------------
# Expert cleaning
# ---------------------------------------------------------------------------

class TestCleanExpert:
    def test_smart_quotes_normalized(self):
        cleaned = clean_passage_text("“Hello,” she said. “It’s late.”", E)
        assert cleaned == "\"Hello,\" she said. \"It's late.\""

    def test_dashes_and_ellipsis(self):
        assert clean_passage_text("Wait—no… not yet – please.", E) == "Wait-no... not yet - please."

    def test_repeated_marks_collapsed(self):
        assert clean_passage_text("Stop!! Who goes there?? Wait....", E) == "Stop! Who goes there? Wait..."

    def test_boilerplate_removed(self):
        cleaned = clean_passage_text("This eBook is from Project Gutenberg; read it freely.", E)
        assert "Gutenberg" not in cleaned
        assert "eBook" not in cleaned

    def test_other_punctuation_kept(self):
        text = "Species vary; some (not all) survive: it's a struggle!"
        assert clean_passage_text(text, E) == text


# ---------------------------------------------------------------------------
# is_character_set_valid
# ---------------------------------------------------------------------------

class TestCharacterSetValid:
    def test_strict_valid(self):
        assert is_character_set_valid("Hello, world.", B)
        assert is_character_set_valid("Hello, world.", I)

    def test_strict_invalid(self):
        assert not is_character_set_valid('Hello "world".', B)
        assert not is_character_set_valid("Hello; world.", I)

    def test_strict_empty_invalid(self):
        assert not is_character_set_valid("", B)

    def test_expert_accepts_anything(self):
        assert is_character_set_valid('He said: "Stop!"', E)
