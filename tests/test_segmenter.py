"""Tests for typeclassic.core.segmenter – candidate passage slicing."""

from __future__ import annotations

from typeclassic.core.segmenter import (
    generate_candidates,
    is_heading,
    iter_candidates,
    split_paragraphs,
    split_sentences,
)

CRUSOE = (
    "CHAPTER I\n\n"
    "Robinson Crusoe was born in 1632, in the city of York. "
    "His father was a merchant. He went to sea against his wishes."
)


# ---------------------------------------------------------------------------
# Paragraphs and headings
# ---------------------------------------------------------------------------

class TestHeadings:
    def test_roman_chapter(self):
        assert is_heading("CHAPTER I")

    def test_numbered_chapter(self):
        assert is_heading("Chapter 12")

    def test_all_caps_title(self):
        assert is_heading("THE END")

    def test_sentence_is_not_heading(self):
        assert not is_heading("Chapter the first was long.")

    def test_prose_is_not_heading(self):
        assert not is_heading("I was born in the year 1632.")


class TestSplitParagraphs:
    def test_blank_lines_split(self):
        assert split_paragraphs("One.\n\nTwo.\n   \nThree.") == ["One.", "Two.", "Three."]

    def test_drops_headings_and_empty(self):
        text = "CHAPTER I\n\nRobinson Crusoe was born.\n\n\n\nSecond para."
        assert split_paragraphs(text) == ["Robinson Crusoe was born.", "Second para."]

    def test_joins_wrapped_lines(self):
        assert split_paragraphs("Line one\ncontinues here.") == ["Line one continues here."]


class TestSplitSentences:
    def test_keeps_terminators(self):
        assert split_sentences("Hi. Who? Stop!") == ["Hi.", " Who?", " Stop!"]

    def test_trailing_fragment_dropped(self):
        assert split_sentences("Done. and then") == ["Done."]


# ---------------------------------------------------------------------------
# generate_candidates
# ---------------------------------------------------------------------------

PARAGRAPHS = ["One short line.", "Two short line.", "Three short line."]


class TestGenerateCandidates:
    def test_running_concatenations(self):
        candidates = generate_candidates(PARAGRAPHS, 0, 30, 60)
        assert set(candidates) == {
            "One short line. Two short line.",
            "One short line. Two short line. Three short line.",
        }

    def test_from_later_start(self):
        candidates = generate_candidates(PARAGRAPHS, 1, 30, 60)
        assert set(candidates) == {"Two short line. Three short line."}

    def test_all_within_bounds(self):
        paragraphs = [f"Sentence number {i} is here. And another one follows it." for i in range(10)]
        for start in range(len(paragraphs)):
            for candidate in generate_candidates(paragraphs, start, 40, 120):
                assert 40 <= len(candidate) <= 120

    def test_too_short_yields_nothing(self):
        assert generate_candidates(["Tiny."], 0, 30, 60) == []

    def test_too_long_sentence_yields_nothing(self):
        long_sentence = "word " * 40 + "end."
        assert generate_candidates([long_sentence], 0, 30, 60) == []

    def test_multiple_lengths_per_start(self):
        paragraph = "First one here. Second one here. Third one here. Fourth one here."
        candidates = set(generate_candidates([paragraph], 0, 20, 70))
        assert "First one here. Second one here." in candidates
        assert "First one here. Second one here. Third one here." in candidates
        assert paragraph in candidates

    def test_block_growth_is_bounded(self):
        paragraphs = [f"Paragraph {i} has enough words to count." for i in range(20)]
        candidates = generate_candidates(paragraphs, 0, 10, 60)
        # limit is 90 chars, so at most three paragraphs are ever joined
        assert not any("Paragraph 3" in c for c in candidates)


# ---------------------------------------------------------------------------
# iter_candidates
# ---------------------------------------------------------------------------

class TestIterCandidates:
    def test_heading_excluded(self):
        candidates = list(iter_candidates(CRUSOE, 40, 200))
        assert any(c.startswith("Robinson Crusoe was born") for c in candidates)
        assert not any("CHAPTER" in c for c in candidates)

    def test_every_start_index_visited(self):
        text = "Alpha is the first paragraph here.\n\nBeta is the second paragraph here."
        candidates = list(iter_candidates(text, 20, 100))
        assert any(c.startswith("Alpha") for c in candidates)
        assert any(c.startswith("Beta") for c in candidates)

    def test_empty_text(self):
        assert list(iter_candidates("", 20, 100)) == []
