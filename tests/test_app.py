"""Tests for typeclassic.app – command line flags and the passage preview."""

from __future__ import annotations

from pathlib import Path

from typeclassic.app import parse_args, print_preview
from typeclassic.core.passages import Difficulty, Passage
from typeclassic.core.selector import PassageSelector
from typeclassic.core.store import InMemoryPassageRepository


def _passage(n, text):
    return Passage(
        id=f"book_{n}",
        text=text,
        difficulty=Difficulty.BEGINNER,
        grade=2.0,
        ease=80.0,
        length=len(text),
        word_count=len(text.split()),
        fingerprint=f"f{n}",
    )


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])
        assert args.config is None
        assert not args.reprocess
        assert not args.verbose
        assert args.preview is None

    def test_flags(self):
        args = parse_args(["--config", "books.yaml", "--reprocess", "--preview", "3"])
        assert args.config == Path("books.yaml")
        assert args.reprocess
        assert args.preview == 3


class TestPrintPreview:
    def test_lists_tiers_and_passages(self, capsys):
        repo = InMemoryPassageRepository()
        repo.store_passages(
            Difficulty.BEGINNER,
            [_passage(0, "The dog was happy to see the sun."), _passage(1, "and then the cat sat on the mat")],
        )
        print_preview(PassageSelector(repo), 5)
        out = capsys.readouterr().out
        assert "beginner: 2 passages" in out
        assert "[book_0] grade 2.0, 8 words: The dog was happy" in out
        assert "book_1" not in out
        assert "expert: 0 passages" in out

    def test_fragments_flagged(self, capsys):
        repo = InMemoryPassageRepository()
        repo.store_passages(Difficulty.BEGINNER, [_passage(0, "and then the cat sat on the mat")])
        print_preview(PassageSelector(repo), 5)
        assert "(fragment)" in capsys.readouterr().out
