from __future__ import annotations

import logging
import re
from typing import Optional, Set

from typeclassic.core.passages import Difficulty
from typeclassic.core.readability import ReadabilityScore, analyze
from typeclassic.core.sanitizer import is_character_set_valid

logger = logging.getLogger(__name__)

GRADE_TOLERANCE = 1.5
FINGERPRINT_LENGTH = 50

BEGINNER_MAX_SENTENCE_LENGTH = 120
BEGINNER_MAX_CAPITAL_RATIO = 0.08
BEGINNER_MAX_DIGIT_RATIO = 0.05

_QUOTE_CHARS = frozenset("\"'`“”‘’„«»")
_WHITESPACE_RE = re.compile(r"\s+")


def fingerprint(text: str) -> str:
    """Normalized 50-character prefix used to spot near-duplicate passages.

    Two passages that only differ after the prefix share a fingerprint.
    """
    return _WHITESPACE_RE.sub(" ", text[:FINGERPRINT_LENGTH].lower()).strip()


class FingerprintDeduplicator:
    """Fingerprints seen so far in one processing batch of one difficulty."""

    def __init__(self) -> None:
        self._seen: Set[str] = set()

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, key: str) -> bool:
        return key in self._seen

    def is_duplicate(self, text: str) -> bool:
        return fingerprint(text) in self._seen

    def add(self, text: str) -> str:
        """Record ``text`` and return its fingerprint."""
        key = fingerprint(text)
        self._seen.add(key)
        return key


def _passes_beginner_checks(text: str) -> bool:
    if any(char in _QUOTE_CHARS for char in text):
        return False

    length = len(text)
    sentence_count = max(text.count("."), 1)
    if length / sentence_count > BEGINNER_MAX_SENTENCE_LENGTH:
        return False

    digits = sum(1 for char in text if "0" <= char <= "9")
    if digits / length > BEGINNER_MAX_DIGIT_RATIO:
        return False

    capitals = sum(1 for char in text if "A" <= char <= "Z")
    if capitals / length > BEGINNER_MAX_CAPITAL_RATIO:
        return False

    return True


def is_suitable(
    text: str,
    difficulty: Difficulty,
    target_grade: float,
    score: Optional[ReadabilityScore] = None,
) -> bool:
    """Whether a cleaned candidate is fit for ``difficulty`` at ``target_grade``.

    ``score`` may be passed when the caller has already analyzed ``text``.
    """
    if not text:
        return False

    if score is None:
        score = analyze(text)
    if abs(score.grade - target_grade) > GRADE_TOLERANCE:
        logger.debug("Grade %.1f too far from target %.1f: %r", score.grade, target_grade, text[:50])
        return False

    if difficulty.is_strict and not is_character_set_valid(text, difficulty):
        logger.debug("Invalid characters for %s: %r", difficulty.value, text[:50])
        return False

    if difficulty is Difficulty.BEGINNER and not _passes_beginner_checks(text):
        logger.debug("Failed beginner checks: %r", text[:50])
        return False

    return True
