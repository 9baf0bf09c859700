"""Character-set sanitizing of candidate passages, per difficulty tier.

Beginner and intermediate passages are reduced to letters, digits, spaces,
periods and commas. The reduction is an explicit code-point allow-list so
that no look-alike character from any encoding can slip through; a final
regex check rejects anything that still does not match. Expert passages keep
their punctuation and only get typographic characters replaced by the ones
found on a keyboard.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Pattern, Tuple

from typeclassic.core.passages import Difficulty

logger = logging.getLogger(__name__)

STRICT_CHARSET_RE = re.compile(r"^[a-zA-Z0-9\s.,]*$")
MIN_CLEAN_LENGTH = 20

BOILERPLATE_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"\b(gutenberg\.org|project gutenberg|gutenberg|produced by|created by)\b", re.IGNORECASE),
    re.compile(r"\b(this ebook|ebook|etext|isbn|edition|volume|copyright|public domain)\b", re.IGNORECASE),
)
_STRICT_SPAN_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"\*+[^*]*\*+"),
    re.compile(r"\[[^\]]*\]"),
    re.compile(r"\([^)]*\)"),
)
_EXPERT_SPAN_PATTERNS: Tuple[Pattern[str], ...] = (re.compile(r"\*\*\*[^*]*\*\*\*"),)

_TYPOGRAPHIC_REPLACEMENTS = str.maketrans(
    {
        "“": '"',
        "”": '"',
        "„": '"',
        "«": '"',
        "»": '"',
        "‘": "'",
        "’": "'",
        "‚": "'",
        "′": "'",
        "–": "-",
        "—": "-",
        "―": "-",
        "…": "...",
    }
)

_WHITESPACE_RE = re.compile(r"\s+")


def is_allowed_char(char: str) -> bool:
    """Code-point test for the strict tiers: ``A-Z a-z 0-9``, space, ``.`` and ``,``."""
    code = ord(char)
    return (
        65 <= code <= 90
        or 97 <= code <= 122
        or 48 <= code <= 57
        or code in (32, 44, 46)
    )


def filter_allowed_chars(text: str) -> str:
    return "".join(char for char in text if is_allowed_char(char))


def is_character_set_valid(text: str, difficulty: Difficulty) -> bool:
    if difficulty.is_strict:
        return bool(text) and STRICT_CHARSET_RE.fullmatch(text) is not None
    return True


def _remove_all(text: str, patterns: Iterable[Pattern[str]]) -> str:
    for pattern in patterns:
        text = pattern.sub("", text)
    return text


def _clean_strict(text: str) -> str:
    cleaned = _remove_all(text, BOILERPLATE_PATTERNS)
    cleaned = _remove_all(cleaned, _STRICT_SPAN_PATTERNS)
    cleaned = filter_allowed_chars(cleaned)

    cleaned = _WHITESPACE_RE.sub(" ", cleaned)
    cleaned = re.sub(r"([.,])\s+", r"\1 ", cleaned)
    cleaned = re.sub(r"\s+([.,])", r"\1", cleaned)
    cleaned = re.sub(r"[.,]{2,}", ".", cleaned)
    cleaned = re.sub(r"^\s*[.,]\s*", "", cleaned)
    cleaned = re.sub(r"\s*[.,]\s*$", "", cleaned).strip()
    if cleaned:
        cleaned += "."

    if STRICT_CHARSET_RE.fullmatch(cleaned) is None:
        logger.warning("Rejected text with remaining special characters: %r", cleaned[:50])
        return ""
    if len(cleaned) < MIN_CLEAN_LENGTH or not re.search(r"[a-zA-Z]", cleaned):
        return ""
    return cleaned


def _clean_expert(text: str) -> str:
    cleaned = _remove_all(text, BOILERPLATE_PATTERNS)
    cleaned = _remove_all(cleaned, _EXPERT_SPAN_PATTERNS)
    cleaned = cleaned.translate(_TYPOGRAPHIC_REPLACEMENTS)
    cleaned = re.sub(r"\.{2,}", "...", cleaned)
    cleaned = re.sub(r"!{2,}", "!", cleaned)
    cleaned = re.sub(r"\?{2,}", "?", cleaned)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def clean_passage_text(text: str, difficulty: Difficulty) -> str:
    """Return ``text`` cleaned for ``difficulty``, or ``""`` when nothing usable is left."""
    if not text or not isinstance(text, str):
        return ""
    normalized = _WHITESPACE_RE.sub(" ", text).strip()
    if difficulty.is_strict:
        return _clean_strict(normalized)
    return _clean_expert(normalized)
