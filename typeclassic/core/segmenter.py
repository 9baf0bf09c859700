from __future__ import annotations

import re
from typing import Iterator, List, Sequence

_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_SENTENCE_RE = re.compile(r"[^.!?]*[.!?]+")
_NUMBERED_HEADING_RE = re.compile(r"^(?:chapter|book|part|volume)\s+(?:[ivxlcdm]+|\d+)\b", re.IGNORECASE)
_MAX_HEADING_LENGTH = 80

# Blocks keep growing until they pass this multiple of the max passage length.
BLOCK_GROWTH_FACTOR = 1.5


def is_heading(paragraph: str) -> bool:
    """True for stand-alone headings such as ``CHAPTER I`` or ``Chapter 12``."""
    text = paragraph.strip()
    if not text or len(text) > _MAX_HEADING_LENGTH:
        return False
    if not any(c.islower() for c in text):
        return True
    return bool(_NUMBERED_HEADING_RE.match(text)) and not text.endswith((".", "!", "?"))


def split_paragraphs(raw_text: str) -> List[str]:
    """Split on blank lines, dropping empty paragraphs and headings."""
    paragraphs = []
    for chunk in _PARAGRAPH_SPLIT_RE.split(raw_text):
        paragraph = " ".join(chunk.split())
        if paragraph and not is_heading(paragraph):
            paragraphs.append(paragraph)
    return paragraphs


def split_sentences(text: str) -> List[str]:
    """Sentence-terminated chunks of ``text``, each keeping its leading whitespace."""
    return _SENTENCE_RE.findall(text)


def generate_candidates(
    paragraphs: Sequence[str],
    start_index: int,
    min_length: int,
    max_length: int,
) -> List[str]:
    """Candidate passages that start at ``paragraphs[start_index]``.

    Paragraphs are joined one at a time. Whenever the block is long enough,
    every running concatenation of its sentences that lands inside
    ``[min_length, max_length]`` becomes a candidate, as does the whole block
    when it fits. One start index therefore yields several lengths.
    """
    candidates: List[str] = []
    block = ""
    limit = max_length * BLOCK_GROWTH_FACTOR

    for i in range(start_index, len(paragraphs)):
        if len(block) >= limit:
            break
        paragraph = paragraphs[i].strip()
        block = paragraph if not block else f"{block} {paragraph}"

        if len(block) < min_length:
            continue

        built = ""
        for sentence in split_sentences(block):
            built += sentence
            candidate = built.strip()
            if min_length <= len(candidate) <= max_length:
                candidates.append(candidate)
            if len(built) > max_length:
                break

        if len(block) <= max_length:
            candidates.append(block)

    return candidates


def iter_candidates(raw_text: str, min_length: int, max_length: int) -> Iterator[str]:
    """Walk every paragraph start index of ``raw_text`` and yield its candidates."""
    paragraphs = split_paragraphs(raw_text)
    for start in range(len(paragraphs)):
        yield from generate_candidates(paragraphs, start, min_length, max_length)
