from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol

from typeclassic.core.errors import RepositoryError, SourceUnavailable
from typeclassic.core.filters import FingerprintDeduplicator, is_suitable
from typeclassic.core.passages import BookConfig, Passage
from typeclassic.core.readability import analyze
from typeclassic.core.sanitizer import clean_passage_text, is_character_set_valid
from typeclassic.core.segmenter import iter_candidates
from typeclassic.core.store import PassageRepository

logger = logging.getLogger(__name__)

MAX_PASSAGES_PER_BOOK = 500


@dataclass
class ProcessingReport:
    """Aggregate outcome of one book run. Individual rejections are not kept."""

    book_id: str
    candidates: int = 0
    accepted: int = 0
    rejected: int = 0
    passages: List[Passage] = field(default_factory=list)


class RawTextSource(Protocol):
    def load_raw_book(self, book: BookConfig, cache_validity_days: int = ...) -> str:
        ...


def build_report(
    raw_text: str,
    book: BookConfig,
    max_passages: int = MAX_PASSAGES_PER_BOOK,
) -> ProcessingReport:
    """Run the curation pipeline over ``raw_text`` without storing anything."""
    report = ProcessingReport(book_id=book.id)
    dedup = FingerprintDeduplicator()
    min_length, max_length = book.min_length, book.max_length

    for raw_candidate in iter_candidates(raw_text, min_length, max_length):
        report.candidates += 1
        text = clean_passage_text(raw_candidate, book.difficulty)

        if not (min_length <= len(text) <= max_length):
            report.rejected += 1
            continue
        if not is_character_set_valid(text, book.difficulty) or dedup.is_duplicate(text):
            report.rejected += 1
            continue

        score = analyze(text)
        if not is_suitable(text, book.difficulty, book.target_grade, score=score):
            report.rejected += 1
            continue

        report.passages.append(
            Passage(
                id=f"{book.id}_{len(report.passages)}",
                text=text,
                difficulty=book.difficulty,
                grade=score.grade,
                ease=score.ease,
                length=len(text),
                word_count=len(text.split()),
                fingerprint=dedup.add(text),
            )
        )
        if len(report.passages) >= max_passages:
            logger.info("Reached %d passages for %s, stopping early", max_passages, book.title)
            break

    validated = []
    for passage in report.passages:
        if is_character_set_valid(passage.text, book.difficulty):
            validated.append(passage)
        else:
            logger.warning("Rejected passage with invalid characters: %r", passage.text[:50])
    report.rejected += len(report.passages) - len(validated)
    report.passages = validated
    report.accepted = len(validated)
    return report


def process_book(
    raw_text: str,
    book: BookConfig,
    repository: Optional[PassageRepository] = None,
    max_passages: int = MAX_PASSAGES_PER_BOOK,
) -> List[Passage]:
    """Turn a book into passages and, when given a repository, replace its tier set."""
    logger.info("Processing %s...", book.title)
    report = build_report(raw_text, book, max_passages=max_passages)
    logger.info(
        "Generated %d passages for %s (%d candidates, %d rejected)",
        report.accepted,
        book.title,
        report.candidates,
        report.rejected,
    )
    if repository is not None:
        repository.store_passages(book.difficulty, report.passages)
    return report.passages


def _has_usable_passages(repository: PassageRepository, book: BookConfig) -> bool:
    try:
        return repository.has_passages(book.difficulty)
    except RepositoryError as e:
        # The replacement set written below overwrites the unreadable one.
        logger.warning("Stored %s passages unreadable, rebuilding: %s", book.difficulty.value, e)
        return False


def prepare_library(
    books: Iterable[BookConfig],
    source: RawTextSource,
    repository: PassageRepository,
    cache_validity_days: int = 30,
    max_passages: int = MAX_PASSAGES_PER_BOOK,
    force: bool = False,
) -> int:
    """Process every book whose tier has no passages yet. Returns books processed.

    A book whose text cannot be loaded or stored is skipped; the other tiers
    still load. An unreadable stored tier is rebuilt.
    """
    processed = 0
    for book in books:
        if not force and _has_usable_passages(repository, book):
            logger.info("Passages already cached for %s (%s)", book.difficulty.value, book.title)
            continue
        try:
            raw_text = source.load_raw_book(book, cache_validity_days)
        except SourceUnavailable as e:
            logger.error("Failed to load %s: %s", book.title, e)
            continue
        try:
            process_book(raw_text, book, repository=repository, max_passages=max_passages)
        except RepositoryError as e:
            logger.error("Failed to store passages for %s: %s", book.title, e)
            continue
        processed += 1
    return processed
