"""Book catalog configuration and raw book text loading."""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
import yaml

from typeclassic.core.errors import SourceUnavailable
from typeclassic.core.passages import BookConfig, Difficulty

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "data" / "books.yaml"
DEFAULT_CACHE_VALIDITY_DAYS = 30
USER_AGENT = "TypeClassic/1.0 (typing practice; passage builder)"
REQUEST_TIMEOUT = 30

_GUTENBERG_START_RE = re.compile(r"\*\*\*\s*START OF (?:THE|THIS) PROJECT GUTENBERG.*?\*\*\*", re.IGNORECASE)
_GUTENBERG_END_RE = re.compile(r"\*\*\*\s*END OF (?:THE|THIS) PROJECT GUTENBERG.*?\*\*\*", re.IGNORECASE)
_HEADER_LINE_PATTERNS = (
    re.compile(r"Produced by.*?Gutenberg", re.IGNORECASE | re.DOTALL),
    re.compile(r"Project Gutenberg's.*?\n", re.IGNORECASE),
    re.compile(r"This eBook is for the use of anyone anywhere.*?\n", re.IGNORECASE),
)
_METADATA_LINE_RE = re.compile(r"^(produced|created|project|gutenberg|isbn|title|author|edition|release|language)", re.IGNORECASE)
_CHAPTER_LINE_RE = re.compile(r"\n[ \t]*chapter[ \t]+(?:[ivxlcdm]+|\d+)\.?[ \t]*\n", re.IGNORECASE)


@dataclass(frozen=True)
class AppConfig:
    books: List[BookConfig]
    cache_validity_days: int = DEFAULT_CACHE_VALIDITY_DAYS
    max_passages: int = 500
    remote_url: Optional[str] = None


def _is_url(ref: str) -> bool:
    return ref.startswith(("http://", "https://"))


def _parse_book(raw: Any, index: int, config_path: Path) -> BookConfig:
    name = config_path.name
    if not isinstance(raw, dict):
        raise ValueError(f"{name}: book #{index} must be a mapping")

    for key in ("id", "title", "difficulty", "source"):
        value = raw.get(key)
        if not value or not isinstance(value, str):
            raise ValueError(f"{name}: book #{index} missing or invalid '{key}'")

    try:
        difficulty = Difficulty(raw["difficulty"].strip().lower())
    except ValueError:
        raise ValueError(f"{name}: book '{raw['id']}' has unknown difficulty {raw['difficulty']!r}") from None

    target_grade = raw.get("target_grade")
    if not isinstance(target_grade, (int, float)) or isinstance(target_grade, bool):
        raise ValueError(f"{name}: book '{raw['id']}' missing or invalid 'target_grade'")

    length_range = raw.get("passage_length")
    if (
        not isinstance(length_range, list)
        or len(length_range) != 2
        or not all(isinstance(v, int) and v > 0 for v in length_range)
        or length_range[0] > length_range[1]
    ):
        raise ValueError(f"{name}: book '{raw['id']}' needs 'passage_length' as [min, max]")

    source = raw["source"].strip()
    if not _is_url(source):
        source = str((config_path.parent / source).resolve())

    return BookConfig(
        id=raw["id"].strip(),
        title=raw["title"].strip(),
        author=str(raw.get("author", "")).strip(),
        difficulty=difficulty,
        source_ref=source,
        target_grade=float(target_grade),
        passage_length_range=(length_range[0], length_range[1]),
    )


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load the YAML book catalog. Raises ValueError naming the file on bad input."""
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if not raw or not isinstance(raw, dict):
        raise ValueError(f"{config_path.name}: expected YAML mapping with 'books'")

    books_raw = raw.get("books")
    if not isinstance(books_raw, list) or not books_raw:
        raise ValueError(f"{config_path.name}: 'books' must be a non-empty list")

    books = [_parse_book(item, i, config_path) for i, item in enumerate(books_raw)]
    ids = [b.id for b in books]
    if len(set(ids)) != len(ids):
        raise ValueError(f"{config_path.name}: duplicate book ids")

    cache_days = raw.get("cache_validity_days", DEFAULT_CACHE_VALIDITY_DAYS)
    max_passages = raw.get("max_passages", 500)
    for key, value in (("cache_validity_days", cache_days), ("max_passages", max_passages)):
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise ValueError(f"{config_path.name}: '{key}' must be a positive integer")

    remote_url = raw.get("remote_url")
    if remote_url is not None and not isinstance(remote_url, str):
        raise ValueError(f"{config_path.name}: 'remote_url' must be a string")

    return AppConfig(
        books=books,
        cache_validity_days=cache_days,
        max_passages=max_passages,
        remote_url=remote_url or None,
    )


def remove_gutenberg_headers(text: str) -> str:
    start_match = _GUTENBERG_START_RE.search(text)
    if start_match:
        text = text[start_match.end():]
    end_match = _GUTENBERG_END_RE.search(text)
    if end_match:
        text = text[: end_match.start()]

    for pattern in _HEADER_LINE_PATTERNS:
        text = pattern.sub("", text)

    # Skip front matter up to the first substantial line of prose.
    lines = text.split("\n")
    for i, line in enumerate(lines):
        stripped = line.strip()
        if len(stripped) > 50 and not _METADATA_LINE_RE.match(stripped):
            if i > 0:
                text = "\n".join(lines[i:])
            break

    return text.strip()


def clean_book_text(raw_text: str) -> str:
    """Normalize a downloaded book into blank-line separated paragraphs."""
    text = raw_text.replace("\r\n", "\n").replace("\r", "\n").replace("\ufeff", "")
    # RTF exports end lines with a backslash
    text = re.sub(r"\\[ \t]*\n", "\n", text)
    text = re.sub(r"\n\s*\n\s*\n", "\n\n", text)
    text = re.sub(r"[ \t]+", " ", text)
    text = text.replace("\n ", "\n")

    text = remove_gutenberg_headers(text)

    text = re.sub(r"\*\s*\*\s*\*.*?\*\s*\*\s*\*", "", text)
    text = re.sub(r"_{3,}", "", text)
    text = re.sub(r"-{3,}", "", text)
    text = _CHAPTER_LINE_RE.sub("\n\n", "\n" + text + "\n")

    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


class BookLoader:
    """Fetches raw book text, caching the cleaned copy under ~/.typeclassic/books/."""

    def __init__(self, cache_dir: Optional[Path] = None, session: Optional[requests.Session] = None) -> None:
        self._cache_dir = cache_dir or Path.home() / ".typeclassic" / "books"
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        self._session = session or requests.Session()
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    def cache_path(self, book: BookConfig) -> Path:
        return self._cache_dir / f"{book.id}.txt"

    def is_cache_fresh(self, book: BookConfig, cache_validity_days: int) -> bool:
        path = self.cache_path(book)
        if not path.exists():
            return False
        age = time.time() - path.stat().st_mtime
        return age < cache_validity_days * 24 * 60 * 60

    def load_raw_book(self, book: BookConfig, cache_validity_days: int = DEFAULT_CACHE_VALIDITY_DAYS) -> str:
        """Return cleaned book text: fresh cache, then source, then stale cache."""
        path = self.cache_path(book)
        if self.is_cache_fresh(book, cache_validity_days):
            return path.read_text(encoding="utf-8")

        logger.info("Fetching book: %s", book.title)
        try:
            text = clean_book_text(self._fetch(book.source_ref))
        except (requests.RequestException, OSError, UnicodeDecodeError) as e:
            logger.error("Error loading book %s: %s", book.id, e)
            if path.exists():
                logger.warning("Using stale cached content for %s", book.id)
                return path.read_text(encoding="utf-8")
            raise SourceUnavailable(f"{book.title}: {e}") from e

        try:
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            logger.warning("Could not cache %s at %s: %s", book.id, path, e)
        return text

    def _fetch(self, source_ref: str) -> str:
        if _is_url(source_ref):
            response = self._session.get(source_ref, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            if not response.encoding or response.encoding.lower() == "iso-8859-1":
                response.encoding = "utf-8"
            return response.text
        return Path(source_ref).read_text(encoding="utf-8")
