"""Remote passage source with a short-lived local cache.

The endpoint answers ``GET <base_url>?difficulty=<tier>&count=<n>`` with
``{"success": true, "passages": [...]}``. Anything else (HTTP errors,
non-JSON bodies, ``success: false``, malformed passages) is treated as the
service being unavailable, and the passage comes from the local store or
the local generator instead. Callers always get a passage of the tier they
asked for.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from typeclassic.core.errors import RemoteSourceError, RepositoryError
from typeclassic.core.generator import fallback_passage
from typeclassic.core.passages import Difficulty, Passage
from typeclassic.core.sanitizer import is_character_set_valid
from typeclassic.core.selector import PassageSelector

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10
PREFETCH_COUNT = 3
PREFETCH_THRESHOLD = 5


@dataclass(frozen=True)
class CachePolicy:
    max_age: float
    max_count: int


CACHE_POLICIES: Dict[Difficulty, CachePolicy] = {
    Difficulty.BEGINNER: CachePolicy(max_age=300, max_count=20),
    Difficulty.INTERMEDIATE: CachePolicy(max_age=600, max_count=15),
    Difficulty.EXPERT: CachePolicy(max_age=900, max_count=10),
}


class RemotePassageService:
    def __init__(
        self,
        base_url: Optional[str],
        selector: Optional[PassageSelector] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._base_url = base_url
        self._selector = selector
        self._session = session or requests.Session()
        self._clock = clock
        self._rng = rng or random.Random()
        self._cache: Dict[Difficulty, List[Tuple[float, Passage]]] = {d: [] for d in Difficulty}

    def get_passage(self, difficulty: Difficulty) -> Passage:
        cached = self._take_cached(difficulty)
        if cached is not None:
            return cached

        try:
            passages = self._fetch(difficulty, count=1)
        except RemoteSourceError as e:
            logger.warning("API unavailable for %s, using fallback: %s", difficulty.value, e)
            return self._fallback(difficulty)

        self._prefetch(difficulty)
        return passages[0]

    def clear_cache(self) -> None:
        for entries in self._cache.values():
            entries.clear()
        logger.info("Passage cache cleared")

    def cache_stats(self) -> Dict[str, Dict[str, int]]:
        return {
            d.value: {"count": len(self._cache[d]), "max_count": CACHE_POLICIES[d].max_count}
            for d in Difficulty
        }

    def _take_cached(self, difficulty: Difficulty) -> Optional[Passage]:
        policy = CACHE_POLICIES[difficulty]
        now = self._clock()
        entries = [(t, p) for t, p in self._cache[difficulty] if now - t < policy.max_age]
        self._cache[difficulty] = entries
        if not entries:
            return None
        _, passage = entries.pop(self._rng.randrange(len(entries)))
        return passage

    def _store(self, difficulty: Difficulty, passages: List[Passage]) -> None:
        policy = CACHE_POLICIES[difficulty]
        now = self._clock()
        entries = self._cache[difficulty]
        entries.extend((now, p) for p in passages)
        if len(entries) > policy.max_count:
            del entries[: len(entries) - policy.max_count]

    def _prefetch(self, difficulty: Difficulty) -> None:
        if len(self._cache[difficulty]) >= PREFETCH_THRESHOLD:
            return
        try:
            passages = self._fetch(difficulty, count=PREFETCH_COUNT)
        except RemoteSourceError as e:
            logger.warning("Pre-fetch failed for %s: %s", difficulty.value, e)
            return
        self._store(difficulty, passages)
        logger.info("Pre-fetched %d passages for %s", len(passages), difficulty.value)

    def _fetch(self, difficulty: Difficulty, count: int) -> List[Passage]:
        if not self._base_url:
            raise RemoteSourceError("no remote passage URL configured")
        try:
            response = self._session.get(
                self._base_url,
                params={"difficulty": difficulty.value, "count": count},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise RemoteSourceError(str(e)) from e

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise RemoteSourceError(f"API returned non-JSON content: {content_type or 'unknown'}")
        if not response.ok:
            raise RemoteSourceError(f"API responded with status: {response.status_code}")
        try:
            data = response.json()
        except ValueError as e:
            raise RemoteSourceError(f"Invalid JSON: {e}") from e

        if not isinstance(data, dict) or not data.get("success") or not isinstance(data.get("passages"), list):
            raise RemoteSourceError("Invalid API response format")

        passages = [p for p in (self._parse(raw, difficulty) for raw in data["passages"]) if p is not None]
        if not passages:
            raise RemoteSourceError("API response held no usable passages")
        return passages

    @staticmethod
    def _parse(raw: Any, difficulty: Difficulty) -> Optional[Passage]:
        if not isinstance(raw, dict):
            return None
        try:
            passage = Passage.from_dict({"difficulty": difficulty.value, **raw})
        except (KeyError, ValueError, TypeError):
            logger.debug("Skipping malformed remote passage: %r", raw)
            return None
        if passage.difficulty is not difficulty or not passage.text:
            return None
        if not is_character_set_valid(passage.text, difficulty):
            return None
        return passage

    def _fallback(self, difficulty: Difficulty) -> Passage:
        if self._selector is not None:
            try:
                passage = self._selector.get_random(difficulty)
            except RepositoryError as e:
                logger.warning("Passage store unavailable for %s: %s", difficulty.value, e)
                passage = None
            if passage is not None:
                return passage
        logger.info("Generated fallback passage for %s level", difficulty.value)
        return fallback_passage(difficulty, rng=self._rng)
