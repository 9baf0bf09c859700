from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass
from typing import Dict, List, MutableSequence, Optional, Set, TypeVar

from typeclassic.core.passages import Difficulty, Passage
from typeclassic.core.rounding import round_half_up, round_to_int
from typeclassic.core.store import PassageRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_MEANINGFUL_LENGTH = 20
MIN_CONTENT_WORDS = 3
PREVIEW_LENGTH = 100

_COMMON_VERBS = """
is was are were has have had do does did can will would could should may might must
said says went goes came comes made makes took takes got gets saw sees found finds
became becomes looked looks turned turns felt feels thought thinks knew knows wanted
wants needed needs tried tries began begins started starts stopped stops lived lives
worked works played plays walked walks ran runs moved moves stayed stays left leaves
arrived arrives returned returns helped helps asked asks told tells gave gives brought
brings put puts kept keeps held holds opened opens closed closes built builds created
creates discovered discovers learned learns taught teaches showed shows seemed seems
appeared appears happened happens occurred occurs continued continues decided decides
remembered remembers forgot forgets understood understands believed believes hoped
hopes feared fears loved loves liked likes enjoyed enjoys hated hates preferred prefers
chose chooses selected selects followed follows led leads joined joins met meets
visited visits traveled travels explored explores studied studies examined examines
watched watches listened listens heard hears spoke speaks talked talks answered answers
called calls wrote writes read reads sang sings danced dances cooked cooks ate eats
drank drinks slept sleeps woke wakes died dies born births grew grows changed changes
improved improves failed fails succeeded succeeds won wins lost loses fought fights
protected protects saved saves killed kills destroyed destroys fixed fixes broke breaks
""".split()
_COMMON_VERB_RE = re.compile(r"\b(?:" + "|".join(_COMMON_VERBS) + r")\b", re.IGNORECASE)
_INCOMPLETE_START_RES = (
    re.compile(r"^(?:and|but|or|so|for|yet|because|since|when|where|while|if|although|though)\s", re.IGNORECASE),
    re.compile(r"^(?:the|a|an)\s+(?:and|or|but)\s", re.IGNORECASE),
    re.compile(r"^\w+ing\s", re.IGNORECASE | re.ASCII),
    re.compile(r"^\w+ed\s", re.IGNORECASE | re.ASCII),
)
_WORD_PUNCTUATION_RE = re.compile(r"[.,!?]")


def fisher_yates(items: MutableSequence[T], rng: random.Random) -> MutableSequence[T]:
    """Uniformly shuffle ``items`` in place and return it."""
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


def is_meaningful(passage: Passage) -> bool:
    """Whether a passage reads as complete sentences.

    It must start with a capital, end with a period (beginner) or ``.!?``,
    hold at least three words of three letters or more and contain a common
    verb. Beginner passages may not open with a conjunction, a gerund or a
    past participle.
    """
    text = passage.text.strip()
    if len(text) < MIN_MEANINGFUL_LENGTH or not ("A" <= text[0] <= "Z"):
        return False

    beginner = passage.difficulty is Difficulty.BEGINNER
    if not text.endswith("." if beginner else (".", "!", "?")):
        return False

    content_words = [w for w in text.split() if len(_WORD_PUNCTUATION_RE.sub("", w)) >= 3]
    if len(content_words) < MIN_CONTENT_WORDS:
        return False

    if beginner and any(pattern.match(text) for pattern in _INCOMPLETE_START_RES):
        return False

    return _COMMON_VERB_RE.search(text) is not None


@dataclass(frozen=True)
class SelectorStats:
    total: int
    used: int
    remaining: int
    avg_grade: float
    avg_length: int


@dataclass(frozen=True)
class PassagePreview:
    id: str
    preview: str
    grade: float
    length: int
    word_count: int
    meaningful: bool


class PassageSelector:
    """Serves passages of one repository without repeats until a tier is exhausted.

    The used-id bookkeeping belongs to this instance, so two selectors never
    influence each other.
    """

    def __init__(self, repository: PassageRepository, rng: Optional[random.Random] = None) -> None:
        self._repository = repository
        self._rng = rng or random.Random()
        self._used: Dict[Difficulty, Set[str]] = {d: set() for d in Difficulty}

    def used_ids(self, difficulty: Difficulty) -> Set[str]:
        return set(self._used[difficulty])

    def get_random(self, difficulty: Difficulty) -> Optional[Passage]:
        """A passage not served since the last reset, or None when the tier is empty."""
        passages = self._repository.get_passages(difficulty)
        if not passages:
            logger.warning("No passages available for difficulty: %s", difficulty.value)
            return None

        by_id = {p.id: p for p in passages}
        used = self._used[difficulty]
        pool: List[str] = [pid for pid in by_id if pid not in used]
        exhausted = not pool
        if exhausted:
            logger.info("Resetting used passages for %s", difficulty.value)
            pool = list(by_id)

        # Complete-sentence passages go first; the rest of the pool still gets served.
        candidates = [pid for pid in pool if is_meaningful(by_id[pid])] or pool

        fisher_yates(candidates, self._rng)
        passage = by_id[candidates[0]]

        if exhausted:
            used.clear()
        used.add(passage.id)
        return passage

    def get_by_id(self, difficulty: Difficulty, passage_id: str) -> Optional[Passage]:
        """The passage with ``passage_id``, or a random one if it is gone or not meaningful."""
        for passage in self._repository.get_passages(difficulty):
            if passage.id != passage_id:
                continue
            if is_meaningful(passage):
                return passage
            logger.warning("Passage %s is not meaningful, picking another", passage_id)
            return self.get_random(difficulty)
        logger.info("Passage %s no longer available, picking another", passage_id)
        return self.get_random(difficulty)

    def stats(self, difficulty: Difficulty) -> SelectorStats:
        passages = self._repository.get_passages(difficulty)
        if not passages:
            return SelectorStats(total=0, used=0, remaining=0, avg_grade=0.0, avg_length=0)
        ids = {p.id for p in passages}
        used = len(self._used[difficulty] & ids)
        return SelectorStats(
            total=len(passages),
            used=used,
            remaining=len(passages) - used,
            avg_grade=round_half_up(sum(p.grade for p in passages) / len(passages), 1),
            avg_length=round_to_int(sum(p.length for p in passages) / len(passages)),
        )

    def preview(self, difficulty: Difficulty, count: int = 5) -> List[PassagePreview]:
        """First ``count`` stored passages, meaningful ones only when there are any."""
        passages = self._repository.get_passages(difficulty)
        meaningful = [p for p in passages if is_meaningful(p)]
        logger.info(
            "Preview: %d/%d meaningful passages for %s", len(meaningful), len(passages), difficulty.value
        )
        return [
            PassagePreview(
                id=p.id,
                preview=p.text[:PREVIEW_LENGTH] + "...",
                grade=p.grade,
                length=p.length,
                word_count=p.word_count,
                meaningful=is_meaningful(p),
            )
            for p in (meaningful or passages)[:count]
        ]

    def reset_used(self, difficulty: Optional[Difficulty] = None) -> None:
        targets = [difficulty] if difficulty is not None else list(Difficulty)
        for d in targets:
            self._used[d].clear()
