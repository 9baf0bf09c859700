from __future__ import annotations

import random
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from typeclassic.core.filters import fingerprint
from typeclassic.core.passages import Difficulty, Passage
from typeclassic.core.readability import analyze

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
BEGINNER_MIN_LENGTH = 80
BEGINNER_MAX_LENGTH = 140
MAX_ATTEMPTS = 50

_SLOT_RE = re.compile(r"\{(\w+)\}")


@lru_cache(maxsize=None)
def _load_data(name: str) -> Dict[str, Any]:
    path = DATA_DIR / name
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not raw or not isinstance(raw, dict):
        raise ValueError(f"{path.name}: expected a YAML mapping")
    return raw


def load_wordbank() -> Dict[str, Any]:
    bank = _load_data("wordbank.yaml")
    if not bank.get("templates"):
        raise ValueError("wordbank.yaml: missing 'templates'")
    return bank


def make_sentence(bank: Dict[str, Any], rng: random.Random) -> str:
    template = rng.choice(bank["templates"])

    def _fill(match: "re.Match[str]") -> str:
        words: List[str] = bank[match.group(1)]
        return str(rng.choice(words))

    sentence = _SLOT_RE.sub(_fill, template)
    return sentence[0].upper() + sentence[1:] + "."


def _to_passage(passage_id: str, text: str, difficulty: Difficulty) -> Passage:
    score = analyze(text)
    return Passage(
        id=passage_id,
        text=text,
        difficulty=difficulty,
        grade=score.grade,
        ease=score.ease,
        length=len(text),
        word_count=len(text.split()),
        fingerprint=fingerprint(text),
    )


def generate_beginner_passage(
    min_length: int = BEGINNER_MIN_LENGTH,
    max_length: int = BEGINNER_MAX_LENGTH,
    rng: Optional[random.Random] = None,
) -> Passage:
    """Build a beginner passage of whole sentences within ``[min_length, max_length]``."""
    rng = rng or random.Random()
    bank = load_wordbank()

    for _ in range(MAX_ATTEMPTS):
        text = ""
        while len(text) < min_length:
            candidate = f"{text} {make_sentence(bank, rng)}".strip()
            if len(candidate) > max_length:
                break
            text = candidate
        if min_length <= len(text) <= max_length:
            return _to_passage(f"generated_beginner_{rng.getrandbits(40):010x}", text, Difficulty.BEGINNER)

    raise ValueError(f"Could not generate a passage between {min_length} and {max_length} characters")


def fallback_passage(difficulty: Difficulty, rng: Optional[random.Random] = None) -> Passage:
    """Last-resort passage for ``difficulty``; always of the requested tier."""
    rng = rng or random.Random()
    if difficulty is Difficulty.BEGINNER:
        return generate_beginner_passage(rng=rng)

    texts = _load_data("fallback_passages.yaml").get(difficulty.value) or []
    if not texts:
        raise ValueError(f"fallback_passages.yaml: no texts for {difficulty.value}")
    index = rng.randrange(len(texts))
    return _to_passage(f"fallback_{difficulty.value}_{index}", str(texts[index]).strip(), difficulty)
