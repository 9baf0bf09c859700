from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"

    @property
    def is_strict(self) -> bool:
        """Beginner and intermediate share the letters/digits/space/period/comma set."""
        return self in (Difficulty.BEGINNER, Difficulty.INTERMEDIATE)


@dataclass(frozen=True)
class Passage:
    """A typeable passage cut from a book. Never mutated after creation."""

    id: str
    text: str
    difficulty: Difficulty
    grade: float
    ease: float
    length: int
    word_count: int
    fingerprint: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "difficulty": self.difficulty.value,
            "grade": self.grade,
            "ease": self.ease,
            "length": self.length,
            "wordCount": self.word_count,
            "fingerprint": self.fingerprint,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Passage":
        """Build a passage from its wire form. Raises KeyError/ValueError on bad input."""
        text = str(raw["text"])
        return cls(
            id=str(raw["id"]),
            text=text,
            difficulty=Difficulty(raw["difficulty"]),
            grade=float(raw.get("grade", 0.0)),
            ease=float(raw.get("ease", 0.0)),
            length=int(raw.get("length", len(text))),
            word_count=int(raw.get("wordCount", len(text.split()))),
            fingerprint=str(raw.get("fingerprint", "")),
        )


@dataclass(frozen=True)
class BookConfig:
    id: str
    title: str
    author: str
    difficulty: Difficulty
    source_ref: str
    target_grade: float
    passage_length_range: Tuple[int, int]

    @property
    def min_length(self) -> int:
        return self.passage_length_range[0]

    @property
    def max_length(self) -> int:
        return self.passage_length_range[1]
