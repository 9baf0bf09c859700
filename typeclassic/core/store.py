from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence

from typeclassic.core.errors import RepositoryError
from typeclassic.core.passages import Difficulty, Passage

logger = logging.getLogger(__name__)


class PassageRepository(Protocol):
    """Holds exactly one current passage set per difficulty."""

    def store_passages(self, difficulty: Difficulty, passages: Sequence[Passage]) -> None:
        """Replace the whole set for ``difficulty``. Readers never see a partial set."""

    def get_passages(self, difficulty: Difficulty) -> List[Passage]:
        """Current set for ``difficulty``; empty if nothing was processed yet."""

    def has_passages(self, difficulty: Difficulty) -> bool:
        ...


class InMemoryPassageRepository:
    def __init__(self) -> None:
        self._sets: Dict[Difficulty, List[Passage]] = {}

    def store_passages(self, difficulty: Difficulty, passages: Sequence[Passage]) -> None:
        self._sets[difficulty] = list(passages)

    def get_passages(self, difficulty: Difficulty) -> List[Passage]:
        return list(self._sets.get(difficulty, []))

    def has_passages(self, difficulty: Difficulty) -> bool:
        return bool(self._sets.get(difficulty))


class JsonPassageRepository:
    """Passage sets persisted as ``passages_<difficulty>.json`` files.

    A replace is written to a sibling temp file and moved over the old one
    with ``os.replace``, so a reader gets either the old set or the new one.
    Default location: ~/.typeclassic/passages/.
    """

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or Path.home() / ".typeclassic" / "passages"
        self._base_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, difficulty: Difficulty) -> Path:
        return self._base_dir / f"passages_{difficulty.value}.json"

    def store_passages(self, difficulty: Difficulty, passages: Sequence[Passage]) -> None:
        path = self._path_for(difficulty)
        tmp_path = path.with_name(path.name + ".tmp")
        payload = {
            "difficulty": difficulty.value,
            "passages": [p.to_dict() for p in passages],
        }
        try:
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            raise RepositoryError(f"Could not store {difficulty.value} passages in {path}: {e}") from e
        logger.info("Stored %d %s passages", len(passages), difficulty.value)

    def get_passages(self, difficulty: Difficulty) -> List[Passage]:
        path = self._path_for(difficulty)
        if not path.exists():
            return []
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            return [Passage.from_dict(raw) for raw in payload.get("passages", [])]
        except (json.JSONDecodeError, OSError, KeyError, ValueError, AttributeError) as e:
            raise RepositoryError(f"Could not read {difficulty.value} passages from {path}: {e}") from e

    def has_passages(self, difficulty: Difficulty) -> bool:
        return bool(self.get_passages(difficulty))
