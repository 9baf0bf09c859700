from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from typeclassic.core.passages import Difficulty
from typeclassic.core.session import FinalMetrics

logger = logging.getLogger(__name__)


@dataclass
class PersonalBest:
    net_wpm: float = 0.0
    gross_wpm: float = 0.0
    accuracy: float = 0.0
    time_elapsed: int = 0
    date: str = ""


class PersonalBestStore:
    """Best net WPM per difficulty. Persists to disk across app restarts.
    File: ~/.typeclassic/personal_best.json."""

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or Path.home() / ".typeclassic" / "personal_best.json"
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._bests = self._load()

    def get(self, difficulty: Difficulty) -> Optional[PersonalBest]:
        return self._bests.get(difficulty.value)

    def record(self, difficulty: Difficulty, metrics: FinalMetrics) -> bool:
        """Store ``metrics`` if they beat the current best net WPM. Returns True when stored."""
        if metrics.net_wpm <= 0:
            return False
        current = self._bests.get(difficulty.value)
        if current is not None and metrics.net_wpm <= current.net_wpm:
            return False

        self._bests[difficulty.value] = PersonalBest(
            net_wpm=metrics.net_wpm,
            gross_wpm=metrics.gross_wpm,
            accuracy=metrics.accuracy,
            time_elapsed=metrics.time_elapsed,
            date=datetime.now().isoformat(timespec="seconds"),
        )
        self._save()
        logger.info("New personal best for %s: %s WPM", difficulty.value, metrics.net_wpm)
        return True

    def reset(self) -> None:
        """Clear all personal bests."""
        self._bests = {}
        self._save()

    def _load(self) -> Dict[str, PersonalBest]:
        bests: Dict[str, PersonalBest] = {}
        if not self._file_path.exists():
            return bests
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load personal bests from %s: %s", self._file_path, e)
            return bests

        if not isinstance(payload, dict):
            return bests
        for key, value in payload.items():
            if key not in {d.value for d in Difficulty} or not isinstance(value, dict):
                continue
            try:
                bests[key] = PersonalBest(
                    net_wpm=float(value.get("net_wpm", 0.0)),
                    gross_wpm=float(value.get("gross_wpm", 0.0)),
                    accuracy=float(value.get("accuracy", 0.0)),
                    time_elapsed=int(value.get("time_elapsed", 0)),
                    date=str(value.get("date", "")),
                )
            except (TypeError, ValueError):
                logger.warning("Ignoring malformed personal best for %s", key)
        return bests

    def _save(self) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {key: asdict(value) for key, value in self._bests.items()}
        try:
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save personal bests to %s: %s", self._file_path, e)
