from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Union

from typeclassic.core.rounding import round_half_up, round_to_int

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 200


class Phase(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETED = "completed"


class SessionEvent(Enum):
    STARTED = "started"
    TICK = "tick"
    COMPLETED = "completed"


@dataclass(frozen=True)
class LiveMetrics:
    """Metrics while typing, rounded to whole numbers."""

    gross_wpm: int
    net_wpm: int
    accuracy: int
    errors: int
    time_elapsed: int
    progress: int


@dataclass(frozen=True)
class FinalMetrics:
    """Metrics of a finished passage, rounded to one decimal."""

    gross_wpm: float
    net_wpm: float
    accuracy: float
    errors: int
    time_elapsed: int
    total_characters: int
    target_length: int


@dataclass(frozen=True)
class CharacterState:
    char: str
    status: str  # "correct", "incorrect", "current" or "pending"
    position: int


Metrics = Union[LiveMetrics, FinalMetrics]
Listener = Callable[..., None]


class Ticker(Protocol):
    """Periodic callback source, e.g. a QTimer wrapper in the UI."""

    def start(self, interval_ms: int, callback: Callable[[], None]) -> None:
        ...

    def stop(self) -> None:
        ...


class NullTicker:
    """Ticker that never fires; callers drive ``TypingEngine.tick()`` themselves."""

    def __init__(self) -> None:
        self.active = False

    def start(self, interval_ms: int, callback: Callable[[], None]) -> None:
        self.active = True

    def stop(self) -> None:
        self.active = False


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def count_errors(typed: str, target: str) -> int:
    """Position-by-position mismatches over the shorter of the two strings."""
    return sum(1 for a, b in zip(typed, target) if a != b)


def compute_speeds(typed_chars: int, errors: int, elapsed_ms: float) -> tuple[float, float, float]:
    """Return ``(gross_wpm, net_wpm, accuracy)`` unrounded.

    * **Gross WPM** – (typed characters / 5) / minutes.
    * **Net WPM** – max(0, (typed − errors) / 5) / minutes.
    * **Accuracy** – (typed − errors) / typed × 100, 0 when nothing is typed.

    Speeds are 0 while no time has elapsed.
    """
    minutes = elapsed_ms / 60000.0
    if minutes > 0:
        gross = (typed_chars / 5.0) / minutes
        net = max(0.0, (typed_chars - errors) / 5.0) / minutes
    else:
        gross = net = 0.0
    accuracy = (typed_chars - errors) / typed_chars * 100.0 if typed_chars else 0.0
    return gross, net, accuracy


class TypingEngine:
    """State machine for typing one passage: IDLE → ACTIVE → COMPLETED.

    ``process_input`` always receives the whole contents of the input
    field. The first non-empty snapshot starts the clock and the periodic
    TICK emission; a snapshot as long as the target completes the run and
    emits the final metrics once. Listeners subscribe per event:

    * ``STARTED`` – called with no arguments.
    * ``TICK`` – called with :class:`LiveMetrics` every 200 ms while active.
    * ``COMPLETED`` – called with :class:`FinalMetrics`.
    """

    def __init__(
        self,
        clock: Callable[[], float] = _monotonic_ms,
        ticker: Optional[Ticker] = None,
    ) -> None:
        self._clock = clock
        self._ticker: Ticker = ticker or NullTicker()
        self._listeners: Dict[SessionEvent, List[Listener]] = {e: [] for e in SessionEvent}
        self._target_text = ""
        self._input_buffer = ""
        self._start_timestamp: Optional[float] = None
        self._end_timestamp: Optional[float] = None
        self._phase = Phase.IDLE
        self._final: Optional[FinalMetrics] = None

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def target_text(self) -> str:
        return self._target_text

    @property
    def input_buffer(self) -> str:
        return self._input_buffer

    @property
    def start_timestamp(self) -> Optional[float]:
        return self._start_timestamp

    @property
    def end_timestamp(self) -> Optional[float]:
        return self._end_timestamp

    @property
    def final_metrics(self) -> Optional[FinalMetrics]:
        return self._final

    def subscribe(self, event: SessionEvent, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for ``event``; returns a function that unsubscribes it."""
        self._listeners[event].append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners[event]:
                self._listeners[event].remove(listener)

        return _unsubscribe

    def _emit(self, event: SessionEvent, *args: object) -> None:
        for listener in list(self._listeners[event]):
            listener(*args)

    def reset(self) -> None:
        """Back to IDLE with no target, input or timestamps; stops ticking."""
        self._ticker.stop()
        self._target_text = ""
        self._clear_run()

    def set_target_text(self, text: str) -> None:
        self._ticker.stop()
        self._target_text = text
        self._clear_run()

    def _clear_run(self) -> None:
        self._input_buffer = ""
        self._start_timestamp = None
        self._end_timestamp = None
        self._phase = Phase.IDLE
        self._final = None

    def process_input(self, buffer: str) -> Optional[Metrics]:
        """Feed the current input snapshot.

        Returns live metrics, the final metrics when this snapshot completes
        the passage, or None when ignored (no target, or already completed).
        """
        if self._phase is Phase.COMPLETED or not self._target_text:
            return None

        self._input_buffer = buffer

        if self._phase is Phase.IDLE:
            if not buffer:
                return self.live_metrics()
            self._start_timestamp = self._clock()
            self._phase = Phase.ACTIVE
            self._ticker.start(TICK_INTERVAL_MS, self.tick)
            logger.debug("Typing started")
            self._emit(SessionEvent.STARTED)

        if len(buffer) == len(self._target_text):
            return self._complete()

        return self.live_metrics()

    def tick(self) -> Optional[LiveMetrics]:
        """Emit TICK with live metrics if a run is active."""
        if self._phase is not Phase.ACTIVE:
            return None
        metrics = self.live_metrics()
        self._emit(SessionEvent.TICK, metrics)
        return metrics

    def _complete(self) -> FinalMetrics:
        self._end_timestamp = self._clock()
        self._phase = Phase.COMPLETED
        self._ticker.stop()
        self._final = self._final_metrics()
        logger.debug("Typing completed: %s", self._final)
        self._emit(SessionEvent.COMPLETED, self._final)
        return self._final

    def live_metrics(self) -> LiveMetrics:
        if self._start_timestamp is None:
            return LiveMetrics(gross_wpm=0, net_wpm=0, accuracy=0, errors=0, time_elapsed=0, progress=0)

        elapsed_ms = self._clock() - self._start_timestamp
        typed = len(self._input_buffer)
        errors = count_errors(self._input_buffer, self._target_text)
        gross, net, accuracy = compute_speeds(typed, errors, elapsed_ms)
        progress = typed / len(self._target_text) * 100.0

        return LiveMetrics(
            gross_wpm=round_to_int(gross),
            net_wpm=round_to_int(net),
            accuracy=round_to_int(accuracy),
            errors=errors,
            time_elapsed=round_to_int(elapsed_ms / 1000.0),
            progress=round_to_int(progress),
        )

    def _final_metrics(self) -> FinalMetrics:
        assert self._start_timestamp is not None and self._end_timestamp is not None
        elapsed_ms = self._end_timestamp - self._start_timestamp
        typed = len(self._input_buffer)
        errors = count_errors(self._input_buffer, self._target_text)
        gross, net, accuracy = compute_speeds(typed, errors, elapsed_ms)

        return FinalMetrics(
            gross_wpm=round_half_up(gross, 1),
            net_wpm=round_half_up(net, 1),
            accuracy=round_half_up(accuracy, 1),
            errors=errors,
            time_elapsed=round_to_int(elapsed_ms / 1000.0),
            total_characters=typed,
            target_length=len(self._target_text),
        )

    def character_analysis(self) -> List[CharacterState]:
        """Per-character status of the target text for highlighting."""
        typed = self._input_buffer
        states = []
        for i, char in enumerate(self._target_text):
            if i < len(typed):
                status = "correct" if typed[i] == char else "incorrect"
            elif i == len(typed):
                status = "current"
            else:
                status = "pending"
            states.append(CharacterState(char=char, status=status, position=i))
        return states

    @staticmethod
    def format_time(seconds: int) -> str:
        """Format seconds as ``MM:SS``."""
        minutes, secs = divmod(max(0, int(seconds)), 60)
        return f"{minutes:02d}:{secs:02d}"
