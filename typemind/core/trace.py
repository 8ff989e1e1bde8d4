from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

PAUSE_THRESHOLD_MS = 1000


class SessionStateError(RuntimeError):
    """Raised when a test operation is called in the wrong state."""


def now_ms() -> float:
    """Wall-clock time in milliseconds."""
    return time.time() * 1000.0


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (86.5 -> 87, not 86)."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class SpeedSample:
    timestamp: float
    wpm: int
    after_error: bool


@dataclass
class RecoveryEvent:
    """Interval between an error and the next rise in typing speed.

    ``recovery_duration_ms`` stays 0 until speed picks up again.
    """

    error_timestamp: float
    recovery_duration_ms: float = 0

    @property
    def resolved(self) -> bool:
        return bool(self.recovery_duration_ms)


@dataclass(frozen=True)
class Pause:
    word: str
    duration_ms: float


@dataclass
class TypingTrace:
    """Everything recorded about one test run."""

    input: str = ""
    start_time: float = 0.0
    wpm: int = 0
    accuracy: int = 100
    errors: int = 0
    error_words: Dict[str, int] = field(default_factory=dict)
    speed_samples: List[SpeedSample] = field(default_factory=list)
    recovery_events: List[RecoveryEvent] = field(default_factory=list)
    pauses: List[Pause] = field(default_factory=list)
    pause_start: Optional[float] = None
    current_word_start: Optional[float] = None


def count_words(text: str) -> int:
    """Number of non-empty whitespace-delimited tokens."""
    return len(text.split())


def count_errors(typed: str, reference: str) -> int:
    """Positions where *typed* disagrees with *reference*.

    Characters typed past the end of the reference all count as errors.
    """
    errors = sum(1 for a, b in zip(typed, reference) if a != b)
    return errors + max(0, len(typed) - len(reference))


def accuracy_percent(typed_length: int, errors: int) -> int:
    if typed_length == 0:
        return 100
    return round_half_up((typed_length - errors) / typed_length * 100)


def words_per_minute(word_count: int, elapsed_ms: float) -> int:
    elapsed_minutes = elapsed_ms / 60000.0
    if elapsed_minutes <= 0:
        return 0
    return round_half_up(word_count / elapsed_minutes)


def mismatched_words(typed: str, reference: str) -> List[str]:
    """Typed words that differ from the reference word at the same index.

    Both sides are split on single spaces, so a trailing space yields an
    empty typed word that is compared like any other.
    """
    typed_words = typed.split(" ")
    reference_words = reference.split(" ")
    return [
        word
        for word, expected in zip(typed_words, reference_words)
        if expected and word != expected
    ]


class TraceRecorder:
    """Keeps the live typing trace for one test at a time.

    Only ``on_input_change`` mutates the trace, and only while running.
    ``start_test`` throws the previous trace away entirely.
    """

    def __init__(self, reference_text: str) -> None:
        self._reference_text = reference_text
        self._trace = TypingTrace()
        self._running = False

    @property
    def reference_text(self) -> str:
        return self._reference_text

    @property
    def trace(self) -> TypingTrace:
        return self._trace

    @property
    def is_running(self) -> bool:
        return self._running

    def start_test(self, now: float) -> TypingTrace:
        """Begin a fresh run at *now* (ms)."""
        if self._running:
            raise SessionStateError("A test is already running; end it before starting another")
        self._trace = TypingTrace(start_time=now)
        self._running = True
        logger.info("Test started at %.0f", now)
        return self._trace

    def end_test(self) -> None:
        if not self._running:
            return
        self._running = False
        logger.info(
            "Test ended: wpm=%d accuracy=%d errors=%d samples=%d",
            self._trace.wpm,
            self._trace.accuracy,
            self._trace.errors,
            len(self._trace.speed_samples),
        )

    def on_input_change(self, new_input: str, now: float) -> bool:
        """Recompute the trace for the new input. Returns False when not running."""
        if not self._running:
            logger.debug("Ignoring input change while no test is running")
            return False

        trace = self._trace
        previous_input = trace.input
        previous_errors = trace.errors
        previous_wpm = trace.wpm

        wpm = words_per_minute(count_words(new_input), now - trace.start_time)
        errors = count_errors(new_input, self._reference_text)
        accuracy = accuracy_percent(len(new_input), errors)

        for word in mismatched_words(new_input, self._reference_text):
            trace.error_words[word] = trace.error_words.get(word, 0) + 1

        self._track_pause(trace, previous_input, new_input, now)

        new_error = errors > previous_errors
        trace.speed_samples.append(SpeedSample(timestamp=now, wpm=wpm, after_error=new_error))

        if new_error:
            trace.recovery_events.append(RecoveryEvent(error_timestamp=now))
        elif trace.recovery_events and wpm > previous_wpm:
            last = trace.recovery_events[-1]
            if not last.resolved:
                last.recovery_duration_ms = now - last.error_timestamp

        trace.input = new_input
        trace.wpm = wpm
        trace.accuracy = accuracy
        trace.errors = errors
        return True

    @staticmethod
    def _track_pause(trace: TypingTrace, previous_input: str, new_input: str, now: float) -> None:
        if len(new_input) == len(previous_input) and trace.pause_start is None:
            trace.pause_start = now
        elif len(new_input) > len(previous_input) and trace.pause_start is not None:
            duration = now - trace.pause_start
            if duration > PAUSE_THRESHOLD_MS:
                trace.current_word_start = now
                trace.pauses.append(Pause(word=new_input.split(" ")[-1], duration_ms=duration))
            trace.pause_start = None
