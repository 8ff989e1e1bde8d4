"""End-of-test scoring: psychological metrics and the session summary."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple

from typemind.core.trace import (
    Pause,
    RecoveryEvent,
    SessionStateError,
    SpeedSample,
    TraceRecorder,
    TypingTrace,
)

logger = logging.getLogger(__name__)

ANXIETY_WINDOW = 5
LONG_WORD_LENGTH = 5


@dataclass(frozen=True)
class PsychologicalMetrics:
    impulsivity_score: float
    deliberation_score: float
    cognitive_load_score: float
    resilience_score: float
    anxiety_score: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "impulsivityScore": self.impulsivity_score,
            "deliberationScore": self.deliberation_score,
            "cognitiveLoadScore": self.cognitive_load_score,
            "resilienceScore": self.resilience_score,
            "anxietyScore": self.anxiety_score,
        }


@dataclass(frozen=True)
class ErrorWord:
    word: str
    count: int


@dataclass(frozen=True)
class SessionSummary:
    """Final record of one test, handed to persistence as-is."""

    wpm: int
    accuracy: int
    errors: int
    duration: int
    error_words: Tuple[ErrorWord, ...]
    speed_samples: Tuple[SpeedSample, ...]
    recovery_events: Tuple[RecoveryEvent, ...]
    pauses: Tuple[Pause, ...]
    psychological_metrics: PsychologicalMetrics
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape shared with stored sessions (camelCase keys)."""
        return {
            "wpm": self.wpm,
            "accuracy": self.accuracy,
            "errors": self.errors,
            "duration": self.duration,
            "errorWords": [{"word": e.word, "count": e.count} for e in self.error_words],
            "typingPatterns": {
                "pausesBefore": [{"word": p.word, "duration": p.duration_ms} for p in self.pauses],
                "speedVariations": [
                    {"timestamp": s.timestamp, "wpm": s.wpm, "afterError": s.after_error}
                    for s in self.speed_samples
                ],
                "recoveryTimes": [
                    {"errorTimestamp": r.error_timestamp, "recoveryDuration": r.recovery_duration_ms}
                    for r in self.recovery_events
                ],
            },
            "psychologicalMetrics": self.psychological_metrics.to_dict(),
            "createdAt": self.created_at,
        }


def impulsivity_score(wpm: float, errors: int, typed_length: int) -> float:
    """High speed combined with a high error density."""
    return wpm * (errors / max(1, typed_length))


def deliberation_score(accuracy: float, errors: int, typed_length: int) -> float:
    """High accuracy combined with a low error density."""
    return accuracy * (1 - errors / max(1, typed_length))


def average_recovery_ms(events: Sequence[RecoveryEvent]) -> float:
    # unresolved events count as 0 but still count
    return sum(e.recovery_duration_ms for e in events) / max(1, len(events))


def cognitive_load_score(error_words: Dict[str, int]) -> float:
    """Error occurrences on words longer than five characters."""
    return float(sum(count for word, count in error_words.items() if len(word) > LONG_WORD_LENGTH))


def resilience_score(avg_recovery_ms: float) -> float:
    return 100 - avg_recovery_ms / 1000


def anxiety_score(samples: Sequence[SpeedSample]) -> float:
    """Mean absolute WPM change across the last few samples."""
    window = list(samples)[-ANXIETY_WINDOW:]
    if len(window) < 2:
        return 0.0
    deltas = [abs(cur.wpm - prev.wpm) for prev, cur in zip(window, window[1:])]
    return sum(deltas) / (len(window) - 1)


def compute_metrics(trace: TypingTrace) -> PsychologicalMetrics:
    typed_length = len(trace.input)
    return PsychologicalMetrics(
        impulsivity_score=impulsivity_score(trace.wpm, trace.errors, typed_length),
        deliberation_score=deliberation_score(trace.accuracy, trace.errors, typed_length),
        cognitive_load_score=cognitive_load_score(trace.error_words),
        resilience_score=resilience_score(average_recovery_ms(trace.recovery_events)),
        anxiety_score=anxiety_score(trace.speed_samples),
    )


def _utc_now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(time.time()))


def score_trace(trace: TypingTrace, duration: int) -> SessionSummary:
    """Build the summary for a finished trace.

    *duration* is the configured test length in seconds, not the time actually
    spent typing.
    """
    return SessionSummary(
        wpm=trace.wpm,
        accuracy=trace.accuracy,
        errors=trace.errors,
        duration=int(duration),
        error_words=tuple(ErrorWord(word=w, count=c) for w, c in trace.error_words.items()),
        speed_samples=tuple(trace.speed_samples),
        recovery_events=tuple(
            RecoveryEvent(e.error_timestamp, e.recovery_duration_ms) for e in trace.recovery_events
        ),
        pauses=tuple(trace.pauses),
        psychological_metrics=compute_metrics(trace),
        created_at=_utc_now_iso(),
    )


class SessionScorer:
    """Scores the trace held by a recorder once its test has ended."""

    def __init__(self, duration: int) -> None:
        self._duration = duration

    @property
    def duration(self) -> int:
        return self._duration

    def score(self, recorder: TraceRecorder) -> SessionSummary:
        if recorder.is_running:
            raise SessionStateError("Cannot score a test that is still running")
        summary = score_trace(recorder.trace, self._duration)
        m = summary.psychological_metrics
        logger.info(
            "Scored session: impulsivity=%.2f deliberation=%.2f load=%.0f resilience=%.2f anxiety=%.2f",
            m.impulsivity_score,
            m.deliberation_score,
            m.cognitive_load_score,
            m.resilience_score,
            m.anxiety_score,
        )
        return summary
