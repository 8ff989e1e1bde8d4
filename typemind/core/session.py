from __future__ import annotations

import logging
from typing import Callable, Optional

from typemind.core.history import SessionStore
from typemind.core.prompts import Prompt
from typemind.core.scorer import SessionScorer, SessionSummary
from typemind.core.trace import TraceRecorder, now_ms

logger = logging.getLogger(__name__)


class TypingTest:
    """Runs timed typing tests against one prompt.

    Each ``start`` opens a fresh trace; ``finish`` scores it exactly once and
    hands the summary to the store, if one was given.

    Timestamps are milliseconds. ``clock`` is only consulted when a caller does
    not pass ``now`` explicitly.
    """

    def __init__(
        self,
        prompt: Prompt,
        store: Optional[SessionStore] = None,
        identity: str = "local",
        clock: Callable[[], float] = now_ms,
    ) -> None:
        """Initialize a test for *prompt*; summaries go to *store* under *identity*."""
        self._prompt = prompt
        self._store = store
        self._identity = identity
        self._clock = clock
        self._recorder = TraceRecorder(prompt.text)
        self._scorer = SessionScorer(prompt.duration)
        self._remaining = prompt.duration
        self._summary: Optional[SessionSummary] = None

    @property
    def prompt(self) -> Prompt:
        return self._prompt

    @property
    def reference_text(self) -> str:
        return self._prompt.text

    @property
    def input(self) -> str:
        return self._recorder.trace.input

    @property
    def wpm(self) -> int:
        return self._recorder.trace.wpm

    @property
    def accuracy(self) -> int:
        return self._recorder.trace.accuracy

    @property
    def errors(self) -> int:
        return self._recorder.trace.errors

    @property
    def remaining(self) -> int:
        """Seconds left on the countdown."""
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._recorder.is_running

    @property
    def summary(self) -> Optional[SessionSummary]:
        """Summary of the last finished run, or None."""
        return self._summary

    def start(self, now: Optional[float] = None) -> None:
        """Start a new run. Raises SessionStateError if one is already running."""
        self._recorder.start_test(self._clock() if now is None else now)
        self._remaining = self._prompt.duration
        self._summary = None

    def type(self, text: str, now: Optional[float] = None) -> bool:
        """Feed the full current input. Returns False if no test is running."""
        return self._recorder.on_input_change(text, self._clock() if now is None else now)

    def tick(self) -> Optional[SessionSummary]:
        """Advance the countdown by one second; returns the summary when time runs out."""
        if not self._recorder.is_running:
            return None
        self._remaining = max(0, self._remaining - 1)
        if self._remaining == 0:
            logger.info("Countdown expired for %s", self._prompt.key)
            return self.finish()
        return None

    def finish(self) -> Optional[SessionSummary]:
        """End the current run, score it and save it.

        Safe to call more than once: after the first call it returns the same
        summary. Returns None if no run was ever started.
        """
        if self._summary is not None and not self._recorder.is_running:
            return self._summary
        if not self._recorder.is_running:
            return None
        self._recorder.end_test()
        self._summary = self._scorer.score(self._recorder)
        if self._store is not None:
            self._store.save(self._identity, self._summary)
        return self._summary
