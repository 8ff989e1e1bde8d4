"""Tests for typemind.core.session – timed typing test controller."""

from __future__ import annotations

from pathlib import Path

import pytest

from typemind.core.history import SessionStore
from typemind.core.prompts import Prompt
from typemind.core.session import TypingTest
from typemind.core.trace import SessionStateError


@pytest.fixture()
def prompt() -> Prompt:
    return Prompt(key="prompt0", title="Pets", text="cat dog", duration=3)


@pytest.fixture()
def store(tmp_path: Path) -> SessionStore:
    return SessionStore(tmp_path / "sessions.json")


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------

class TestInitialState:
    def test_defaults(self, prompt: Prompt):
        t = TypingTest(prompt)
        assert t.prompt is prompt
        assert t.reference_text == "cat dog"
        assert t.input == ""
        assert t.wpm == 0
        assert t.accuracy == 100
        assert t.errors == 0
        assert t.remaining == 3
        assert not t.is_running
        assert t.summary is None

    def test_type_before_start_is_ignored(self, prompt: Prompt):
        t = TypingTest(prompt)
        assert t.type("cat", now=1000) is False
        assert t.input == ""

    def test_finish_before_start_returns_none(self, prompt: Prompt):
        assert TypingTest(prompt).finish() is None

    def test_tick_before_start_does_nothing(self, prompt: Prompt):
        t = TypingTest(prompt)
        assert t.tick() is None
        assert t.remaining == 3


# ---------------------------------------------------------------------------
# Running a test
# ---------------------------------------------------------------------------

class TestRun:
    def test_live_stats(self, prompt: Prompt):
        t = TypingTest(prompt)
        t.start(now=0)
        assert t.type("cat dig", now=60000) is True
        assert t.input == "cat dig"
        assert t.wpm == 2
        assert t.accuracy == 86
        assert t.errors == 1

    def test_start_twice_raises(self, prompt: Prompt):
        t = TypingTest(prompt)
        t.start(now=0)
        with pytest.raises(SessionStateError):
            t.start(now=10)

    def test_clock_used_when_now_omitted(self, prompt: Prompt):
        times = iter([0.0, 30000.0])
        t = TypingTest(prompt, clock=lambda: next(times))
        t.start()
        t.type("cat dog")
        assert t.wpm == 4

    def test_countdown_expiry_scores(self, prompt: Prompt):
        t = TypingTest(prompt)
        t.start(now=0)
        t.type("cat", now=1000)
        assert t.tick() is None
        assert t.remaining == 2
        assert t.tick() is None
        summary = t.tick()
        assert summary is not None
        assert t.remaining == 0
        assert not t.is_running
        assert summary.duration == 3
        assert t.summary is summary

    def test_early_finish(self, prompt: Prompt):
        t = TypingTest(prompt)
        t.start(now=0)
        t.type("cat d", now=30000)
        summary = t.finish()
        assert summary is not None
        assert summary.wpm == 4
        assert summary.duration == 3
        assert t.remaining == 3
        assert t.type("cat do", now=31000) is False

    def test_finish_is_idempotent(self, prompt: Prompt):
        t = TypingTest(prompt)
        t.start(now=0)
        first = t.finish()
        assert t.finish() is first

    def test_restart_clears_previous_run(self, prompt: Prompt):
        t = TypingTest(prompt)
        t.start(now=0)
        t.type("cax", now=1000)
        t.finish()
        t.start(now=5000)
        assert t.summary is None
        assert t.input == ""
        assert t.errors == 0
        assert t.remaining == 3


# ---------------------------------------------------------------------------
# Persistence hand-off
# ---------------------------------------------------------------------------

class TestPersistence:
    def test_summary_saved_once(self, prompt: Prompt, store: SessionStore):
        t = TypingTest(prompt, store=store, identity="ada")
        t.start(now=0)
        t.type("cat dig", now=60000)
        t.finish()
        t.finish()
        saved = store.sessions("ada")
        assert len(saved) == 1
        assert saved[0]["wpm"] == 2
        assert saved[0]["errorWords"] == [{"word": "dig", "count": 1}]

    def test_saved_under_identity(self, prompt: Prompt, store: SessionStore):
        t = TypingTest(prompt, store=store, identity="grace")
        t.start(now=0)
        t.finish()
        assert store.sessions("ada") == []
        assert len(store.sessions("grace")) == 1

    def test_expiry_saves(self, prompt: Prompt, store: SessionStore):
        t = TypingTest(prompt, store=store)
        t.start(now=0)
        for _ in range(3):
            t.tick()
        assert len(store.sessions("local")) == 1

    def test_finish_survives_unwritable_history(self, prompt: Prompt, tmp_path: Path):
        history_dir = tmp_path / "hist"
        store = SessionStore(history_dir / "sessions.json")
        history_dir.rmdir()
        history_dir.write_text("not a directory", encoding="utf-8")
        t = TypingTest(prompt, store=store)
        t.start(now=0)
        t.type("cat", now=1000)
        summary = t.finish()
        assert summary is not None
        assert not t.is_running
        assert t.finish() is summary
