"""Data models used by the UI."""

from __future__ import annotations

import html
from dataclasses import dataclass
from enum import Enum
from typing import List

from typemind.ui.colors import HomeColors


class CharState(Enum):
    PENDING = "pending"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class HighlightedChar:
    """One reference character and how the typed input matches it."""

    char: str
    state: CharState


def char_states(reference: str, typed: str) -> List[HighlightedChar]:
    """Compare *typed* to *reference* index by index.

    Reference characters not reached yet are PENDING. Characters typed past
    the end of the reference have nothing to highlight and are ignored.
    """
    out: List[HighlightedChar] = []
    for i, ch in enumerate(reference):
        if i >= len(typed):
            state = CharState.PENDING
        elif typed[i] == ch:
            state = CharState.CORRECT
        else:
            state = CharState.INCORRECT
        out.append(HighlightedChar(char=ch, state=state))
    return out


_STATE_STYLE = {
    CharState.PENDING: f"color:{HomeColors.CHAR_PENDING};",
    CharState.CORRECT: f"color:{HomeColors.CHAR_CORRECT};",
    CharState.INCORRECT: (
        f"color:{HomeColors.CHAR_INCORRECT};background-color:{HomeColors.CHAR_INCORRECT_BG};"
    ),
}


def reference_html(reference: str, typed: str) -> str:
    """Rich-text rendering of *reference* colored against *typed*."""
    parts = []
    for hc in char_states(reference, typed):
        # a plain space would not show its error background
        ch = "&nbsp;" if hc.char == " " and hc.state is CharState.INCORRECT else html.escape(hc.char)
        parts.append(f'<span style="{_STATE_STYLE[hc.state]}">{ch}</span>')
    return "".join(parts)
