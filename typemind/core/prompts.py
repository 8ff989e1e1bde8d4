from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import yaml

DEFAULT_DURATION = 30


@dataclass(frozen=True)
class Prompt:
    key: str
    title: str
    text: str
    duration: int = DEFAULT_DURATION


class PromptRepository:
    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or Path(__file__).resolve().parent.parent / "data" / "prompts"
        self._prompts = self._load_prompts()

    def all(self) -> List[Prompt]:
        return list(self._prompts.values())

    def get(self, key: str) -> Prompt:
        return self._prompts[key]

    def default(self) -> Prompt:
        return next(iter(self._prompts.values()))

    def _load_prompts(self) -> Dict[str, Prompt]:
        base_dir = self._base_dir
        if not base_dir.exists():
            raise FileNotFoundError(f"Prompts directory not found: {base_dir}")

        prompts: Dict[str, Prompt] = {}

        def _sort_key(p: Path) -> tuple[int, str]:
            m = re.match(r"^prompt(\d+)$", p.stem)
            if m:
                return (int(m.group(1)), p.stem)
            return (10**9, p.stem)

        for prompt_path in sorted(base_dir.glob("prompt*.yaml"), key=_sort_key):
            key = prompt_path.stem
            raw = yaml.safe_load(prompt_path.read_text(encoding="utf-8"))
            if not raw or not isinstance(raw, dict):
                raise ValueError(f"{prompt_path.name}: expected YAML with 'title' and 'text'")
            title = raw.get("title")
            text = raw.get("text")
            if not title or not isinstance(title, str):
                raise ValueError(f"{prompt_path.name}: missing or invalid 'title'")
            if not isinstance(text, str) or not text.strip():
                raise ValueError(f"{prompt_path.name}: missing or empty 'text'")
            duration = raw.get("duration", DEFAULT_DURATION)
            if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
                raise ValueError(f"{prompt_path.name}: 'duration' must be a positive number of seconds")
            # folded YAML blocks keep newlines; the test compares against single spaces
            text = " ".join(text.split())
            prompts[key] = Prompt(key=key, title=title.strip(), text=text, duration=duration)

        if not prompts:
            raise ValueError("No prompt files (prompt*.yaml) found in data/prompts")
        return prompts
