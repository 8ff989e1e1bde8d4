"""Tests for typemind.core.prompts – YAML-based prompt loading."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from typemind.core.prompts import DEFAULT_DURATION, Prompt, PromptRepository


@pytest.fixture()
def prompts_dir(tmp_path: Path) -> Path:
    d = tmp_path / "data" / "prompts"
    d.mkdir(parents=True)
    return d


def _write(directory: Path, name: str, body: str) -> None:
    (directory / name).write_text(textwrap.dedent(body), encoding="utf-8")


# ---------------------------------------------------------------------------
# Prompt dataclass
# ---------------------------------------------------------------------------

class TestPrompt:
    def test_default_duration(self):
        p = Prompt(key="prompt0", title="T", text="abc")
        assert p.duration == DEFAULT_DURATION == 30

    def test_frozen(self):
        p = Prompt(key="prompt0", title="T", text="abc")
        with pytest.raises(AttributeError):
            p.text = "xyz"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# PromptRepository – loading
# ---------------------------------------------------------------------------

class TestLoading:
    def test_loads_single_prompt(self, prompts_dir: Path):
        _write(prompts_dir, "prompt0.yaml", """\
            title: Basics
            duration: 45
            text: cat dog
            """)
        repo = PromptRepository(prompts_dir)
        p = repo.get("prompt0")
        assert p == Prompt(key="prompt0", title="Basics", text="cat dog", duration=45)

    def test_duration_defaults(self, prompts_dir: Path):
        _write(prompts_dir, "prompt0.yaml", "title: Basics\ntext: cat dog\n")
        assert PromptRepository(prompts_dir).get("prompt0").duration == 30

    def test_folded_text_collapsed_to_single_spaces(self, prompts_dir: Path):
        _write(prompts_dir, "prompt0.yaml", """\
            title: Long
            text: |
              The quick   brown
              fox jumps.
            """)
        assert PromptRepository(prompts_dir).get("prompt0").text == "The quick brown fox jumps."

    def test_numeric_sort_order(self, prompts_dir: Path):
        for n in (10, 2, 1):
            _write(prompts_dir, f"prompt{n}.yaml", f"title: P{n}\ntext: t{n}\n")
        repo = PromptRepository(prompts_dir)
        assert [p.key for p in repo.all()] == ["prompt1", "prompt2", "prompt10"]
        assert repo.default().key == "prompt1"

    def test_non_numeric_stems_sort_last(self, prompts_dir: Path):
        _write(prompts_dir, "promptextra.yaml", "title: X\ntext: x\n")
        _write(prompts_dir, "prompt3.yaml", "title: Three\ntext: three\n")
        assert [p.key for p in PromptRepository(prompts_dir).all()] == ["prompt3", "promptextra"]

    def test_get_unknown_raises_key_error(self, prompts_dir: Path):
        _write(prompts_dir, "prompt0.yaml", "title: A\ntext: a\n")
        with pytest.raises(KeyError):
            PromptRepository(prompts_dir).get("prompt9")

    def test_bundled_prompts_load(self):
        repo = PromptRepository()
        assert repo.all()
        default = repo.default()
        assert default.text.startswith("The quick brown fox")
        assert "  " not in default.text
        assert default.duration == 30


# ---------------------------------------------------------------------------
# PromptRepository – errors
# ---------------------------------------------------------------------------

class TestErrors:
    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            PromptRepository(tmp_path / "nope")

    def test_no_prompt_files(self, prompts_dir: Path):
        with pytest.raises(ValueError, match="No prompt files"):
            PromptRepository(prompts_dir)

    def test_empty_yaml(self, prompts_dir: Path):
        _write(prompts_dir, "prompt0.yaml", "")
        with pytest.raises(ValueError, match="prompt0.yaml"):
            PromptRepository(prompts_dir)

    def test_missing_title(self, prompts_dir: Path):
        _write(prompts_dir, "prompt0.yaml", "text: abc\n")
        with pytest.raises(ValueError, match="title"):
            PromptRepository(prompts_dir)

    def test_blank_text(self, prompts_dir: Path):
        _write(prompts_dir, "prompt0.yaml", "title: A\ntext: '   '\n")
        with pytest.raises(ValueError, match="text"):
            PromptRepository(prompts_dir)

    @pytest.mark.parametrize("duration", ["0", "-5", "fast", "true", "2.5"])
    def test_bad_duration(self, prompts_dir: Path, duration: str):
        _write(prompts_dir, "prompt0.yaml", f"title: A\ntext: abc\nduration: {duration}\n")
        with pytest.raises(ValueError, match="duration"):
            PromptRepository(prompts_dir)
