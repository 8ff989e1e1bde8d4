from __future__ import annotations

import getpass
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from typemind.core.scorer import SessionSummary

logger = logging.getLogger(__name__)


def default_history_path() -> Path:
    home = os.environ.get("TYPEMIND_HOME")
    base = Path(home) if home else Path.home() / ".typemind"
    return base / "sessions.json"


def resolve_identity() -> str:
    """Identity that sessions are stored under: TYPEMIND_USER, else the login name."""
    identity = os.environ.get("TYPEMIND_USER", "").strip()
    if identity:
        return identity
    try:
        return getpass.getuser()
    except (KeyError, OSError) as e:
        logger.warning("Could not determine login name, using 'local': %s", e)
        return "local"


class SessionStore:
    """Stores finished session summaries per identity.
    File: ~/.typemind/sessions.json (TYPEMIND_HOME overrides the directory).
    Write failures are logged and dropped; a summary can be saved again safely."""

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or default_history_path()
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._sessions = self._load()

    @property
    def file_path(self) -> Path:
        return self._file_path

    def save(self, identity: str, summary: SessionSummary) -> None:
        self._sessions.setdefault(identity, []).append(summary.to_dict())
        self._save()
        logger.info("Saved session for %s (wpm=%d, accuracy=%d)", identity, summary.wpm, summary.accuracy)

    def sessions(self, identity: str) -> List[Dict[str, Any]]:
        """Stored sessions for *identity*, newest first."""
        return list(reversed(self._sessions.get(identity, [])))

    def clear(self, identity: str) -> None:
        self._sessions.pop(identity, None)
        self._save()

    def _load(self) -> Dict[str, List[Dict[str, Any]]]:
        sessions: Dict[str, List[Dict[str, Any]]] = {}
        if not self._file_path.exists():
            return sessions
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load sessions from %s: %s", self._file_path, e)
            return sessions

        users = payload.get("users", {}) if isinstance(payload, dict) else {}
        if not isinstance(users, dict):
            logger.warning("Ignoring malformed session history in %s", self._file_path)
            return sessions
        for identity, records in users.items():
            if isinstance(records, list):
                sessions[str(identity)] = [r for r in records if isinstance(r, dict)]
        return sessions

    def _save(self) -> None:
        payload = {"users": self._sessions}
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save sessions to %s: %s", self._file_path, e)
