"""Bearer-token storage for the client session."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


AUTH_TOKEN_KEY = "authToken"

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    def set(self, token: str) -> None:
        """Store the token, replacing any previous one."""

    def get(self) -> str | None:
        """Return the stored token or None when absent."""

    def clear(self) -> None:
        """Forget the stored token."""


class InMemorySessionStore:
    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def set(self, token: str) -> None:
        self._token = token

    def get(self) -> str | None:
        return self._token

    def clear(self) -> None:
        self._token = None


@dataclass
class FileSessionStore:
    """Keeps the token in a small JSON file so it survives process restarts."""

    path: Path

    def set(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(mode=0o600)
        self.path.chmod(0o600)
        self.path.write_text(json.dumps({AUTH_TOKEN_KEY: token}), encoding="utf-8")

    def get(self) -> str | None:
        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable session file %s", self.path)
            return None
        if not isinstance(payload, dict):
            return None
        token = payload.get(AUTH_TOKEN_KEY)
        return token if isinstance(token, str) and token else None

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


def create_session_store(session_file: Path | None) -> SessionStore:
    if session_file is not None:
        return FileSessionStore(path=session_file)
    return InMemorySessionStore()
