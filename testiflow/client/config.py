"""Configuration helpers for the API client."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_API_URL = "http://localhost:8080/api"
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class ClientSettings:
    api_url: str
    session_file: Path | None
    http_timeout_seconds: float | None


def load_settings() -> ClientSettings:
    session_raw = os.getenv("TESTIFLOW_SESSION_FILE")
    timeout_raw = os.getenv("TESTIFLOW_HTTP_TIMEOUT_SECONDS", str(DEFAULT_HTTP_TIMEOUT_SECONDS))
    timeout = float(timeout_raw)
    return ClientSettings(
        api_url=os.getenv("TESTIFLOW_API_URL", DEFAULT_API_URL).rstrip("/"),
        session_file=Path(session_raw).expanduser() if session_raw else None,
        http_timeout_seconds=timeout if timeout > 0 else None,
    )
