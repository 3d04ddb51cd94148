"""Configuration helpers for backend runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass


DEFAULT_CORS_ORIGINS = "http://localhost:3000"


@dataclass(frozen=True)
class BackendSettings:
    server_salt: str
    database_url: str | None
    host: str
    port: int
    cors_origins: tuple[str, ...]


def load_settings() -> BackendSettings:
    port_raw = os.getenv("TESTIFLOW_PORT", "8080")
    origins_raw = os.getenv("TESTIFLOW_CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    return BackendSettings(
        server_salt=os.getenv("TESTIFLOW_SERVER_SALT", "dev-salt"),
        database_url=os.getenv("TESTIFLOW_DATABASE_URL"),
        host=os.getenv("TESTIFLOW_HOST", "127.0.0.1"),
        port=int(port_raw),
        cors_origins=tuple(origin.strip() for origin in origins_raw.split(",") if origin.strip()),
    )
