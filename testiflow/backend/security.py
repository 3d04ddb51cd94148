"""Session-token and password hashing for the backend."""

from __future__ import annotations

import hashlib
import hmac
import secrets


TOKEN_BYTES = 24
PASSWORD_ITERATIONS = 120_000


def generate_token() -> str:
    """Generate a URL-safe bearer token for a login session."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def hash_token(token: str, server_salt: str) -> str:
    """Create deterministic token hash via sha256(token + server_salt)."""
    payload = f"{token}{server_salt}".encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


def hash_password(password: str, salt: str | None = None) -> str:
    """Return ``<salt>$<pbkdf2-sha256 hex>`` for storage."""
    salt = salt if salt is not None else secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), PASSWORD_ITERATIONS)
    return f"{salt}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    salt, _, _ = stored.partition("$")
    return hmac.compare_digest(hash_password(password, salt), stored)
