"""Normalized failures raised by the request layer."""

from __future__ import annotations

from typing import Any


NETWORK_ERROR_MESSAGE = (
    "Network error: Unable to connect to the server. Please check if the backend is running."
)
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"
UNEXPECTED_RESPONSE_MESSAGE = "Unexpected response from server"
NO_ACCESS_TOKEN_MESSAGE = "No access token received"

AUTH_REJECTION_STATUSES = frozenset({401, 403})


class ApiError(Exception):
    """A failed API call.

    ``status`` is the HTTP status, ``0`` for transport failures and ``500`` for
    unexpected local failures. ``details`` carries the decoded error body or the
    original cause.
    """

    def __init__(self, message: str, status: int, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details

    @property
    def is_network_error(self) -> bool:
        return self.status == 0

    @property
    def is_auth_rejection(self) -> bool:
        return self.status in AUTH_REJECTION_STATUSES

    def __repr__(self) -> str:
        return f"ApiError(message={self.message!r}, status={self.status})"


class MissingAccessTokenError(ApiError):
    """Login answered successfully but carried no access token."""

    def __init__(self, details: Any = None) -> None:
        super().__init__(NO_ACCESS_TOKEN_MESSAGE, 500, details)
