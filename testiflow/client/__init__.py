"""Async client package for the TestiFlow API."""

from .api import ApiClient
from .auth import AuthController, AuthState
from .config import ClientSettings, load_settings
from .errors import ApiError, MissingAccessTokenError
from .models import Review, Space, User
from .resources import EmbedController, ReviewsController, SpacesController
from .session import FileSessionStore, InMemorySessionStore, SessionStore, create_session_store

__all__ = [
    "ApiClient",
    "ApiError",
    "AuthController",
    "AuthState",
    "ClientSettings",
    "create_session_store",
    "EmbedController",
    "FileSessionStore",
    "InMemorySessionStore",
    "load_settings",
    "MissingAccessTokenError",
    "Review",
    "ReviewsController",
    "SessionStore",
    "Space",
    "SpacesController",
    "User",
]
