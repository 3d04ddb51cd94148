"""Reference backend package for TestiFlow."""

from .config import BackendSettings, load_settings
from .security import generate_token, hash_password, hash_token, verify_password
from .slugs import slugify, unique_slug
from .store import InMemoryTestimonialStore, PostgresTestimonialStore, TestimonialStore, create_store

__all__ = [
    "BackendSettings",
    "create_store",
    "generate_token",
    "hash_password",
    "hash_token",
    "InMemoryTestimonialStore",
    "load_settings",
    "PostgresTestimonialStore",
    "slugify",
    "TestimonialStore",
    "unique_slug",
    "verify_password",
]
