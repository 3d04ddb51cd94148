"""Public slug generation for spaces."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Callable


_NON_ALNUM = re.compile(r"[^a-z0-9]+")
FALLBACK_SLUG = "space"


def slugify(name: str) -> str:
    """Lower-case ASCII slug with runs of other characters collapsed to '-'."""
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    slug = _NON_ALNUM.sub("-", ascii_name.lower()).strip("-")
    return slug or FALLBACK_SLUG


def unique_slug(name: str, is_taken: Callable[[str], bool]) -> str:
    """Return ``slugify(name)``, suffixed with -1, -2, ... until it is free."""
    base = slugify(name)
    slug = base
    counter = 1
    while is_taken(slug):
        slug = f"{base}-{counter}"
        counter += 1
    return slug
