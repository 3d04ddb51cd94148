"""Persistence records for users, spaces and reviews."""

from __future__ import annotations

from dataclasses import dataclass


PUBLIC_PATH_PREFIX = "/t/"


@dataclass(frozen=True)
class UserRecord:
    user_id: str
    name: str
    email: str
    password_hash: str


@dataclass(frozen=True)
class SpaceRecord:
    space_id: str
    user_id: str
    name: str
    slug: str
    redirect_url: str
    created_at: str
    updated_at: str

    @property
    def public_url(self) -> str:
        return f"{PUBLIC_PATH_PREFIX}{self.slug}"


@dataclass(frozen=True)
class ReviewRecord:
    review_id: str
    space_id: str
    author_name: str
    author_email: str | None
    rating: int
    text: str
    liked: bool
    created_at: str
    updated_at: str
