"""Persistence interfaces and implementations for users, spaces and reviews."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Protocol
import uuid

from testiflow.backend.models import ReviewRecord, SpaceRecord, UserRecord
from testiflow.backend.security import hash_password, hash_token, verify_password
from testiflow.backend.slugs import unique_slug


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class TestimonialStore(Protocol):
    def create_user(self, name: str, email: str, password: str) -> UserRecord | None:
        """Create a user; None when the email is already registered."""

    def authenticate(self, email: str, password: str) -> UserRecord | None:
        """Return the user when email and password match."""

    def open_session(self, user_id: str, raw_token: str) -> None:
        """Persist the hash of a freshly issued bearer token."""

    def get_session_user(self, raw_token: str) -> UserRecord | None:
        """Resolve a bearer token to its user."""

    def create_space(self, user_id: str, name: str, redirect_url: str) -> SpaceRecord:
        """Create a space with a unique slug derived from its name."""

    def list_spaces(self, user_id: str) -> list[SpaceRecord]:
        """Return the spaces owned by the user."""

    def get_space(self, space_id: str, user_id: str) -> SpaceRecord | None:
        """Return the space when it exists and is owned by the user."""

    def update_space(self, space_id: str, user_id: str, name: str, redirect_url: str) -> SpaceRecord | None:
        """Rename / re-target an owned space."""

    def delete_space(self, space_id: str, user_id: str) -> bool:
        """Delete an owned space and its reviews."""

    def submit_review(
        self, slug: str, author_name: str, author_email: str | None, rating: int, text: str
    ) -> ReviewRecord | None:
        """Add a public review to the space with the slug; None when unknown."""

    def list_reviews(self, space_id: str, user_id: str) -> list[ReviewRecord] | None:
        """Return all reviews of an owned space."""

    def toggle_like(self, review_id: str, user_id: str) -> ReviewRecord | None:
        """Flip the liked flag of a review in an owned space."""

    def delete_review(self, review_id: str, user_id: str) -> bool:
        """Delete a review in an owned space."""

    def list_liked_reviews(self, space_id: str) -> list[ReviewRecord] | None:
        """Return the liked reviews of any space; None when the space is unknown."""


@dataclass
class InMemoryTestimonialStore:
    server_salt: str

    def __post_init__(self) -> None:
        self._users: dict[str, UserRecord] = {}
        self._sessions: dict[str, str] = {}
        self._spaces: dict[str, SpaceRecord] = {}
        self._reviews: dict[str, ReviewRecord] = {}

    def create_user(self, name: str, email: str, password: str) -> UserRecord | None:
        if self._find_user_by_email(email) is not None:
            return None
        user = UserRecord(
            user_id=str(uuid.uuid4()),
            name=name,
            email=email,
            password_hash=hash_password(password),
        )
        self._users[user.user_id] = user
        return user

    def authenticate(self, email: str, password: str) -> UserRecord | None:
        user = self._find_user_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            return None
        return user

    def open_session(self, user_id: str, raw_token: str) -> None:
        self._sessions[hash_token(raw_token, self.server_salt)] = user_id

    def get_session_user(self, raw_token: str) -> UserRecord | None:
        user_id = self._sessions.get(hash_token(raw_token, self.server_salt))
        if user_id is None:
            return None
        return self._users.get(user_id)

    def create_space(self, user_id: str, name: str, redirect_url: str) -> SpaceRecord:
        taken = {space.slug for space in self._spaces.values()}
        now = _utc_now_iso()
        space = SpaceRecord(
            space_id=str(uuid.uuid4()),
            user_id=user_id,
            name=name,
            slug=unique_slug(name, taken.__contains__),
            redirect_url=redirect_url,
            created_at=now,
            updated_at=now,
        )
        self._spaces[space.space_id] = space
        return space

    def list_spaces(self, user_id: str) -> list[SpaceRecord]:
        return [space for space in self._spaces.values() if space.user_id == user_id]

    def get_space(self, space_id: str, user_id: str) -> SpaceRecord | None:
        space = self._spaces.get(space_id)
        if space is None or space.user_id != user_id:
            return None
        return space

    def update_space(self, space_id: str, user_id: str, name: str, redirect_url: str) -> SpaceRecord | None:
        space = self.get_space(space_id=space_id, user_id=user_id)
        if space is None:
            return None
        updated = replace(space, name=name, redirect_url=redirect_url, updated_at=_utc_now_iso())
        self._spaces[space_id] = updated
        return updated

    def delete_space(self, space_id: str, user_id: str) -> bool:
        if self.get_space(space_id=space_id, user_id=user_id) is None:
            return False
        del self._spaces[space_id]
        for review_id in [r.review_id for r in self._reviews.values() if r.space_id == space_id]:
            del self._reviews[review_id]
        return True

    def submit_review(
        self, slug: str, author_name: str, author_email: str | None, rating: int, text: str
    ) -> ReviewRecord | None:
        space = next((s for s in self._spaces.values() if s.slug == slug), None)
        if space is None:
            return None
        now = _utc_now_iso()
        review = ReviewRecord(
            review_id=str(uuid.uuid4()),
            space_id=space.space_id,
            author_name=author_name,
            author_email=author_email,
            rating=rating,
            text=text,
            liked=False,
            created_at=now,
            updated_at=now,
        )
        self._reviews[review.review_id] = review
        return review

    def list_reviews(self, space_id: str, user_id: str) -> list[ReviewRecord] | None:
        if self.get_space(space_id=space_id, user_id=user_id) is None:
            return None
        return [review for review in self._reviews.values() if review.space_id == space_id]

    def toggle_like(self, review_id: str, user_id: str) -> ReviewRecord | None:
        review = self._owned_review(review_id=review_id, user_id=user_id)
        if review is None:
            return None
        updated = replace(review, liked=not review.liked, updated_at=_utc_now_iso())
        self._reviews[review_id] = updated
        return updated

    def delete_review(self, review_id: str, user_id: str) -> bool:
        if self._owned_review(review_id=review_id, user_id=user_id) is None:
            return False
        del self._reviews[review_id]
        return True

    def list_liked_reviews(self, space_id: str) -> list[ReviewRecord] | None:
        if space_id not in self._spaces:
            return None
        return [r for r in self._reviews.values() if r.space_id == space_id and r.liked]

    def _find_user_by_email(self, email: str) -> UserRecord | None:
        return next((user for user in self._users.values() if user.email == email), None)

    def _owned_review(self, review_id: str, user_id: str) -> ReviewRecord | None:
        review = self._reviews.get(review_id)
        if review is None or self.get_space(space_id=review.space_id, user_id=user_id) is None:
            return None
        return review


_SPACE_COLUMNS = "id, user_id, name, slug, redirect_url, created_at, updated_at"
_REVIEW_COLUMNS = "id, space_id, author_name, author_email, rating, text, liked, created_at, updated_at"


def _iso(value: Any) -> str:
    return value.isoformat() if isinstance(value, datetime) else str(value)


def _space_from_row(row: tuple) -> SpaceRecord:
    space_id, user_id, name, slug, redirect_url, created_at, updated_at = row
    return SpaceRecord(
        space_id=str(space_id),
        user_id=str(user_id),
        name=name,
        slug=slug,
        redirect_url=redirect_url,
        created_at=_iso(created_at),
        updated_at=_iso(updated_at),
    )


def _review_from_row(row: tuple) -> ReviewRecord:
    review_id, space_id, author_name, author_email, rating, text, liked, created_at, updated_at = row
    return ReviewRecord(
        review_id=str(review_id),
        space_id=str(space_id),
        author_name=author_name,
        author_email=author_email,
        rating=int(rating),
        text=text,
        liked=bool(liked),
        created_at=_iso(created_at),
        updated_at=_iso(updated_at),
    )


def _user_from_row(row: tuple) -> UserRecord:
    user_id, name, email, password_hash = row
    return UserRecord(user_id=str(user_id), name=name, email=email, password_hash=password_hash)


@dataclass
class PostgresTestimonialStore:
    database_url: str
    server_salt: str

    def _connect(self) -> Any:
        import psycopg

        return psycopg.connect(self.database_url)

    def create_user(self, name: str, email: str, password: str) -> UserRecord | None:
        user_id = str(uuid.uuid4())
        password_hash = hash_password(password)
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO users (id, name, email, password_hash, created_at)
                    VALUES (%s, %s, %s, %s, %s)
                    ON CONFLICT (email) DO NOTHING
                    RETURNING id
                    """,
                    (user_id, name, email, password_hash, datetime.now(timezone.utc)),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            return None
        return UserRecord(user_id=user_id, name=name, email=email, password_hash=password_hash)

    def authenticate(self, email: str, password: str) -> UserRecord | None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT id, name, email, password_hash FROM users WHERE email = %s",
                    (email,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        user = _user_from_row(row)
        if not verify_password(password, user.password_hash):
            return None
        return user

    def open_session(self, user_id: str, raw_token: str) -> None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO user_sessions (token_hash, user_id, created_at)
                    VALUES (%s, %s, %s)
                    """,
                    (hash_token(raw_token, self.server_salt), user_id, datetime.now(timezone.utc)),
                )
            conn.commit()

    def get_session_user(self, raw_token: str) -> UserRecord | None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT u.id, u.name, u.email, u.password_hash
                    FROM user_sessions t
                    JOIN users u ON u.id = t.user_id
                    WHERE t.token_hash = %s
                    """,
                    (hash_token(raw_token, self.server_salt),),
                )
                row = cur.fetchone()
        return _user_from_row(row) if row is not None else None

    def create_space(self, user_id: str, name: str, redirect_url: str) -> SpaceRecord:
        space_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            with conn.cursor() as cur:

                def is_taken(slug: str) -> bool:
                    cur.execute("SELECT 1 FROM spaces WHERE slug = %s", (slug,))
                    return cur.fetchone() is not None

                slug = unique_slug(name, is_taken)
                cur.execute(
                    f"""
                    INSERT INTO spaces ({_SPACE_COLUMNS})
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    """,
                    (space_id, user_id, name, slug, redirect_url, now, now),
                )
            conn.commit()

        return SpaceRecord(
            space_id=space_id,
            user_id=user_id,
            name=name,
            slug=slug,
            redirect_url=redirect_url,
            created_at=now.isoformat(),
            updated_at=now.isoformat(),
        )

    def list_spaces(self, user_id: str) -> list[SpaceRecord]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT {_SPACE_COLUMNS} FROM spaces WHERE user_id = %s ORDER BY created_at",
                    (user_id,),
                )
                rows = cur.fetchall()
        return [_space_from_row(row) for row in rows]

    def get_space(self, space_id: str, user_id: str) -> SpaceRecord | None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT {_SPACE_COLUMNS} FROM spaces WHERE id = %s AND user_id = %s",
                    (space_id, user_id),
                )
                row = cur.fetchone()
        return _space_from_row(row) if row is not None else None

    def update_space(self, space_id: str, user_id: str, name: str, redirect_url: str) -> SpaceRecord | None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    UPDATE spaces
                    SET name = %s, redirect_url = %s, updated_at = %s
                    WHERE id = %s AND user_id = %s
                    RETURNING {_SPACE_COLUMNS}
                    """,
                    (name, redirect_url, datetime.now(timezone.utc), space_id, user_id),
                )
                row = cur.fetchone()
            conn.commit()
        return _space_from_row(row) if row is not None else None

    def delete_space(self, space_id: str, user_id: str) -> bool:
        # Reviews go with the space through ON DELETE CASCADE.
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM spaces WHERE id = %s AND user_id = %s RETURNING id",
                    (space_id, user_id),
                )
                row = cur.fetchone()
            conn.commit()
        return row is not None

    def submit_review(
        self, slug: str, author_name: str, author_email: str | None, rating: int, text: str
    ) -> ReviewRecord | None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT id FROM spaces WHERE slug = %s", (slug,))
                space_row = cur.fetchone()
                if space_row is None:
                    return None
                now = datetime.now(timezone.utc)
                review_id = str(uuid.uuid4())
                cur.execute(
                    f"""
                    INSERT INTO reviews ({_REVIEW_COLUMNS})
                    VALUES (%s, %s, %s, %s, %s, %s, FALSE, %s, %s)
                    """,
                    (review_id, space_row[0], author_name, author_email, rating, text, now, now),
                )
            conn.commit()

        return ReviewRecord(
            review_id=review_id,
            space_id=str(space_row[0]),
            author_name=author_name,
            author_email=author_email,
            rating=rating,
            text=text,
            liked=False,
            created_at=now.isoformat(),
            updated_at=now.isoformat(),
        )

    def list_reviews(self, space_id: str, user_id: str) -> list[ReviewRecord] | None:
        if self.get_space(space_id=space_id, user_id=user_id) is None:
            return None
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT {_REVIEW_COLUMNS} FROM reviews WHERE space_id = %s ORDER BY created_at",
                    (space_id,),
                )
                rows = cur.fetchall()
        return [_review_from_row(row) for row in rows]

    def toggle_like(self, review_id: str, user_id: str) -> ReviewRecord | None:
        returning = ", ".join(f"r.{column.strip()}" for column in _REVIEW_COLUMNS.split(","))
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    UPDATE reviews r
                    SET liked = NOT r.liked, updated_at = %s
                    FROM spaces s
                    WHERE r.id = %s AND s.id = r.space_id AND s.user_id = %s
                    RETURNING {returning}
                    """,
                    (datetime.now(timezone.utc), review_id, user_id),
                )
                row = cur.fetchone()
            conn.commit()
        return _review_from_row(row) if row is not None else None

    def delete_review(self, review_id: str, user_id: str) -> bool:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    DELETE FROM reviews r
                    USING spaces s
                    WHERE r.id = %s AND s.id = r.space_id AND s.user_id = %s
                    RETURNING r.id
                    """,
                    (review_id, user_id),
                )
                row = cur.fetchone()
            conn.commit()
        return row is not None

    def list_liked_reviews(self, space_id: str) -> list[ReviewRecord] | None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1 FROM spaces WHERE id = %s", (space_id,))
                if cur.fetchone() is None:
                    return None
                cur.execute(
                    f"""
                    SELECT {_REVIEW_COLUMNS} FROM reviews
                    WHERE space_id = %s AND liked
                    ORDER BY created_at
                    """,
                    (space_id,),
                )
                rows = cur.fetchall()
        return [_review_from_row(row) for row in rows]


def create_store(database_url: str | None, server_salt: str) -> TestimonialStore:
    if database_url:
        return PostgresTestimonialStore(database_url=database_url, server_salt=server_salt)
    return InMemoryTestimonialStore(server_salt=server_salt)
