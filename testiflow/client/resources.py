"""Typed wrappers for the spaces, reviews and embed endpoints."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from .api import ApiClient
from .errors import UNEXPECTED_RESPONSE_MESSAGE, ApiError
from .models import Review, ReviewRequest, Space, SpaceRequest


ModelT = TypeVar("ModelT", bound=BaseModel)

logger = logging.getLogger(__name__)

_review_list = TypeAdapter(list[Review])
_space_list = TypeAdapter(list[Space])


def _decode(model: type[ModelT], payload: Any) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ApiError(UNEXPECTED_RESPONSE_MESSAGE, 500, {"originalError": exc.errors()}) from exc


def _decode_list(adapter: TypeAdapter, payload: Any) -> list:
    # An empty success body comes back as {}.
    if not payload:
        return []
    try:
        return adapter.validate_python(payload)
    except ValidationError as exc:
        raise ApiError(UNEXPECTED_RESPONSE_MESSAGE, 500, {"originalError": exc.errors()}) from exc


class SpacesController:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def list(self) -> list[Space]:
        return _decode_list(_space_list, await self.client.get_spaces())

    async def get(self, space_id: str) -> Space:
        return _decode(Space, await self.client.get_space(space_id))

    async def create(self, name: str, redirect_url: str) -> Space:
        body = SpaceRequest(name=name, redirect_url=redirect_url)
        return _decode(Space, await self.client.create_space(body.to_payload()))

    async def update(self, space_id: str, name: str, redirect_url: str) -> Space:
        body = SpaceRequest(name=name, redirect_url=redirect_url)
        return _decode(Space, await self.client.update_space(space_id, body.to_payload()))

    async def delete(self, space_id: str) -> None:
        await self.client.delete_space(space_id)


class ReviewsController:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def list(self, space_id: str) -> list[Review]:
        return _decode_list(_review_list, await self.client.get_reviews(space_id))

    async def create(
        self,
        slug: str,
        author_name: str,
        rating: int,
        text: str,
        author_email: str | None = None,
    ) -> None:
        """Submit a public review to the space published under ``slug``.

        Raises pydantic's ValidationError before any request when ``rating``
        is outside 1..5.
        """
        body = ReviewRequest(author_name=author_name, author_email=author_email, rating=rating, text=text)
        await self.client.create_review(slug, body.to_payload())

    async def toggle_like(self, review_id: str) -> Review:
        return _decode(Review, await self.client.toggle_review_like(review_id))

    async def delete(self, review_id: str) -> None:
        await self.client.delete_review(review_id)

    async def list_for_spaces(self, space_ids: Iterable[str]) -> dict[str, list[Review] | ApiError]:
        """Fetch reviews for several spaces concurrently.

        A failing space is reported as its ApiError without aborting the rest.
        """
        ids = list(dict.fromkeys(space_ids))
        outcomes = await asyncio.gather(*(self._list_isolated(space_id) for space_id in ids))
        return dict(zip(ids, outcomes))

    async def _list_isolated(self, space_id: str) -> list[Review] | ApiError:
        try:
            return await self.list(space_id)
        except ApiError as exc:
            logger.warning("Failed to load reviews for space %s: %s", space_id, exc.message)
            return exc


class EmbedController:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def list(self, space_id: str) -> list[Review]:
        return _decode_list(_review_list, await self.client.get_embed_reviews(space_id))

    async def wall_of_love(self, space_id: str) -> list[Review]:
        return [review for review in await self.list(space_id) if review.liked]
