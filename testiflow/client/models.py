"""Typed payloads exchanged with the TestiFlow API.

Attributes are snake_case; the wire format is camelCase.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class User(ApiModel):
    id: str
    name: str
    email: str


class LoginResponse(ApiModel):
    access_token: str | None = None
    token_type: str | None = None


class Space(ApiModel):
    id: str
    name: str
    redirect_url: str
    slug: str
    public_url: str | None = None
    user_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class Review(ApiModel):
    id: str
    space_id: str | None = None
    author_name: str
    author_email: str | None = None
    rating: int = Field(ge=1, le=5)
    text: str
    liked: bool = False
    created_at: str | None = None
    updated_at: str | None = None


class SignupRequest(ApiModel):
    name: str
    email: str
    password: str


class LoginRequest(ApiModel):
    email: str
    password: str


class SpaceRequest(ApiModel):
    name: str
    redirect_url: str


class ReviewRequest(ApiModel):
    author_name: str
    author_email: str | None = None
    rating: int = Field(ge=1, le=5)
    text: str
