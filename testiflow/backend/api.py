"""FastAPI endpoints for authentication, spaces, reviews and embeds."""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Header, HTTPException, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import load_settings
from .models import ReviewRecord, SpaceRecord, UserRecord
from .security import generate_token
from .store import TestimonialStore, create_store


TOKEN_TYPE = "Bearer"

logger = logging.getLogger(__name__)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SignUpRequest(CamelModel):
    name: str = Field(min_length=3, max_length=50)
    email: str = Field(min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=6, max_length=40)


class LoginRequest(CamelModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginResponse(CamelModel):
    access_token: str
    token_type: str = TOKEN_TYPE


class MessageResponse(CamelModel):
    message: str


class UserResponse(CamelModel):
    id: str
    name: str
    email: str


class SpaceRequest(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    redirect_url: str = Field(min_length=1, max_length=2000)


class SpaceResponse(CamelModel):
    id: str
    name: str
    slug: str
    public_url: str
    redirect_url: str
    user_id: str
    created_at: str
    updated_at: str


class ReviewRequest(CamelModel):
    author_name: str = Field(min_length=1, max_length=200)
    author_email: str | None = Field(default=None, max_length=254)
    rating: int = Field(ge=1, le=5)
    text: str = Field(min_length=1, max_length=5000)


class ReviewResponse(CamelModel):
    id: str
    space_id: str
    author_name: str
    author_email: str | None
    rating: int
    text: str
    liked: bool
    created_at: str
    updated_at: str


def _user_response(user: UserRecord) -> UserResponse:
    return UserResponse(id=user.user_id, name=user.name, email=user.email)


def _space_response(space: SpaceRecord) -> SpaceResponse:
    return SpaceResponse(
        id=space.space_id,
        name=space.name,
        slug=space.slug,
        public_url=space.public_url,
        redirect_url=space.redirect_url,
        user_id=space.user_id,
        created_at=space.created_at,
        updated_at=space.updated_at,
    )


def _review_response(review: ReviewRecord) -> ReviewResponse:
    return ReviewResponse(
        id=review.review_id,
        space_id=review.space_id,
        author_name=review.author_name,
        author_email=review.author_email,
        rating=review.rating,
        text=review.text,
        liked=review.liked,
        created_at=review.created_at,
        updated_at=review.updated_at,
    )


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def create_app(store: TestimonialStore | None = None, cors_origins: tuple[str, ...] | None = None) -> FastAPI:
    settings = load_settings()
    app = FastAPI(title="TestiFlow API", version="0.1.0")
    local_store_instance = store if store is not None else create_store(settings.database_url, settings.server_salt)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins if cors_origins is not None else settings.cors_origins),
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        allow_credentials=True,
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse({"message": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            {"message": "Validation failed", "errors": jsonable_encoder(exc.errors())},
            status_code=400,
        )

    def get_store() -> TestimonialStore:
        return local_store_instance

    def current_user(
        authorization: str | None = Header(default=None),
        local_store: TestimonialStore = Depends(get_store),
    ) -> UserRecord:
        token = _bearer_token(authorization)
        user = local_store.get_session_user(token) if token else None
        if user is None:
            raise HTTPException(status_code=401, detail="No user authenticated")
        return user

    @app.post("/api/auth/signup", response_model=MessageResponse, status_code=201)
    def signup(
        payload: SignUpRequest,
        local_store: TestimonialStore = Depends(get_store),
    ) -> MessageResponse:
        created = local_store.create_user(name=payload.name, email=payload.email, password=payload.password)
        if created is None:
            raise HTTPException(status_code=400, detail="Email is already taken!")
        logger.info("Registered user %s", created.user_id)
        return MessageResponse(message="User registered successfully")

    @app.post("/api/auth/login", response_model=LoginResponse)
    def login(
        payload: LoginRequest,
        local_store: TestimonialStore = Depends(get_store),
    ) -> LoginResponse:
        user = local_store.authenticate(email=payload.email, password=payload.password)
        if user is None:
            raise HTTPException(status_code=401, detail="Invalid credentials")
        token = generate_token()
        local_store.open_session(user_id=user.user_id, raw_token=token)
        return LoginResponse(access_token=token)

    @app.get("/api/auth/me", response_model=UserResponse)
    def me(user: UserRecord = Depends(current_user)) -> UserResponse:
        return _user_response(user)

    @app.post("/api/spaces", response_model=SpaceResponse, status_code=201)
    def create_space(
        payload: SpaceRequest,
        user: UserRecord = Depends(current_user),
        local_store: TestimonialStore = Depends(get_store),
    ) -> SpaceResponse:
        space = local_store.create_space(user_id=user.user_id, name=payload.name, redirect_url=payload.redirect_url)
        logger.info("Created space %s (%s)", space.space_id, space.slug)
        return _space_response(space)

    @app.get("/api/spaces", response_model=list[SpaceResponse])
    def list_spaces(
        user: UserRecord = Depends(current_user),
        local_store: TestimonialStore = Depends(get_store),
    ) -> list[SpaceResponse]:
        return [_space_response(space) for space in local_store.list_spaces(user_id=user.user_id)]

    @app.get("/api/spaces/{space_id}", response_model=SpaceResponse)
    def get_space(
        space_id: str,
        user: UserRecord = Depends(current_user),
        local_store: TestimonialStore = Depends(get_store),
    ) -> SpaceResponse:
        space = local_store.get_space(space_id=space_id, user_id=user.user_id)
        if space is None:
            raise HTTPException(status_code=404, detail=f"Space not found with id: {space_id}")
        return _space_response(space)

    @app.put("/api/spaces/{space_id}", response_model=SpaceResponse)
    def update_space(
        space_id: str,
        payload: SpaceRequest,
        user: UserRecord = Depends(current_user),
        local_store: TestimonialStore = Depends(get_store),
    ) -> SpaceResponse:
        space = local_store.update_space(
            space_id=space_id,
            user_id=user.user_id,
            name=payload.name,
            redirect_url=payload.redirect_url,
        )
        if space is None:
            raise HTTPException(status_code=404, detail=f"Space not found with id: {space_id}")
        return _space_response(space)

    @app.delete("/api/spaces/{space_id}", status_code=204, response_class=Response)
    def delete_space(
        space_id: str,
        user: UserRecord = Depends(current_user),
        local_store: TestimonialStore = Depends(get_store),
    ) -> Response:
        if not local_store.delete_space(space_id=space_id, user_id=user.user_id):
            raise HTTPException(status_code=404, detail=f"Space not found with id: {space_id}")
        return Response(status_code=204)

    @app.post("/api/reviews/{slug}", status_code=201, response_class=Response)
    def submit_review(
        slug: str,
        payload: ReviewRequest,
        local_store: TestimonialStore = Depends(get_store),
    ) -> Response:
        review = local_store.submit_review(
            slug=slug,
            author_name=payload.author_name,
            author_email=payload.author_email,
            rating=payload.rating,
            text=payload.text,
        )
        if review is None:
            raise HTTPException(status_code=404, detail=f"Space not found with slug: {slug}")
        return Response(status_code=201)

    @app.get("/api/reviews/{space_id}", response_model=list[ReviewResponse])
    def list_reviews(
        space_id: str,
        user: UserRecord = Depends(current_user),
        local_store: TestimonialStore = Depends(get_store),
    ) -> list[ReviewResponse]:
        reviews = local_store.list_reviews(space_id=space_id, user_id=user.user_id)
        if reviews is None:
            raise HTTPException(status_code=404, detail="Space not found or user not authorized")
        return [_review_response(review) for review in reviews]

    @app.put("/api/reviews/{review_id}/like", response_model=ReviewResponse)
    def toggle_like(
        review_id: str,
        user: UserRecord = Depends(current_user),
        local_store: TestimonialStore = Depends(get_store),
    ) -> ReviewResponse:
        review = local_store.toggle_like(review_id=review_id, user_id=user.user_id)
        if review is None:
            raise HTTPException(status_code=404, detail=f"Review not found with id: {review_id}")
        return _review_response(review)

    @app.delete("/api/reviews/{review_id}", status_code=204, response_class=Response)
    def delete_review(
        review_id: str,
        user: UserRecord = Depends(current_user),
        local_store: TestimonialStore = Depends(get_store),
    ) -> Response:
        if not local_store.delete_review(review_id=review_id, user_id=user.user_id):
            raise HTTPException(status_code=404, detail=f"Review not found with id: {review_id}")
        return Response(status_code=204)

    @app.get("/api/embed/{space_id}", response_model=list[ReviewResponse])
    def embed_reviews(
        space_id: str,
        local_store: TestimonialStore = Depends(get_store),
    ) -> list[ReviewResponse]:
        reviews = local_store.list_liked_reviews(space_id=space_id)
        if reviews is None:
            raise HTTPException(status_code=404, detail=f"Space not found with id: {space_id}")
        return [_review_response(review) for review in reviews]

    return app


app = create_app()
