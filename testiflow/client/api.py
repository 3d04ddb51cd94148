"""Async request client for the TestiFlow HTTP API."""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping
from typing import Any
from urllib.parse import quote

import httpx

from .config import DEFAULT_API_URL, DEFAULT_HTTP_TIMEOUT_SECONDS, ClientSettings
from .errors import NETWORK_ERROR_MESSAGE, UNEXPECTED_ERROR_MESSAGE, ApiError
from .models import LoginRequest, SignupRequest
from .session import SessionStore


EMPTY_BODY_STATUSES = (201, 204)

logger = logging.getLogger(__name__)


def _segment(value: str) -> str:
    return quote(str(value), safe="")


class ApiClient:
    """Performs one HTTP call per request and normalizes every failure to ApiError.

    The bearer token is read from the injected session store before each call.
    There is no retry; the optional timeout is the only bound on a call.
    """

    def __init__(
        self,
        session: SessionStore,
        base_url: str | None = None,
        *,
        timeout: float | None = DEFAULT_HTTP_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.session = session
        self.base_url = (base_url or DEFAULT_API_URL).rstrip("/")
        self._default_headers = {"Content-Type": "application/json"}
        self._http = httpx.AsyncClient(timeout=httpx.Timeout(timeout), transport=transport)

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        session: SessionStore,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ApiClient":
        return cls(
            session,
            settings.api_url,
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def build_headers(self, overrides: Mapping[str, str] | None = None) -> dict[str, str]:
        headers = dict(self._default_headers)
        token = self.session.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if overrides:
            headers.update(overrides)
        return headers

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        json: Any = None,
        headers: Mapping[str, str] | None = None,
        empty_statuses: Collection[int] = EMPTY_BODY_STATUSES,
    ) -> Any:
        url = f"{self.base_url}{endpoint}"
        request_headers = self.build_headers(headers)
        logger.debug(
            "%s %s (token present: %s)", method, url, "Authorization" in request_headers
        )
        try:
            response = await self._http.request(method, url, json=json, headers=request_headers)
            logger.debug("%s %s -> %s", method, url, response.status_code)
            return self._handle_response(response, empty_statuses)
        except ApiError:
            raise
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ApiError(NETWORK_ERROR_MESSAGE, 0, {"originalError": str(exc)}) from exc
        except Exception as exc:
            logger.exception("%s %s raised an unexpected error", method, url)
            raise ApiError(UNEXPECTED_ERROR_MESSAGE, 500, {"originalError": exc}) from exc

    def _handle_response(self, response: httpx.Response, empty_statuses: Collection[int]) -> Any:
        if not response.is_success:
            raise self._error_from_response(response)

        if response.status_code in empty_statuses:
            return {}

        try:
            return response.json()
        except ValueError:
            # A success status with a non-JSON body is reported as empty; this can hide backend faults.
            logger.warning(
                "Response %s from %s carried no JSON body", response.status_code, response.request.url
            )
            return {}

    def _error_from_response(self, response: httpx.Response) -> ApiError:
        status = response.status_code
        fallback = f"HTTP {status}"
        text = response.text
        if not text:
            details: Any = {"message": fallback}
            message = fallback
        else:
            try:
                details = response.json()
            except ValueError:
                details = {"message": text}
            message = details.get("message") if isinstance(details, dict) else None
            if not message:
                message = fallback
        logger.warning("API error %s from %s: %s", status, response.request.url, message)
        return ApiError(str(message), status, details)

    # Authentication
    async def signup(self, name: str, email: str, password: str) -> Any:
        body = SignupRequest(name=name, email=email, password=password)
        return await self.request("/auth/signup", "POST", json=body.to_payload())

    async def login(self, email: str, password: str) -> Any:
        body = LoginRequest(email=email, password=password)
        return await self.request("/auth/login", "POST", json=body.to_payload())

    async def get_current_user(self) -> Any:
        return await self.request("/auth/me")

    # Spaces
    async def get_spaces(self) -> Any:
        return await self.request("/spaces")

    async def get_space(self, space_id: str) -> Any:
        return await self.request(f"/spaces/{_segment(space_id)}")

    async def create_space(self, payload: Mapping[str, Any]) -> Any:
        # The created space comes back in the 201 body.
        return await self.request("/spaces", "POST", json=dict(payload), empty_statuses=(204,))

    async def update_space(self, space_id: str, payload: Mapping[str, Any]) -> Any:
        return await self.request(f"/spaces/{_segment(space_id)}", "PUT", json=dict(payload))

    async def delete_space(self, space_id: str) -> Any:
        return await self.request(f"/spaces/{_segment(space_id)}", "DELETE")

    # Reviews
    async def get_reviews(self, space_id: str) -> Any:
        return await self.request(f"/reviews/{_segment(space_id)}")

    async def create_review(self, slug: str, payload: Mapping[str, Any]) -> Any:
        return await self.request(f"/reviews/{_segment(slug)}", "POST", json=dict(payload))

    async def toggle_review_like(self, review_id: str) -> Any:
        return await self.request(f"/reviews/{_segment(review_id)}/like", "PUT")

    async def delete_review(self, review_id: str) -> Any:
        return await self.request(f"/reviews/{_segment(review_id)}", "DELETE")

    # Embed
    async def get_embed_reviews(self, space_id: str) -> Any:
        return await self.request(f"/embed/{_segment(space_id)}")
