import asyncio
import json

import httpx
import pytest

from testiflow.client.api import ApiClient
from testiflow.client.config import ClientSettings
from testiflow.client.errors import NETWORK_ERROR_MESSAGE, UNEXPECTED_ERROR_MESSAGE, ApiError
from testiflow.client.session import InMemorySessionStore

BASE_URL = "http://api.test/api"


def call(handler, endpoint: str = "/spaces", token: str | None = None, **kwargs):
    client = ApiClient(InMemorySessionStore(token), BASE_URL, transport=httpx.MockTransport(handler))

    async def scenario():
        async with client:
            return await client.request(endpoint, **kwargs)

    return asyncio.run(scenario())


def test_request_builds_url_and_json_headers_without_token() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    result = call(handler, "/spaces")

    assert result == []
    assert str(seen[0].url) == "http://api.test/api/spaces"
    assert seen[0].headers["content-type"] == "application/json"
    assert "authorization" not in seen[0].headers


def test_request_attaches_bearer_token_from_session() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "u1"})

    call(handler, "/auth/me", token="tok-123")

    assert seen[0].headers["authorization"] == "Bearer tok-123"


def test_request_header_overrides_win() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    call(handler, token="tok-123", headers={"Authorization": "Bearer other", "X-Trace": "1"})

    assert seen[0].headers["authorization"] == "Bearer other"
    assert seen[0].headers["x-trace"] == "1"


def test_request_sends_json_body_with_method() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    call(handler, "/spaces/s1", method="PUT", json={"name": "Acme", "redirectUrl": "https://acme.example"})

    assert seen[0].method == "PUT"
    assert json.loads(seen[0].content) == {"name": "Acme", "redirectUrl": "https://acme.example"}


@pytest.mark.parametrize("status", [201, 204])
def test_created_and_no_content_return_empty_result_regardless_of_body(status: int) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if status == 204:
            return httpx.Response(204)
        return httpx.Response(201, json={"id": "ignored"})

    assert call(handler, method="POST") == {}


def test_created_body_is_decoded_when_caller_opts_in() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, json={"id": "s1"})

    assert call(handler, method="POST", empty_statuses=(204,)) == {"id": "s1"}


def test_success_with_undecodable_body_returns_empty_result() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>ok</html>")

    assert call(handler) == {}


def test_error_message_is_taken_from_json_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Invalid credentials"})

    with pytest.raises(ApiError) as caught:
        call(handler, "/auth/login", method="POST", json={"email": "a@b.c", "password": "x"})

    assert caught.value.message == "Invalid credentials"
    assert caught.value.status == 401
    assert caught.value.details == {"message": "Invalid credentials"}
    assert caught.value.is_auth_rejection is True


def test_error_with_plain_text_body_uses_text_as_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, text="Email is already taken!")

    with pytest.raises(ApiError) as caught:
        call(handler, "/auth/signup", method="POST")

    assert caught.value.message == "Email is already taken!"
    assert caught.value.status == 400


def test_error_with_empty_body_synthesizes_http_status_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502)

    with pytest.raises(ApiError) as caught:
        call(handler)

    assert caught.value.message == "HTTP 502"
    assert caught.value.status == 502


def test_error_json_without_message_falls_back_to_http_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "missing"})

    with pytest.raises(ApiError) as caught:
        call(handler)

    assert caught.value.message == "HTTP 404"
    assert caught.value.details == {"error": "missing"}


def test_connection_failure_maps_to_status_zero() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    with pytest.raises(ApiError) as caught:
        call(handler)

    assert caught.value.status == 0
    assert caught.value.message == NETWORK_ERROR_MESSAGE
    assert caught.value.is_network_error is True
    assert "Connection refused" in caught.value.details["originalError"]


def test_timeout_is_a_network_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ApiError) as caught:
        call(handler)

    assert caught.value.status == 0


def test_unexpected_failure_maps_to_status_500_and_keeps_cause() -> None:
    boom = RuntimeError("boom")

    def handler(request: httpx.Request) -> httpx.Response:
        raise boom

    with pytest.raises(ApiError) as caught:
        call(handler)

    assert caught.value.status == 500
    assert caught.value.message == UNEXPECTED_ERROR_MESSAGE
    assert caught.value.details["originalError"] is boom
    assert caught.value.__cause__ is boom


def test_endpoint_helpers_map_to_expected_paths() -> None:
    seen: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        return httpx.Response(200, json={})

    client = ApiClient(InMemorySessionStore("t"), BASE_URL, transport=httpx.MockTransport(handler))

    async def scenario() -> None:
        async with client:
            await client.get_spaces()
            await client.get_space("s1")
            await client.delete_space("s1")
            await client.get_reviews("s1")
            await client.create_review("acme", {"authorName": "Ann", "rating": 5, "text": "Great"})
            await client.toggle_review_like("r1")
            await client.delete_review("r1")
            await client.get_embed_reviews("s1")

    asyncio.run(scenario())

    assert seen == [
        ("GET", "/api/spaces"),
        ("GET", "/api/spaces/s1"),
        ("DELETE", "/api/spaces/s1"),
        ("GET", "/api/reviews/s1"),
        ("POST", "/api/reviews/acme"),
        ("PUT", "/api/reviews/r1/like"),
        ("DELETE", "/api/reviews/r1"),
        ("GET", "/api/embed/s1"),
    ]


def test_from_settings_uses_configured_base_url(tmp_path) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "u1"})

    settings = ClientSettings(api_url="http://other.test/v1", session_file=tmp_path / "s.json", http_timeout_seconds=None)
    client = ApiClient.from_settings(settings, InMemorySessionStore(), transport=httpx.MockTransport(handler))

    async def scenario():
        async with client:
            return await client.get_current_user()

    assert asyncio.run(scenario()) == {"id": "u1"}
    assert str(seen[0].url) == "http://other.test/v1/auth/me"
