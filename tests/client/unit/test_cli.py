import asyncio

import httpx

from testiflow.cli import check_backend, parse_args


def test_check_backend_treats_401_as_running(capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/auth/me"
        assert "authorization" not in request.headers
        return httpx.Response(401, json={"message": "No user authenticated"})

    ok = asyncio.run(check_backend("http://localhost:8080/api", transport=httpx.MockTransport(handler)))

    assert ok is True
    assert "running and accessible" in capsys.readouterr().out


def test_check_backend_reports_unreachable_server(capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    ok = asyncio.run(check_backend("http://localhost:8080/api", transport=httpx.MockTransport(handler)))

    assert ok is False
    assert "not accessible" in capsys.readouterr().err


def test_check_backend_warns_on_unexpected_status(capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    ok = asyncio.run(check_backend("http://localhost:8080/api", transport=httpx.MockTransport(handler)))

    assert ok is True
    assert "responded with status: 500" in capsys.readouterr().out


def test_parse_args_reads_subcommands() -> None:
    serve = parse_args(["serve", "--port", "9000"])
    check = parse_args(["check", "--server", "http://api.test/api"])

    assert serve.command == "serve"
    assert serve.port == 9000
    assert check.command == "check"
    assert check.server == "http://api.test/api"
