"""Command line entry point: run the backend or check that one is reachable."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from testiflow.backend.config import load_settings as load_backend_settings
from testiflow.client.api import ApiClient
from testiflow.client.config import load_settings as load_client_settings
from testiflow.client.errors import ApiError
from testiflow.client.session import InMemorySessionStore

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="testiflow", description="TestiFlow tools")
    parser.add_argument("--verbose", action="store_true")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="run the reference backend")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    check = commands.add_parser("check", help="check that a backend is reachable")
    check.add_argument("--server", default=None, help="API base URL, e.g. http://localhost:8080/api")
    return parser.parse_args(argv)


async def check_backend(server: str, transport=None) -> bool:
    """Probe ``/auth/me`` anonymously; a 401 proves the API is up."""
    async with ApiClient(InMemorySessionStore(), server, transport=transport) as client:
        try:
            await client.get_current_user()
        except ApiError as exc:
            if exc.is_network_error:
                print(f"Backend is not accessible at {server}: {exc.details}", file=sys.stderr)
                return False
            if exc.status == 401:
                print(f"Backend is running and accessible at {server}")
            else:
                print(f"Backend at {server} responded with status: {exc.status}")
            return True
    print(f"Backend at {server} answered an anonymous /auth/me request")
    return True


def serve(host: str | None, port: int | None) -> int:
    import uvicorn

    settings = load_backend_settings()
    uvicorn.run(
        "testiflow.backend.api:app",
        host=host or settings.host,
        port=port or settings.port,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "serve":
        return serve(host=args.host, port=args.port)

    server = args.server or load_client_settings().api_url
    return 0 if asyncio.run(check_backend(server)) else 1


if __name__ == "__main__":
    raise SystemExit(main())
