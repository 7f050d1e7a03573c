"""
Shared fixtures for the unit tests.

Venue HTTP is never touched: connector tests replace the API client's
``_get`` with a ``FakeTransport`` that routes by endpoint path.
"""

from typing import Any, Callable, Dict, List, Tuple
from urllib.parse import parse_qsl

import pytest

from core.config import Settings
from core.exceptions import TransportError


class FakeTransport:
    """
    Stand-in for ``VenueRESTClient._get``.

    Routes map an endpoint path (query string stripped) to either:
    - an exception instance (raised on every call)
    - a callable ``handler(args) -> payload`` where ``args`` merges
      ``params`` and any pre-built query string
    - a plain payload returned as-is

    Unrouted paths raise TransportError (HTTP 404).
    """

    def __init__(self, routes: Dict[str, Any]):
        self.routes = routes
        self.calls: List[Tuple[str, Dict[str, Any], Dict[str, str], str]] = []

    async def __call__(self, path: str, params=None, headers=None):
        base, _, query = path.partition("?")
        args = {key: str(value) for key, value in (params or {}).items()}
        args.update(dict(parse_qsl(query)))
        self.calls.append((base, args, dict(headers or {}), query))

        handler = self.routes.get(base)
        if handler is None:
            raise TransportError(f"HTTP 404 on {base}", status=404)
        if isinstance(handler, BaseException):
            raise handler
        if callable(handler):
            return handler(args)
        return handler

    def count(self, path: str) -> int:
        return sum(1 for call in self.calls if call[0] == path)

    def calls_to(self, path: str):
        return [call for call in self.calls if call[0] == path]


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from .env, with a zero placeholder for determinism."""
    return Settings(
        _env_file=None,
        degraded_volume_mode="zero",
        woox_default_api_key="",
        woox_default_api_secret="",
        paradex_default_token="",
        supabase_url="",
        supabase_key="",
    )


@pytest.fixture
def fake_transport() -> Callable[[Dict[str, Any]], FakeTransport]:
    """Factory for FakeTransport instances."""
    return FakeTransport
