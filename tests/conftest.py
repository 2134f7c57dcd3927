"""Shared pytest fixtures.

Credential stores work on Werkzeug request and response objects; the
helpers here build those without running a server.
"""

from datetime import datetime, timezone
from typing import Callable, Dict, Optional

import pytest
from flask import Request, Response

from tdameritrade.oauth.token_storage import TokenData


def _make_request(
    query: Optional[Dict[str, str]] = None,
    cookies: Optional[Dict[str, str]] = None,
) -> Request:
    headers = {}
    if cookies:
        headers["Cookie"] = "; ".join(f"{name}={value}" for name, value in cookies.items())
    return Request.from_values("/callback", query_string=query or {}, headers=headers)


def _response_cookies(response: Response) -> Dict[str, str]:
    """Name to value of every Set-Cookie header (deletions map to "")."""
    cookies = {}
    for header in response.headers.getlist("Set-Cookie"):
        name, _, rest = header.partition("=")
        cookies[name] = rest.split(";", 1)[0].strip('"')
    return cookies


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Factory for requests carrying query parameters and cookies."""
    return _make_request


@pytest.fixture
def response_cookies() -> Callable[[Response], Dict[str, str]]:
    """Extract cookies set on a response."""
    return _response_cookies


@pytest.fixture
def sample_token() -> TokenData:
    """Create sample token data for testing."""
    return TokenData(
        access_token="access_abc123",
        refresh_token="refresh_xyz789",
        token_type="Bearer",
        expires_in=1800,
        scope="PlaceTrades AccountAccess MoveMoney",
        issued_at=datetime.now(timezone.utc).isoformat(),
        refresh_token_expires_in=7776000,
    )
