"""Tests for authorization code exchange."""

import base64
from unittest import mock

import pytest
import requests

from tdameritrade.oauth.config import TDAmeritradeOAuthConfig
from tdameritrade.oauth.exceptions import TokenExchangeError, TokenExchangeTimeoutError
from tdameritrade.oauth.token_exchange import TokenExchanger


def _response(status_code=200, payload=None, text=""):
    response = mock.Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = text
    return response


class TestTokenExchanger:
    """Tests for TokenExchanger class."""

    @pytest.fixture
    def config(self):
        return TDAmeritradeOAuthConfig(
            client_id="CLIENTID@AMER.OAUTHAP",
            redirect_uri="https://localhost:8080/callback",
            token_url="https://api.example.com/v1/oauth2/token",
            request_timeout=12.0,
        )

    @pytest.fixture
    def session(self):
        return mock.Mock(spec=requests.Session)

    def test_exchange_success(self, config, session):
        """A 200 response is turned into TokenData."""
        session.post.return_value = _response(
            payload={
                "access_token": "access",
                "refresh_token": "refresh",
                "token_type": "Bearer",
                "expires_in": 1800,
                "scope": "PlaceTrades AccountAccess",
                "refresh_token_expires_in": 7776000,
            }
        )

        token = TokenExchanger(config, session=session).exchange("the-code")

        assert token.access_token == "access"
        assert token.refresh_token == "refresh"
        assert token.expires_in == 1800
        assert token.scope == "PlaceTrades AccountAccess"
        assert token.refresh_token_expires_in == 7776000
        assert not token.is_expired

    def test_exchange_request(self, config, session):
        """The code is posted as an authorization_code grant."""
        session.post.return_value = _response(payload={"access_token": "a", "expires_in": 60})

        TokenExchanger(config, session=session).exchange("the-code")

        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args[0] == "https://api.example.com/v1/oauth2/token"
        assert kwargs["data"] == {
            "grant_type": "authorization_code",
            "access_type": "offline",
            "code": "the-code",
            "client_id": "CLIENTID@AMER.OAUTHAP",
            "redirect_uri": "https://localhost:8080/callback",
        }
        assert kwargs["timeout"] == 12.0
        assert "Authorization" not in kwargs["headers"]

    def test_exchange_with_client_secret(self, session):
        """A client secret is sent as HTTP Basic auth."""
        config = TDAmeritradeOAuthConfig(client_id="id", client_secret="secret")
        session.post.return_value = _response(payload={"access_token": "a", "expires_in": 60})

        TokenExchanger(config, session=session).exchange("code")

        headers = session.post.call_args[1]["headers"]
        assert headers["Authorization"] == "Basic " + base64.b64encode(b"id:secret").decode()

    def test_exchange_explicit_timeout(self, config, session):
        """An explicit timeout overrides the configured one."""
        session.post.return_value = _response(payload={"access_token": "a", "expires_in": 60})

        TokenExchanger(config, session=session).exchange("code", timeout=2.5)

        assert session.post.call_args[1]["timeout"] == 2.5

    def test_exchange_defaults_missing_refresh_token(self, config, session):
        """A response without refresh_token yields an empty one."""
        session.post.return_value = _response(payload={"access_token": "a", "expires_in": 60})

        token = TokenExchanger(config, session=session).exchange("code")

        assert token.refresh_token == ""
        assert token.token_type == "Bearer"

    def test_exchange_timeout(self, config, session):
        """A timeout raises TokenExchangeTimeoutError."""
        session.post.side_effect = requests.Timeout("too slow")

        with pytest.raises(TokenExchangeTimeoutError, match=r"timed out \(timeout=12.0s\)"):
            TokenExchanger(config, session=session).exchange("code")

    def test_exchange_network_error(self, config, session):
        """A network error raises TokenExchangeError."""
        session.post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(TokenExchangeError, match="Network error"):
            TokenExchanger(config, session=session).exchange("code")

    def test_exchange_http_error(self, config, session):
        """A non-200 status raises TokenExchangeError with the body."""
        session.post.return_value = _response(status_code=400, text="invalid_grant")

        with pytest.raises(TokenExchangeError, match="status 400: invalid_grant"):
            TokenExchanger(config, session=session).exchange("code")

    def test_exchange_malformed_body(self, config, session):
        """A body without access_token raises TokenExchangeError."""
        session.post.return_value = _response(payload={"token_type": "Bearer"})

        with pytest.raises(TokenExchangeError, match="Invalid response from token endpoint"):
            TokenExchanger(config, session=session).exchange("code")

    def test_default_session(self, config):
        """A session is created when none is given."""
        with mock.patch("requests.Session.post") as post:
            post.return_value = _response(payload={"access_token": "a", "expires_in": 60})

            token = TokenExchanger(config).exchange("code")

        assert token.access_token == "a"
