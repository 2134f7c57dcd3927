"""Tests for the Authenticator login flow."""

from types import SimpleNamespace
from unittest import mock
from urllib.parse import parse_qs, urlparse

import pytest
from flask import Response

from tdameritrade.api.client import BearerAuth, TDAmeritradeClient
from tdameritrade.oauth.authenticator import Authenticator
from tdameritrade.oauth.config import TDAmeritradeOAuthConfig
from tdameritrade.oauth.exceptions import (
    InvalidStateError,
    MissingCodeError,
    MissingStateError,
    RandomnessUnavailableError,
    TokenExchangeError,
    TokenNotAvailableError,
    TokenStorageError,
)
from tdameritrade.oauth.token_exchange import TokenExchanger
from tdameritrade.oauth.token_storage import SESSION_COOKIE, FileCredentialStore, MemoryCredentialStore


def _callback(**params):
    """Callback request with the given query parameters."""
    return SimpleNamespace(args=params, cookies={})


@pytest.fixture
def config():
    return TDAmeritradeOAuthConfig(
        client_id="CLIENTID",
        authorization_url="https://auth.example.com/auth",
        redirect_uri="https://localhost:8080/callback",
    )


@pytest.fixture
def store():
    """Mock credential store with a stored state of "state"."""
    store = mock.Mock(spec=MemoryCredentialStore)
    store.get_state.return_value = "state"
    return store


@pytest.fixture
def exchanger(sample_token):
    exchanger = mock.Mock(spec=TokenExchanger)
    exchanger.exchange.return_value = sample_token
    return exchanger


@pytest.fixture
def authenticator(store, config, exchanger):
    return Authenticator(store, config, exchanger=exchanger)


class TestAuthenticatorConstruction:
    """Tests for building an Authenticator."""

    def test_raw_constructor_keeps_client_id(self, store, config):
        """The constructor uses the client ID unmodified."""
        authenticator = Authenticator(store, config)

        assert authenticator.config.client_id == "CLIENTID"
        assert authenticator.exchanger.config.client_id == "CLIENTID"

    def test_create_appends_suffix_once(self, store, config):
        """create() appends @AMER.OAUTHAP to the client ID."""
        authenticator = Authenticator.create(store, config)

        assert authenticator.config.client_id == "CLIENTID@AMER.OAUTHAP"
        assert authenticator.exchanger.config.client_id == "CLIENTID@AMER.OAUTHAP"

        again = Authenticator.create(store, authenticator.config)
        assert again.config.client_id == "CLIENTID@AMER.OAUTHAP"

    def test_create_url_uses_suffixed_client_id(self, store, config):
        """URLs built by a created Authenticator carry the suffix."""
        url = Authenticator.create(store, config).start_oauth2_flow(None, _callback())

        assert parse_qs(urlparse(url).query)["client_id"] == ["CLIENTID@AMER.OAUTHAP"]


class TestStartOAuth2Flow:
    """Tests for start_oauth2_flow."""

    def test_url_matches_configuration(self, authenticator):
        """The URL points at the authorization endpoint with the configured values."""
        url = authenticator.start_oauth2_flow(None, _callback())

        parsed = urlparse(url)
        params = parse_qs(parsed.query)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://auth.example.com/auth"
        # Raw constructor: no suffix
        assert params["client_id"] == ["CLIENTID"]
        assert params["redirect_uri"] == ["https://localhost:8080/callback"]
        assert params["response_type"] == ["code"]
        assert params["state"][0]

    def test_state_is_stored(self, authenticator, store):
        """The state in the URL is the one handed to the store."""
        response, request = object(), _callback()

        url = authenticator.start_oauth2_flow(response, request)

        state = parse_qs(urlparse(url).query)["state"][0]
        store.store_state.assert_called_once_with(state, response, request)

    def test_state_differs_between_calls(self, authenticator):
        """Each login attempt gets a fresh state."""
        first = parse_qs(urlparse(authenticator.start_oauth2_flow(None, _callback())).query)
        second = parse_qs(urlparse(authenticator.start_oauth2_flow(None, _callback())).query)

        assert first["state"] != second["state"]

    def test_store_failure_propagates(self, authenticator, store):
        """A failing store aborts the flow."""
        store.store_state.side_effect = TokenStorageError("disk full")

        with pytest.raises(TokenStorageError, match="disk full"):
            authenticator.start_oauth2_flow(None, _callback())

    @mock.patch("tdameritrade.oauth.authenticator.generate_state")
    def test_randomness_failure_propagates(self, mock_generate_state, authenticator, store):
        """Without secure randomness no state is stored and no URL is built."""
        mock_generate_state.side_effect = RandomnessUnavailableError("no entropy")

        with pytest.raises(RandomnessUnavailableError, match="no entropy"):
            authenticator.start_oauth2_flow(None, _callback())

        store.store_state.assert_not_called()


class TestFinishOAuth2Flow:
    """Tests for finish_oauth2_flow."""

    def test_missing_code(self, authenticator, store, exchanger):
        """A callback without code fails before state is looked at."""
        with pytest.raises(MissingCodeError) as exc_info:
            authenticator.finish_oauth2_flow(None, _callback(state="state"))

        assert str(exc_info.value) == "missing code in request from TD Ameritrade"
        store.get_state.assert_not_called()
        exchanger.exchange.assert_not_called()

    def test_missing_code_and_state(self, authenticator):
        """Missing code is reported even when state is missing too."""
        with pytest.raises(MissingCodeError):
            authenticator.finish_oauth2_flow(None, _callback())

    def test_empty_code(self, authenticator, store):
        """An empty code counts as missing and no client is returned."""
        result = None
        with pytest.raises(MissingCodeError, match="^missing code in request from TD Ameritrade$"):
            result = authenticator.finish_oauth2_flow(None, _callback(code="", state="state"))

        assert result is None
        store.store_token.assert_not_called()

    def test_missing_state(self, authenticator, store, exchanger):
        """A callback with code but no state fails with MissingStateError."""
        with pytest.raises(MissingStateError) as exc_info:
            authenticator.finish_oauth2_flow(None, _callback(code="code"))

        assert str(exc_info.value) == "missing state in request from TD Ameritrade"
        store.get_state.assert_not_called()
        exchanger.exchange.assert_not_called()

    def test_no_stored_state(self, authenticator, store, exchanger):
        """An empty stored state is never treated as a match."""
        store.get_state.return_value = ""

        with pytest.raises(MissingStateError):
            authenticator.finish_oauth2_flow(None, _callback(code="code", state="state"))

        exchanger.exchange.assert_not_called()

    def test_invalid_state(self, authenticator, store, exchanger):
        """A mismatched state reports both values."""
        with pytest.raises(InvalidStateError) as exc_info:
            authenticator.finish_oauth2_flow(None, _callback(code="code", state="invalid"))

        assert str(exc_info.value) == "invalid state. expected: 'state', got 'invalid'"
        exchanger.exchange.assert_not_called()
        store.store_token.assert_not_called()

    def test_success(self, authenticator, store, exchanger, sample_token):
        """A valid callback exchanges the code, stores the token once and returns a client."""
        response, request = object(), _callback(code="code", state="state")

        client = authenticator.finish_oauth2_flow(response, request)

        exchanger.exchange.assert_called_once_with("code", timeout=None)
        store.store_token.assert_called_once_with(sample_token, response, request)
        assert isinstance(client, TDAmeritradeClient)
        assert isinstance(client.session.auth, BearerAuth)
        assert client.session.auth.token is sample_token

    def test_timeout_is_passed_to_exchange(self, authenticator, exchanger):
        """The caller's deadline bounds the token exchange."""
        authenticator.finish_oauth2_flow(None, _callback(code="code", state="state"), timeout=3)

        exchanger.exchange.assert_called_once_with("code", timeout=3)

    def test_exchange_failure(self, authenticator, store, exchanger):
        """A failed exchange stores nothing."""
        exchanger.exchange.side_effect = TokenExchangeError("denied")

        with pytest.raises(TokenExchangeError, match="denied"):
            authenticator.finish_oauth2_flow(None, _callback(code="code", state="state"))

        store.store_token.assert_not_called()

    def test_store_failure(self, authenticator, store):
        """A store failure while reading the state propagates unchanged."""
        store.get_state.side_effect = TokenStorageError("bad cookie")

        with pytest.raises(TokenStorageError, match="bad cookie"):
            authenticator.finish_oauth2_flow(None, _callback(code="code", state="state"))

    def test_token_store_failure_propagates(self, authenticator, store, exchanger, sample_token):
        """A failure storing the exchanged token propagates and no client is returned."""
        store.store_token.side_effect = TokenStorageError("Failed to save tokens: disk full")
        result = None

        with pytest.raises(TokenStorageError, match="disk full"):
            result = authenticator.finish_oauth2_flow(None, _callback(code="code", state="state"))

        assert result is None
        exchanger.exchange.assert_called_once_with("code", timeout=None)
        store.store_token.assert_called_once()

    def test_custom_provider_name(self, store, config):
        """Error messages use the configured provider name."""
        authenticator = Authenticator(store, config, provider_name="Example Broker")

        with pytest.raises(MissingCodeError, match="from Example Broker"):
            authenticator.finish_oauth2_flow(None, _callback())


class TestEndToEnd:
    """Flow scenarios with a real credential store."""

    @pytest.fixture
    def file_authenticator(self, tmp_path, config, exchanger):
        store = FileCredentialStore(str(tmp_path / "tokens.json"))
        return Authenticator(store, config, exchanger=exchanger)

    def test_invalid_state_scenario(self, file_authenticator, make_request):
        """Stored "state" against callback state "invalid"."""
        session = {SESSION_COOKIE: "session"}
        file_authenticator.store.store_state("state", Response(), make_request(cookies=session))

        callback = make_request(query={"code": "code", "state": "invalid"}, cookies=session)
        with pytest.raises(InvalidStateError) as exc_info:
            file_authenticator.finish_oauth2_flow(Response(), callback)

        assert str(exc_info.value) == "invalid state. expected: 'state', got 'invalid'"

    def test_empty_code_scenario(self, file_authenticator, make_request):
        """Stored "state" against a callback with an empty code."""
        session = {SESSION_COOKIE: "session"}
        file_authenticator.store.store_state("state", Response(), make_request(cookies=session))

        callback = make_request(query={"code": "", "state": "state"}, cookies=session)
        with pytest.raises(MissingCodeError) as exc_info:
            file_authenticator.finish_oauth2_flow(Response(), callback)

        assert str(exc_info.value) == "missing code in request from TD Ameritrade"

    def test_full_flow(self, file_authenticator, exchanger, sample_token, make_request, response_cookies):
        """Start, finish and reuse the stored token."""
        response = Response()
        url = file_authenticator.start_oauth2_flow(response, make_request())
        state = parse_qs(urlparse(url).query)["state"][0]
        cookies = response_cookies(response)

        callback = make_request(query={"code": "code", "state": state}, cookies=cookies)
        file_authenticator.finish_oauth2_flow(Response(), callback)
        client = file_authenticator.authenticated_client(make_request())

        assert client.session.auth.token == sample_token
        # The state is single use
        with pytest.raises(MissingStateError):
            file_authenticator.finish_oauth2_flow(Response(), callback)

    def test_state_from_another_session_is_rejected(self, file_authenticator, exchanger, make_request, response_cookies):
        """A callback carrying someone else's state fails without an exchange."""
        attacker_response = Response()
        attacker_url = file_authenticator.start_oauth2_flow(attacker_response, make_request())
        attacker_state = parse_qs(urlparse(attacker_url).query)["state"][0]

        victim_response = Response()
        file_authenticator.start_oauth2_flow(victim_response, make_request())
        victim_cookies = response_cookies(victim_response)

        callback = make_request(query={"code": "code", "state": attacker_state}, cookies=victim_cookies)
        with pytest.raises(InvalidStateError):
            file_authenticator.finish_oauth2_flow(Response(), callback)

        exchanger.exchange.assert_not_called()
        assert not file_authenticator.store.exists()


class TestAuthenticatedClient:
    """Tests for authenticated_client."""

    def test_returns_client_for_stored_token(self, authenticator, store, sample_token):
        """A stored token yields a bearer client."""
        store.get_token.return_value = sample_token

        client = authenticator.authenticated_client(_callback())

        assert isinstance(client, TDAmeritradeClient)
        assert client.session.auth.token is sample_token

    def test_no_token(self, authenticator, store):
        """Without a stored token TokenNotAvailableError is raised."""
        store.get_token.return_value = None

        with pytest.raises(TokenNotAvailableError):
            authenticator.authenticated_client(_callback())
