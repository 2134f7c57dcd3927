"""
Authenticator for TD Ameritrade's OAuth 2.0 Authorization Code flow.

The login happens in two steps:

1. start_oauth2_flow generates a random state, persists it through the
   credential store and returns the URL the user must be redirected to.
2. finish_oauth2_flow handles the callback: it verifies the returned
   state against the stored one (CSRF protection), exchanges the code
   for tokens, persists them and returns an authenticated client.

The Authenticator holds only immutable configuration. Everything that
ties a callback to its login attempt lives in the credential store, so
one instance can serve many concurrent logins.
"""

import logging
from typing import Any, Optional

from ..api.client import TDAmeritradeClient, new_authenticated_client
from .authorization import build_authorization_url
from .config import TDAmeritradeOAuthConfig
from .exceptions import (
    DEFAULT_PROVIDER_NAME,
    InvalidStateError,
    MissingCodeError,
    MissingStateError,
    TokenNotAvailableError,
)
from .state import generate_state
from .token_exchange import TokenExchanger
from .token_storage import CredentialStore

logger = logging.getLogger(__name__)


class Authenticator:
    """
    Helper for TD Ameritrade's authentication.

    Prefer Authenticator.create over the constructor: TD Ameritrade
    requires client IDs in the form clientid@AMER.OAUTHAP, which create
    takes care of. The constructor uses the configuration as given.

    Args:
        store: Credential store persisting state and tokens between requests
        config: OAuth configuration
        exchanger: Token exchanger (built from config if omitted)
        provider_name: Provider name used in error messages
    """

    def __init__(
        self,
        store: CredentialStore,
        config: TDAmeritradeOAuthConfig,
        exchanger: Optional[TokenExchanger] = None,
        provider_name: str = DEFAULT_PROVIDER_NAME,
    ):
        self.store = store
        self.config = config
        self.exchanger = exchanger or TokenExchanger(config)
        self.provider_name = provider_name

    @classmethod
    def create(
        cls,
        store: CredentialStore,
        config: TDAmeritradeOAuthConfig,
        exchanger: Optional[TokenExchanger] = None,
        provider_name: str = DEFAULT_PROVIDER_NAME,
    ) -> "Authenticator":
        """Build an Authenticator whose client ID carries the @AMER.OAUTHAP suffix."""
        config = config.with_account_suffix()
        if exchanger is None:
            exchanger = TokenExchanger(config)
        return cls(store, config, exchanger=exchanger, provider_name=provider_name)

    def start_oauth2_flow(self, response: Any, request: Any) -> str:
        """
        Store a random state value and return TD Ameritrade's auth URL.

        Redirect users to the returned URL to begin authentication.

        Args:
            response: Outgoing response (handed to the store, e.g. for cookies)
            request: Incoming request

        Returns:
            Authorization URL including the state

        Raises:
            RandomnessUnavailableError: If no secure state could be generated
            TokenStorageError: If the state could not be stored
        """
        state = generate_state()
        self.store.store_state(state, response, request)
        logger.info("Started OAuth2 flow")
        return build_authorization_url(self.config, state)

    def finish_oauth2_flow(
        self, response: Any, request: Any, timeout: Optional[float] = None
    ) -> TDAmeritradeClient:
        """
        Finish authenticating a user returning from TD Ameritrade.

        The checks run in a fixed order so that the cheapest failure is
        reported first: code, state, stored state, state comparison. Tokens
        are only exchanged and stored once every check has passed.

        Args:
            response: Outgoing response (handed to the store)
            request: Callback request carrying code and state query parameters
            timeout: Connect and read timeout in seconds for the token exchange

        Returns:
            Authenticated TDAmeritradeClient

        Raises:
            MissingCodeError: If the callback carries no code
            MissingStateError: If the callback or the store has no state
            InvalidStateError: If the callback state does not match
            TokenStorageError: If the store fails
            TokenExchangeError: If the code could not be exchanged
        """
        code = request.args.get("code")
        if not code:
            logger.warning("OAuth callback without code")
            raise MissingCodeError(self.provider_name)

        state = request.args.get("state")
        if not state:
            logger.warning("OAuth callback without state")
            raise MissingStateError(self.provider_name)

        expected_state = self.store.get_state(request)

        # Only reachable with a store that drops states or a flow that
        # skipped start_oauth2_flow. Never treat it as a match.
        if not expected_state:
            logger.warning("No stored OAuth state for this session")
            raise MissingStateError(self.provider_name)

        if state != expected_state:
            logger.warning("OAuth callback state mismatch")
            raise InvalidStateError(expected_state, state)

        token = self.exchanger.exchange(code, timeout=timeout)
        self.store.store_token(token, response, request)

        logger.info("Finished OAuth2 flow")
        return new_authenticated_client(token)

    def authenticated_client(self, request: Any) -> TDAmeritradeClient:
        """
        Create an authenticated client from a user's stored token.

        Raises:
            TokenNotAvailableError: If no token is stored for the user
            TokenStorageError: If the store fails
        """
        token = self.store.get_token(request)
        if token is None:
            raise TokenNotAvailableError(
                "No tokens available. Run the authorization flow first."
            )
        return new_authenticated_client(token)
