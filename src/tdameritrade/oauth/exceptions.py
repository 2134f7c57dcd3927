"""
OAuth exception classes for TD Ameritrade API integration.

This module defines the exception hierarchy for every failure the login
flow can report. Each error is raised straight back to the caller of
the Authenticator; nothing here is retried or swallowed.
"""

DEFAULT_PROVIDER_NAME = "TD Ameritrade"


class TDAmeritradeOAuthError(Exception):
    """Base exception for all TD Ameritrade OAuth errors."""

    pass


class ConfigurationError(TDAmeritradeOAuthError):
    """OAuth configuration error (missing or invalid configuration)."""

    pass


class RandomnessUnavailableError(TDAmeritradeOAuthError):
    """The secure random source could not supply entropy for the state."""

    pass


class TokenStorageError(TDAmeritradeOAuthError):
    """A credential store operation failed."""

    pass


class AuthorizationError(TDAmeritradeOAuthError):
    """The authorization callback failed validation."""

    pass


class MissingCodeError(AuthorizationError):
    """The callback request carried no authorization code."""

    def __init__(self, provider: str = DEFAULT_PROVIDER_NAME):
        super().__init__(f"missing code in request from {provider}")
        self.provider = provider


class MissingStateError(AuthorizationError):
    """
    The callback carried no state, or no state was stored for the session.

    Both cases indicate a possible CSRF attempt (or a store that does not
    honour the state round-trip) and are rejected the same way.
    """

    def __init__(self, provider: str = DEFAULT_PROVIDER_NAME):
        super().__init__(f"missing state in request from {provider}")
        self.provider = provider


class InvalidStateError(AuthorizationError):
    """
    The callback state does not match the state stored for the session.

    Attributes:
        expected: State previously stored by start_oauth2_flow
        got: State received in the callback request
    """

    def __init__(self, expected: str, got: str):
        super().__init__(f"invalid state. expected: '{expected}', got '{got}'")
        self.expected = expected
        self.got = got


class TokenExchangeError(TDAmeritradeOAuthError):
    """Failed to exchange authorization code for tokens."""

    pass


class TokenExchangeTimeoutError(TokenExchangeError):
    """Connecting to the token endpoint or reading its reply timed out."""

    pass


class TokenNotAvailableError(TDAmeritradeOAuthError):
    """No stored tokens available (need to authorize first)."""

    pass
