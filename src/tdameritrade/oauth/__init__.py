"""
OAuth 2.0 module for TD Ameritrade API integration.

This module implements the OAuth 2.0 Authorization Code flow used to log
users in to TD Ameritrade, with CSRF protection through a random state
that is round-tripped via a pluggable credential store.

Public API:
    TDAmeritradeOAuthConfig: OAuth configuration management
    Authenticator: Starts and finishes the login flow
    CredentialStore: Contract for persisting state and tokens
    MemoryCredentialStore: Session-cookie keyed in-memory store
    FileCredentialStore: Single-user JSON file store
    SignedCookieStore: itsdangerous-signed cookie store
    TokenData: Token data structure
    TokenExchanger: Authorization code to token exchange

Exceptions:
    TDAmeritradeOAuthError: Base exception
    ConfigurationError: Configuration error
    RandomnessUnavailableError: No secure randomness for the state
    TokenStorageError: Credential store operation failed
    AuthorizationError: Callback validation error
    MissingCodeError: Callback without code
    MissingStateError: Callback or store without state
    InvalidStateError: Callback state mismatch
    TokenExchangeError: Token exchange failed
    TokenExchangeTimeoutError: Token exchange connect or read timed out
    TokenNotAvailableError: No stored tokens
"""

from .authenticator import Authenticator
from .authorization import build_authorization_url
from .config import ACCOUNT_SUFFIX, TDAmeritradeOAuthConfig
from .cookie_store import SignedCookieStore
from .exceptions import (
    AuthorizationError,
    ConfigurationError,
    InvalidStateError,
    MissingCodeError,
    MissingStateError,
    RandomnessUnavailableError,
    TDAmeritradeOAuthError,
    TokenExchangeError,
    TokenExchangeTimeoutError,
    TokenNotAvailableError,
    TokenStorageError,
)
from .state import generate_state
from .token_exchange import TokenExchanger
from .token_storage import (
    CredentialStore,
    FileCredentialStore,
    MemoryCredentialStore,
    TokenData,
)

__all__ = [
    # Configuration
    "ACCOUNT_SUFFIX",
    "TDAmeritradeOAuthConfig",
    # Flow
    "Authenticator",
    "build_authorization_url",
    "generate_state",
    "TokenExchanger",
    # Storage
    "CredentialStore",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "SignedCookieStore",
    "TokenData",
    # Exceptions
    "TDAmeritradeOAuthError",
    "ConfigurationError",
    "RandomnessUnavailableError",
    "TokenStorageError",
    "AuthorizationError",
    "MissingCodeError",
    "MissingStateError",
    "InvalidStateError",
    "TokenExchangeError",
    "TokenExchangeTimeoutError",
    "TokenNotAvailableError",
]
