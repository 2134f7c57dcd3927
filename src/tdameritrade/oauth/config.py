"""
OAuth configuration for TD Ameritrade API integration.

This module provides configuration management for the OAuth 2.0
Authorization Code flow. Configuration can be loaded from environment
variables or provided programmatically.
"""

import os
from dataclasses import dataclass, replace
from typing import Optional

from .exceptions import ConfigurationError

# TD Ameritrade requires client IDs in the form <id>@AMER.OAUTHAP.
# See https://developer.tdameritrade.com/content/authentication-faq
ACCOUNT_SUFFIX = "@AMER.OAUTHAP"

DEFAULT_AUTHORIZATION_URL = "https://auth.tdameritrade.com/auth"
DEFAULT_TOKEN_URL = "https://api.tdameritrade.com/v1/oauth2/token"
DEFAULT_REDIRECT_URI = "https://localhost:8080/callback"
DEFAULT_TOKEN_FILE = "~/.tdameritrade/tokens.json"


@dataclass(frozen=True)
class TDAmeritradeOAuthConfig:
    """
    Configuration for the TD Ameritrade OAuth 2.0 flow.

    Instances are immutable so a single config can be shared by an
    Authenticator serving many concurrent logins.

    Attributes:
        client_id: Consumer key from the TD Ameritrade developer portal
        redirect_uri: Callback URL registered for the app
        authorization_url: TD Ameritrade authorization endpoint
        token_url: TD Ameritrade token endpoint
        client_secret: Optional secret (sent as HTTP Basic auth on exchange)
        token_file: Path used by the file-backed credential store
        request_timeout: Connect and read timeout in seconds for the token exchange
    """

    client_id: str
    redirect_uri: str = DEFAULT_REDIRECT_URI
    authorization_url: str = DEFAULT_AUTHORIZATION_URL
    token_url: str = DEFAULT_TOKEN_URL
    client_secret: Optional[str] = None
    token_file: str = DEFAULT_TOKEN_FILE
    request_timeout: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.client_id:
            raise ConfigurationError("client_id cannot be empty")

        if not self.redirect_uri:
            raise ConfigurationError("redirect_uri cannot be empty")

        if not self.authorization_url or not self.token_url:
            raise ConfigurationError("authorization_url and token_url are required")

        if self.request_timeout <= 0:
            raise ConfigurationError(
                f"request_timeout must be positive, got {self.request_timeout}"
            )

    def with_account_suffix(self) -> "TDAmeritradeOAuthConfig":
        """
        Return a copy whose client ID carries the @AMER.OAUTHAP suffix.

        The suffix is appended at most once; a client ID that already
        ends with it is returned unchanged.
        """
        if self.client_id.endswith(ACCOUNT_SUFFIX):
            return self
        return replace(self, client_id=self.client_id + ACCOUNT_SUFFIX)

    @property
    def token_path(self) -> str:
        """Token file path with ~ expanded."""
        return os.path.expanduser(self.token_file)

    @classmethod
    def from_env(cls) -> "TDAmeritradeOAuthConfig":
        """
        Load configuration from environment variables.

        Required environment variables:
            TDAMERITRADE_CLIENT_ID: Consumer key of the app

        Optional environment variables:
            TDAMERITRADE_REDIRECT_URI: Callback URL (default: https://localhost:8080/callback)
            TDAMERITRADE_CLIENT_SECRET: Client secret, if the app has one
            TDAMERITRADE_TOKEN_FILE: Token file path (default: ~/.tdameritrade/tokens.json)

        Returns:
            TDAmeritradeOAuthConfig instance

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        client_id = os.environ.get("TDAMERITRADE_CLIENT_ID")

        if not client_id:
            raise ConfigurationError(
                "Missing TD Ameritrade OAuth credentials. Set environment variable:\n"
                "  TDAMERITRADE_CLIENT_ID=your_consumer_key\n"
                "\n"
                "Get credentials from: https://developer.tdameritrade.com"
            )

        return cls(
            client_id=client_id,
            redirect_uri=os.environ.get("TDAMERITRADE_REDIRECT_URI", DEFAULT_REDIRECT_URI),
            client_secret=os.environ.get("TDAMERITRADE_CLIENT_SECRET") or None,
            token_file=os.environ.get("TDAMERITRADE_TOKEN_FILE", DEFAULT_TOKEN_FILE),
        )
