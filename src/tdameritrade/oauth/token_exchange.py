"""
Token exchange for TD Ameritrade OAuth integration.

This module trades an authorization code for an access/refresh token
pair using the standard Authorization Code grant. There is no refresh
logic and no retrying: a failed exchange is reported to the caller,
who decides whether to start a new login.
"""

import logging
from base64 import b64encode
from datetime import datetime, timezone
from typing import Dict, Optional

import requests

from .config import TDAmeritradeOAuthConfig
from .exceptions import TokenExchangeError, TokenExchangeTimeoutError
from .token_storage import TokenData

logger = logging.getLogger(__name__)


class TokenExchanger:
    """
    Exchanges authorization codes at the TD Ameritrade token endpoint.

    Args:
        config: OAuth configuration
        session: Optional requests session (a new one is created if omitted)
    """

    def __init__(
        self,
        config: TDAmeritradeOAuthConfig,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/x-www-form-urlencoded"}
        if self.config.client_secret:
            credentials = f"{self.config.client_id}:{self.config.client_secret}"
            headers["Authorization"] = f"Basic {b64encode(credentials.encode()).decode()}"
        return headers

    def exchange(self, authorization_code: str, timeout: Optional[float] = None) -> TokenData:
        """
        Exchange authorization code for access and refresh tokens.

        Args:
            authorization_code: Code received in the OAuth callback
            timeout: Seconds to wait for the connection and for each read
                     (defaults to config.request_timeout); not a limit
                     on the total duration of the call

        Returns:
            TokenData with access and refresh tokens

        Raises:
            TokenExchangeTimeoutError: If connecting or a read times out
            TokenExchangeError: If the exchange fails
        """
        logger.info("Exchanging authorization code for tokens")

        wait = timeout if timeout is not None else self.config.request_timeout

        try:
            response = self.session.post(
                self.config.token_url,
                headers=self._headers(),
                data={
                    "grant_type": "authorization_code",
                    "access_type": "offline",
                    "code": authorization_code,
                    "client_id": self.config.client_id,
                    "redirect_uri": self.config.redirect_uri,
                },
                timeout=wait,
            )
        except requests.Timeout as e:
            logger.error(f"Token exchange timed out after {wait}s")
            raise TokenExchangeTimeoutError(
                f"Token exchange timed out (timeout={wait}s)"
            ) from e
        except requests.RequestException as e:
            logger.error(f"Network error during token exchange: {e}")
            raise TokenExchangeError(f"Network error during token exchange: {e}") from e

        if response.status_code != 200:
            logger.error(
                f"Token exchange failed: {response.status_code} - {response.text}"
            )
            raise TokenExchangeError(
                f"Token exchange failed with status {response.status_code}: {response.text}"
            )

        try:
            data = response.json()
            token_data = TokenData(
                access_token=data["access_token"],
                refresh_token=data.get("refresh_token", ""),
                token_type=data.get("token_type", "Bearer"),
                expires_in=int(data["expires_in"]),
                scope=data.get("scope", ""),
                issued_at=datetime.now(timezone.utc).isoformat(),
                refresh_token_expires_in=data.get("refresh_token_expires_in"),
            )
        except (KeyError, ValueError, TypeError) as e:
            logger.error(f"Invalid response from token endpoint: {e}")
            raise TokenExchangeError(
                f"Invalid response from token endpoint: {e}"
            ) from e

        logger.info("Successfully obtained tokens")
        return token_data
