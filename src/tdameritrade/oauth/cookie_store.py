"""
Signed-cookie credential store.

Keeps the OAuth state and token pair in browser cookies signed with
itsdangerous, so a multi-process web deployment needs no server-side
session storage. Cookies are signed, not encrypted: the token pair is
readable by the browser that holds it but cannot be forged or altered.
"""

import logging
from typing import Any, Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .exceptions import TokenStorageError
from .token_storage import STATE_MAX_AGE_SECONDS, TokenData

logger = logging.getLogger(__name__)

STATE_COOKIE = "tda_state"
TOKEN_COOKIE = "tda_token"


class SignedCookieStore:
    """
    CredentialStore backed by signed cookies.

    Args:
        secret_key: Key used to sign cookie values
        salt: Namespace for the signatures
        secure: Only send cookies over HTTPS
    """

    def __init__(
        self,
        secret_key: str,
        salt: str = "tdameritrade-oauth",
        secure: bool = True,
    ):
        if not secret_key:
            raise ValueError("secret_key cannot be empty")
        self.serializer = URLSafeTimedSerializer(secret_key, salt=salt)
        self.secure = secure

    def _set_cookie(self, response: Any, name: str, value: str, max_age: Optional[int]) -> None:
        response.set_cookie(
            name,
            value,
            max_age=max_age,
            httponly=True,
            secure=self.secure,
            samesite="Lax",
        )

    def _load(self, request: Any, name: str, max_age: Optional[int] = None) -> Any:
        raw = request.cookies.get(name)
        if not raw:
            return None
        try:
            return self.serializer.loads(raw, max_age=max_age)
        except SignatureExpired:
            # Stale but genuine; treat as absent
            logger.info(f"Ignoring expired {name} cookie")
            return None
        except BadSignature as e:
            logger.warning(f"Rejected {name} cookie: {e}")
            raise TokenStorageError(f"Invalid {name} cookie: {e}") from e

    def store_state(self, state: str, response: Any, request: Any) -> None:
        self._set_cookie(
            response, STATE_COOKIE, self.serializer.dumps(state), STATE_MAX_AGE_SECONDS
        )

    def get_state(self, request: Any) -> str:
        state = self._load(request, STATE_COOKIE, max_age=STATE_MAX_AGE_SECONDS)
        return state or ""

    def store_token(self, token: TokenData, response: Any, request: Any) -> None:
        self._set_cookie(
            response,
            TOKEN_COOKIE,
            self.serializer.dumps(token.to_dict()),
            token.refresh_token_expires_in,
        )
        # The state has served its purpose once a token is issued
        response.delete_cookie(STATE_COOKIE)
        logger.debug("Stored token cookie")

    def get_token(self, request: Any) -> Optional[TokenData]:
        data = self._load(request, TOKEN_COOKIE)
        if data is None:
            return None
        try:
            return TokenData.from_dict(data)
        except (KeyError, TypeError) as e:
            raise TokenStorageError(f"Malformed token cookie: {e}") from e
