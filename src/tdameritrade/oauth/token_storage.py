"""
Credential storage for TD Ameritrade OAuth integration.

This module defines the token data structure and the CredentialStore
contract the Authenticator depends on, plus two ready-made stores:

- MemoryCredentialStore: per-session storage keyed by a session cookie,
  suitable for a single-process web app and for tests
- FileCredentialStore: session-bound login state like the memory store,
  with a single-user token persisted as plaintext JSON (chmod 600); used
  by the command line tool

Applications are free to provide their own store (signed cookies, JWTs,
a database, ...). Any object implementing the four CredentialStore
methods can be handed to the Authenticator.
"""

import json
import logging
import secrets
import threading
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Tuple, runtime_checkable

from .exceptions import TokenStorageError

logger = logging.getLogger(__name__)

SESSION_COOKIE = "tda_session"

# A login must be completed within this window
STATE_MAX_AGE_SECONDS = 600
MAX_PENDING_STATES = 10000


@dataclass
class TokenData:
    """
    Stored OAuth token data.

    Attributes:
        access_token: Short-lived access token for API calls
        refresh_token: Long-lived token for obtaining new access tokens
        token_type: Token type (typically "Bearer")
        expires_in: Access token lifetime in seconds from issue time
        scope: Granted OAuth scopes
        issued_at: ISO timestamp of when tokens were issued
        refresh_token_expires_in: Refresh token lifetime in seconds, if known
    """

    access_token: str
    refresh_token: str
    token_type: str  # "Bearer"
    expires_in: int  # seconds from issue
    scope: str
    issued_at: str  # ISO timestamp
    refresh_token_expires_in: Optional[int] = None

    @property
    def expires_at(self) -> datetime:
        """
        Calculate expiration datetime.

        Returns:
            Datetime when access token expires (timezone-aware UTC)
        """
        issued = datetime.fromisoformat(self.issued_at)
        # Ensure timezone-aware
        if issued.tzinfo is None:
            issued = issued.replace(tzinfo=timezone.utc)
        return issued + timedelta(seconds=self.expires_in)

    @property
    def is_expired(self) -> bool:
        """True if the access token has expired."""
        return datetime.now(timezone.utc) >= self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenData":
        """
        Create TokenData from dictionary.

        Raises:
            KeyError: If required fields are missing
            TypeError: If fields have wrong types
        """
        return cls(**data)


@runtime_checkable
class CredentialStore(Protocol):
    """
    Persists data from TD Ameritrade that is needed between requests.

    Implementations must return from get_state the same value they stored
    for a user in store_state, or the login process will fail. Binding
    values to a user session (cookie, header, JWT, ...) is entirely the
    store's responsibility.

    All methods may raise TokenStorageError.
    """

    def store_state(self, state: str, response: Any, request: Any) -> None:
        """Persist the CSRF state for the current session."""
        ...

    def get_state(self, request: Any) -> str:
        """Return the stored state, or an empty string if none was stored."""
        ...

    def store_token(self, token: TokenData, response: Any, request: Any) -> None:
        """Persist the token pair after a successful exchange."""
        ...

    def get_token(self, request: Any) -> Optional[TokenData]:
        """Return the stored token pair, or None if none was stored."""
        ...


class MemoryCredentialStore:
    """
    In-process credential store keyed by a session cookie.

    The first call to store_state issues a random session ID cookie on the
    response; later requests from the same browser are matched by that
    cookie. A stored state is removed when it is read, so each state can
    complete at most one login.

    Pending states expire after state_max_age seconds, and at most
    max_pending_states are kept; abandoned logins are dropped oldest first.
    """

    def __init__(
        self,
        cookie_name: str = SESSION_COOKIE,
        secure: bool = True,
        state_max_age: int = STATE_MAX_AGE_SECONDS,
        max_pending_states: int = MAX_PENDING_STATES,
    ):
        self.cookie_name = cookie_name
        self.secure = secure
        self.state_max_age = state_max_age
        self.max_pending_states = max_pending_states
        # session ID -> (state, monotonic time stored), oldest first
        self._states: Dict[str, Tuple[str, float]] = {}
        self._tokens: Dict[str, TokenData] = {}
        self._lock = threading.Lock()

    def _session_id(self, request: Any) -> Optional[str]:
        return request.cookies.get(self.cookie_name)

    def _ensure_session(self, response: Any, request: Any) -> str:
        session_id = self._session_id(request)
        if not session_id:
            session_id = secrets.token_urlsafe(32)
            response.set_cookie(
                self.cookie_name,
                session_id,
                httponly=True,
                secure=self.secure,
                samesite="Lax",
            )
            logger.debug("Issued new session cookie")
        return session_id

    def _purge_states(self, now: float) -> None:
        """Drop expired states, then the oldest ones beyond the cap. Caller holds the lock."""
        cutoff = now - self.state_max_age
        while self._states:
            oldest = next(iter(self._states))
            if self._states[oldest][1] > cutoff:
                break
            del self._states[oldest]

        dropped = 0
        while len(self._states) > self.max_pending_states:
            del self._states[next(iter(self._states))]
            dropped += 1
        if dropped:
            logger.warning(f"Dropped {dropped} pending login state(s) over the limit")

    def store_state(self, state: str, response: Any, request: Any) -> None:
        session_id = self._ensure_session(response, request)
        now = time.monotonic()
        with self._lock:
            # Re-insert so the map stays ordered by store time
            self._states.pop(session_id, None)
            self._states[session_id] = (state, now)
            self._purge_states(now)

    def get_state(self, request: Any) -> str:
        session_id = self._session_id(request)
        if not session_id:
            return ""
        with self._lock:
            entry = self._states.pop(session_id, None)
        if entry is None:
            return ""

        state, stored_at = entry
        if time.monotonic() - stored_at > self.state_max_age:
            logger.info("Login state expired")
            return ""
        return state

    def store_token(self, token: TokenData, response: Any, request: Any) -> None:
        session_id = self._ensure_session(response, request)
        with self._lock:
            self._tokens[session_id] = token

    def get_token(self, request: Any) -> Optional[TokenData]:
        session_id = self._session_id(request)
        if not session_id:
            return None
        with self._lock:
            return self._tokens.get(session_id)


class FileCredentialStore(MemoryCredentialStore):
    """
    File-based credential store for a single user (plaintext JSON).

    Tokens are written to token_file with user-only permissions. The CSRF
    state only needs to live for the duration of one login; it is kept in
    process memory bound to the browser's session cookie, exactly as in
    MemoryCredentialStore, and is consumed when read.

    The token file is shared by every session, so store_token and
    get_token ignore the request.
    """

    def __init__(
        self,
        token_file: str,
        cookie_name: str = SESSION_COOKIE,
        secure: bool = True,
        state_max_age: int = STATE_MAX_AGE_SECONDS,
        max_pending_states: int = MAX_PENDING_STATES,
    ):
        """
        Initialize token storage.

        Args:
            token_file: Path to token storage file
                       (e.g., ~/.tdameritrade/tokens.json)
            cookie_name: Name of the session cookie binding login state
            secure: Mark the session cookie Secure (HTTPS only)
            state_max_age: Seconds a pending login state stays valid
            max_pending_states: Cap on concurrently pending logins
        """
        super().__init__(
            cookie_name=cookie_name,
            secure=secure,
            state_max_age=state_max_age,
            max_pending_states=max_pending_states,
        )
        self.token_file = Path(token_file).expanduser()

    def _set_secure_permissions(self) -> None:
        """Set file permissions to user-only read/write (600)."""
        try:
            self.token_file.chmod(0o600)
            logger.debug(f"Set secure permissions (600) on {self.token_file}")
        except OSError as e:
            logger.warning(f"Could not set secure permissions: {e}")

    def store_token(self, token: TokenData, response: Any = None, request: Any = None) -> None:
        self.save(token)

    def get_token(self, request: Any = None) -> Optional[TokenData]:
        return self.load()

    def save(self, token_data: TokenData) -> None:
        """
        Save tokens to file.

        Args:
            token_data: Token data to save

        Raises:
            TokenStorageError: If save operation fails
        """
        try:
            self.token_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.token_file, "w") as f:
                json.dump(token_data.to_dict(), f, indent=2)

            self._set_secure_permissions()

            logger.info(f"Tokens saved to {self.token_file}")
        except OSError as e:
            logger.error(f"Failed to save tokens: {e}")
            raise TokenStorageError(f"Failed to save tokens: {e}") from e

    def load(self) -> Optional[TokenData]:
        """
        Load tokens from file.

        Returns:
            TokenData if file exists and is valid, None otherwise

        Raises:
            TokenStorageError: If the file exists but cannot be read
        """
        if not self.token_file.exists():
            logger.debug(f"No token file found at {self.token_file}")
            return None

        try:
            with open(self.token_file, "r") as f:
                data = json.load(f)
            token_data = TokenData.from_dict(data)
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(
                f"Invalid token file at {self.token_file}, "
                f"will need re-authorization: {e}"
            )
            return None
        except OSError as e:
            logger.error(f"Could not read token file: {e}")
            raise TokenStorageError(f"Could not read token file: {e}") from e

        logger.debug(f"Tokens loaded from {self.token_file}")
        return token_data

    def delete(self) -> bool:
        """
        Delete token file.

        Returns:
            True if file was deleted, False if file didn't exist
        """
        if not self.token_file.exists():
            logger.debug(f"Token file does not exist: {self.token_file}")
            return False

        try:
            self.token_file.unlink()
        except OSError as e:
            logger.error(f"Failed to delete token file: {e}")
            raise TokenStorageError(f"Failed to delete token file: {e}") from e

        logger.info(f"Token file deleted: {self.token_file}")
        return True

    def exists(self) -> bool:
        """True if the token file exists."""
        return self.token_file.exists()
