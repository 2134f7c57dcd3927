"""CSRF state generation for the OAuth authorization request."""

import base64
import logging
import secrets

from .exceptions import RandomnessUnavailableError

logger = logging.getLogger(__name__)

# 32 bytes = 256 bits of entropy
STATE_NUM_BYTES = 32


def generate_state(nbytes: int = STATE_NUM_BYTES) -> str:
    """
    Generate an unguessable, URL-safe state value.

    State generation is never left to callers: the value is drawn from
    the operating system's secure random source and encoded as unpadded
    URL-safe base64.

    Args:
        nbytes: Number of random bytes (minimum 32)

    Returns:
        Opaque state string

    Raises:
        RandomnessUnavailableError: If the secure random source fails
    """
    if nbytes < STATE_NUM_BYTES:
        raise ValueError(f"state needs at least {STATE_NUM_BYTES} bytes, got {nbytes}")

    try:
        raw = secrets.token_bytes(nbytes)
    except (OSError, NotImplementedError) as e:
        logger.error(f"Secure random source unavailable: {e}")
        raise RandomnessUnavailableError(
            f"Could not generate OAuth state: {e}"
        ) from e

    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")
