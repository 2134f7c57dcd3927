"""Authorization URL construction."""

import logging
from urllib.parse import urlencode

from .config import TDAmeritradeOAuthConfig

logger = logging.getLogger(__name__)


def build_authorization_url(config: TDAmeritradeOAuthConfig, state: str) -> str:
    """
    Generate the TD Ameritrade authorization URL.

    Args:
        config: OAuth configuration
        state: CSRF state previously persisted for the session

    Returns:
        Complete authorization URL with query parameters
    """
    params = {
        "client_id": config.client_id,
        "redirect_uri": config.redirect_uri,
        "response_type": "code",
        "state": state,
    }
    url = f"{config.authorization_url}?{urlencode(params)}"
    logger.debug(f"Generated authorization URL for client {config.client_id}")
    return url
