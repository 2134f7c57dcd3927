"""
TD Ameritrade API client.

Log users in with tdameritrade.oauth.Authenticator and call the API with
the TDAmeritradeClient it returns.
"""

from .api import TDAmeritradeClient, new_authenticated_client
from .oauth import Authenticator, TDAmeritradeOAuthConfig

__version__ = "0.1.0"

__all__ = [
    "Authenticator",
    "TDAmeritradeClient",
    "TDAmeritradeOAuthConfig",
    "new_authenticated_client",
]
