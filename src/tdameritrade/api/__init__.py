"""
TD Ameritrade API client module.

This module provides access to TD Ameritrade's REST API. It includes:

- TDAmeritradeClient: HTTP client for API calls
- new_authenticated_client: client carrying a bearer access token
- Data models: Account, Position, instruments, PriceHistory, Transaction

Obtain an authenticated client through tdameritrade.oauth.Authenticator.
"""

from .client import BASE_URL, BearerAuth, TDAmeritradeClient, new_authenticated_client
from .exceptions import (
    TDAmeritradeAPIError,
    TDAmeritradeAuthenticationError,
    TDAmeritradeNotFoundError,
    TDAmeritradeRateLimitError,
    UnsupportedAssetTypeError,
)
from .models import (
    Account,
    Balances,
    Candle,
    CashEquivalent,
    Equity,
    FixedIncome,
    InstrumentInfo,
    MutualFund,
    Option,
    OptionDeliverable,
    Position,
    PriceHistory,
    Transaction,
    TransactionInstrument,
    TransactionItem,
)
from .parsers import instrument_to_dict, parse_instrument

__all__ = [
    # Client
    "BASE_URL",
    "BearerAuth",
    "TDAmeritradeClient",
    "new_authenticated_client",
    # Models
    "Account",
    "Balances",
    "Candle",
    "CashEquivalent",
    "Equity",
    "FixedIncome",
    "InstrumentInfo",
    "MutualFund",
    "Option",
    "OptionDeliverable",
    "Position",
    "PriceHistory",
    "Transaction",
    "TransactionInstrument",
    "TransactionItem",
    "parse_instrument",
    "instrument_to_dict",
    # Exceptions
    "TDAmeritradeAPIError",
    "TDAmeritradeAuthenticationError",
    "TDAmeritradeNotFoundError",
    "TDAmeritradeRateLimitError",
    "UnsupportedAssetTypeError",
]
