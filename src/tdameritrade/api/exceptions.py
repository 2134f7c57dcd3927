"""Exceptions for TD Ameritrade API client."""

from typing import Optional


class TDAmeritradeAPIError(Exception):
    """
    Base exception for TD Ameritrade API errors.

    Attributes:
        status_code: HTTP status of the failed response, if there was one
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TDAmeritradeAuthenticationError(TDAmeritradeAPIError):
    """
    Authentication failure with TD Ameritrade API (401).

    The access token is invalid, expired, or revoked. Tokens are not
    refreshed automatically; the user needs to log in again.
    """

    pass


class TDAmeritradeRateLimitError(TDAmeritradeAPIError):
    """API rate limit exceeded."""

    pass


class TDAmeritradeNotFoundError(TDAmeritradeAPIError):
    """Invalid or unknown symbol, account, or resource."""

    pass


class UnsupportedAssetTypeError(TDAmeritradeAPIError):
    """An instrument carried an assetType this client cannot decode."""

    def __init__(self, asset_type: str):
        super().__init__(f"unsupported type {asset_type}")
        self.asset_type = asset_type
