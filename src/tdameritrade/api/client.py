"""
TD Ameritrade API client.

This module provides the HTTP client for TD Ameritrade's REST API. It
handles:

- Bearer authentication through the session's auth hook
- URL building relative to the API base URL
- Error handling and logging (401, 404, 429 and other non-2xx responses)
- Thin accessors for market data (quotes, price history, option chains,
  hours, movers), instruments, accounts, orders and saved orders,
  transaction history, watchlists and user data

Tokens are never refreshed here and requests are never retried. An
expired access token surfaces as TDAmeritradeAuthenticationError.
"""

import logging
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Union
from urllib.parse import urljoin

import requests
from requests.auth import AuthBase

from . import endpoints
from .exceptions import (
    TDAmeritradeAPIError,
    TDAmeritradeAuthenticationError,
    TDAmeritradeNotFoundError,
    TDAmeritradeRateLimitError,
)
from .models import Account, InstrumentInfo, PriceHistory, Transaction
from .parsers import (
    parse_account,
    parse_instrument_info,
    parse_instrument_search,
    parse_price_history,
    parse_transaction,
)

if TYPE_CHECKING:
    from ..oauth.token_storage import TokenData

logger = logging.getLogger(__name__)

BASE_URL = "https://api.tdameritrade.com/v1/"

VALID_PERIOD_TYPES = ("day", "month", "year", "ytd")
VALID_FREQUENCY_TYPES = ("minute", "daily", "weekly", "monthly")
VALID_MOVER_DIRECTIONS = ("up", "down")
VALID_MOVER_CHANGES = ("value", "percent")
VALID_PROJECTIONS = ("symbol-search", "symbol-regex", "desc-search", "desc-regex", "fundamental")
VALID_TRANSACTION_TYPES = (
    "ALL", "TRADE", "BUY_ONLY", "SELL_ONLY", "CASH_IN_OR_CASH_OUT", "CHECKING",
    "DIVIDEND", "INTEREST", "OTHER", "ADVISOR_FEES",
)
VALID_ORDER_STATUSES = (
    "AWAITING_PARENT_ORDER", "AWAITING_CONDITION", "AWAITING_MANUAL_REVIEW", "ACCEPTED",
    "AWAITING_UR_OUT", "PENDING_ACTIVATION", "QUEUED", "WORKING", "REJECTED",
    "PENDING_CANCEL", "CANCELED", "PENDING_REPLACE", "REPLACED", "FILLED", "EXPIRED",
)


class BearerAuth(AuthBase):
    """Attaches the access token of a TokenData as a bearer credential."""

    def __init__(self, token: "TokenData"):
        self.token = token

    def __call__(self, r: requests.PreparedRequest) -> requests.PreparedRequest:
        r.headers["Authorization"] = f"Bearer {self.token.access_token}"
        return r


def _epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def _format_date(value: Union[date, datetime]) -> str:
    return value.strftime("%Y-%m-%d")


def _format_utc_date(value: Union[date, datetime]) -> str:
    """yyyy-MM-dd of the UTC day; aware datetimes are converted first."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%d")


class TDAmeritradeClient:
    """
    HTTP client for the TD Ameritrade API.

    To call methods which require authentication, provide a session that
    performs the authentication (see new_authenticated_client).

    Example:
        client = authenticator.authenticated_client(request)

        quotes = client.get_quotes("AAPL", "SPY")
        accounts = client.get_accounts(positions=True)

    Args:
        session: requests session used for all calls (a plain one if omitted)
        base_url: API base URL; must end with a slash
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
    ):
        self.session = session or requests.Session()
        self.base_url = ""
        self.update_base_url(base_url)
        self.timeout = timeout

    def update_base_url(self, base_url: str) -> None:
        """
        Point the client at a different API root (useful for testing).

        Raises:
            ValueError: If base_url has no trailing slash
        """
        if not base_url.endswith("/"):
            raise ValueError(f"base_url must have a trailing slash, but {base_url!r} does not")
        self.base_url = base_url

    def _get_full_url(self, endpoint: str) -> str:
        """Resolve an endpoint path relative to the base URL."""
        return urljoin(self.base_url, endpoint.lstrip("/"))

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Any] = None,
    ) -> requests.Response:
        """
        Make an HTTP request to the TD Ameritrade API.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            params: Query parameters
            json_data: Body, JSON encoded when given

        Returns:
            Response object (2xx only)

        Raises:
            TDAmeritradeAuthenticationError: If authentication fails (401)
            TDAmeritradeNotFoundError: If the resource is unknown (404)
            TDAmeritradeRateLimitError: If rate limit exceeded (429)
            TDAmeritradeAPIError: For other API and network errors
        """
        url = self._get_full_url(endpoint)

        # Log request (excluding sensitive headers)
        logger.debug(f"{method} {url}")
        if params:
            logger.debug(f"  Params: {params}")

        try:
            response = self.session.request(
                method,
                url,
                headers={"Accept": "application/json"},
                params=params,
                json=json_data,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"Request timeout: {method} {url}")
            raise TDAmeritradeAPIError("Request to TD Ameritrade API timed out") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Network error: {e}")
            raise TDAmeritradeAPIError(f"Network error: {e}") from e

        status = response.status_code

        if status == 401:
            logger.error(f"Authentication failed (401): {response.text}")
            raise TDAmeritradeAuthenticationError(
                "Authentication failed. The access token may be expired or revoked; "
                "log in again.",
                status_code=status,
            )

        if status == 404:
            logger.warning(f"Resource not found (404): {url}")
            raise TDAmeritradeNotFoundError(
                f"Resource not found. Check symbol or endpoint: {endpoint}",
                status_code=status,
            )

        if status == 429:
            logger.warning("Rate limit exceeded (429)")
            raise TDAmeritradeRateLimitError(
                "TD Ameritrade API rate limit exceeded. Please wait before retrying.",
                status_code=status,
            )

        if not 200 <= status <= 299:
            logger.error(f"API error ({status}): {response.text}")
            raise TDAmeritradeAPIError(response.text, status_code=status)

        logger.debug(f"Response: {status}")
        return response

    def _decode(self, response: requests.Response) -> Any:
        """Decode a JSON body; an empty body decodes to None."""
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TDAmeritradeAPIError(
                f"Invalid JSON in response: {e}", status_code=response.status_code
            ) from e

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Make a GET request and return the decoded JSON."""
        return self._decode(self._request("GET", endpoint, params=params))

    def post(
        self,
        endpoint: str,
        json_data: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Make a POST request and return the decoded JSON (None if empty)."""
        return self._decode(self._request("POST", endpoint, params=params, json_data=json_data))

    def put(self, endpoint: str, json_data: Optional[Any] = None) -> Any:
        """Make a PUT request and return the decoded JSON (None if empty)."""
        return self._decode(self._request("PUT", endpoint, json_data=json_data))

    def patch(self, endpoint: str, json_data: Optional[Any] = None) -> Any:
        """Make a PATCH request and return the decoded JSON (None if empty)."""
        return self._decode(self._request("PATCH", endpoint, json_data=json_data))

    def delete(self, endpoint: str) -> Any:
        """Make a DELETE request and return the decoded JSON (None if empty)."""
        return self._decode(self._request("DELETE", endpoint))

    # Market data

    def get_quotes(self, *symbols: str) -> Dict[str, Dict[str, Any]]:
        """
        Get quotes for one or more symbols.

        Returns:
            Mapping of symbol to quote data (lastPrice, bidPrice, askPrice, ...)

        Raises:
            ValueError: If no symbols are given
        """
        if not symbols:
            raise ValueError("no symbols present")

        logger.info(f"Fetching quotes for {', '.join(symbols)}")
        return self.get(endpoints.MARKETDATA_QUOTES, params={"symbol": ",".join(symbols)}) or {}

    def get_quote(self, symbol: str) -> Dict[str, Any]:
        """
        Get the quote for a single symbol.

        Raises:
            TDAmeritradeNotFoundError: If the symbol is not in the response
        """
        data = self.get(endpoints.MARKETDATA_QUOTE.format(symbol=symbol)) or {}
        quote = data.get(symbol)
        if not quote:
            raise TDAmeritradeNotFoundError(f"Symbol {symbol} not found in response")
        return quote

    def get_price_history(
        self,
        symbol: str,
        period_type: Optional[str] = None,
        period: Optional[int] = None,
        frequency_type: Optional[str] = None,
        frequency: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        need_extended_hours_data: Optional[bool] = None,
    ) -> PriceHistory:
        """
        Get historical price data for a symbol.

        Args:
            symbol: Stock symbol (e.g., "AAPL")
            period_type: "day", "month", "year" or "ytd"
            period: Number of periods
            frequency_type: "minute", "daily", "weekly" or "monthly"
            frequency: Frequency interval
            start_date: Start of the range (overrides period)
            end_date: End of the range
            need_extended_hours_data: Include extended hours candles

        Returns:
            PriceHistory with candles

        Raises:
            ValueError: If period_type or frequency_type is not valid
            TDAmeritradeAPIError: If the API returns no data
        """
        if period_type is not None and period_type not in VALID_PERIOD_TYPES:
            raise ValueError(
                f"invalid periodType, must have the value of one of the following "
                f"{list(VALID_PERIOD_TYPES)}"
            )
        if frequency_type is not None and frequency_type not in VALID_FREQUENCY_TYPES:
            raise ValueError(
                f"invalid frequencyType, must have the value of one of the following "
                f"{list(VALID_FREQUENCY_TYPES)}"
            )

        params: Dict[str, Any] = {}
        if period_type:
            params["periodType"] = period_type
        if period:
            params["period"] = period
        if frequency_type:
            params["frequencyType"] = frequency_type
        if frequency:
            params["frequency"] = frequency
        if start_date:
            params["startDate"] = _epoch_ms(start_date)
        if end_date:
            params["endDate"] = _epoch_ms(end_date)
        if need_extended_hours_data is not None:
            params["needExtendedHoursData"] = str(need_extended_hours_data).lower()

        logger.info(f"Fetching price history for {symbol}")
        data = self.get(endpoints.MARKETDATA_PRICE_HISTORY.format(symbol=symbol), params=params)
        history = parse_price_history(symbol, data or {})

        if history.empty:
            raise TDAmeritradeAPIError(f"no data, check time period and/or ticker {symbol}")

        return history

    def get_movers(
        self, index: str, direction: str = "up", change: str = "percent"
    ) -> List[Dict[str, Any]]:
        """
        Get the top movers of an index ($COMPX, $DJI or $SPX.X).

        Raises:
            ValueError: If direction or change is not valid
        """
        if direction not in VALID_MOVER_DIRECTIONS:
            raise ValueError(
                f"invalid direction, must have the value of one of the following "
                f"{list(VALID_MOVER_DIRECTIONS)}"
            )
        if change not in VALID_MOVER_CHANGES:
            raise ValueError(
                f"invalid changeType, must have the value of one of the following "
                f"{list(VALID_MOVER_CHANGES)}"
            )

        return self.get(
            endpoints.MARKETDATA_MOVERS.format(index=index),
            params={"direction": direction, "change": change},
        ) or []

    def get_market_hours(
        self, market: str, on: Optional[Union[date, datetime]] = None
    ) -> Dict[str, Any]:
        """Get market hours for one market (EQUITY, OPTION, FUTURE, BOND or FOREX)."""
        params = {"date": _format_date(on)} if on else None
        return self.get(endpoints.MARKETDATA_MARKET_HOURS.format(market=market), params=params) or {}

    def get_market_hours_multi(
        self, markets: Sequence[str], on: Optional[Union[date, datetime]] = None
    ) -> Dict[str, Any]:
        """
        Get market hours for several markets.

        Raises:
            ValueError: If no markets are given
        """
        if not markets:
            raise ValueError("no markets present")

        params = {"markets": ",".join(markets)}
        if on:
            params["date"] = _format_date(on)
        return self.get(endpoints.MARKETDATA_HOURS, params=params) or {}

    def get_option_chain(self, symbol: str, **params: Any) -> Dict[str, Any]:
        """
        Get the option chain for a symbol.

        Extra keyword arguments are sent as query parameters unchanged,
        using the API's names (contractType, strikeCount, strategy,
        fromDate, toDate, ...). None values are dropped.

        Example:
            chain = client.get_option_chain("AAPL", contractType="PUT", strikeCount=10)

        Raises:
            ValueError: If symbol is empty
        """
        if not symbol:
            raise ValueError("no symbol present")

        query = {key: value for key, value in params.items() if value is not None}
        query["symbol"] = symbol

        logger.info(f"Fetching option chain for {symbol}")
        return self.get(endpoints.MARKETDATA_CHAINS, params=query) or {}

    # Instruments

    def search_instruments(
        self, symbol: str, projection: str = "symbol-search"
    ) -> Dict[str, InstrumentInfo]:
        """
        Search instruments by symbol or description.

        Raises:
            ValueError: If symbol is empty or projection is not valid
        """
        if not symbol:
            raise ValueError("no symbol present")
        if projection not in VALID_PROJECTIONS:
            raise ValueError(f"invalid projection {projection!r}")

        data = self.get(endpoints.INSTRUMENTS, params={"symbol": symbol, "projection": projection})
        return parse_instrument_search(data or {})

    def get_instrument(self, cusip: str) -> List[InstrumentInfo]:
        """
        Get instruments by CUSIP.

        Raises:
            ValueError: If cusip is empty
        """
        if not cusip:
            raise ValueError("no cusip present")

        data = self.get(endpoints.INSTRUMENT.format(cusip=cusip)) or []
        return [parse_instrument_info(item) for item in data]

    # Accounts & trading

    @staticmethod
    def _account_fields(positions: bool, orders: bool) -> Optional[Dict[str, str]]:
        fields = [name for name, wanted in (("positions", positions), ("orders", orders)) if wanted]
        return {"fields": ",".join(fields)} if fields else None

    def get_accounts(self, positions: bool = False, orders: bool = False) -> List[Account]:
        """
        Get all accounts for the authenticated user.

        Args:
            positions: Include positions
            orders: Include working orders

        Returns:
            List of Account objects
        """
        logger.info("Fetching accounts")
        data = self.get(endpoints.ACCOUNTS, params=self._account_fields(positions, orders)) or []
        accounts = [parse_account(a) for a in data]
        logger.info(f"Retrieved {len(accounts)} account(s)")
        return accounts

    def get_account(
        self, account_id: str, positions: bool = False, orders: bool = False
    ) -> Account:
        """Get a single account."""
        logger.info(f"Fetching account {account_id}")
        data = self.get(
            endpoints.ACCOUNT_DETAILS.format(accountId=account_id),
            params=self._account_fields(positions, orders),
        )
        return parse_account(data or {})

    def place_order(self, account_id: str, order: Dict[str, Any]) -> Optional[str]:
        """
        Place an order.

        Args:
            account_id: Account to trade in
            order: Order in TD Ameritrade's JSON format

        Returns:
            ID of the new order, taken from the Location header (if present)
        """
        logger.info(f"Placing order for account {account_id}")
        response = self._request(
            "POST", endpoints.ORDERS.format(accountId=account_id), json_data=order
        )
        location = response.headers.get("Location", "")
        return location.rstrip("/").rsplit("/", 1)[-1] if location else None

    def get_order(self, account_id: str, order_id: str) -> Dict[str, Any]:
        """Get a single order."""
        return self.get(endpoints.ORDER_DETAILS.format(accountId=account_id, orderId=order_id))

    def cancel_order(self, account_id: str, order_id: str) -> None:
        """Cancel an order."""
        logger.info(f"Cancelling order {order_id} for account {account_id}")
        self._request("DELETE", endpoints.ORDER_DETAILS.format(accountId=account_id, orderId=order_id))

    def replace_order(self, account_id: str, order_id: str, order: Dict[str, Any]) -> None:
        """
        Replace a working order with a new one.

        Raises:
            ValueError: If order is empty
        """
        if not order:
            raise ValueError("order cannot be empty")

        logger.info(f"Replacing order {order_id} for account {account_id}")
        self.put(endpoints.ORDER_DETAILS.format(accountId=account_id, orderId=order_id), order)

    def get_orders(
        self,
        account_id: str,
        max_results: Optional[int] = None,
        from_entered_time: Optional[Union[date, datetime]] = None,
        to_entered_time: Optional[Union[date, datetime]] = None,
        status: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Get orders for an account, optionally filtered.

        Args:
            account_id: Account to query
            max_results: Maximum number of orders to return
            from_entered_time: Only orders entered on or after this day
            to_entered_time: Only orders entered on or before this day
            status: Only orders in this status (e.g. "WORKING", "FILLED")

        Raises:
            ValueError: If status is not valid
        """
        if status is not None and status not in VALID_ORDER_STATUSES:
            raise ValueError(
                f"invalid status, must have the value of one of the following "
                f"{list(VALID_ORDER_STATUSES)}"
            )

        params: Dict[str, Any] = {}
        if max_results:
            params["maxResults"] = max_results
        if from_entered_time:
            params["fromEnteredTime"] = _format_date(from_entered_time)
        if to_entered_time:
            params["toEnteredTime"] = _format_date(to_entered_time)
        if status:
            params["status"] = status

        return self.get(endpoints.ORDERS.format(accountId=account_id), params=params or None) or []

    # Saved orders

    def create_saved_order(self, account_id: str, order: Dict[str, Any]) -> None:
        """
        Save an order for later placement.

        Raises:
            ValueError: If order is empty
        """
        if not order:
            raise ValueError("order cannot be empty")

        logger.info(f"Saving order for account {account_id}")
        self.post(endpoints.SAVED_ORDERS.format(accountId=account_id), order)

    def get_saved_orders(self, account_id: str) -> List[Dict[str, Any]]:
        """Get all saved orders of an account."""
        return self.get(endpoints.SAVED_ORDERS.format(accountId=account_id)) or []

    def get_saved_order(self, account_id: str, saved_order_id: str) -> Dict[str, Any]:
        return self.get(
            endpoints.SAVED_ORDER_DETAILS.format(accountId=account_id, savedOrderId=saved_order_id)
        )

    def replace_saved_order(
        self, account_id: str, saved_order_id: str, order: Dict[str, Any]
    ) -> None:
        """
        Replace a saved order.

        Raises:
            ValueError: If order is empty
        """
        if not order:
            raise ValueError("order cannot be empty")

        self.put(
            endpoints.SAVED_ORDER_DETAILS.format(accountId=account_id, savedOrderId=saved_order_id),
            order,
        )

    def delete_saved_order(self, account_id: str, saved_order_id: str) -> None:
        logger.info(f"Deleting saved order {saved_order_id} for account {account_id}")
        self.delete(
            endpoints.SAVED_ORDER_DETAILS.format(accountId=account_id, savedOrderId=saved_order_id)
        )

    # Transaction history

    def get_transactions(
        self,
        account_id: str,
        transaction_type: Optional[str] = None,
        symbol: Optional[str] = None,
        start_date: Optional[Union[date, datetime]] = None,
        end_date: Optional[Union[date, datetime]] = None,
    ) -> List[Transaction]:
        """
        Get the transaction history of an account.

        Args:
            account_id: Account to query
            transaction_type: One of VALID_TRANSACTION_TYPES (default: all)
            symbol: Only transactions in this symbol
            start_date: First day of the range (UTC)
            end_date: Last day of the range (UTC)

        Returns:
            List of Transaction objects

        Raises:
            ValueError: If transaction_type is not valid
        """
        if transaction_type is not None and transaction_type not in VALID_TRANSACTION_TYPES:
            raise ValueError(
                f"invalid type, must have the value of one of the following "
                f"{list(VALID_TRANSACTION_TYPES)}"
            )

        params: Dict[str, Any] = {}
        if transaction_type:
            params["type"] = transaction_type
        if symbol:
            params["symbol"] = symbol
        if start_date:
            params["startDate"] = _format_utc_date(start_date)
        if end_date:
            params["endDate"] = _format_utc_date(end_date)

        logger.info(f"Fetching transactions for account {account_id}")
        data = self.get(
            endpoints.TRANSACTIONS.format(accountId=account_id), params=params or None
        ) or []
        return [parse_transaction(t) for t in data]

    def get_transaction(self, account_id: str, transaction_id: str) -> Transaction:
        """Get a single transaction."""
        data = self.get(
            endpoints.TRANSACTION_DETAILS.format(accountId=account_id, transactionId=transaction_id)
        )
        return parse_transaction(data or {})

    # Watchlists

    @staticmethod
    def _require(**values: str) -> None:
        for name, value in values.items():
            if not value:
                raise ValueError(f"{name} cannot be empty")

    def create_watchlist(self, account_id: str, watchlist: Dict[str, Any]) -> None:
        """
        Create a watchlist.

        Args:
            account_id: Account that owns the watchlist
            watchlist: {"name": ..., "watchlistItems": [{"instrument": {...}}, ...]}

        Raises:
            ValueError: If account_id is empty
        """
        self._require(account_id=account_id)
        self.post(endpoints.ACCOUNT_WATCHLISTS.format(accountId=account_id), watchlist)

    def get_watchlist(self, account_id: str, watchlist_id: str) -> Dict[str, Any]:
        self._require(account_id=account_id, watchlist_id=watchlist_id)
        return self.get(
            endpoints.WATCHLIST_DETAILS.format(accountId=account_id, watchlistId=watchlist_id)
        ) or {}

    def get_all_watchlists(self) -> List[Dict[str, Any]]:
        """Get the watchlists of every linked account."""
        return self.get(endpoints.WATCHLISTS) or []

    def get_watchlists_for_account(self, account_id: str) -> List[Dict[str, Any]]:
        self._require(account_id=account_id)
        return self.get(endpoints.ACCOUNT_WATCHLISTS.format(accountId=account_id)) or []

    def replace_watchlist(
        self, account_id: str, watchlist_id: str, watchlist: Dict[str, Any]
    ) -> None:
        """Replace a watchlist's name and items entirely."""
        self._require(account_id=account_id, watchlist_id=watchlist_id)
        self.put(
            endpoints.WATCHLIST_DETAILS.format(accountId=account_id, watchlistId=watchlist_id),
            watchlist,
        )

    def update_watchlist(self, account_id: str, watchlist: Dict[str, Any]) -> None:
        """
        Partially update a watchlist.

        Renames the watchlist, appends items, or updates and deletes items
        by sequenceId. The watchlist ID is taken from watchlist["watchlistId"].

        Raises:
            ValueError: If account_id or the watchlist ID is empty
        """
        watchlist_id = watchlist.get("watchlistId", "")
        self._require(account_id=account_id, watchlist_id=watchlist_id)
        self.patch(
            endpoints.WATCHLIST_DETAILS.format(accountId=account_id, watchlistId=watchlist_id),
            watchlist,
        )

    def delete_watchlist(self, account_id: str, watchlist_id: str) -> None:
        self._require(account_id=account_id, watchlist_id=watchlist_id)
        logger.info(f"Deleting watchlist {watchlist_id} for account {account_id}")
        self.delete(
            endpoints.WATCHLIST_DETAILS.format(accountId=account_id, watchlistId=watchlist_id)
        )

    # User

    def get_user_principals(self, *fields: str) -> Dict[str, Any]:
        """
        Get user principal details.

        Args:
            fields: Optional extra fields (streamerSubscriptionKeys,
                    streamerConnectionInfo, preferences, surrogateIds)
        """
        params = {"fields": ",".join(fields)} if fields else None
        return self.get(endpoints.USER_PRINCIPALS, params=params) or {}

    def get_streamer_subscription_keys(self, *account_ids: str) -> Dict[str, Any]:
        """
        Get the streamer subscription keys for the given accounts.

        Raises:
            ValueError: If no account IDs are given
        """
        if not account_ids:
            raise ValueError("no account IDs present")

        return self.get(
            endpoints.STREAMER_SUBSCRIPTION_KEYS, params={"accountIds": ",".join(account_ids)}
        ) or {}

    def get_preferences(self, account_id: str) -> Dict[str, Any]:
        """Get the trading preferences of an account."""
        return self.get(endpoints.PREFERENCES.format(accountId=account_id)) or {}

    def update_preferences(self, account_id: str, preferences: Dict[str, Any]) -> None:
        """
        Replace the trading preferences of an account.

        Raises:
            ValueError: If preferences is empty
        """
        if not preferences:
            raise ValueError("preferences cannot be empty")

        logger.info(f"Updating preferences for account {account_id}")
        self.put(endpoints.PREFERENCES.format(accountId=account_id), preferences)


def new_authenticated_client(
    token: "TokenData", base_url: str = BASE_URL, timeout: float = 30.0
) -> TDAmeritradeClient:
    """
    Build a client whose requests carry the token's access token.

    The token is used as-is; it is not refreshed when it expires.
    """
    session = requests.Session()
    session.auth = BearerAuth(token)
    return TDAmeritradeClient(session=session, base_url=base_url, timeout=timeout)
