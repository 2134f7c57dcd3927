"""
TD Ameritrade API endpoint definitions.

Paths are relative to the client's base URL (https://api.tdameritrade.com/v1/).

Documentation: https://developer.tdameritrade.com/apis
"""

# Market Data Endpoints
MARKETDATA_QUOTES = "marketdata/quotes"
MARKETDATA_QUOTE = "marketdata/{symbol}/quotes"
MARKETDATA_PRICE_HISTORY = "marketdata/{symbol}/pricehistory"
MARKETDATA_MOVERS = "marketdata/{index}/movers"
MARKETDATA_HOURS = "marketdata/hours"
MARKETDATA_MARKET_HOURS = "marketdata/{market}/hours"
MARKETDATA_CHAINS = "marketdata/chains"

# Instrument Endpoints
INSTRUMENTS = "instruments"
INSTRUMENT = "instruments/{cusip}"

# Account & Trading Endpoints
ACCOUNTS = "accounts"
ACCOUNT_DETAILS = "accounts/{accountId}"
ORDERS = "accounts/{accountId}/orders"
ORDER_DETAILS = "accounts/{accountId}/orders/{orderId}"
SAVED_ORDERS = "accounts/{accountId}/savedorders"
SAVED_ORDER_DETAILS = "accounts/{accountId}/savedorders/{savedOrderId}"

# Transaction History Endpoints
TRANSACTIONS = "accounts/{accountId}/transactions"
TRANSACTION_DETAILS = "accounts/{accountId}/transactions/{transactionId}"

# Watchlist Endpoints
WATCHLISTS = "accounts/watchlists"
ACCOUNT_WATCHLISTS = "accounts/{accountId}/watchlists"
WATCHLIST_DETAILS = "accounts/{accountId}/watchlists/{watchlistId}"

# User Endpoints
USER_PRINCIPALS = "userprincipals"
STREAMER_SUBSCRIPTION_KEYS = "userprincipals/streamersubscriptionkeys"
PREFERENCES = "accounts/{accountId}/preferences"
