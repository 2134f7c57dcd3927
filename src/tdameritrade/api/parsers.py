"""
TD Ameritrade API response parsers.

This module provides functions for parsing TD Ameritrade API responses
into the data models in models.py. These parsers are used by the
TDAmeritradeClient to convert raw API responses into structured objects.
"""

import logging
from typing import Any, Callable, Dict, List

from .exceptions import UnsupportedAssetTypeError
from .models import (
    Account,
    Balances,
    Candle,
    CashEquivalent,
    Equity,
    FixedIncome,
    Instrument,
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

logger = logging.getLogger(__name__)


def _parse_equity(data: Dict[str, Any]) -> Equity:
    return Equity(
        symbol=data.get("symbol", ""),
        cusip=data.get("cusip", ""),
        description=data.get("description", ""),
    )


def _parse_option(data: Dict[str, Any]) -> Option:
    deliverables = [
        OptionDeliverable(
            symbol=d.get("symbol", ""),
            deliverable_units=d.get("deliverableUnits", 0.0),
            currency_type=d.get("currencyType", ""),
            asset_type=d.get("assetType", ""),
        )
        for d in data.get("optionDeliverables") or []
    ]
    return Option(
        symbol=data.get("symbol", ""),
        cusip=data.get("cusip", ""),
        description=data.get("description", ""),
        option_type=data.get("type", ""),
        put_call=data.get("putCall", ""),
        underlying_symbol=data.get("underlyingSymbol", ""),
        option_multiplier=data.get("optionMultiplier", 0.0),
        option_deliverables=deliverables,
    )


def _parse_mutual_fund(data: Dict[str, Any]) -> MutualFund:
    return MutualFund(
        symbol=data.get("symbol", ""),
        cusip=data.get("cusip", ""),
        description=data.get("description", ""),
        fund_type=data.get("type", ""),
    )


def _parse_cash_equivalent(data: Dict[str, Any]) -> CashEquivalent:
    return CashEquivalent(
        symbol=data.get("symbol", ""),
        cusip=data.get("cusip", ""),
        description=data.get("description", ""),
        cash_type=data.get("type", ""),
    )


def _parse_fixed_income(data: Dict[str, Any]) -> FixedIncome:
    return FixedIncome(
        symbol=data.get("symbol", ""),
        cusip=data.get("cusip", ""),
        description=data.get("description", ""),
        maturity_date=data.get("maturityDate", ""),
        variable_rate=data.get("variableRate", 0.0),
        factor=data.get("factor", 0.0),
    )


INSTRUMENT_PARSERS: Dict[str, Callable[[Dict[str, Any]], Instrument]] = {
    Equity.ASSET_TYPE: _parse_equity,
    Option.ASSET_TYPE: _parse_option,
    MutualFund.ASSET_TYPE: _parse_mutual_fund,
    CashEquivalent.ASSET_TYPE: _parse_cash_equivalent,
    FixedIncome.ASSET_TYPE: _parse_fixed_income,
}


def parse_instrument(data: Dict[str, Any]) -> Instrument:
    """
    Decode an instrument keyed by its assetType discriminator.

    Args:
        data: Raw instrument object

    Returns:
        Equity, Option, MutualFund, CashEquivalent or FixedIncome

    Raises:
        UnsupportedAssetTypeError: If assetType is missing or unknown
    """
    asset_type = data.get("assetType", "")
    parser = INSTRUMENT_PARSERS.get(asset_type)
    if parser is None:
        raise UnsupportedAssetTypeError(asset_type)
    return parser(data)


def instrument_to_dict(instrument: Instrument) -> Dict[str, Any]:
    """Encode an instrument back to API form, including its assetType."""
    return instrument.to_dict()


def parse_position(data: Dict[str, Any]) -> Position:
    """Parse a single position."""
    return Position(
        instrument=parse_instrument(data.get("instrument", {})),
        long_quantity=data.get("longQuantity", 0.0),
        short_quantity=data.get("shortQuantity", 0.0),
        average_price=data.get("averagePrice", 0.0),
        market_value=data.get("marketValue", 0.0),
        current_day_profit_loss=data.get("currentDayProfitLoss", 0.0),
        current_day_profit_loss_percentage=data.get("currentDayProfitLossPercentage", 0.0),
        settled_long_quantity=data.get("settledLongQuantity", 0.0),
        settled_short_quantity=data.get("settledShortQuantity", 0.0),
        aged_quantity=data.get("agedQuantity", 0.0),
    )


def parse_balances(data: Dict[str, Any]) -> Balances:
    """Parse a balance block (initialBalances, currentBalances, ...)."""
    return Balances(
        cash_balance=data.get("cashBalance", 0.0),
        cash_available_for_trading=data.get("cashAvailableForTrading", 0.0),
        cash_available_for_withdrawal=data.get("cashAvailableForWithdrawal", 0.0),
        liquidation_value=data.get("liquidationValue", 0.0),
        long_market_value=data.get("longMarketValue", 0.0),
        short_market_value=data.get("shortMarketValue", 0.0),
        total_cash=data.get("totalCash", 0.0),
        money_market_fund=data.get("moneyMarketFund", 0.0),
        savings=data.get("savings", 0.0),
        accrued_interest=data.get("accruedInterest", 0.0),
        unsettled_cash=data.get("unsettledCash", 0.0),
        buying_power=data.get("buyingPower"),
    )


def parse_account(data: Dict[str, Any]) -> Account:
    """
    Parse account data to the Account model.

    Args:
        data: Raw account object (optionally wrapped in "securitiesAccount")

    Returns:
        Account object
    """
    # Account data is nested under "securitiesAccount" key
    account_data = data.get("securitiesAccount", data)

    positions = [parse_position(p) for p in account_data.get("positions", [])]

    initial = account_data.get("initialBalances")

    return Account(
        account_id=str(account_data.get("accountId", "")),
        account_type=account_data.get("type", ""),
        current_balances=parse_balances(account_data.get("currentBalances", {})),
        positions=positions,
        initial_balances=parse_balances(initial) if initial else None,
        round_trips=account_data.get("roundTrips", 0.0),
        is_day_trader=account_data.get("isDayTrader", False),
        is_closing_only_restricted=account_data.get("isClosingOnlyRestricted", False),
        order_strategies=account_data.get("orderStrategies", []),
    )


def parse_price_history(symbol: str, data: Dict[str, Any]) -> PriceHistory:
    """
    Parse a price history response.

    The API returns candles in format:
    {
        "candles": [
            {"open": 150.0, "high": 152.5, "low": 149.0, "close": 151.0,
             "volume": 1000000, "datetime": 1704067200000},
            ...
        ],
        "symbol": "AAPL",
        "empty": false
    }
    """
    candles: List[Candle] = [
        Candle(
            open=float(c.get("open", 0.0)),
            high=float(c.get("high", 0.0)),
            low=float(c.get("low", 0.0)),
            close=float(c.get("close", 0.0)),
            volume=float(c.get("volume", 0)),
            epoch_ms=int(c.get("datetime", 0)),
        )
        for c in data.get("candles", [])
    ]
    logger.debug(f"Parsed {len(candles)} candles for {symbol}")
    return PriceHistory(
        symbol=data.get("symbol", symbol),
        candles=candles,
        empty=bool(data.get("empty", False)),
    )


def parse_instrument_info(data: Dict[str, Any], symbol: str = "") -> InstrumentInfo:
    """Parse one instruments endpoint result."""
    return InstrumentInfo(
        symbol=data.get("symbol", symbol),
        asset_type=data.get("assetType", ""),
        cusip=data.get("cusip", ""),
        description=data.get("description", ""),
        exchange=data.get("exchange", ""),
    )


def parse_instrument_search(data: Dict[str, Any]) -> Dict[str, InstrumentInfo]:
    """Parse an instruments search response keyed by symbol."""
    return {key: parse_instrument_info(info, key) for key, info in data.items()}


def _parse_transaction_item(data: Dict[str, Any]) -> TransactionItem:
    raw = data.get("instrument")
    instrument = None
    if raw:
        instrument = TransactionInstrument(
            symbol=raw.get("symbol", ""),
            asset_type=raw.get("assetType", ""),
            cusip=raw.get("cusip", ""),
            description=raw.get("description", ""),
            underlying_symbol=raw.get("underlyingSymbol", ""),
            option_expiration_date=raw.get("optionExpirationDate", ""),
            option_strike_price=raw.get("optionStrikePrice", 0.0),
            put_call=raw.get("putCall", ""),
            bond_maturity_date=raw.get("bondMaturityDate", ""),
            bond_interest_rate=raw.get("bondInterestRate", 0.0),
        )
    return TransactionItem(
        account_id=str(data.get("accountId", "")),
        amount=data.get("amount", 0.0),
        price=data.get("price", 0.0),
        cost=data.get("cost", 0.0),
        instruction=data.get("instruction", ""),
        position_effect=data.get("positionEffect", ""),
        instrument=instrument,
    )


def parse_transaction(data: Dict[str, Any]) -> Transaction:
    """
    Parse one transaction history entry.

    Instruments in transactions are kept as TransactionInstrument rather
    than decoded by assetType, since history can include asset types
    that positions never carry.
    """
    item = data.get("transactionItem")
    return Transaction(
        transaction_id=str(data.get("transactionId", "")),
        transaction_type=data.get("type", ""),
        transaction_sub_type=data.get("transactionSubType", ""),
        description=data.get("description", ""),
        transaction_date=data.get("transactionDate", ""),
        settlement_date=data.get("settlementDate", ""),
        order_id=str(data.get("orderId", "") or ""),
        order_date=data.get("orderDate", ""),
        sub_account=data.get("subAccount", ""),
        clearing_reference_number=data.get("clearingReferenceNumber", ""),
        net_amount=data.get("netAmount", 0.0),
        fees=dict(data.get("fees") or {}),
        item=_parse_transaction_item(item) if item else None,
    )
