"""
TD Ameritrade data models.

This module defines data models for account, position, instrument,
price history and transaction data. The API's camelCase field names
are translated by the functions in parsers.py.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional, Union


@dataclass
class Equity:
    """A stock position instrument."""

    ASSET_TYPE: ClassVar[str] = "EQUITY"

    symbol: str
    cusip: str = ""
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assetType": self.ASSET_TYPE,
            "cusip": self.cusip,
            "symbol": self.symbol,
            "description": self.description,
        }


@dataclass
class OptionDeliverable:
    """A deliverable underlying an option contract."""

    symbol: str
    deliverable_units: float
    currency_type: str = ""
    asset_type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "deliverableUnits": self.deliverable_units,
            "currencyType": self.currency_type,
            "assetType": self.asset_type,
        }


@dataclass
class Option:
    """
    An option contract instrument.

    Attributes:
        put_call: "PUT" or "CALL"
        option_type: "VANILLA", "BINARY" or "BARRIER"
        underlying_symbol: Symbol of the underlying security
        option_multiplier: Shares per contract
        option_deliverables: Deliverables for non-standard contracts
    """

    ASSET_TYPE: ClassVar[str] = "OPTION"

    symbol: str
    cusip: str = ""
    description: str = ""
    option_type: str = ""
    put_call: str = ""
    underlying_symbol: str = ""
    option_multiplier: float = 0.0
    option_deliverables: List[OptionDeliverable] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assetType": self.ASSET_TYPE,
            "cusip": self.cusip,
            "symbol": self.symbol,
            "description": self.description,
            "type": self.option_type,
            "putCall": self.put_call,
            "underlyingSymbol": self.underlying_symbol,
            "optionMultiplier": self.option_multiplier,
            "optionDeliverables": [d.to_dict() for d in self.option_deliverables],
        }


@dataclass
class MutualFund:
    """A mutual fund instrument."""

    ASSET_TYPE: ClassVar[str] = "MUTUAL_FUND"

    symbol: str
    cusip: str = ""
    description: str = ""
    # 'NOT_APPLICABLE', 'OPEN_END_NON_TAXABLE', 'OPEN_END_TAXABLE',
    # 'NO_LOAD_NON_TAXABLE' or 'NO_LOAD_TAXABLE'
    fund_type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assetType": self.ASSET_TYPE,
            "cusip": self.cusip,
            "symbol": self.symbol,
            "description": self.description,
            "type": self.fund_type,
        }


@dataclass
class CashEquivalent:
    """A cash equivalent instrument."""

    ASSET_TYPE: ClassVar[str] = "CASH_EQUIVALENT"

    symbol: str
    cusip: str = ""
    description: str = ""
    cash_type: str = ""  # 'SAVINGS' or 'MONEY_MARKET_FUND'

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assetType": self.ASSET_TYPE,
            "cusip": self.cusip,
            "symbol": self.symbol,
            "description": self.description,
            "type": self.cash_type,
        }


@dataclass
class FixedIncome:
    """A bond or other fixed income instrument."""

    ASSET_TYPE: ClassVar[str] = "FIXED_INCOME"

    symbol: str
    cusip: str = ""
    description: str = ""
    maturity_date: str = ""
    variable_rate: float = 0.0
    factor: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assetType": self.ASSET_TYPE,
            "cusip": self.cusip,
            "symbol": self.symbol,
            "description": self.description,
            "maturityDate": self.maturity_date,
            "variableRate": self.variable_rate,
            "factor": self.factor,
        }


Instrument = Union[Equity, Option, MutualFund, CashEquivalent, FixedIncome]


@dataclass
class Position:
    """
    Represents a position in a TD Ameritrade account.

    Attributes:
        instrument: Held instrument (one of the Instrument shapes)
        long_quantity: Shares/contracts held long
        short_quantity: Shares/contracts held short
        average_price: Average cost basis per share
        market_value: Total market value of position
        current_day_profit_loss: Profit/loss for current day
        current_day_profit_loss_percentage: Day profit/loss as percentage
    """

    instrument: Instrument
    long_quantity: float = 0.0
    short_quantity: float = 0.0
    average_price: float = 0.0
    market_value: float = 0.0
    current_day_profit_loss: float = 0.0
    current_day_profit_loss_percentage: float = 0.0
    settled_long_quantity: float = 0.0
    settled_short_quantity: float = 0.0
    aged_quantity: float = 0.0

    @property
    def symbol(self) -> str:
        return self.instrument.symbol

    @property
    def asset_type(self) -> str:
        return self.instrument.ASSET_TYPE

    @property
    def quantity(self) -> float:
        """Net quantity (long minus short)."""
        return self.long_quantity - self.short_quantity


@dataclass
class Balances:
    """Account balance information."""

    cash_balance: float = 0.0
    cash_available_for_trading: float = 0.0
    cash_available_for_withdrawal: float = 0.0
    liquidation_value: float = 0.0
    long_market_value: float = 0.0
    short_market_value: float = 0.0
    total_cash: float = 0.0
    money_market_fund: float = 0.0
    savings: float = 0.0
    accrued_interest: float = 0.0
    unsettled_cash: float = 0.0
    buying_power: Optional[float] = None


@dataclass
class Account:
    """
    Represents a TD Ameritrade securities account.

    Attributes:
        account_id: Account number
        account_type: Account type (CASH, MARGIN)
        positions: Positions (only populated when requested)
        current_balances: Current balance information
        order_strategies: Raw order data (only populated when requested)
    """

    account_id: str
    account_type: str
    current_balances: Balances
    positions: List[Position] = field(default_factory=list)
    initial_balances: Optional[Balances] = None
    round_trips: float = 0.0
    is_day_trader: bool = False
    is_closing_only_restricted: bool = False
    order_strategies: List[Dict[str, Any]] = field(default_factory=list)

    def get_equity_positions(self) -> List[Position]:
        """All equity (stock) positions."""
        return [p for p in self.positions if isinstance(p.instrument, Equity)]

    def get_option_positions(self) -> List[Position]:
        """All option positions."""
        return [p for p in self.positions if isinstance(p.instrument, Option)]

    def get_position(self, symbol: str) -> Optional[Position]:
        """
        Get position by symbol.

        Returns:
            Position if found, None otherwise
        """
        for position in self.positions:
            if position.symbol == symbol:
                return position
        return None

    def __repr__(self) -> str:
        return (
            f"Account({self.account_type} ***{self.account_id[-4:]}: "
            f"{len(self.positions)} positions, "
            f"${self.current_balances.liquidation_value:,.2f})"
        )


@dataclass
class Candle:
    """One OHLCV bar; epoch_ms is the bar time in milliseconds since the epoch."""

    open: float
    high: float
    low: float
    close: float
    volume: float
    epoch_ms: int

    @property
    def timestamp(self) -> datetime:
        return datetime.fromtimestamp(self.epoch_ms / 1000, tz=timezone.utc)


@dataclass
class PriceHistory:
    symbol: str
    candles: List[Candle]
    empty: bool = False


@dataclass
class InstrumentInfo:
    """Search result from the instruments endpoint."""

    symbol: str
    asset_type: str
    cusip: str = ""
    description: str = ""
    exchange: str = ""


@dataclass
class TransactionInstrument:
    """Instrument traded in a transaction (any asset type)."""

    symbol: str = ""
    asset_type: str = ""
    cusip: str = ""
    description: str = ""
    underlying_symbol: str = ""
    option_expiration_date: str = ""
    option_strike_price: float = 0.0
    put_call: str = ""
    bond_maturity_date: str = ""
    bond_interest_rate: float = 0.0


@dataclass
class TransactionItem:
    account_id: str = ""
    amount: float = 0.0
    price: float = 0.0
    cost: float = 0.0
    instruction: str = ""
    position_effect: str = ""
    instrument: Optional[TransactionInstrument] = None


@dataclass
class Transaction:
    """
    One entry of an account's transaction history.

    Attributes:
        transaction_id: Transaction ID
        transaction_type: e.g. TRADE, DIVIDEND_OR_INTEREST, ACH_RECEIPT
        net_amount: Net cash effect on the account
        fees: Fee name (commission, secFee, ...) to amount
        item: Traded item, if the transaction involved an instrument
    """

    transaction_id: str
    transaction_type: str = ""
    transaction_sub_type: str = ""
    description: str = ""
    transaction_date: str = ""
    settlement_date: str = ""
    order_id: str = ""
    order_date: str = ""
    sub_account: str = ""
    clearing_reference_number: str = ""
    net_amount: float = 0.0
    fees: Dict[str, float] = field(default_factory=dict)
    item: Optional[TransactionItem] = None

    @property
    def total_fees(self) -> float:
        return sum(self.fees.values())
