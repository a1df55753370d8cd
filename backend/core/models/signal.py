"""Signal, position and trade data models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class Signal(str, Enum):
    """Trend decision for the latest bar."""

    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


class Side(str, Enum):
    """Side of an open position."""

    BUY = "buy"
    SELL = "sell"

    @property
    def direction(self) -> int:
        """+1 for long, -1 for short."""
        return 1 if self is Side.BUY else -1

    @classmethod
    def from_signal(cls, signal: Signal) -> "Side":
        if signal == Signal.HOLD:
            raise ValueError("Cannot open a position on a hold signal")
        return cls(signal.value)


class Market(str, Enum):
    """Market a symbol trades on."""

    CRYPTO = "crypto"
    FOREX = "forex"


class Position(BaseModel):
    """An open trade.

    ``size`` and ``value`` are both the notional amount committed to the
    trade. ``highest_price`` is the highest price seen since entry and feeds
    the trailing stop. Positions are immutable: a new high yields a new
    Position, and closing yields a Trade.
    """

    model_config = ConfigDict(frozen=True)

    side: Side
    entry_price: float
    size: float
    value: float
    opened_at: datetime
    symbol: str
    highest_price: float | None = None

    @model_validator(mode="before")
    @classmethod
    def _default_highest_price(cls, data):
        if isinstance(data, dict) and data.get("highest_price") is None:
            data = {**data, "highest_price": data.get("entry_price")}
        return data

    def with_price(self, price: float) -> "Position":
        """Position with the trailing stop high-water mark raised to price."""
        if price > self.highest_price:
            return self.model_copy(update={"highest_price": price})
        return self

    def close(
        self,
        exit_price: float,
        exit_time: datetime,
        profit: float,
        profit_percent: float,
    ) -> "Trade":
        """Close the position, returning the resulting trade record."""
        return Trade(
            side=self.side,
            entry_price=self.entry_price,
            size=self.size,
            value=self.value,
            opened_at=self.opened_at,
            symbol=self.symbol,
            exit_price=exit_price,
            exit_time=exit_time,
            profit=profit,
            profit_percent=profit_percent,
        )


class Trade(BaseModel):
    """A closed position with its realized result."""

    model_config = ConfigDict(frozen=True)

    side: Side
    entry_price: float
    size: float
    value: float
    opened_at: datetime
    symbol: str
    exit_price: float
    exit_time: datetime
    profit: float
    profit_percent: float

    @property
    def is_win(self) -> bool:
        return self.profit > 0

    @property
    def hold_seconds(self) -> float:
        return (self.exit_time - self.opened_at).total_seconds()


class EquityPoint(BaseModel):
    """Account equity after processing one bar."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    equity: float
