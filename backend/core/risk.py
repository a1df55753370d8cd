"""Position sizing and exit rules.

Pure functions shared by the live position manager and the backtester.
No I/O: the caller supplies balances and prices.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from core.models.signal import Market, Position, Side

# Per-market position size limits: (minimum size, cap as fraction of balance)
SIZE_LIMITS: dict[Market, tuple[float, float]] = {
    Market.CRYPTO: (0.001, 0.05),
    Market.FOREX: (0.01, 0.02),
}

DEFAULT_TARGET_PROFIT = 0.05
DEFAULT_STOP_LOSS = 0.03


class ActionKind(str, Enum):
    """What the caller should do with an open position."""

    CLOSE = "close"
    HOLD = "hold"
    ERROR = "error"


@dataclass(frozen=True)
class TradeAction:
    """Result of evaluating an open position.

    Attributes:
        action: close, hold or error.
        current_price: Price the decision was made at (None on error).
        profit: Side-adjusted fractional P&L at current_price.
        profit_reached: True only when closing at the profit target.
        reason: Why the position should close (close actions only).
        message: Error description (error actions only).
    """

    action: ActionKind
    current_price: float | None = None
    profit: float = 0.0
    profit_reached: bool = False
    reason: str | None = None
    message: str | None = None


def size_position(
    available_balance: float,
    risk_level: int,
    stop_loss_percent: float = 2,
    market: Market = Market.CRYPTO,
) -> float:
    """
    Size a new position from account risk parameters.

    risk_amount = available * clamp(risk_level, 1, 5) / 100
    size = risk_amount / (stop_loss_percent / 100)

    The size is then capped at a share of the balance and floored at the
    market minimum (the floor wins if the two cross).

    Args:
        available_balance: Balance free to trade (excluding locked funds)
        risk_level: 1-5; percent of the balance put at risk
        stop_loss_percent: Stop distance in percent (2 = 2%)
        market: Market, selects the min size and cap

    Returns:
        Position size in quote currency
    """
    risk_pct = min(max(risk_level, 1), 5)
    risk_amount = (available_balance * risk_pct) / 100
    size = risk_amount / (stop_loss_percent / 100)

    min_size, cap_pct = SIZE_LIMITS[Market(market)]
    return max(min(size, available_balance * cap_pct), min_size)


def profit_percent(side: Side, entry_price: float, current_price: float) -> float:
    """Side-adjusted fractional price move since entry (0.05 = +5%)."""
    price_change = (current_price - entry_price) / entry_price
    return price_change if side == Side.BUY else -price_change


def is_trailing_stop_hit(
    entry_price: float,
    current_price: float,
    trailing_percent: float,
    highest_since_entry: float,
) -> bool:
    """
    Check the trailing stop.

    The stop sits ``trailing_percent`` percent below the highest price since
    entry, and only fires while the trade is still above entry.
    """
    trail_stop = highest_since_entry * (1 - trailing_percent / 100)
    return current_price <= trail_stop and current_price > entry_price


def evaluate_exit(
    position: Position,
    current_price: float | None,
    target_profit: float = DEFAULT_TARGET_PROFIT,
    stop_loss: float = DEFAULT_STOP_LOSS,
    trailing_percent: float | None = None,
) -> TradeAction:
    """
    Decide whether an open position should close at the current price.

    Args:
        position: The open position
        current_price: Latest price, or None when no quote is available
        target_profit: Close when pnl >= this fraction
        stop_loss: Close when pnl <= -this fraction
        trailing_percent: Optional trailing stop distance in percent

    Returns:
        TradeAction (error when current_price is missing)
    """
    if not current_price:
        return TradeAction(
            action=ActionKind.ERROR,
            message="Could not fetch current price",
        )

    pnl = profit_percent(position.side, position.entry_price, current_price)

    if pnl >= target_profit:
        return TradeAction(
            action=ActionKind.CLOSE,
            current_price=current_price,
            profit=pnl,
            profit_reached=True,
            reason="Target profit reached",
        )

    if pnl <= -stop_loss:
        return TradeAction(
            action=ActionKind.CLOSE,
            current_price=current_price,
            profit=pnl,
            reason="Stop loss hit",
        )

    # The trailing stop follows highs, so it only applies to long positions
    if (
        position.side == Side.BUY
        and trailing_percent is not None
        and is_trailing_stop_hit(
            position.entry_price,
            current_price,
            trailing_percent,
            position.highest_price,
        )
    ):
        return TradeAction(
            action=ActionKind.CLOSE,
            current_price=current_price,
            profit=pnl,
            reason="Trailing stop hit",
        )

    return TradeAction(
        action=ActionKind.HOLD,
        current_price=current_price,
        profit=pnl,
    )
