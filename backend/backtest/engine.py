"""Bar-by-bar backtest simulation engine.

Replays a candle series through the configured strategy, holding at most one
position at a time:

    NoPosition --buy/sell signal--> OpenPosition
    OpenPosition --opposite signal / +5% / -3%--> NoPosition

Exits use fixed 5% take-profit and 3% stop-loss thresholds, independent of
the live trade-management settings. Any position still open after the last
bar is closed at the last close.

The engine is deterministic: no randomness and no wall-clock reads.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from core.models.candle import Candle, get_closes, get_volumes
from core.models.config import StrategyParams
from core.models.signal import EquityPoint, Market, Position, Side, Signal, Trade
from core.risk import profit_percent
from core.strategy import detect_trend, required_warmup

from backtest.stats import BacktestResult, StatisticsCalculator

logger = logging.getLogger(__name__)

TAKE_PROFIT = 0.05
STOP_LOSS = 0.03
# Size = balance * 2% risk / 3% stop, capped at 20% of balance
RISK_PER_TRADE = 0.02
MAX_POSITION_PCT = 0.2


def filter_candles(
    candles: Sequence[Candle], start_date: datetime, end_date: datetime
) -> list[Candle]:
    """Candles within [start_date, end_date], oldest first."""
    selected = [c for c in candles if start_date <= c.timestamp <= end_date]
    return sorted(selected, key=lambda c: c.timestamp)


def position_size(balance: float) -> float:
    """Notional size of a new backtest position."""
    return min(balance * RISK_PER_TRADE / STOP_LOSS, balance * MAX_POSITION_PCT)


class BacktestEngine:
    """Simulate one strategy on one symbol.

    Each call to run() starts from a clean state, so an engine instance can
    be reused but never shares state between runs.
    """

    def __init__(
        self,
        symbol: str,
        market: Market,
        params: StrategyParams,
        initial_capital: float = 10_000.0,
    ):
        if initial_capital <= 0:
            raise ValueError(f"Initial capital must be positive, got {initial_capital}")
        self.symbol = symbol
        self.market = Market(market)
        self.params = params
        self.initial_capital = initial_capital

        self._balance = initial_capital
        self._position: Position | None = None
        self._trades: list[Trade] = []
        self._equity_curve: list[EquityPoint] = []

    def run(
        self,
        candles: Sequence[Candle],
        start_date: datetime,
        end_date: datetime,
    ) -> BacktestResult:
        """Run the simulation over candles within [start_date, end_date].

        Args:
            candles: Validated candles (any order; filtered and sorted here)
            start_date: First timestamp to include
            end_date: Last timestamp to include

        Returns:
            Immutable BacktestResult with metrics, trades and equity curve
        """
        series = filter_candles(candles, start_date, end_date)
        self._reset(start_date)

        warmup = required_warmup(self.params)
        closes = get_closes(series)
        volumes = get_volumes(series)

        logger.info(
            f"[{self.symbol}] Backtest {self.params.strategy.value}: "
            f"{len(series)} candles, warmup={warmup}"
        )

        for i in range(warmup, len(series)):
            signal = detect_trend(closes[: i + 1], volumes[: i + 1], self.params)
            self._process_candle(series[i], signal)

        if self._position is not None:
            self._close_at(series[-1])

        logger.info(
            f"[{self.symbol}] Done: {len(self._trades)} trades, "
            f"final balance {self._balance:.2f}"
        )

        return StatisticsCalculator().calculate(
            trades=self._trades,
            equity_curve=self._equity_curve,
            initial_capital=self.initial_capital,
            final_capital=self._balance,
            symbol=self.symbol,
            market=self.market,
            parameters=self.params,
            start_date=start_date,
            end_date=end_date,
        )

    def _reset(self, start_date: datetime) -> None:
        self._balance = self.initial_capital
        self._position = None
        self._trades = []
        self._equity_curve = [
            EquityPoint(timestamp=start_date, equity=self.initial_capital)
        ]

    def _process_candle(self, candle: Candle, signal: Signal) -> None:
        """Apply one bar's signal to the current state."""
        position = self._position

        if position is not None:
            pnl_pct = profit_percent(position.side, position.entry_price, candle.close)
            pnl_amount = position.value * pnl_pct
            equity = self._balance + pnl_amount
            self._equity_curve.append(
                EquityPoint(timestamp=candle.timestamp, equity=equity)
            )

            opposite = (position.side == Side.BUY and signal == Signal.SELL) or (
                position.side == Side.SELL and signal == Signal.BUY
            )
            if opposite or pnl_pct >= TAKE_PROFIT or pnl_pct <= -STOP_LOSS:
                self._record_close(candle, pnl_pct, pnl_amount)
            return

        if signal != Signal.HOLD:
            size = position_size(self._balance)
            self._position = Position(
                side=Side.from_signal(signal),
                entry_price=candle.close,
                size=size,
                value=size,
                opened_at=candle.timestamp,
                symbol=self.symbol,
            )
            logger.debug(
                f"[{self.symbol}] Open {signal.value} @ {candle.close} "
                f"size={size:.2f} ({candle.timestamp:%Y-%m-%d})"
            )

        self._equity_curve.append(
            EquityPoint(timestamp=candle.timestamp, equity=self._balance)
        )

    def _close_at(self, candle: Candle) -> None:
        """Force-close the open position at the candle's close."""
        position = self._position
        pnl_pct = profit_percent(position.side, position.entry_price, candle.close)
        self._record_close(candle, pnl_pct, position.value * pnl_pct)

    def _record_close(
        self, candle: Candle, pnl_pct: float, pnl_amount: float
    ) -> None:
        self._balance += pnl_amount
        trade = self._position.close(
            exit_price=candle.close,
            exit_time=candle.timestamp,
            profit=pnl_amount,
            profit_percent=pnl_pct,
        )
        self._trades.append(trade)
        self._position = None
        logger.debug(
            f"[{self.symbol}] Close {trade.side.value} @ {trade.exit_price} "
            f"pnl={pnl_amount:+.2f} ({pnl_pct:+.2%})"
        )
