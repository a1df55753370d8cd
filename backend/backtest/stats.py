"""Statistics calculator for backtest results.

Computes trade-ledger metrics (win rate, profit factor, ROI), equity-curve
metrics (max drawdown, annualized Sharpe ratio) and per-trade analytics,
and assembles the immutable BacktestResult.

Sentinels kept for compatibility with existing reports:
- profit factor is 999 when there are profits but no losses, 0 when neither
- Sharpe ratio is 0 with fewer than 2 returns or zero variance
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

import numpy as np

from core.models.config import StrategyKind, StrategyParams
from core.models.signal import EquityPoint, Market, Trade

logger = logging.getLogger(__name__)

PROFIT_FACTOR_NO_LOSS = 999.0
TRADING_DAYS_PER_YEAR = 252


@dataclass(frozen=True)
class TradeMetrics:
    """Metrics derived from the closed trade ledger."""

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    gross_profit: float = 0.0
    gross_loss: float = 0.0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    net_profit: float = 0.0
    return_on_investment: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0


@dataclass(frozen=True)
class TradeAnalytics:
    """Per-trade performance analytics over a trade history."""

    total: int = 0
    wins: int = 0
    losses: int = 0
    total_profit: float = 0.0
    win_rate: float = 0.0
    avg_profit: float = 0.0
    max_drawdown: float = 0.0
    best_trade: float | None = None
    worst_trade: float | None = None
    max_win_streak: int = 0
    avg_hold_seconds: float = 0.0
    sharpe_ratio: float = 0.0


@dataclass(frozen=True)
class BacktestResult:
    """Complete backtest results (immutable snapshot)."""

    # Metadata
    symbol: str
    market: Market
    parameters: StrategyParams
    start_date: datetime
    end_date: datetime

    # Capital
    initial_capital: float
    final_capital: float
    net_profit: float = 0.0
    return_on_investment: float = 0.0

    # Trade ledger
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0

    # Equity curve
    max_drawdown: float = 0.0
    sharpe_ratio: float = 0.0

    equity_curve: tuple[EquityPoint, ...] = ()
    trades: tuple[Trade, ...] = ()
    analytics: TradeAnalytics = field(default_factory=TradeAnalytics)

    @property
    def strategy(self) -> StrategyKind:
        return self.parameters.strategy


def calculate_trade_metrics(
    trades: Sequence[Trade], initial_capital: float
) -> TradeMetrics:
    """Win rate, profit factor, net profit and ROI from closed trades.

    A trade with zero profit counts as a loss.
    """
    total = len(trades)
    wins = [t.profit for t in trades if t.profit > 0]
    losses = [abs(t.profit) for t in trades if t.profit <= 0]

    gross_profit = sum(wins)
    gross_loss = sum(losses)

    win_rate = len(wins) / total * 100 if total > 0 else 0.0
    if gross_loss > 0:
        profit_factor = gross_profit / gross_loss
    else:
        profit_factor = PROFIT_FACTOR_NO_LOSS if gross_profit > 0 else 0.0

    net_profit = gross_profit - gross_loss

    return TradeMetrics(
        total_trades=total,
        winning_trades=len(wins),
        losing_trades=len(losses),
        gross_profit=gross_profit,
        gross_loss=gross_loss,
        win_rate=win_rate,
        profit_factor=profit_factor,
        net_profit=net_profit,
        return_on_investment=net_profit / initial_capital * 100,
        largest_win=max(wins, default=0.0),
        largest_loss=max(losses, default=0.0),
    )


def calculate_max_drawdown(equity: Sequence[float]) -> float:
    """Largest percentage decline from a running equity peak.

    The peak starts at the first point and moves up on every new high.
    """
    if len(equity) == 0:
        return 0.0
    values = np.asarray(equity, dtype=np.float64)
    peaks = np.maximum.accumulate(values)
    drawdowns = (peaks - values) / peaks * 100
    return float(drawdowns.max())


def calculate_sharpe_ratio(equity: Sequence[float]) -> float:
    """Annualized Sharpe ratio of per-step equity returns.

    sharpe = mean(returns) / pstdev(returns) * sqrt(252)

    Returns equal up to float rounding (e.g. constant growth) count as zero
    variance.
    """
    if len(equity) < 3:
        return 0.0
    values = np.asarray(equity, dtype=np.float64)
    returns = np.diff(values) / values[:-1]
    if np.allclose(returns, returns[0], rtol=1e-9, atol=0.0):
        return 0.0
    std = float(returns.std())
    return float(returns.mean()) / std * math.sqrt(TRADING_DAYS_PER_YEAR)


def calculate_trade_analytics(trades: Sequence[Trade]) -> TradeAnalytics:
    """Analytics over a trade history.

    Unlike the ledger metrics, break-even trades count as neither wins nor
    losses here, and the Sharpe ratio is per trade (sample std, not
    annualized). Drawdown is peak minus trough of the cumulative profit.
    """
    if not trades:
        return TradeAnalytics()

    profits = [t.profit for t in trades]
    total = len(profits)
    wins = sum(1 for p in profits if p > 0)
    losses = sum(1 for p in profits if p < 0)
    total_profit = sum(profits)

    cumulative = 0.0
    peak = 0.0
    trough = 0.0
    streak = 0
    max_streak = 0
    for p in profits:
        if p > 0:
            streak += 1
        elif p < 0:
            streak = 0
        max_streak = max(max_streak, streak)
        cumulative += p
        peak = max(peak, cumulative)
        trough = min(trough, cumulative)

    sharpe = 0.0
    if total >= 2:
        std = float(np.std(profits, ddof=1))
        if std != 0:
            sharpe = float(np.mean(profits)) / std

    return TradeAnalytics(
        total=total,
        wins=wins,
        losses=losses,
        total_profit=total_profit,
        win_rate=round(wins / total * 100, 2),
        avg_profit=round(total_profit / total, 2),
        max_drawdown=peak - trough,
        best_trade=max(profits),
        worst_trade=min(profits),
        max_win_streak=max_streak,
        avg_hold_seconds=sum(t.hold_seconds for t in trades) / total,
        sharpe_ratio=sharpe,
    )


class StatisticsCalculator:
    """Calculate backtest statistics and build the result snapshot."""

    def calculate(
        self,
        trades: Sequence[Trade],
        equity_curve: Sequence[EquityPoint],
        initial_capital: float,
        final_capital: float,
        symbol: str,
        market: Market,
        parameters: StrategyParams,
        start_date: datetime,
        end_date: datetime,
    ) -> BacktestResult:
        metrics = calculate_trade_metrics(trades, initial_capital)
        equity = [p.equity for p in equity_curve]
        max_drawdown = calculate_max_drawdown(equity)
        sharpe = calculate_sharpe_ratio(equity)

        logger.debug(
            f"{symbol}: {metrics.total_trades} trades, "
            f"win rate {metrics.win_rate:.1f}%, max DD {max_drawdown:.2f}%"
        )

        # Rounded values are the reported (and optimizer-scored) figures
        return BacktestResult(
            symbol=symbol,
            market=market,
            parameters=parameters,
            start_date=start_date,
            end_date=end_date,
            initial_capital=initial_capital,
            final_capital=final_capital,
            net_profit=metrics.net_profit,
            return_on_investment=round(metrics.return_on_investment, 2),
            total_trades=metrics.total_trades,
            winning_trades=metrics.winning_trades,
            losing_trades=metrics.losing_trades,
            win_rate=round(metrics.win_rate, 2),
            profit_factor=round(metrics.profit_factor, 2),
            largest_win=metrics.largest_win,
            largest_loss=metrics.largest_loss,
            max_drawdown=round(max_drawdown, 2),
            sharpe_ratio=sharpe,
            equity_curve=tuple(equity_curve),
            trades=tuple(trades),
            analytics=calculate_trade_analytics(trades),
        )
