"""Tests for backtest statistics."""

from datetime import datetime, timedelta, timezone

import pytest

from core.models.config import StrategyParams
from core.models.signal import EquityPoint, Market, Side, Trade
from backtest.stats import (
    PROFIT_FACTOR_NO_LOSS,
    StatisticsCalculator,
    calculate_max_drawdown,
    calculate_sharpe_ratio,
    calculate_trade_analytics,
    calculate_trade_metrics,
)

START = datetime(2025, 1, 1, tzinfo=timezone.utc)
END = datetime(2025, 12, 31, tzinfo=timezone.utc)


def make_trade(profit: float, day: int = 0, hold_days: int = 1) -> Trade:
    """Build a closed BUY trade with the given profit."""
    opened = START + timedelta(days=day)
    return Trade(
        side=Side.BUY,
        entry_price=100.0,
        size=1000.0,
        value=1000.0,
        opened_at=opened,
        symbol="BTC-USDT",
        exit_price=100.0 + profit / 10,
        exit_time=opened + timedelta(days=hold_days),
        profit=profit,
        profit_percent=profit / 1000.0,
    )


def make_curve(values: list[float]) -> list[EquityPoint]:
    return [
        EquityPoint(timestamp=START + timedelta(days=i), equity=v)
        for i, v in enumerate(values)
    ]


def _calc(trades, equity, capital=10_000.0):
    return StatisticsCalculator().calculate(
        trades=trades,
        equity_curve=make_curve(equity),
        initial_capital=capital,
        final_capital=capital + sum(t.profit for t in trades),
        symbol="BTC-USDT",
        market=Market.CRYPTO,
        parameters=StrategyParams(),
        start_date=START,
        end_date=END,
    )


class TestMaxDrawdown:
    def test_reference_curve(self):
        # Peak 110, trough 80
        assert calculate_max_drawdown([100, 110, 90, 95, 80, 120]) == pytest.approx(
            27.2727, abs=1e-3
        )

    def test_monotonic_rise(self):
        assert calculate_max_drawdown([100, 101, 102]) == 0.0

    def test_empty_and_single(self):
        assert calculate_max_drawdown([]) == 0.0
        assert calculate_max_drawdown([100]) == 0.0

    def test_rounded_in_result(self):
        result = _calc([], [100, 110, 90, 95, 80, 120])
        assert result.max_drawdown == 27.27


class TestSharpeRatio:
    def test_too_few_points(self):
        assert calculate_sharpe_ratio([100, 110]) == 0.0

    def test_zero_variance(self):
        assert calculate_sharpe_ratio([100, 100, 100, 100]) == 0.0

    def test_constant_growth_is_zero_variance(self):
        equity = [100.0 * 1.1 ** i for i in range(10)]
        assert calculate_sharpe_ratio(equity) == 0.0

    def test_population_std_annualized(self):
        equity = [100.0, 110.0, 99.0, 108.9]
        returns = [0.1, -0.1, 0.1]
        mean = sum(returns) / 3
        std = (sum((r - mean) ** 2 for r in returns) / 3) ** 0.5
        assert calculate_sharpe_ratio(equity) == pytest.approx(mean / std * 252 ** 0.5)


class TestTradeMetrics:
    def test_basic(self):
        trades = [make_trade(200), make_trade(-100), make_trade(50)]
        m = calculate_trade_metrics(trades, 10_000)

        assert m.total_trades == 3
        assert m.winning_trades == 2
        assert m.losing_trades == 1
        assert m.win_rate == pytest.approx(66.6667, abs=1e-3)
        assert m.profit_factor == pytest.approx(2.5)
        assert m.net_profit == pytest.approx(150)
        assert m.return_on_investment == pytest.approx(1.5)
        assert m.largest_win == 200
        assert m.largest_loss == 100

    def test_zero_profit_trade_is_a_loss(self):
        m = calculate_trade_metrics([make_trade(0.0)], 10_000)
        assert m.winning_trades == 0
        assert m.losing_trades == 1
        assert m.win_rate == 0.0
        assert m.profit_factor == 0.0

    def test_no_losses_sentinel(self):
        m = calculate_trade_metrics([make_trade(100)], 10_000)
        assert m.profit_factor == PROFIT_FACTOR_NO_LOSS

    def test_no_trades(self):
        m = calculate_trade_metrics([], 10_000)
        assert m.total_trades == 0
        assert m.win_rate == 0.0
        assert m.profit_factor == 0.0
        assert m.largest_win == 0.0


class TestStatisticsCalculator:
    def test_single_zero_profit_trade(self):
        result = _calc([make_trade(0.0)], [10_000, 10_000, 10_000])
        assert result.win_rate == 0
        assert result.profit_factor == 0
        assert result.sharpe_ratio == 0

    def test_rounding(self):
        trades = [make_trade(200), make_trade(-100), make_trade(50)]
        result = _calc(trades, [10_000, 10_200, 10_100, 10_150])
        assert result.win_rate == 66.67
        assert result.profit_factor == 2.5
        assert result.return_on_investment == 1.5
        assert result.strategy == StrategyParams().strategy

    def test_carries_ledger(self):
        trades = [make_trade(10), make_trade(-5)]
        result = _calc(trades, [10_000, 10_010, 10_005])
        assert result.trades == tuple(trades)
        assert len(result.equity_curve) == 3
        assert result.analytics.total == 2


class TestTradeAnalytics:
    def test_empty(self):
        a = calculate_trade_analytics([])
        assert a.total == 0
        assert a.best_trade is None
        assert a.sharpe_ratio == 0.0

    def test_streak_reset_only_by_loss(self):
        profits = [10, 0, 5, -3, 4, 4, 4]
        a = calculate_trade_analytics([make_trade(p, day=i) for i, p in enumerate(profits)])
        # 10, 0 (no reset), 5 -> 2; then 4, 4, 4 -> 3
        assert a.max_win_streak == 3
        assert a.wins == 5
        assert a.losses == 1

    def test_drawdown_peak_minus_trough(self):
        a = calculate_trade_analytics([make_trade(p) for p in [100, -150, 30]])
        # cumulative: 100, -50, -20; peak 100, trough -50
        assert a.max_drawdown == pytest.approx(150)

    def test_summary_figures(self):
        a = calculate_trade_analytics(
            [make_trade(30, hold_days=2), make_trade(-10, hold_days=4)]
        )
        assert a.total_profit == 20
        assert a.win_rate == 50.0
        assert a.avg_profit == 10.0
        assert a.best_trade == 30
        assert a.worst_trade == -10
        assert a.avg_hold_seconds == pytest.approx(3 * 86400)

    def test_sample_std_sharpe(self):
        a = calculate_trade_analytics([make_trade(p) for p in [10, 20, 30]])
        # mean 20, sample std 10
        assert a.sharpe_ratio == pytest.approx(2.0)
