"""Report formatting for backtest results.

Outputs results to console (formatted tables) and JSON files. The JSON
layout (camelCase keys) is the wire contract consumed by reporting layers.
"""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum

from core.models.signal import EquityPoint, Trade

from backtest.optimizer import OptimizationResult
from backtest.stats import BacktestResult


class ReportEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def _point_to_dict(point: EquityPoint) -> dict:
    return {"timestamp": point.timestamp.isoformat(), "equity": point.equity}


def _trade_to_dict(trade: Trade) -> dict:
    return {
        "side": trade.side.value,
        "entry": trade.entry_price,
        "size": trade.size,
        "value": trade.value,
        "time": trade.opened_at.isoformat(),
        "symbol": trade.symbol,
        "exit": trade.exit_price,
        "exitTime": trade.exit_time.isoformat(),
        "profit": trade.profit,
        "profitPercent": trade.profit_percent,
    }


class ReportFormatter:
    """Format backtest results for display and export."""

    @staticmethod
    def print_console(result: BacktestResult) -> None:
        """Print formatted report to console."""
        print("\n" + "=" * 70)
        print(f"  BACKTEST RESULTS — {result.symbol} ({result.market.value})")
        print("=" * 70)
        print(f"  Period:   {result.start_date:%Y-%m-%d} → {result.end_date:%Y-%m-%d}")
        print(f"  Strategy: {result.strategy.value}")
        params = ", ".join(f"{k}={v}" for k, v in result.parameters.to_wire().items())
        print(f"  Params:   {params}")

        print("\n" + "-" * 70)
        print("  CAPITAL")
        print("-" * 70)
        print(f"  Initial:        {result.initial_capital:,.2f}")
        print(f"  Final:          {result.final_capital:,.2f}")
        print(f"  Net profit:     {result.net_profit:+,.2f}")
        print(f"  ROI:            {result.return_on_investment:+.2f}%")

        print("\n" + "-" * 70)
        print("  PERFORMANCE")
        print("-" * 70)
        print(f"  Total trades:   {result.total_trades}")
        print(f"  Winning:        {result.winning_trades}")
        print(f"  Losing:         {result.losing_trades}")
        print(f"  Win rate:       {result.win_rate:.1f}%")
        print(f"  Profit factor:  {result.profit_factor:.2f}")
        print(f"  Largest win:    {result.largest_win:,.2f}")
        print(f"  Largest loss:   {result.largest_loss:,.2f}")
        print(f"  Max drawdown:   {result.max_drawdown:.2f}%")
        print(f"  Sharpe ratio:   {result.sharpe_ratio:.2f}")

        a = result.analytics
        if a.total:
            print("\n" + "-" * 70)
            print("  TRADE ANALYTICS")
            print("-" * 70)
            print(f"  Best / worst:   {a.best_trade:+,.2f} / {a.worst_trade:+,.2f}")
            print(f"  Avg profit:     {a.avg_profit:+,.2f}")
            print(f"  Max win streak: {a.max_win_streak}")
            print(f"  Avg hold:       {a.avg_hold_seconds / 86400:.1f} days")

        if result.trades:
            print("\n" + "-" * 70)
            print("  TRADES (last 10)")
            print("-" * 70)
            print(f"  {'Opened':<12} {'Side':<5} {'Entry':>12} {'Exit':>12} {'P&L':>11} {'P&L%':>8}")
            for t in result.trades[-10:]:
                print(
                    f"  {t.opened_at:%Y-%m-%d}   {t.side.value:<5} {t.entry_price:>12.4f} "
                    f"{t.exit_price:>12.4f} {t.profit:>+11.2f} {t.profit_percent:>+8.2%}"
                )

        print("\n" + "=" * 70)

    @staticmethod
    def print_optimization(optimization: OptimizationResult, top: int = 5) -> None:
        """Print the best grid cells, then the full report of the winner."""
        print("\n" + "=" * 70)
        print(f"  OPTIMIZATION — {optimization.evaluated} combinations")
        print("=" * 70)
        ranked = sorted(optimization.scores, key=lambda c: c.score, reverse=True)
        print(f"  {'emaFast':>8} {'emaSlow':>8} {'rsiPeriod':>10} {'riskLevel':>10} {'Score':>10}")
        for cell in ranked[:top]:
            p = cell.params
            print(
                f"  {p.ema_fast:>8} {p.ema_slow:>8} {p.rsi_period:>10} "
                f"{p.risk_level:>10} {cell.score:>10.2f}"
            )
        if optimization.best is not None:
            ReportFormatter.print_console(optimization.best)

    @staticmethod
    def to_dict(result: BacktestResult) -> dict:
        """Convert results to JSON-serializable dict."""
        return {
            "symbol": result.symbol,
            "market": result.market.value,
            "strategy": result.strategy.value,
            "parameters": result.parameters.to_wire(),
            "startDate": result.start_date.strftime("%Y-%m-%d"),
            "endDate": result.end_date.strftime("%Y-%m-%d"),
            "initialCapital": result.initial_capital,
            "finalCapital": result.final_capital,
            "netProfit": result.net_profit,
            "returnOnInvestment": result.return_on_investment,
            "totalTrades": result.total_trades,
            "winningTrades": result.winning_trades,
            "losingTrades": result.losing_trades,
            "winRate": result.win_rate,
            "profitFactor": result.profit_factor,
            "largestWin": result.largest_win,
            "largestLoss": result.largest_loss,
            "maxDrawdown": result.max_drawdown,
            "sharpeRatio": result.sharpe_ratio,
            "equityCurve": [_point_to_dict(p) for p in result.equity_curve],
            "trades": [_trade_to_dict(t) for t in result.trades],
        }

    @staticmethod
    def to_json(result: BacktestResult) -> str:
        return json.dumps(ReportFormatter.to_dict(result), indent=2, cls=ReportEncoder)

    @staticmethod
    def save_json(result: BacktestResult, filepath: str) -> None:
        """Save results to JSON file."""
        data = ReportFormatter.to_dict(result)
        with open(filepath, "w") as f:
            json.dump(data, f, indent=2, cls=ReportEncoder)
        print(f"\nResults saved to {filepath}")
