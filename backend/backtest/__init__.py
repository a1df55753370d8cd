"""Backtesting system for the trend strategies.

Only depends on core/ for business logic. Candles come from any
MarketDataSource (CSV files and in-memory sources are provided).

Usage:
    python -m backtest --csv data/BTC-USDT.csv --symbol BTC-USDT --start 2025-01-01 --end 2025-06-30
    python -m backtest --csv data/ --symbol BTC-USDT --optimize
"""

from backtest.engine import BacktestEngine
from backtest.optimizer import OptimizationResult, ParameterGrid, optimize
from backtest.runner import BacktestConfig, BacktestRunner, run_backtest
from backtest.stats import BacktestResult

__all__ = [
    "BacktestConfig",
    "BacktestEngine",
    "BacktestResult",
    "BacktestRunner",
    "OptimizationResult",
    "ParameterGrid",
    "optimize",
    "run_backtest",
]
