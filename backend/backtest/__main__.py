"""CLI entry point for the backtesting system.

Reads daily candles from CSV (one file, or a directory of <SYMBOL>.csv),
runs a single backtest or a parameter grid search, and prints a report.

Usage:
    python -m backtest --csv data/BTC-USDT.csv --symbol BTC-USDT --start 2025-01-01 --end 2025-06-30
    python -m backtest --csv data/ --symbol EURUSD --market forex --strategy macd
    python -m backtest --csv data/ --symbol BTC-USDT --optimize --workers 4 -o best.json
"""

import argparse
import asyncio
import logging
import os
import sys
from datetime import datetime, timezone

# Add backend to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pydantic import ValidationError

from core.models.config import StrategyKind, StrategyParams
from core.models.signal import Market

from backtest.config import get_backtest_settings
from backtest.report import ReportFormatter
from backtest.runner import BacktestConfig, BacktestRunner
from backtest.storage.candle_source import CsvCandleSource

# CLI flag -> StrategyParams field
PARAM_FLAGS = {
    "ema_fast": "--ema-fast",
    "ema_slow": "--ema-slow",
    "rsi_period": "--rsi-period",
    "macd_fast": "--macd-fast",
    "macd_slow": "--macd-slow",
    "macd_signal": "--macd-signal",
    "risk_level": "--risk-level",
    "triple_fast": "--triple-fast",
    "triple_mid": "--triple-mid",
    "triple_slow": "--triple-slow",
}


def parse_date(date_str: str) -> datetime:
    """Parse YYYY-MM-DD to timezone-aware datetime."""
    try:
        dt = datetime.strptime(date_str, "%Y-%m-%d")
        return dt.replace(tzinfo=timezone.utc)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid date format: {date_str} (expected YYYY-MM-DD)"
        )


def parse_capital(value: str) -> float:
    """Parse a strictly positive capital amount."""
    try:
        capital = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid capital: {value}")
    if capital <= 0:
        raise argparse.ArgumentTypeError(f"Capital must be positive: {value}")
    return capital


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Backtest and optimize trend strategies on daily candles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m backtest --csv data/BTC-USDT.csv --symbol BTC-USDT --start 2025-01-01 --end 2025-06-30
  python -m backtest --csv data/ --symbol EURUSD --market forex --strategy triple-ema
  python -m backtest --csv data/ --symbol BTC-USDT --optimize --workers 4
        """,
    )

    parser.add_argument(
        "--csv",
        type=str,
        required=True,
        help="CSV file or directory of <SYMBOL>.csv files",
    )
    parser.add_argument("--symbol", type=str, required=True, help="Symbol to test")
    parser.add_argument(
        "--market",
        type=Market,
        choices=list(Market),
        default=Market.CRYPTO,
        help="Market (default: crypto)",
    )
    parser.add_argument(
        "--strategy",
        type=StrategyKind,
        choices=list(StrategyKind),
        default=StrategyKind.EMA_RSI,
        help="Strategy (default: ema-rsi)",
    )
    for field_name, flag in PARAM_FLAGS.items():
        parser.add_argument(flag, dest=field_name, type=int, default=None)

    parser.add_argument("--start", type=parse_date, default=None, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end", type=parse_date, default=None, help="End date (YYYY-MM-DD)")
    parser.add_argument("--capital", type=parse_capital, default=None, help="Initial capital")
    parser.add_argument(
        "--optimize",
        action="store_true",
        help="Grid-search ema-rsi parameters instead of a single run",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker processes for --optimize",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file path for JSON results",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    return parser.parse_args(argv)


def build_params(args: argparse.Namespace) -> StrategyParams:
    """StrategyParams from CLI flags; unset flags keep their defaults."""
    overrides = {
        name: getattr(args, name)
        for name in PARAM_FLAGS
        if getattr(args, name) is not None
    }
    return StrategyParams(strategy=args.strategy, **overrides)


async def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    try:
        params = build_params(args)
    except ValidationError as e:
        print(f"Error: invalid strategy parameters\n{e}")
        sys.exit(1)

    # End date should include the full day
    end_date = args.end.replace(hour=23, minute=59, second=59) if args.end else None

    config = BacktestConfig(
        symbol=args.symbol,
        market=args.market,
        params=params,
        start_date=args.start,
        end_date=end_date,
        initial_capital=args.capital,
    )
    runner = BacktestRunner(
        source=CsvCandleSource(args.csv),
        settings=get_backtest_settings(),
    )

    if args.optimize:
        print(f"\nOptimizing {args.symbol} ({args.market.value})...")
        optimization = await runner.optimize(config, workers=args.workers)
        ReportFormatter.print_optimization(optimization)
        result = optimization.best
    else:
        print(f"\nBacktest: {args.symbol} ({args.market.value}) strategy={params.strategy.value}")
        result = await runner.run(config)
        ReportFormatter.print_console(result)

    if args.output and result is not None:
        ReportFormatter.save_json(result, args.output)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
