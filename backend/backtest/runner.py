"""Backtest entry points.

- run_backtest: pure function over an in-memory candle series
- BacktestRunner: fetches candles from a MarketDataSource, then runs the
  engine or the optimizer
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Sequence

from core.models.candle import Candle
from core.models.config import StrategyParams
from core.models.signal import Market
from core.protocols import MarketDataSource

from backtest.config import BacktestSettings, get_backtest_settings
from backtest.engine import BacktestEngine
from backtest.optimizer import OptimizationResult, ParameterGrid, optimize
from backtest.stats import BacktestResult

logger = logging.getLogger(__name__)


@dataclass
class BacktestConfig:
    """Configuration for a backtest run.

    Missing dates default to the settings' lookback window ending now;
    a missing initial capital defaults to the settings value.
    """

    symbol: str
    market: Market
    params: StrategyParams = field(default_factory=StrategyParams)
    start_date: datetime | None = None
    end_date: datetime | None = None
    initial_capital: float | None = None


def _as_utc(dt: datetime) -> datetime:
    """Treat a naive datetime as UTC, like candle timestamps."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def resolve_date_range(
    start_date: datetime | None,
    end_date: datetime | None,
    lookback_days: int,
) -> tuple[datetime, datetime]:
    """Fill in a missing end (now, UTC) and start (end - lookback_days)."""
    end = _as_utc(end_date) if end_date else datetime.now(timezone.utc)
    start = _as_utc(start_date) if start_date else end - timedelta(days=lookback_days)
    return start, end


def run_backtest(
    candles: Sequence[Candle],
    market: Market,
    symbol: str,
    params: StrategyParams,
    start_date: datetime,
    end_date: datetime,
    initial_capital: float = 10_000.0,
) -> BacktestResult:
    """Backtest one strategy configuration over a candle series."""
    engine = BacktestEngine(
        symbol=symbol,
        market=market,
        params=params,
        initial_capital=initial_capital,
    )
    return engine.run(candles, start_date, end_date)


class BacktestRunner:
    """Run backtests against candles from a market data source."""

    def __init__(
        self,
        source: MarketDataSource,
        settings: BacktestSettings | None = None,
    ):
        self._source = source
        self.settings = settings or get_backtest_settings()

    async def load_candles(self, symbol: str, market: Market) -> list[Candle]:
        """Fetch the daily candle history for a symbol."""
        timeframe = self.settings.timeframe_for(market)
        candles = await self._source.get_historical_data(
            symbol, timeframe, self.settings.candle_limit
        )
        if not candles:
            logger.warning(f"[{symbol}] No candles returned ({timeframe})")
        else:
            logger.info(f"[{symbol}] Loaded {len(candles):,} {timeframe} candles")
        return candles

    def _resolve(self, config: BacktestConfig) -> tuple[datetime, datetime, float]:
        start, end = resolve_date_range(
            config.start_date, config.end_date, self.settings.default_lookback_days
        )
        capital = (
            config.initial_capital
            if config.initial_capital is not None
            else self.settings.initial_capital
        )
        return start, end, capital

    async def run(self, config: BacktestConfig) -> BacktestResult:
        """Execute a single backtest."""
        started = time.time()
        start, end, capital = self._resolve(config)

        logger.info(
            f"Starting backtest {config.symbol} ({Market(config.market).value}) "
            f"{start:%Y-%m-%d} → {end:%Y-%m-%d} "
            f"strategy={config.params.strategy.value}"
        )

        candles = await self.load_candles(config.symbol, config.market)
        result = run_backtest(
            candles,
            market=config.market,
            symbol=config.symbol,
            params=config.params,
            start_date=start,
            end_date=end,
            initial_capital=capital,
        )

        elapsed = time.time() - started
        logger.info(
            f"Backtest {config.symbol} completed in {elapsed:.1f}s: "
            f"{result.total_trades} trades, ROI {result.return_on_investment:+.2f}%"
        )
        return result

    async def optimize(
        self,
        config: BacktestConfig,
        grid: ParameterGrid | None = None,
        workers: int | None = None,
    ) -> OptimizationResult:
        """Grid-search strategy parameters; config.params is ignored."""
        start, end, capital = self._resolve(config)
        candles = await self.load_candles(config.symbol, config.market)
        return optimize(
            candles,
            market=config.market,
            symbol=config.symbol,
            start_date=start,
            end_date=end,
            initial_capital=capital,
            grid=grid,
            workers=workers if workers is not None else self.settings.optimizer_workers,
        )
