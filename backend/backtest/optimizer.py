"""Exhaustive grid search over ema-rsi strategy parameters.

Every valid cell of the parameter lattice is backtested and scored:

    score = ROI * win_rate / 100 - max_drawdown * 2

The highest score wins; on ties the first cell in grid order is kept.
Cells are independent, so they may be evaluated in worker processes
without changing the outcome.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from itertools import product
from typing import Iterator, Sequence

from pydantic import BaseModel, ConfigDict

from core.models.candle import Candle
from core.models.config import StrategyKind, StrategyParams
from core.models.signal import Market

from backtest.engine import BacktestEngine
from backtest.stats import BacktestResult

logger = logging.getLogger(__name__)


class ParameterGrid(BaseModel):
    """Typed parameter ranges for the ema-rsi grid search."""

    model_config = ConfigDict(frozen=True)

    ema_fast: tuple[int, ...] = (5, 7, 9, 12)
    ema_slow: tuple[int, ...] = (14, 21, 30)
    rsi_period: tuple[int, ...] = (9, 14, 21)
    risk_level: tuple[int, ...] = (1, 2, 3)

    def combinations(self) -> Iterator[StrategyParams]:
        """Yield valid StrategyParams in grid order (fast EMA < slow EMA)."""
        for ema_fast, ema_slow, rsi_period, risk_level in product(
            self.ema_fast, self.ema_slow, self.rsi_period, self.risk_level
        ):
            if ema_fast >= ema_slow:
                continue
            yield StrategyParams(
                strategy=StrategyKind.EMA_RSI,
                ema_fast=ema_fast,
                ema_slow=ema_slow,
                rsi_period=rsi_period,
                risk_level=risk_level,
            )


def score(result: BacktestResult) -> float:
    """Performance score combining return, hit rate and drawdown."""
    return (
        result.return_on_investment * result.win_rate / 100
        - result.max_drawdown * 2
    )


@dataclass(frozen=True)
class CellScore:
    """Score of one grid cell."""

    params: StrategyParams
    score: float


@dataclass(frozen=True)
class OptimizationResult:
    """Outcome of a grid search."""

    best: BacktestResult | None
    best_score: float
    scores: tuple[CellScore, ...] = field(default_factory=tuple)

    @property
    def evaluated(self) -> int:
        return len(self.scores)


@dataclass(frozen=True)
class _Job:
    candles: tuple[Candle, ...]
    market: Market
    symbol: str
    params: StrategyParams
    start_date: datetime
    end_date: datetime
    initial_capital: float


def _evaluate(job: _Job) -> BacktestResult:
    """Run one grid cell (module-level so worker processes can pickle it)."""
    engine = BacktestEngine(
        symbol=job.symbol,
        market=job.market,
        params=job.params,
        initial_capital=job.initial_capital,
    )
    return engine.run(job.candles, job.start_date, job.end_date)


def optimize(
    candles: Sequence[Candle],
    market: Market,
    symbol: str,
    start_date: datetime,
    end_date: datetime,
    initial_capital: float = 10_000.0,
    grid: ParameterGrid | None = None,
    workers: int = 1,
) -> OptimizationResult:
    """
    Backtest every grid cell and keep the best-scoring result.

    Args:
        candles: Candle history shared by all cells
        market: Market of the symbol
        symbol: Symbol being optimized
        start_date: Backtest range start
        end_date: Backtest range end
        initial_capital: Starting balance for each cell
        grid: Parameter lattice (default lattice when None)
        workers: Worker processes; 1 runs sequentially in-process

    Returns:
        OptimizationResult with the best result and every cell's score
    """
    grid = grid or ParameterGrid()
    shared = tuple(candles)
    jobs = [
        _Job(
            candles=shared,
            market=Market(market),
            symbol=symbol,
            params=params,
            start_date=start_date,
            end_date=end_date,
            initial_capital=initial_capital,
        )
        for params in grid.combinations()
    ]

    logger.info(
        f"Optimizing {symbol}: {len(jobs)} parameter combinations "
        f"({workers} worker{'s' if workers != 1 else ''})"
    )
    started = time.time()

    if workers > 1:
        with ProcessPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(_evaluate, jobs))
    else:
        results = [_evaluate(job) for job in jobs]

    best: BacktestResult | None = None
    best_score = float("-inf")
    scores: list[CellScore] = []
    for result in results:
        cell_score = score(result)
        scores.append(CellScore(params=result.parameters, score=cell_score))
        if cell_score > best_score:
            best_score = cell_score
            best = result

    elapsed = time.time() - started
    if best is not None:
        logger.info(
            f"Best {symbol} params: {best.parameters.to_wire()} "
            f"score={best_score:.2f} ({elapsed:.1f}s)"
        )
    else:
        logger.warning(f"No valid parameter combinations for {symbol}")

    return OptimizationResult(best=best, best_score=best_score, scores=tuple(scores))
