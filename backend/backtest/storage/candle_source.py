"""Candle data sources for backtesting.

Both sources satisfy core.protocols.MarketDataSource and return candles in
ascending time order.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import pandas as pd

from core.models.candle import Candle

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("timestamp", "open", "high", "low", "close", "volume")


class InMemoryCandleSource:
    """Serve candles held in memory, keyed by symbol."""

    def __init__(self, candles: dict[str, Sequence[Candle]] | None = None):
        self._candles: dict[str, list[Candle]] = {
            symbol: sorted(series, key=lambda c: c.timestamp)
            for symbol, series in (candles or {}).items()
        }

    def add(self, symbol: str, candles: Sequence[Candle]) -> None:
        self._candles[symbol] = sorted(candles, key=lambda c: c.timestamp)

    async def get_historical_data(
        self, symbol: str, timeframe: str, limit: int
    ) -> list[Candle]:
        return self._candles.get(symbol, [])[-limit:]

    async def get_current_price(self, symbol: str) -> float | None:
        series = self._candles.get(symbol)
        return series[-1].close if series else None


def load_candles_csv(path: str | Path, symbol: str = "") -> list[Candle]:
    """Load candles from a CSV file.

    Expects columns timestamp, open, high, low, close, volume. Timestamps may
    be unix seconds or any format pandas parses; all are read as UTC.

    Raises:
        ValueError: If required columns are missing
    """
    df = pd.read_csv(path)
    df.columns = [str(c).strip().lower() for c in df.columns]

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{path}: missing columns {', '.join(missing)}")

    if pd.api.types.is_numeric_dtype(df["timestamp"]):
        df["timestamp"] = pd.to_datetime(df["timestamp"], unit="s", utc=True)
    else:
        df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)

    df = df.dropna(subset=["close"]).sort_values("timestamp", kind="stable")

    candles = [
        Candle(
            timestamp=row.timestamp.to_pydatetime(),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
            symbol=symbol,
        )
        for row in df.itertuples(index=False)
    ]
    logger.info(f"Loaded {len(candles):,} candles from {path}")
    return candles


class CsvCandleSource:
    """Read candles from CSV files.

    ``path`` is either a single CSV file (served for every symbol) or a
    directory holding one ``<SYMBOL>.csv`` per symbol.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._cache: dict[str, list[Candle]] = {}

    def _file_for(self, symbol: str) -> Path:
        if self.path.is_dir():
            return self.path / f"{symbol}.csv"
        return self.path

    def _load(self, symbol: str) -> list[Candle]:
        if symbol not in self._cache:
            self._cache[symbol] = load_candles_csv(self._file_for(symbol), symbol)
        return self._cache[symbol]

    async def get_historical_data(
        self, symbol: str, timeframe: str, limit: int
    ) -> list[Candle]:
        return self._load(symbol)[-limit:]

    async def get_current_price(self, symbol: str) -> float | None:
        candles = self._load(symbol)
        return candles[-1].close if candles else None
