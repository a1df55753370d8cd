"""Candle sources for backtesting."""

from backtest.storage.candle_source import (
    CsvCandleSource,
    InMemoryCandleSource,
    load_candles_csv,
)

__all__ = ["CsvCandleSource", "InMemoryCandleSource", "load_candles_csv"]
