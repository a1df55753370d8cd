"""Technical indicators (pure math, no I/O)."""

from core.indicators.indicators import (
    ema,
    rsi,
    macd,
    average_volume,
)

__all__ = [
    "ema",
    "rsi",
    "macd",
    "average_volume",
]
