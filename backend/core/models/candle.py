"""Candle (OHLCV bar) data model."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, field_validator


class Candle(BaseModel):
    """One OHLCV aggregate over a fixed time bucket.

    Timestamps are always timezone-aware; a naive timestamp is taken as UTC.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0
    symbol: str = ""

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def is_bullish(self) -> bool:
        """Check if this is a bullish (green) candle."""
        return self.close > self.open

    @property
    def range_size(self) -> float:
        """Get the full range (high - low) of the candle."""
        return self.high - self.low


def get_closes(candles: list[Candle]) -> list[float]:
    """Get list of close prices."""
    return [c.close for c in candles]


def get_volumes(candles: list[Candle]) -> list[float]:
    """Get list of volumes."""
    return [c.volume for c in candles]
