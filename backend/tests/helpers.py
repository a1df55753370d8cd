"""Shared candle factory for tests."""

from datetime import datetime, timedelta, timezone

from core.models.candle import Candle

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_candles(
    closes: list[float],
    volumes: list[float] | None = None,
    symbol: str = "BTC-USDT",
    start: datetime = BASE_TIME,
) -> list[Candle]:
    """Daily candles with the given closes (open = previous close)."""
    if volumes is None:
        volumes = [1000.0] * len(closes)
    candles = []
    prev = closes[0] if closes else 0.0
    for i, (close, volume) in enumerate(zip(closes, volumes)):
        candles.append(
            Candle(
                timestamp=start + timedelta(days=i),
                open=prev,
                high=max(prev, close),
                low=min(prev, close),
                close=close,
                volume=volume,
                symbol=symbol,
            )
        )
        prev = close
    return candles
