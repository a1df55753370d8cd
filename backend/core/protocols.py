"""Interfaces to external collaborators.

The signal engine never talks to an exchange or a database directly. Market
data and position persistence come in through these protocols.
"""

from __future__ import annotations

from typing import Protocol

from core.models.candle import Candle
from core.models.signal import Market, Position, Trade


class MarketDataSource(Protocol):
    """Protocol for market data access."""

    async def get_historical_data(
        self, symbol: str, timeframe: str, limit: int
    ) -> list[Candle]:
        """Return up to ``limit`` candles in ascending time order."""
        ...

    async def get_current_price(self, symbol: str) -> float | None:
        """Return the latest price, or None when unavailable."""
        ...


class PositionSink(Protocol):
    """Protocol for recording live positions."""

    async def record_open_position(
        self, user_id: str, market: Market, symbol: str, position: Position
    ) -> None: ...

    async def record_close_position(
        self, user_id: str, market: Market, symbol: str, trade: Trade
    ) -> float:
        """Persist a closed trade and return its realized profit."""
        ...
