"""Open-position store and trade sink implementations.

PositionStore holds the currently open position per key. The sink records
opens and closes (a database in production, memory in tests and dry runs).
"""

from __future__ import annotations

import logging
from typing import Protocol

from core.models.signal import Market, Position, Trade

logger = logging.getLogger(__name__)

# (user_id, market, symbol)
PositionKey = tuple[str, Market, str]


class PositionStore(Protocol):
    """Protocol for open-position storage."""

    def get(self, key: PositionKey) -> Position | None: ...

    def put(self, key: PositionKey, position: Position) -> None: ...

    def pop(self, key: PositionKey) -> Position | None: ...


class InMemoryPositionStore:
    """Dict-backed PositionStore."""

    def __init__(self):
        self._positions: dict[PositionKey, Position] = {}

    def get(self, key: PositionKey) -> Position | None:
        return self._positions.get(key)

    def put(self, key: PositionKey, position: Position) -> None:
        self._positions[key] = position

    def pop(self, key: PositionKey) -> Position | None:
        return self._positions.pop(key, None)

    def keys(self) -> list[PositionKey]:
        return list(self._positions)

    def __len__(self) -> int:
        return len(self._positions)


class InMemoryPositionSink:
    """PositionSink that keeps every recorded open and close in lists."""

    def __init__(self):
        self.opened: list[tuple[str, Market, str, Position]] = []
        self.closed: list[tuple[str, Market, str, Trade]] = []

    async def record_open_position(
        self, user_id: str, market: Market, symbol: str, position: Position
    ) -> None:
        self.opened.append((user_id, market, symbol, position))
        logger.debug(f"Recorded open {position.side.value} {symbol} for {user_id}")

    async def record_close_position(
        self, user_id: str, market: Market, symbol: str, trade: Trade
    ) -> float:
        self.closed.append((user_id, market, symbol, trade))
        logger.debug(f"Recorded close {symbol} for {user_id}: {trade.profit:+.4f}")
        return trade.profit

    @property
    def total_profit(self) -> float:
        return sum(trade.profit for *_, trade in self.closed)
