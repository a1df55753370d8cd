"""Live position manager.

Enforces one open position per (user, market, symbol), sizes new positions
and evaluates open ones against live prices using the shared exit rules.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from core.models.signal import Market, Position, Side
from core.protocols import MarketDataSource, PositionSink
from core.risk import TradeAction, evaluate_exit, size_position
from live.config import LiveSettings, get_live_settings
from live.storage.position_store import PositionKey, PositionStore

logger = logging.getLogger(__name__)


class PositionAlreadyOpenError(RuntimeError):
    """Raised when opening a position on a key that already holds one."""


class PositionManager:
    """
    Open, evaluate and close live positions.

    Positions live in the injected store; opens and closes are recorded
    through the sink. Each key gets its own asyncio.Lock so a check-then-open
    on one symbol never races another open on the same key. A key's lock is
    dropped once no caller holds or waits on it.
    """

    def __init__(
        self,
        store: PositionStore,
        source: MarketDataSource,
        sink: PositionSink,
        settings: LiveSettings | None = None,
    ):
        self.store = store
        self.source = source
        self.sink = sink
        self.settings = settings or get_live_settings()
        self._locks: dict[PositionKey, asyncio.Lock] = {}
        self._lock_users: dict[PositionKey, int] = {}

    def _key(self, user_id: str, market: Market, symbol: str) -> PositionKey:
        return (user_id, Market(market), symbol)

    @asynccontextmanager
    async def _guard(self, key: PositionKey) -> AsyncIterator[None]:
        """Hold the per-key lock; forget it when the last user leaves."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if self._lock_users[key] == 0:
                del self._lock_users[key]
                del self._locks[key]

    def can_open_trade(self, user_id: str, market: Market, symbol: str) -> bool:
        """True if no position is open for this exact user/market/symbol."""
        return self.store.get(self._key(user_id, market, symbol)) is None

    def get_open_position(
        self, user_id: str, market: Market, symbol: str
    ) -> Position | None:
        return self.store.get(self._key(user_id, market, symbol))

    def position_size(
        self,
        available_balance: float,
        market: Market,
        risk_level: int,
        stop_loss_percent: float | None = None,
    ) -> float:
        """Size a new position with the configured sizing stop distance."""
        if stop_loss_percent is None:
            stop_loss_percent = self.settings.sizing_stop_loss_percent
        return size_position(
            available_balance,
            risk_level,
            stop_loss_percent=stop_loss_percent,
            market=market,
        )

    async def open_position(
        self,
        user_id: str,
        market: Market,
        symbol: str,
        side: Side,
        price: float,
        size: float,
        opened_at: datetime | None = None,
    ) -> Position:
        """
        Open a position and record it through the sink.

        Raises:
            ValueError: symbol is not a major pair of the market
            PositionAlreadyOpenError: a position is already open for the key
        """
        if not self.settings.is_major_pair(market, symbol):
            raise ValueError(f"Only major pairs are allowed for trading: {symbol}")

        key = self._key(user_id, market, symbol)
        async with self._guard(key):
            if self.store.get(key) is not None:
                raise PositionAlreadyOpenError(
                    f"Position already open for {user_id} {key[1].value} {symbol}"
                )

            position = Position(
                side=Side(side),
                entry_price=price,
                size=size,
                value=size,
                opened_at=opened_at or datetime.now(timezone.utc),
                symbol=symbol,
            )
            await self.sink.record_open_position(user_id, key[1], symbol, position)
            self.store.put(key, position)

        logger.info(
            f"Opened {position.side.value.upper()} {symbol} for {user_id} "
            f"@ {price:.6f} size={size:.4f}"
        )
        return position

    async def close_position(
        self,
        user_id: str,
        market: Market,
        symbol: str,
        exit_price: float,
        exit_time: datetime | None = None,
    ) -> float | None:
        """
        Close the open position at exit_price.

        Returns:
            Realized profit as reported by the sink, or None if nothing is open
        """
        key = self._key(user_id, market, symbol)
        async with self._guard(key):
            position = self.store.get(key)
            if position is None:
                return None

            direction = position.side.direction
            profit = (exit_price - position.entry_price) * direction * position.size
            pnl_pct = (
                (exit_price - position.entry_price) / position.entry_price * direction
            )
            trade = position.close(
                exit_price=exit_price,
                exit_time=exit_time or datetime.now(timezone.utc),
                profit=profit,
                profit_percent=pnl_pct,
            )
            realized = await self.sink.record_close_position(
                user_id, key[1], symbol, trade
            )
            self.store.pop(key)

        logger.info(
            f"Closed {trade.side.value.upper()} {symbol} for {user_id} "
            f"@ {exit_price:.6f} profit={realized:+.4f}"
        )
        return realized

    async def manage_trade(
        self,
        user_id: str,
        market: Market,
        symbol: str,
        target_profit: float | None = None,
        stop_loss: float | None = None,
    ) -> TradeAction | None:
        """
        Evaluate the open position against the current price.

        Returns None when nothing is open. The position is not closed here;
        callers act on a close action via close_position.
        """
        key = self._key(user_id, market, symbol)
        if self.store.get(key) is None:
            return None

        current_price = await self.source.get_current_price(symbol)
        async with self._guard(key):
            position = self.store.get(key)
            if position is None:
                return None
            if current_price:
                position = position.with_price(current_price)
                self.store.put(key, position)

        if not current_price:
            logger.warning(f"No current price for {symbol}")

        action = evaluate_exit(
            position,
            current_price,
            target_profit=self.settings.target_profit if target_profit is None else target_profit,
            stop_loss=self.settings.stop_loss if stop_loss is None else stop_loss,
            trailing_percent=self.settings.trailing_percent,
        )
        logger.debug(f"{symbol} {user_id}: {action.action.value} pnl={action.profit:+.4f}")
        return action

    async def flatten(self, user_id: str, market: Market, symbol: str) -> float | None:
        """Close any open position at the current price, if one is available."""
        if self.get_open_position(user_id, market, symbol) is None:
            return None

        current_price = await self.source.get_current_price(symbol)
        if not current_price:
            logger.warning(f"Cannot flatten {symbol} for {user_id}: no current price")
            return None
        return await self.close_position(user_id, market, symbol, current_price)
