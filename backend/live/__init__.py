"""Live position management for the trend bot.

Holds at most one open position per (user, market, symbol) and applies the
shared exit rules from core.risk against live prices.
"""

from live.config import LiveSettings, get_live_settings
from live.services.position_manager import PositionAlreadyOpenError, PositionManager
from live.storage.position_store import InMemoryPositionSink, InMemoryPositionStore

__all__ = [
    "InMemoryPositionSink",
    "InMemoryPositionStore",
    "LiveSettings",
    "PositionAlreadyOpenError",
    "PositionManager",
    "get_live_settings",
]
