"""Position storage for live trading."""

from live.storage.position_store import (
    InMemoryPositionSink,
    InMemoryPositionStore,
    PositionKey,
    PositionStore,
)

__all__ = [
    "InMemoryPositionSink",
    "InMemoryPositionStore",
    "PositionKey",
    "PositionStore",
]
