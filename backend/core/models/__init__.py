"""Data models shared by the signal engine, backtester and live manager."""

from core.models.candle import Candle, get_closes, get_volumes
from core.models.config import StrategyKind, StrategyParams
from core.models.signal import (
    EquityPoint,
    Market,
    Position,
    Side,
    Signal,
    Trade,
)

__all__ = [
    "Candle",
    "get_closes",
    "get_volumes",
    "StrategyKind",
    "StrategyParams",
    "EquityPoint",
    "Market",
    "Position",
    "Side",
    "Signal",
    "Trade",
]
