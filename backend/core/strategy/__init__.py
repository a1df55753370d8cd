"""Strategy plugin system.

Public API:
- detect_trend: Signal for the latest bar under the configured strategy
- required_warmup: Minimum bar count for the configured strategy
- register_strategy: Decorator to register a detector for a StrategyKind
- get_strategy: Registry lookup by StrategyKind
- list_strategies: Registered strategy kinds

Importing this package registers all built-in strategies.
"""

from core.strategy.protocol import Detector, RegisteredStrategy, WarmupFn
from core.strategy.registry import (
    register_strategy,
    get_strategy,
    list_strategies,
    missing_strategies,
)
from core.strategy.detector import detect_trend, required_warmup

# Import built-in strategies to trigger auto-registration
import core.strategy.ema_rsi  # noqa: F401
import core.strategy.macd  # noqa: F401
import core.strategy.volume  # noqa: F401
import core.strategy.triple_ema  # noqa: F401

__all__ = [
    "Detector",
    "RegisteredStrategy",
    "WarmupFn",
    "register_strategy",
    "get_strategy",
    "list_strategies",
    "missing_strategies",
    "detect_trend",
    "required_warmup",
]
