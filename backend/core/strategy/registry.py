"""Strategy registry mapping each StrategyKind to its detector.

Usage:
    @register_strategy(StrategyKind.MACD, warmup=lambda p: p.macd_slow)
    def detect_macd(closes, volumes, params) -> Signal:
        ...

    entry = get_strategy(StrategyKind.MACD)
    entry.detect(closes, volumes, params)
"""

from __future__ import annotations

import logging

from core.models.config import StrategyKind
from core.strategy.protocol import Detector, RegisteredStrategy, WarmupFn

logger = logging.getLogger(__name__)

# Global registry: StrategyKind -> RegisteredStrategy
_REGISTRY: dict[StrategyKind, RegisteredStrategy] = {}


def register_strategy(kind: StrategyKind, warmup: WarmupFn):
    """Decorator to register a detector function for a strategy kind.

    Args:
        kind: Strategy variant the detector implements.
        warmup: Function returning the minimum bar count for given params.

    Returns:
        Decorator that registers the function and returns it unchanged.

    Raises:
        ValueError: If the kind already has a registered detector.
    """

    def decorator(func: Detector) -> Detector:
        if kind in _REGISTRY:
            raise ValueError(
                f"Strategy '{kind.value}' is already registered by "
                f"{_REGISTRY[kind].detect.__name__}"
            )
        _REGISTRY[kind] = RegisteredStrategy(kind=kind, detect=func, warmup=warmup)
        logger.debug("Registered strategy: %s -> %s", kind.value, func.__name__)
        return func

    return decorator


def get_strategy(kind: StrategyKind) -> RegisteredStrategy:
    """Get the registry entry for a strategy kind.

    Raises:
        KeyError: If no detector is registered for the kind.
    """
    entry = _REGISTRY.get(kind)
    if entry is None:
        available = ", ".join(k.value for k in list_strategies()) or "(none)"
        raise KeyError(f"Unknown strategy '{kind}'. Available: {available}")
    return entry


def list_strategies() -> list[StrategyKind]:
    """Return registered strategy kinds in declaration order."""
    return [kind for kind in StrategyKind if kind in _REGISTRY]


def missing_strategies() -> list[StrategyKind]:
    """Return strategy kinds that have no registered detector."""
    return [kind for kind in StrategyKind if kind not in _REGISTRY]
