"""Strategy dispatch: one entry point for every strategy variant."""

from __future__ import annotations

from typing import Sequence

from core.models.config import StrategyParams
from core.models.signal import Signal
from core.strategy.registry import get_strategy


def detect_trend(
    closes: Sequence[float],
    volumes: Sequence[float],
    params: StrategyParams,
) -> Signal:
    """
    Decide buy/sell/hold for the latest bar under ``params.strategy``.

    Args:
        closes: Close prices, oldest first
        volumes: Volumes aligned with closes
        params: Strategy parameters (selects the variant)

    Returns:
        Signal for the last bar; HOLD when history is insufficient
    """
    return get_strategy(params.strategy).detect(closes, volumes, params)


def required_warmup(params: StrategyParams) -> int:
    """Minimum number of bars the chosen strategy needs before it can trade."""
    return get_strategy(params.strategy).warmup(params)
