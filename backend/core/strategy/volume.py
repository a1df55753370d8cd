"""Volume spike strategy.

A spike is a last-bar volume above 1.5x the 20-bar average volume. The
direction comes from the close over the last 5 bars.
"""

from typing import Sequence

from core.indicators import average_volume
from core.models.config import StrategyKind, StrategyParams
from core.models.signal import Signal
from core.strategy.registry import register_strategy

MIN_BARS = 10
PRICE_WINDOW = 5
VOLUME_WINDOW = 20
SPIKE_MULTIPLIER = 1.5


@register_strategy(StrategyKind.VOLUME, warmup=lambda params: MIN_BARS)
def detect_volume(
    closes: Sequence[float],
    volumes: Sequence[float],
    params: StrategyParams,
) -> Signal:
    if len(closes) < MIN_BARS:
        return Signal.HOLD

    avg_vol = average_volume(volumes, VOLUME_WINDOW)
    spike = volumes[-1] > SPIKE_MULTIPLIER * avg_vol
    window_open = closes[-PRICE_WINDOW]
    if spike and closes[-1] > window_open:
        return Signal.BUY
    if spike and closes[-1] < window_open:
        return Signal.SELL
    return Signal.HOLD
