"""MACD crossover-state strategy.

BUY while the MACD line is above its signal line, SELL while below.
"""

from typing import Sequence

from core.indicators import macd
from core.models.config import StrategyKind, StrategyParams
from core.models.signal import Signal
from core.strategy.registry import register_strategy


def _warmup(params: StrategyParams) -> int:
    return max(params.macd_fast, params.macd_slow, params.macd_signal)


@register_strategy(StrategyKind.MACD, warmup=_warmup)
def detect_macd(
    closes: Sequence[float],
    volumes: Sequence[float],
    params: StrategyParams,
) -> Signal:
    if len(closes) < _warmup(params):
        return Signal.HOLD

    macd_line, signal_line = macd(
        closes, params.macd_fast, params.macd_slow, params.macd_signal
    )
    if macd_line[-1] > signal_line[-1]:
        return Signal.BUY
    if macd_line[-1] < signal_line[-1]:
        return Signal.SELL
    return Signal.HOLD
