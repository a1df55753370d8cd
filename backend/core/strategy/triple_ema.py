"""Triple EMA alignment strategy.

- BUY: fast > mid > slow
- SELL: fast < mid < slow
"""

from typing import Sequence

from core.indicators import ema
from core.models.config import StrategyKind, StrategyParams
from core.models.signal import Signal
from core.strategy.registry import register_strategy


def _warmup(params: StrategyParams) -> int:
    return max(params.triple_fast, params.triple_mid, params.triple_slow)


@register_strategy(StrategyKind.TRIPLE_EMA, warmup=_warmup)
def detect_triple_ema(
    closes: Sequence[float],
    volumes: Sequence[float],
    params: StrategyParams,
) -> Signal:
    if len(closes) < _warmup(params):
        return Signal.HOLD

    fast = ema(closes, params.triple_fast)[-1]
    mid = ema(closes, params.triple_mid)[-1]
    slow = ema(closes, params.triple_slow)[-1]

    if fast > mid > slow:
        return Signal.BUY
    if fast < mid < slow:
        return Signal.SELL
    return Signal.HOLD
