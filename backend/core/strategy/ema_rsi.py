"""EMA/RSI trend strategy (the default).

- BUY: fast EMA above slow EMA and RSI below 70 - 10 * (risk_level - 1)
- SELL: fast EMA below slow EMA and RSI above 30 + 10 * (risk_level - 1)

Higher risk levels narrow the RSI band, so fewer overextended entries pass.
"""

from typing import Sequence

from core.indicators import ema, rsi
from core.models.config import StrategyKind, StrategyParams
from core.models.signal import Signal
from core.strategy.registry import register_strategy


def _warmup(params: StrategyParams) -> int:
    return max(params.ema_fast, params.ema_slow, params.rsi_period)


@register_strategy(StrategyKind.EMA_RSI, warmup=_warmup)
def detect_ema_rsi(
    closes: Sequence[float],
    volumes: Sequence[float],
    params: StrategyParams,
) -> Signal:
    if len(closes) < _warmup(params):
        return Signal.HOLD

    fast = ema(closes, params.ema_fast)[-1]
    slow = ema(closes, params.ema_slow)[-1]
    # NaN when history does not exceed rsi_period; NaN comparisons are False
    last_rsi = rsi(closes, params.rsi_period)[-1]

    shift = 10 * (params.risk_level - 1)
    if fast > slow and last_rsi < 70 - shift:
        return Signal.BUY
    if fast < slow and last_rsi > 30 + shift:
        return Signal.SELL
    return Signal.HOLD
