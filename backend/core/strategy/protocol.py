"""Strategy protocol defining the interface every signal strategy implements.

This module provides:
- Detector: callable turning a price/volume history into a Signal
- WarmupFn: callable returning the minimum bar count a strategy needs
- RegisteredStrategy: the pair stored in the registry for each StrategyKind
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from core.models.config import StrategyKind, StrategyParams
from core.models.signal import Signal


class Detector(Protocol):
    """Pure function deciding buy/sell/hold for the latest bar.

    Detectors are total: with too little history they return HOLD instead
    of raising.
    """

    def __call__(
        self,
        closes: Sequence[float],
        volumes: Sequence[float],
        params: StrategyParams,
    ) -> Signal: ...


WarmupFn = Callable[[StrategyParams], int]


@dataclass(frozen=True)
class RegisteredStrategy:
    """Registry entry for one strategy variant.

    Attributes:
        kind: Strategy identifier.
        detect: Signal detector for the latest bar.
        warmup: Minimum number of bars before detect can emit buy/sell.
    """

    kind: StrategyKind
    detect: Detector
    warmup: WarmupFn
