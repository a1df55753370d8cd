"""Tests for strategy detectors and the registry."""

import pytest
from pydantic import ValidationError

from core.models.config import StrategyKind, StrategyParams
from core.models.signal import Signal
from core.strategy import (
    detect_trend,
    get_strategy,
    list_strategies,
    missing_strategies,
    register_strategy,
    required_warmup,
)

RISING = [float(v) for v in range(1, 31)]
FALLING = [float(v) for v in range(30, 0, -1)]
FLAT_VOLUME = [1000.0] * 30


def params(**kwargs) -> StrategyParams:
    return StrategyParams(**kwargs)


class TestRegistry:
    """Registry completeness and lookup."""

    def test_every_kind_registered(self):
        assert missing_strategies() == []
        assert list_strategies() == list(StrategyKind)

    def test_get_strategy(self):
        entry = get_strategy(StrategyKind.MACD)
        assert entry.kind == StrategyKind.MACD
        assert entry.detect.__name__ == "detect_macd"

    def test_duplicate_registration_rejected(self):
        with pytest.raises(ValueError, match="already registered"):

            @register_strategy(StrategyKind.MACD, warmup=lambda p: 1)
            def other(closes, volumes, params):
                return Signal.HOLD

    def test_unknown_tag_rejected(self):
        with pytest.raises(ValueError):
            StrategyKind("bollinger")


class TestStrategyParams:
    """Parameter defaults and validation."""

    def test_defaults(self):
        p = StrategyParams()
        assert p.strategy == StrategyKind.EMA_RSI
        assert (p.ema_fast, p.ema_slow, p.rsi_period) == (7, 14, 14)
        assert (p.macd_fast, p.macd_slow, p.macd_signal) == (12, 26, 9)
        assert p.risk_level == 1
        assert (p.triple_fast, p.triple_mid, p.triple_slow) == (5, 15, 30)

    def test_camel_case_aliases(self):
        p = StrategyParams.model_validate({"strategy": "triple-ema", "emaFast": 3})
        assert p.strategy == StrategyKind.TRIPLE_EMA
        assert p.ema_fast == 3
        assert p.to_wire()["emaFast"] == 3

    def test_non_positive_period_rejected(self):
        with pytest.raises(ValidationError):
            StrategyParams(ema_fast=0)


class TestInsufficientHistory:
    """Every strategy holds until it has enough bars."""

    @pytest.mark.parametrize("kind", list(StrategyKind))
    def test_hold_below_warmup(self, kind):
        p = params(strategy=kind)
        n = required_warmup(p) - 1
        assert detect_trend(RISING[:n], FLAT_VOLUME[:n], p) == Signal.HOLD

    @pytest.mark.parametrize("kind", list(StrategyKind))
    def test_empty_history(self, kind):
        assert detect_trend([], [], params(strategy=kind)) == Signal.HOLD

    def test_warmups(self):
        assert required_warmup(params()) == 14
        assert required_warmup(params(strategy=StrategyKind.MACD)) == 26
        assert required_warmup(params(strategy=StrategyKind.VOLUME)) == 10
        assert required_warmup(params(strategy=StrategyKind.TRIPLE_EMA)) == 30


class TestEmaRsi:
    """EMA/RSI trend detection."""

    def test_rising_series_buys(self):
        p = params(ema_fast=3, ema_slow=7, rsi_period=5)
        assert detect_trend(RISING, FLAT_VOLUME, p) == Signal.BUY

    def test_falling_series_never_buys(self):
        p = params(ema_fast=3, ema_slow=7, rsi_period=5)
        for n in range(1, len(FALLING) + 1):
            assert detect_trend(FALLING[:n], FLAT_VOLUME[:n], p) != Signal.BUY

    def test_falling_series_with_rsi_zero_holds(self):
        """RSI 0 is not above the 30 sell threshold."""
        p = params(ema_fast=3, ema_slow=7, rsi_period=5)
        assert detect_trend(FALLING, FLAT_VOLUME, p) == Signal.HOLD

    def test_risk_level_narrows_band(self):
        """RSI is 50 on a steady rise: buy below 70/60, hold at 50."""
        assert detect_trend(RISING, FLAT_VOLUME, params(ema_fast=3, ema_slow=7, rsi_period=5, risk_level=2)) == Signal.BUY
        assert detect_trend(RISING, FLAT_VOLUME, params(ema_fast=3, ema_slow=7, rsi_period=5, risk_level=3)) == Signal.HOLD

    def test_rsi_undefined_holds(self):
        """With exactly rsi_period bars the RSI is undefined."""
        p = params(ema_fast=3, ema_slow=5, rsi_period=5)
        assert detect_trend(RISING[:5], FLAT_VOLUME[:5], p) == Signal.HOLD


class TestMacdStrategy:
    def test_rising_buys(self):
        p = params(strategy=StrategyKind.MACD)
        assert detect_trend(RISING, FLAT_VOLUME, p) == Signal.BUY

    def test_falling_sells(self):
        p = params(strategy=StrategyKind.MACD)
        assert detect_trend(FALLING, FLAT_VOLUME, p) == Signal.SELL

    def test_flat_holds(self):
        p = params(strategy=StrategyKind.MACD)
        assert detect_trend([100.0] * 30, FLAT_VOLUME, p) == Signal.HOLD


class TestVolumeStrategy:
    def test_spike_with_rise_buys(self):
        volumes = [100.0] * 19 + [1000.0]
        closes = [float(v) for v in range(1, 21)]
        p = params(strategy=StrategyKind.VOLUME)
        assert detect_trend(closes, volumes, p) == Signal.BUY

    def test_spike_with_fall_sells(self):
        volumes = [100.0] * 19 + [1000.0]
        closes = [float(v) for v in range(20, 0, -1)]
        p = params(strategy=StrategyKind.VOLUME)
        assert detect_trend(closes, volumes, p) == Signal.SELL

    def test_no_spike_holds(self):
        closes = [float(v) for v in range(1, 21)]
        p = params(strategy=StrategyKind.VOLUME)
        assert detect_trend(closes, [100.0] * 20, p) == Signal.HOLD

    def test_spike_with_flat_price_holds(self):
        volumes = [100.0] * 19 + [1000.0]
        p = params(strategy=StrategyKind.VOLUME)
        assert detect_trend([50.0] * 20, volumes, p) == Signal.HOLD

    def test_short_history_spike_uses_window_divisor(self):
        """10 bars: average is sum / 20, so a modest last bar is a spike."""
        volumes = [100.0] * 9 + [200.0]
        closes = [float(v) for v in range(1, 11)]
        p = params(strategy=StrategyKind.VOLUME)
        # avg = 1100 / 20 = 55; 200 > 82.5
        assert detect_trend(closes, volumes, p) == Signal.BUY


class TestTripleEma:
    def test_rising_buys(self):
        p = params(strategy=StrategyKind.TRIPLE_EMA)
        assert detect_trend(RISING, FLAT_VOLUME, p) == Signal.BUY

    def test_falling_sells(self):
        p = params(strategy=StrategyKind.TRIPLE_EMA)
        assert detect_trend(FALLING, FLAT_VOLUME, p) == Signal.SELL

    def test_flat_holds(self):
        p = params(strategy=StrategyKind.TRIPLE_EMA)
        assert detect_trend([100.0] * 30, FLAT_VOLUME, p) == Signal.HOLD
