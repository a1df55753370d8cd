"""Technical indicators for signal generation.

Inputs are converted to float64 NumPy arrays; every function returns a list
of the same length as its input. The recursive formulas are evaluated in
input order so that repeated runs are bit-identical.
"""

from typing import Sequence

import numpy as np


def ema(values: Sequence[float], period: int) -> list[float]:
    """
    Calculate Exponential Moving Average.

    Seeded with the first value (not an SMA), so every index is defined:
    ema[i] = value[i] * k + ema[i-1] * (1 - k), k = 2 / (period + 1)

    Args:
        values: Sequence of price values (must not be empty)
        period: EMA period

    Returns:
        List of EMA values (same length as input)

    Raises:
        ValueError: If values is empty
    """
    if len(values) == 0:
        raise ValueError("EMA requires at least one value")

    arr = np.asarray(values, dtype=np.float64)
    multiplier = 2.0 / (period + 1)

    result = np.empty_like(arr)
    result[0] = arr[0]
    for i in range(1, len(arr)):
        result[i] = arr[i] * multiplier + result[i - 1] * (1 - multiplier)

    return result.tolist()


def rsi(values: Sequence[float], period: int) -> list[float]:
    """
    Calculate Wilder's smoothed Relative Strength Index.

    The first ``period`` deltas bootstrap the average gain/loss. A zero
    average loss is divided as 1 instead (RSI = 100 - 100 / (1 + avg_gain)),
    which is not the same as clamping to 100.

    Args:
        values: Sequence of price values
        period: RSI period

    Returns:
        List of RSI values (NaN for indices < period, and for every index
        when there are not more than ``period`` values)
    """
    arr = np.asarray(values, dtype=np.float64)
    n = len(arr)
    result = np.full(n, np.nan)
    if n <= period:
        return result.tolist()

    deltas = np.diff(arr)
    gains = float(deltas[:period][deltas[:period] >= 0].sum()) / period
    losses = float(-deltas[:period][deltas[:period] < 0].sum()) / period
    result[period] = 100 - 100 / (1 + gains / (losses or 1))

    for i in range(period + 1, n):
        diff = deltas[i - 1]
        if diff >= 0:
            gains = (gains * (period - 1) + diff) / period
            losses = (losses * (period - 1)) / period
        else:
            gains = (gains * (period - 1)) / period
            losses = (losses * (period - 1) - diff) / period
        result[i] = 100 - 100 / (1 + gains / (losses or 1))

    return result.tolist()


def macd(
    values: Sequence[float],
    fast_period: int,
    slow_period: int,
    signal_period: int,
) -> tuple[list[float], list[float]]:
    """
    Calculate MACD line and signal line.

    MACD = EMA(fast) - EMA(slow), signal = EMA(MACD, signal_period)

    Returns:
        Tuple of (macd_line, signal_line)
    """
    fast = np.asarray(ema(values, fast_period))
    slow = np.asarray(ema(values, slow_period))
    macd_line = (fast - slow).tolist()
    return macd_line, ema(macd_line, signal_period)


def average_volume(volumes: Sequence[float], window: int = 20) -> float:
    """
    Average of the last ``window`` volumes.

    The divisor is always ``window``, even when fewer volumes are available.
    """
    arr = np.asarray(volumes[-window:], dtype=np.float64)
    return float(arr.sum()) / window
