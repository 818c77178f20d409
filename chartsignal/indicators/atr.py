"""
ATR (Average True Range)

True Range:
    TR = max(high - low, |high - prev_close|, |low - prev_close|)

The first ATR value (index `period`) is the simple mean of TR[1..period];
later values use Wilder smoothing, the same recursion as RSI.
"""

import numpy as np
import pandas as pd

from .common import round_price


def calculate_true_range(frame: pd.DataFrame) -> pd.Series:
    """
    True range per bar; the first bar uses high - low.

    Args:
        frame: Price frame with high, low, close columns

    Returns:
        Unrounded true range series
    """
    high = frame['high'].astype(float)
    low = frame['low'].astype(float)
    prev_close = frame['close'].astype(float).shift(1)
    tr = pd.concat(
        [
            high - low,
            (high - prev_close).abs(),
            (low - prev_close).abs(),
        ],
        axis=1,
    ).max(axis=1)
    return tr.rename('true_range')


def calculate_atr(frame: pd.DataFrame, period: int = 14) -> pd.Series:
    """
    Calculate Wilder's Average True Range.

    Args:
        frame: Price frame with high, low, close columns
        period: ATR period (default: 14)

    Returns:
        ATR series (2 decimals), NaN before index `period`
    """
    if period <= 0:
        raise ValueError("period must be positive")

    n = len(frame)
    out = np.full(n, np.nan)
    if n < period + 1:
        return pd.Series(out, index=frame.index, name='atr')

    tr = calculate_true_range(frame).to_numpy()
    atr = tr[1:period + 1].sum() / period
    out[period] = atr
    for i in range(period + 1, n):
        atr = (atr * (period - 1) + tr[i]) / period
        out[i] = atr

    return pd.Series(round_price(out), index=frame.index, name='atr')
