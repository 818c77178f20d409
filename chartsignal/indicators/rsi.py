"""
RSI (Relative Strength Index)

Wilder's smoothed RSI on closing prices.

Formula:
    RSI = 100 - (100 / (1 + RS))
    RS = Average Gain / Average Loss

Warm-up:
    The first average is the simple mean of the first `period` close-to-close
    changes, emitted at index `period`. Later averages use Wilder smoothing:
    avg = (avg * (period - 1) + current) / period.

Usage:
    from chartsignal.indicators.rsi import calculate_rsi

    rsi = calculate_rsi(frame, period=14)
"""

import numpy as np
import pandas as pd

from .common import round_price


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def calculate_rsi(frame: pd.DataFrame, period: int = 14) -> pd.Series:
    """
    Calculate Wilder's Relative Strength Index (RSI).

    Args:
        frame: Price frame with a close column
        period: RSI calculation period (default: 14)

    Returns:
        RSI series (0-100 scale, 2 decimals), NaN before index `period`.
        A window with no losses reads 100.
    """
    if period <= 0:
        raise ValueError("period must be positive")

    close = frame['close'].to_numpy(dtype=float)
    n = len(close)
    out = np.full(n, np.nan)
    if n < period + 1:
        return pd.Series(out, index=frame.index, name='rsi')

    delta = np.diff(close)
    gains = np.clip(delta, 0, None)
    losses = np.clip(-delta, 0, None)

    avg_gain = gains[:period].sum() / period
    avg_loss = losses[:period].sum() / period
    out[period] = _rsi_value(avg_gain, avg_loss)

    for i in range(period + 1, n):
        avg_gain = (avg_gain * (period - 1) + gains[i - 1]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i - 1]) / period
        out[i] = _rsi_value(avg_gain, avg_loss)

    return pd.Series(round_price(out), index=frame.index, name='rsi')
