"""
MACD (Moving Average Convergence Divergence)

Formula:
    MACD = EMA(short) - EMA(long)
    Signal = EMA(MACD, signal)
    Histogram = MACD - Signal

EMAs use pandas ewm(adjust=False), i.e. they are seeded with the first value
of their input rather than a simple-average seed. The MACD line is emitted
from index long-1; the signal line is an EMA over the MACD line starting at
that index and is emitted signal-1 bars later.

Usage:
    from chartsignal.indicators.macd import calculate_macd

    macd = calculate_macd(frame, 12, 26, 9)
    macd['histogram']
"""

import numpy as np
import pandas as pd

from .common import round_price


def calculate_ema(values: pd.Series, period: int) -> pd.Series:
    """
    Exponential moving average seeded with the first value.

    Args:
        values: Input series
        period: EMA span (alpha = 2 / (period + 1))

    Returns:
        Unrounded EMA series, defined from the first element
    """
    if period <= 0:
        raise ValueError("period must be positive")
    return values.astype(float).ewm(span=period, adjust=False).mean()


def calculate_macd(
    frame: pd.DataFrame,
    short_period: int = 12,
    long_period: int = 26,
    signal_period: int = 9
) -> pd.DataFrame:
    """
    Calculate MACD line, signal line and histogram.

    Args:
        frame: Price frame with a close column
        short_period: Fast EMA period (default: 12)
        long_period: Slow EMA period (default: 26)
        signal_period: Signal line EMA period (default: 9)

    Returns:
        DataFrame with columns 'macd', 'signal', 'histogram' (2 decimals),
        NaN where not yet defined
    """
    n = len(frame)
    result = pd.DataFrame(
        np.nan, index=frame.index, columns=['macd', 'signal', 'histogram']
    )
    if n < long_period:
        return result

    close = frame['close'].astype(float).reset_index(drop=True)
    macd_line = calculate_ema(close, short_period) - calculate_ema(close, long_period)

    start = long_period - 1
    signal_line = calculate_ema(macd_line.iloc[start:], signal_period)

    macd = np.full(n, np.nan)
    signal = np.full(n, np.nan)
    macd[start:] = round_price(macd_line.to_numpy()[start:])
    signal_start = start + signal_period - 1
    if signal_start < n:
        signal[signal_start:] = round_price(
            signal_line.to_numpy()[signal_period - 1:]
        )

    result['macd'] = macd
    result['signal'] = signal
    result['histogram'] = round_price(macd - signal)
    return result
