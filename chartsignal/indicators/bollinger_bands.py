"""
Bollinger Bands

Middle band is the simple moving average; bands sit at 1, 2 and 3 population
standard deviations (divide by `period`) around it, computed together.

Formula:
    Middle Band = SMA(close, period)
    UpperN = Middle + N * StdDev
    LowerN = Middle - N * StdDev

Usage:
    from chartsignal.indicators.bollinger_bands import calculate_bollinger_bands

    bands = calculate_bollinger_bands(frame, period=25)
    bands['lower2']
"""

import numpy as np
import pandas as pd

from .common import round_price


BAND_COLUMNS = ['middle', 'upper1', 'lower1', 'upper2', 'lower2', 'upper3', 'lower3']


def calculate_bollinger_bands(frame: pd.DataFrame, period: int = 25) -> pd.DataFrame:
    """
    Calculate Bollinger Bands at 1, 2 and 3 standard deviations.

    Args:
        frame: Price frame with a close column
        period: Moving average period (default: 25)

    Returns:
        DataFrame with BAND_COLUMNS (2 decimals), NaN before period bars exist
    """
    if period <= 0:
        raise ValueError("period must be positive")

    if len(frame) < period:
        return pd.DataFrame(np.nan, index=frame.index, columns=BAND_COLUMNS)

    close = frame['close'].astype(float)
    rolling = close.rolling(window=period, min_periods=period)
    mean = rolling.mean()
    # ddof=0: population standard deviation; clip float noise on flat windows
    std_dev = rolling.std(ddof=0).clip(lower=0)

    bands = pd.DataFrame(index=frame.index)
    bands['middle'] = round_price(mean)
    for k in (1, 2, 3):
        bands[f'upper{k}'] = round_price(mean + k * std_dev)
        bands[f'lower{k}'] = round_price(mean - k * std_dev)

    return bands[BAND_COLUMNS]
