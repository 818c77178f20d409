"""
Shared indicator helpers: emission rounding and the simple moving average.
"""

from typing import Union

import numpy as np
import pandas as pd


ArrayLike = Union[pd.Series, np.ndarray, float]


def round_price(values: ArrayLike) -> ArrayLike:
    """
    Round half-up to 2 decimals.

    Indicator outputs are rounded once at emission so chart overlays,
    strategies and tests all see the same values. NaN passes through.

    Args:
        values: Scalar, ndarray or Series

    Returns:
        Rounded values of the same type
    """
    return np.floor(values * 100 + 0.5) / 100


def simple_moving_average(close: pd.Series, window: int) -> pd.Series:
    """
    Unrounded simple moving average of closes.

    Args:
        close: Close price series
        window: Number of bars in the average

    Returns:
        Series aligned with close, NaN until window bars exist
    """
    if window <= 0:
        raise ValueError("window must be positive")
    return close.astype(float).rolling(window=window, min_periods=window).mean()
