"""
Indicator Library

Pure functions computing per-bar indicator values from a price frame.

Indicator Contract:
    - Output is aligned with the input frame's index
    - Undefined (warm-up) entries are NaN
    - A defined value depends only on bars up to its index (no repainting)
    - Emitted values are rounded half-up to 2 decimals; accumulators are not

Available Indicators:
    - calculate_rsi: Wilder RSI
    - calculate_macd: MACD line, signal line, histogram
    - calculate_bollinger_bands: SMA with 1/2/3 sigma bands
    - calculate_atr: Wilder ATR
    - simple_moving_average: Unrounded SMA used by strategies
"""

from .atr import calculate_atr, calculate_true_range
from .bollinger_bands import BAND_COLUMNS, calculate_bollinger_bands
from .common import round_price, simple_moving_average
from .macd import calculate_ema, calculate_macd
from .rsi import calculate_rsi

__all__ = [
    "BAND_COLUMNS",
    "calculate_atr",
    "calculate_bollinger_bands",
    "calculate_ema",
    "calculate_macd",
    "calculate_rsi",
    "calculate_true_range",
    "round_price",
    "simple_moving_average",
]
