"""
Capitulation Gap Detector

Selling-climax pattern: a gap down followed by two black candles near the
lower 2-sigma band.

Pattern Logic (signal at bar i >= 2):
    - Bar i-1 opens below the low of bar i-2 (gap down)
    - Bar i-1 and bar i both close below their open
    - close_i <= lower2_i * 1.10
"""

from typing import List

import pandas as pd

from .signal_types import Signal, SignalKind


NEAR_BAND_BUFFER = 1.10


def is_capitulation_gap(frame: pd.DataFrame, bands: pd.DataFrame, i: int) -> bool:
    """
    Check the capitulation-gap conditions at bar i.

    Args:
        frame: Price frame
        bands: Bollinger bands aligned with frame
        i: Bar position

    Returns:
        True when the pattern completes at bar i
    """
    if i < 2:
        return False
    lower2 = bands['lower2'].iat[i]
    if pd.isna(lower2):
        return False

    opens = frame['open']
    closes = frame['close']
    gap_down = opens.iat[i - 1] < frame['low'].iat[i - 2]
    black_first = closes.iat[i - 1] < opens.iat[i - 1]
    black_second = closes.iat[i] < opens.iat[i]
    near_band = closes.iat[i] <= lower2 * NEAR_BAND_BUFFER
    return bool(gap_down and black_first and near_band and black_second)


def detect_capitulation_gap(frame: pd.DataFrame, bands: pd.DataFrame) -> List[Signal]:
    """
    Detect capitulation-gap buy signals.

    Args:
        frame: Price frame
        bands: Output of calculate_bollinger_bands aligned with frame

    Returns:
        Signals ordered by index, priced at the bar low
    """
    signals: List[Signal] = []
    for i in range(2, len(frame)):
        if not is_capitulation_gap(frame, bands, i):
            continue
        close = float(frame['close'].iat[i])
        signals.append(Signal(
            index=i,
            date=str(frame['date'].iat[i]),
            price=float(frame['low'].iat[i]),
            kind=SignalKind.CAPITULATION_GAP,
            label="Gap down, two black",
            description=f"Gap down + consecutive black candles near BB -2σ (close: {close:,.2f})",
        ))
    return signals
