"""
Band Reversal Detector

Oversold mean-reversion pattern on the 2-sigma Bollinger Band.

Pattern Logic:
    - A close below lower2 arms the pattern
    - The next white candle (close > open) fires a signal at the bar low
    - A close back above lower2 disarms it
"""

from typing import List

import pandas as pd

from .signal_types import Signal, SignalKind


def detect_band_reversal(frame: pd.DataFrame, bands: pd.DataFrame) -> List[Signal]:
    """
    Detect band-reversal buy signals.

    Args:
        frame: Price frame
        bands: Output of calculate_bollinger_bands aligned with frame

    Returns:
        Signals ordered by index
    """
    signals: List[Signal] = []
    dates = frame['date'].to_numpy()
    opens = frame['open'].to_numpy(dtype=float)
    lows = frame['low'].to_numpy(dtype=float)
    closes = frame['close'].to_numpy(dtype=float)
    lower2 = bands['lower2'].to_numpy(dtype=float)

    below_band = False
    for i in range(1, len(frame)):
        band = lower2[i]
        if pd.isna(band):
            continue

        if closes[i] < band:
            below_band = True
            continue

        if below_band and closes[i] > opens[i]:
            signals.append(Signal(
                index=i,
                date=str(dates[i]),
                price=float(lows[i]),
                kind=SignalKind.BAND_REVERSAL,
                label="BB reversal",
                description=f"White candle after close below BB -2σ (close: {closes[i]:,.2f})",
            ))
            below_band = False

        if closes[i] > band:
            below_band = False

    return signals
