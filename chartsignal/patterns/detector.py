"""
Buy Signal Detector

Runs the band-reversal and capitulation-gap passes over the 25-bar
Bollinger Bands and merges their signals.
"""

from typing import List

import pandas as pd
from loguru import logger

from ..indicators.bollinger_bands import calculate_bollinger_bands
from .band_reversal import detect_band_reversal
from .capitulation_gap import detect_capitulation_gap
from .signal_types import Signal


SIGNAL_BAND_PERIOD = 25


def detect_buy_signals(frame: pd.DataFrame) -> List[Signal]:
    """
    Detect band-reversal and capitulation-gap buy signals.

    Signals are merged by index; when both patterns fire on the same date
    the first in merged order (band reversal) is kept.

    Args:
        frame: Price frame

    Returns:
        Signals ordered by index, at most one per date
    """
    if len(frame) < SIGNAL_BAND_PERIOD:
        return []

    bands = calculate_bollinger_bands(frame, SIGNAL_BAND_PERIOD)
    reversal = detect_band_reversal(frame, bands)
    gaps = detect_capitulation_gap(frame, bands)

    merged = sorted(reversal + gaps, key=lambda s: s.index)
    seen = set()
    signals = []
    for signal in merged:
        if signal.date in seen:
            continue
        seen.add(signal.date)
        signals.append(signal)

    logger.debug(
        f"Buy signals: {len(reversal)} band reversal, {len(gaps)} capitulation gap, "
        f"{len(signals)} after merge"
    )
    return signals
