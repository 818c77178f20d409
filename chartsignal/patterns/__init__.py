"""
Pattern Detectors

Discrete buy signals from chart-pattern rules.

Available Detectors:
    - detect_buy_signals: Band reversal + capitulation gap, merged per date
    - detect_band_reversal: Close below BB -2σ, then a white candle
    - detect_capitulation_gap: Gap down with two black candles near BB -2σ
    - detect_cup_with_handle: Completed cup-with-handle breakouts
    - detect_cup_with_handle_forming: Cup with a handle still forming
    - detect_market_sentiment: Close vs 25-bar moving average

Detectors never raise for short series; they return an empty list (or None
for sentiment).
"""

from .band_reversal import detect_band_reversal
from .capitulation_gap import detect_capitulation_gap
from .cup_with_handle import detect_cup_with_handle, detect_cup_with_handle_forming, find_peaks
from .detector import detect_buy_signals
from .market_sentiment import detect_market_sentiment
from .signal_types import CupFormingPattern, CupMeta, FormingStage, Signal, SignalKind

__all__ = [
    "CupFormingPattern",
    "CupMeta",
    "FormingStage",
    "Signal",
    "SignalKind",
    "detect_band_reversal",
    "detect_buy_signals",
    "detect_capitulation_gap",
    "detect_cup_with_handle",
    "detect_cup_with_handle_forming",
    "detect_market_sentiment",
    "find_peaks",
]
