"""
Signal Data Classes

Immutable records emitted by the pattern detectors.

Classes:
  - SignalKind: Pattern that produced a signal
  - CupMeta: Structure of a detected cup-with-handle
  - Signal: One buy signal at a bar
  - FormingStage: Progress of a forming cup-with-handle
  - CupFormingPattern: Cup-with-handle whose breakout has not happened yet
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SignalKind(str, Enum):
    """Pattern type of a buy signal."""

    BAND_REVERSAL = "band_reversal"
    CAPITULATION_GAP = "capitulation_gap"
    CUP_WITH_HANDLE = "cup_with_handle"


@dataclass(frozen=True)
class CupMeta:
    """
    Cup-with-handle structure.

    Attributes:
        left_rim_idx / left_rim_high: Left rim bar and its high
        bottom_idx / bottom_low: Lowest bar inside the cup and its low
        right_rim_idx / right_rim_high: Right rim bar and its high
        cup_days: Bars between the rims
        depth_pct: Bottom depth below the higher rim (percent)
        handle_days: Bars from the right rim to the signal bar
        pullback_pct: Handle retrace from the right rim high (percent)
    """

    left_rim_idx: int
    left_rim_high: float
    bottom_idx: int
    bottom_low: float
    right_rim_idx: int
    right_rim_high: float
    cup_days: int
    depth_pct: float
    handle_days: int = 0
    pullback_pct: float = 0.0


@dataclass(frozen=True)
class Signal:
    """
    Buy signal emitted by a pattern detector.

    Attributes:
        index: Bar position in the price frame
        date: Bar date
        price: Reference price (bar low for reversal patterns, close for breakouts)
        kind: Pattern type
        label: Short chart label
        description: Human-readable summary
        cup_meta: Cup structure (cup-with-handle signals only)
    """

    index: int
    date: str
    price: float
    kind: SignalKind
    label: str
    description: str
    cup_meta: Optional[CupMeta] = None


class FormingStage(str, Enum):
    """Stage of a forming cup-with-handle."""

    HANDLE_FORMING = "handle_forming"
    HANDLE_READY = "handle_ready"


@dataclass(frozen=True)
class CupFormingPattern:
    """
    Cup-with-handle whose handle is still forming.

    Attributes:
        cup_meta: Cup structure at the latest bar
        current_price: Latest close
        handle_days: Bars since the right rim
        pullback_pct: Handle retrace so far (percent)
        breakout_price: Right rim high, the level a breakout must close above
        distance_to_breakout_pct: (breakout_price - close) / breakout_price (percent)
        cup_depth_pct: Bottom depth below the higher rim (percent)
        cup_days: Bars between the rims
        left_rim_date / right_rim_date / bottom_date: Dates of the cup points
        stage: HANDLE_READY when close is near the breakout level
    """

    cup_meta: CupMeta
    current_price: float
    handle_days: int
    pullback_pct: float
    breakout_price: float
    distance_to_breakout_pct: float
    cup_depth_pct: float
    cup_days: int
    left_rim_date: str
    right_rim_date: str
    bottom_date: str
    stage: FormingStage
