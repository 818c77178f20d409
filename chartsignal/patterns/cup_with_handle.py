"""
Cup-with-Handle Detector

Finds U-shaped bases between two comparable highs (the rims), followed by a
shallow handle and a volume-confirmed breakout above the right rim.

Pattern Logic:
    1. Rims: local peaks whose high is not exceeded within +/- peak_window bars
    2. Cup: rims 15-120 bars apart, highs within 6%, bottom 8%-50% below the
       higher rim and located in the middle 70% of the span
    3. Uptrend (when the left rim has 200 bars of history): left rim high
       above the 50-bar close average, which must exceed the 200-bar average
    4. Handle: 3-25 bars after the right rim, retrace 1%-12%
    5. Breakout: white candle closing above the right rim high on volume
       >= 1.5x the trailing 20-bar average, at or above the trailing 252-bar high

detect_cup_with_handle_forming reports cups whose handle is still building.

Usage:
    from chartsignal.patterns.cup_with_handle import detect_cup_with_handle

    signals = detect_cup_with_handle(frame)
    for s in signals:
        print(s.date, s.cup_meta.depth_pct)
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional

import numpy as np
import pandas as pd

from ..backtest_config import CupHandleConfig
from .signal_types import CupFormingPattern, CupMeta, FormingStage, Signal, SignalKind


DEFAULT_CUP_CONFIG = CupHandleConfig()


@dataclass(frozen=True)
class _Cup:
    left: int
    right: int
    bottom: int
    left_high: float
    right_high: float
    bottom_low: float
    depth: float

    @property
    def days(self) -> int:
        return self.right - self.left


def find_peaks(highs: np.ndarray, window: int, last: int) -> List[int]:
    """
    Local peaks: bars whose high no bar within +/- window exceeds.

    Ties do not disqualify a peak. Candidates run from `window` up to and
    excluding `last`.

    Args:
        highs: High prices
        window: Bars checked on each side
        last: Exclusive upper bound for candidate positions

    Returns:
        Peak positions in ascending order
    """
    n = len(highs)
    peaks = []
    for i in range(window, last):
        lo = max(0, i - window)
        hi = min(n - 1, i + window)
        if highs[lo:hi + 1].max() <= highs[i]:
            peaks.append(i)
    return peaks


def _in_uptrend(closes: np.ndarray, left: int, left_high: float, config: CupHandleConfig) -> bool:
    if not config.require_uptrend or left < config.uptrend_ma_long:
        return True
    ma_short = closes[left - config.uptrend_ma_short:left].mean()
    ma_long = closes[left - config.uptrend_ma_long:left].mean()
    return left_high >= ma_short and ma_short > ma_long


def _iter_cups(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    peaks: List[int],
    config: CupHandleConfig,
    max_rim_age: Optional[int] = None,
) -> Iterator[_Cup]:
    """Yield valid cups, left rim first, then right rim ascending."""
    last = len(closes) - 1
    for p1, left in enumerate(peaks):
        for right in peaks[p1 + 1:]:
            cup_days = right - left
            if cup_days > config.cup_max_days:
                break
            if cup_days < config.cup_min_days:
                continue
            if max_rim_age is not None and last - right > max_rim_age:
                continue

            left_high = highs[left]
            right_high = highs[right]
            if not _in_uptrend(closes, left, left_high, config):
                continue

            rim_diff = abs(left_high - right_high) / max(left_high, right_high)
            if rim_diff > config.rim_tolerance:
                continue

            # First occurrence of the lowest low strictly between the rims
            bottom = left + 1 + int(np.argmin(lows[left + 1:right]))
            bottom_low = lows[bottom]

            rim_level = max(left_high, right_high)
            depth = (rim_level - bottom_low) / rim_level
            if depth < config.cup_min_depth or depth > config.cup_max_depth:
                continue

            bottom_pos = (bottom - left) / cup_days
            if bottom_pos < config.bottom_min_pos or bottom_pos > config.bottom_max_pos:
                continue

            yield _Cup(
                left=left,
                right=right,
                bottom=bottom,
                left_high=float(left_high),
                right_high=float(right_high),
                bottom_low=float(bottom_low),
                depth=float(depth),
            )


def _cup_meta(cup: _Cup, handle_days: int, pullback: float) -> CupMeta:
    return CupMeta(
        left_rim_idx=cup.left,
        left_rim_high=cup.left_high,
        bottom_idx=cup.bottom,
        bottom_low=cup.bottom_low,
        right_rim_idx=cup.right,
        right_rim_high=cup.right_high,
        cup_days=cup.days,
        depth_pct=cup.depth * 100,
        handle_days=handle_days,
        pullback_pct=pullback * 100,
    )


def _find_breakout(
    frame: pd.DataFrame,
    cup: _Cup,
    config: CupHandleConfig,
) -> Optional[Signal]:
    """First handle breakout after the right rim, or None."""
    opens = frame['open'].to_numpy(dtype=float)
    highs = frame['high'].to_numpy(dtype=float)
    lows = frame['low'].to_numpy(dtype=float)
    closes = frame['close'].to_numpy(dtype=float)
    volumes = frame['volume'].to_numpy(dtype=float)

    right_high = cup.right_high
    search_end = min(cup.right + config.handle_max_days, len(frame) - 1)
    handle_low = np.inf

    for h in range(cup.right + 1, search_end + 1):
        handle_low = min(handle_low, lows[h])
        if h - cup.right < config.handle_min_days:
            continue

        pullback = (right_high - handle_low) / right_high
        if pullback > config.handle_max_pullback:
            break
        if pullback < config.handle_min_pullback:
            continue

        if not (closes[h] > right_high and closes[h] > opens[h]):
            continue

        vol_start = max(0, h - config.volume_lookback)
        avg_volume = volumes[vol_start:h].mean()
        if avg_volume > 0 and volumes[h] < avg_volume * config.breakout_volume_ratio:
            continue

        if config.require_52w_high:
            trailing_high = highs[max(0, h - config.high_lookback):h].max()
            if closes[h] < trailing_high:
                continue

        return Signal(
            index=h,
            date=str(frame['date'].iat[h]),
            price=float(closes[h]),
            kind=SignalKind.CUP_WITH_HANDLE,
            label="CWH",
            description=(
                f"Cup {cup.days} bars, depth {cup.depth * 100:.0f}%, "
                f"handle {pullback * 100:.1f}%"
            ),
            cup_meta=_cup_meta(cup, h - cup.right, pullback),
        )

    return None


def detect_cup_with_handle(
    frame: pd.DataFrame,
    config: CupHandleConfig = DEFAULT_CUP_CONFIG,
) -> List[Signal]:
    """
    Detect completed cup-with-handle breakouts.

    Each cup contributes at most its first breakout. Candidates are
    enumerated left rim first; a signal within dedup_bars of the previously
    kept one is dropped.

    Args:
        frame: Price frame
        config: Detector thresholds

    Returns:
        Cup-with-handle signals (empty under min_bars bars)
    """
    if len(frame) < config.min_bars:
        return []

    highs = frame['high'].to_numpy(dtype=float)
    lows = frame['low'].to_numpy(dtype=float)
    closes = frame['close'].to_numpy(dtype=float)
    peaks = find_peaks(highs, config.peak_window, len(frame) - 1)

    candidates = []
    for cup in _iter_cups(highs, lows, closes, peaks, config):
        signal = _find_breakout(frame, cup, config)
        if signal is not None:
            candidates.append(signal)

    kept: List[Signal] = []
    for signal in candidates:
        if not kept or signal.index - kept[-1].index > config.dedup_bars:
            kept.append(signal)
    return kept


def detect_cup_with_handle_forming(
    frame: pd.DataFrame,
    config: CupHandleConfig = DEFAULT_CUP_CONFIG,
) -> List[CupFormingPattern]:
    """
    Detect cups whose handle is forming at the latest bar.

    Rims must be confirmed by peak_window bars on each side and the right rim
    must lie within handle_max_days of the latest bar. Only the candidate
    closest to its breakout level is returned.

    Args:
        frame: Price frame
        config: Detector thresholds

    Returns:
        List with zero or one CupFormingPattern
    """
    n = len(frame)
    if n < config.min_bars:
        return []

    highs = frame['high'].to_numpy(dtype=float)
    lows = frame['low'].to_numpy(dtype=float)
    closes = frame['close'].to_numpy(dtype=float)
    dates = frame['date'].astype(str).to_numpy()
    last = n - 1
    current_price = float(closes[last])

    peaks = find_peaks(highs, config.peak_window, n - config.peak_window)

    results: List[CupFormingPattern] = []
    for cup in _iter_cups(highs, lows, closes, peaks, config, max_rim_age=config.handle_max_days):
        handle_low = float(lows[cup.right + 1:].min())
        pullback = (cup.right_high - handle_low) / cup.right_high
        if pullback > config.handle_max_pullback:
            continue
        if current_price > cup.right_high:
            continue
        if pullback < config.forming_min_pullback:
            continue

        handle_days = last - cup.right
        distance = (cup.right_high - current_price) / cup.right_high
        if distance < config.ready_distance and current_price > handle_low:
            stage = FormingStage.HANDLE_READY
        else:
            stage = FormingStage.HANDLE_FORMING

        results.append(CupFormingPattern(
            cup_meta=_cup_meta(cup, handle_days, pullback),
            current_price=current_price,
            handle_days=handle_days,
            pullback_pct=pullback * 100,
            breakout_price=cup.right_high,
            distance_to_breakout_pct=distance * 100,
            cup_depth_pct=cup.depth * 100,
            cup_days=cup.days,
            left_rim_date=dates[cup.left],
            right_rim_date=dates[cup.right],
            bottom_date=dates[cup.bottom],
            stage=stage,
        ))

    if len(results) <= 1:
        return results
    # sorted() is stable: ties keep enumeration order
    closest = sorted(results, key=lambda p: p.distance_to_breakout_pct)[0]
    return [closest]
