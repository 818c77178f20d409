"""
Crossover Strategies

Strategy Logic:
    - ma_cross: BUY when the short SMA crosses above the long SMA, SELL on
      the cross below
    - macd_signal: same rule on the MACD line against its signal line
    - macd_trail: MACD golden-cross entry; exit at -stop_loss_pct from the
      entry close or -trail_pct from the highest close since entry

A cross needs both series defined on the current and previous bar.
Crossover actions do not depend on position state; the simulator ignores
BUY while holding and SELL while flat.
"""

from typing import Dict, Tuple

import numpy as np
import pandas as pd

from ..indicators.common import round_price, simple_moving_average
from ..indicators.macd import calculate_macd
from .base import Action, Flat, Holding, run_state_machine


def cross_action(prev_fast: float, prev_slow: float, fast: float, slow: float) -> Action:
    """
    Classify a two-line cross between the previous and current bar.

    Args:
        prev_fast / prev_slow: Values on the previous bar
        fast / slow: Values on the current bar

    Returns:
        BUY on an upward cross, SELL on a downward cross, HOLD otherwise
        (including any undefined value)
    """
    if np.isnan([prev_fast, prev_slow, fast, slow]).any():
        return Action.HOLD
    if prev_fast <= prev_slow and fast > slow:
        return Action.BUY
    if prev_fast >= prev_slow and fast < slow:
        return Action.SELL
    return Action.HOLD


def _cross_stream(frame: pd.DataFrame, fast: np.ndarray, slow: np.ndarray) -> pd.Series:
    def transition(state, i, bar):
        if i < 1:
            return state, Action.HOLD
        return state, cross_action(fast[i - 1], slow[i - 1], fast[i], slow[i])

    return run_state_machine(frame, transition)


def compute_ma_cross(frame: pd.DataFrame, params: Dict[str, float]) -> pd.Series:
    close = frame['close']
    short_ma = simple_moving_average(close, int(params['short_period'])).to_numpy()
    long_ma = simple_moving_average(close, int(params['long_period'])).to_numpy()
    return _cross_stream(frame, short_ma, long_ma)


def _macd_lines(frame: pd.DataFrame, params: Dict[str, float]) -> Tuple[np.ndarray, np.ndarray]:
    macd = calculate_macd(
        frame,
        int(params['short_period']),
        int(params['long_period']),
        int(params['signal_period']),
    )
    return macd['macd'].to_numpy(), macd['signal'].to_numpy()


def compute_macd_signal(frame: pd.DataFrame, params: Dict[str, float]) -> pd.Series:
    macd_line, signal_line = _macd_lines(frame, params)
    return _cross_stream(frame, macd_line, signal_line)


def _macd_trail_fold(frame: pd.DataFrame, params: Dict[str, float]) -> Tuple[pd.Series, pd.Series]:
    macd_line, signal_line = _macd_lines(frame, params)
    trail_mult = 1 - params['trail_pct'] / 100
    stop_mult = 1 - params['stop_loss_pct'] / 100
    levels = np.full(len(frame), np.nan)

    def transition(state, i, bar):
        close = bar.close
        if isinstance(state, Flat):
            if i < 1:
                return state, Action.HOLD
            cross = cross_action(macd_line[i - 1], signal_line[i - 1], macd_line[i], signal_line[i])
            if cross is Action.BUY:
                levels[i] = close * trail_mult
                return Holding(entry_price=close, entry_index=i, peak=close), Action.BUY
            return state, Action.HOLD

        peak = max(state.peak, close)
        trail_level = peak * trail_mult
        levels[i] = trail_level
        if close <= state.entry_price * stop_mult or close <= trail_level:
            return Flat(), Action.SELL
        return Holding(entry_price=state.entry_price, entry_index=state.entry_index, peak=peak), Action.HOLD

    actions = run_state_machine(frame, transition)
    trail_levels = pd.Series(round_price(levels), index=frame.index, name='trail_level')
    return actions, trail_levels


def compute_macd_trail(frame: pd.DataFrame, params: Dict[str, float]) -> pd.Series:
    actions, _ = _macd_trail_fold(frame, params)
    return actions


def macd_trail_levels(frame: pd.DataFrame, params: Dict[str, float]) -> pd.Series:
    """
    Per-bar trailing-stop level of the macd_trail strategy.

    Args:
        frame: Price frame
        params: Complete macd_trail parameters

    Returns:
        Series (2 decimals) defined on bars where a position is open,
        including the entry and exit bars; NaN elsewhere
    """
    _, levels = _macd_trail_fold(frame, params)
    return levels
