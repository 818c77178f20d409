"""
Drawdown / Recovery Strategies

Strategy Logic:
    - dip_buy: BUY when the close is dip_pct below the running peak close;
      SELL at +recovery_pct or -stop_loss_pct from entry. The peak resets to
      the exit close.
    - dip_ma_deviation: BUY when the close deviates entry_deviation percent
      (negative) from the 25-bar SMA. SELL, in order of precedence, when the
      deviation recovers to exit_deviation, the close reaches the 5-bar SMA,
      the loss reaches stop_loss_pct, or time_stop_days have passed without
      a gain.
    - dip_rsi_volume: BUY when RSI(14) <= rsi_threshold on volume at least
      volume_multiple times the prior 5-bar average. SELL when RSI recovers
      to rsi_exit, the gain reaches take_profit_pct, or the close breaks the
      entry bar's low.
    - dip_bb3sigma: BUY on a close at or below BB -3σ(25); SELL on a close
      back at BB -2σ or a loss of stop_loss_pct.
"""

from typing import Dict

import numpy as np
import pandas as pd

from ..indicators.bollinger_bands import calculate_bollinger_bands
from ..indicators.common import simple_moving_average
from ..indicators.rsi import calculate_rsi
from .base import Action, Flat, Holding, pct_change, run_state_machine


DEVIATION_MA_PERIOD = 25
DEVIATION_EXIT_MA_PERIOD = 5
DIP_RSI_PERIOD = 14
VOLUME_LOOKBACK = 5
DIP_BAND_PERIOD = 25


def compute_dip_buy(frame: pd.DataFrame, params: Dict[str, float]) -> pd.Series:
    def transition(state, i, bar):
        close = bar.close
        if isinstance(state, Flat):
            peak = max(state.peak, close)
            drop = (peak - close) / peak * 100
            if drop >= params['dip_pct']:
                return Holding(entry_price=close, entry_index=i, peak=peak), Action.BUY
            return Flat(peak=peak), Action.HOLD

        gain = pct_change(close, state.entry_price)
        if gain >= params['recovery_pct'] or gain <= -params['stop_loss_pct']:
            return Flat(peak=close), Action.SELL
        return state, Action.HOLD

    first_close = float(frame['close'].iat[0]) if len(frame) else 0.0
    return run_state_machine(frame, transition, Flat(peak=first_close))


def compute_dip_ma_deviation(frame: pd.DataFrame, params: Dict[str, float]) -> pd.Series:
    close = frame['close']
    ma25 = simple_moving_average(close, DEVIATION_MA_PERIOD).to_numpy()
    ma5 = simple_moving_average(close, DEVIATION_EXIT_MA_PERIOD).to_numpy()

    def transition(state, i, bar):
        if np.isnan(ma25[i]):
            return state, Action.HOLD
        deviation = pct_change(bar.close, ma25[i])

        if isinstance(state, Flat):
            if deviation <= params['entry_deviation']:
                return Holding(entry_price=bar.close, entry_index=i), Action.BUY
            return state, Action.HOLD

        if deviation >= params['exit_deviation']:
            return Flat(), Action.SELL
        if not np.isnan(ma5[i]) and bar.close >= ma5[i]:
            return Flat(), Action.SELL
        if pct_change(bar.close, state.entry_price) <= -params['stop_loss_pct']:
            return Flat(), Action.SELL
        if i - state.entry_index >= params['time_stop_days'] and bar.close <= state.entry_price:
            return Flat(), Action.SELL
        return state, Action.HOLD

    return run_state_machine(frame, transition)


def compute_dip_rsi_volume(frame: pd.DataFrame, params: Dict[str, float]) -> pd.Series:
    rsi = calculate_rsi(frame, DIP_RSI_PERIOD).to_numpy()
    volume = frame['volume'].to_numpy(dtype=float)

    def transition(state, i, bar):
        if i < VOLUME_LOOKBACK or np.isnan(rsi[i]):
            return state, Action.HOLD

        if isinstance(state, Flat):
            avg_volume = volume[i - VOLUME_LOOKBACK:i].sum() / VOLUME_LOOKBACK
            if rsi[i] <= params['rsi_threshold'] and bar.volume >= avg_volume * params['volume_multiple']:
                return Holding(entry_price=bar.close, entry_index=i, entry_low=bar.low), Action.BUY
            return state, Action.HOLD

        if rsi[i] >= params['rsi_exit']:
            return Flat(), Action.SELL
        if pct_change(bar.close, state.entry_price) >= params['take_profit_pct']:
            return Flat(), Action.SELL
        if bar.close < state.entry_low:
            return Flat(), Action.SELL
        return state, Action.HOLD

    return run_state_machine(frame, transition)


def compute_dip_bb3sigma(frame: pd.DataFrame, params: Dict[str, float]) -> pd.Series:
    bands = calculate_bollinger_bands(frame, DIP_BAND_PERIOD)
    lower2 = bands['lower2'].to_numpy()
    lower3 = bands['lower3'].to_numpy()

    def transition(state, i, bar):
        if np.isnan(lower3[i]) or np.isnan(lower2[i]):
            return state, Action.HOLD

        if isinstance(state, Flat):
            if bar.close <= lower3[i]:
                return Holding(entry_price=bar.close, entry_index=i), Action.BUY
            return state, Action.HOLD

        if bar.close >= lower2[i]:
            return Flat(), Action.SELL
        if pct_change(bar.close, state.entry_price) <= -params['stop_loss_pct']:
            return Flat(), Action.SELL
        return state, Action.HOLD

    return run_state_machine(frame, transition)
