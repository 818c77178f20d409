"""
Threshold / Reversal Strategies

Strategy Logic:
    - rsi_reversal: BUY when RSI < oversold. The stop is fixed at entry as
      the tighter (higher) of entry - ATR * atr_multiple and
      entry * (1 - stop_loss_pct). SELL when RSI > overbought or the close
      falls to the stop.
    - band_reversal: BUY on the first white candle after a close below
      BB -2σ(25). SELL when the close reaches the 25-bar SMA or closes
      below the entry bar's low.
    - capitulation_gap: BUY on a gap down followed by two black candles near
      BB -2σ(25). SELL when the close fills the gap (low two bars before
      entry) or closes below the entry bar's low.
"""

from typing import Dict

import numpy as np
import pandas as pd

from ..indicators.atr import calculate_atr
from ..indicators.bollinger_bands import calculate_bollinger_bands
from ..indicators.common import simple_moving_average
from ..indicators.rsi import calculate_rsi
from ..patterns.capitulation_gap import is_capitulation_gap
from .base import Action, Flat, Holding, run_state_machine


REVERSAL_BAND_PERIOD = 25


def rsi_stop_level(entry_price: float, atr: float, atr_multiple: float, stop_loss_pct: float) -> float:
    """
    Stop for an RSI reversal entry: the higher of the ATR and percent stops.

    Args:
        entry_price: Entry close
        atr: ATR at the entry bar (NaN when undefined; the ATR stop is then 0)
        atr_multiple: ATR multiplier
        stop_loss_pct: Percent stop below entry

    Returns:
        Stop price
    """
    atr_stop = entry_price - atr * atr_multiple if not np.isnan(atr) else 0.0
    pct_stop = entry_price * (1 - stop_loss_pct / 100)
    return max(atr_stop, pct_stop)


def compute_rsi_reversal(frame: pd.DataFrame, params: Dict[str, float]) -> pd.Series:
    rsi = calculate_rsi(frame, int(params['period'])).to_numpy()
    atr = calculate_atr(frame, int(params['atr_period'])).to_numpy()
    oversold = params['oversold']
    overbought = params['overbought']

    def transition(state, i, bar):
        if np.isnan(rsi[i]):
            return state, Action.HOLD
        if isinstance(state, Flat):
            if rsi[i] < oversold:
                stop = rsi_stop_level(bar.close, atr[i], params['atr_multiple'], params['stop_loss_pct'])
                return Holding(entry_price=bar.close, entry_index=i, stop=stop), Action.BUY
            return state, Action.HOLD
        if rsi[i] > overbought or bar.close <= state.stop:
            return Flat(), Action.SELL
        return state, Action.HOLD

    return run_state_machine(frame, transition)


def compute_band_reversal(frame: pd.DataFrame, params: Dict[str, float]) -> pd.Series:
    lower2 = calculate_bollinger_bands(frame, REVERSAL_BAND_PERIOD)['lower2'].to_numpy()
    ma25 = simple_moving_average(frame['close'], REVERSAL_BAND_PERIOD).to_numpy()

    def transition(state, i, bar):
        band = lower2[i]
        if np.isnan(band):
            return state, Action.HOLD

        if isinstance(state, Flat):
            if bar.close < band:
                return Flat(armed=True), Action.HOLD
            if state.armed and bar.close > bar.open:
                return Holding(entry_price=bar.close, entry_index=i, entry_low=bar.low), Action.BUY
            if bar.close > band:
                return Flat(), Action.HOLD
            return state, Action.HOLD

        if not np.isnan(ma25[i]) and bar.close >= ma25[i]:
            return Flat(), Action.SELL
        if bar.close < state.entry_low:
            return Flat(), Action.SELL
        return state, Action.HOLD

    return run_state_machine(frame, transition)


def compute_capitulation_gap(frame: pd.DataFrame, params: Dict[str, float]) -> pd.Series:
    bands = calculate_bollinger_bands(frame, REVERSAL_BAND_PERIOD)
    lower2 = bands['lower2'].to_numpy()
    lows = frame['low'].to_numpy(dtype=float)

    def transition(state, i, bar):
        if i < 2 or np.isnan(lower2[i]):
            return state, Action.HOLD

        if isinstance(state, Flat):
            if is_capitulation_gap(frame, bands, i):
                # Gap top: low of the bar before the gap
                return Holding(
                    entry_price=bar.close,
                    entry_index=i,
                    entry_low=bar.low,
                    target=lows[i - 2],
                ), Action.BUY
            return state, Action.HOLD

        if bar.close >= state.target or bar.close < state.entry_low:
            return Flat(), Action.SELL
        return state, Action.HOLD

    return run_state_machine(frame, transition)
