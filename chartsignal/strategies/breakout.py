"""
Breakout Strategies

Both strategies enter on the bars where detect_cup_with_handle fires.

Strategy Logic:
    - cup_handle: SELL at +take_profit_pct or -stop_loss_pct from entry
    - cup_handle_trail: SELL at -stop_loss_pct from entry or once the close
      is trail_pct below the highest close since entry
"""

from typing import Dict, Set

import pandas as pd

from ..patterns.cup_with_handle import detect_cup_with_handle
from .base import Action, Flat, Holding, pct_change, run_state_machine


def _breakout_indices(frame: pd.DataFrame) -> Set[int]:
    return {signal.index for signal in detect_cup_with_handle(frame)}


def compute_cup_handle(frame: pd.DataFrame, params: Dict[str, float]) -> pd.Series:
    entries = _breakout_indices(frame)
    take_profit = params['take_profit_pct'] / 100
    stop_loss = params['stop_loss_pct'] / 100

    def transition(state, i, bar):
        if isinstance(state, Flat):
            if i in entries:
                return Holding(
                    entry_price=bar.close,
                    entry_index=i,
                    target=bar.close * (1 + take_profit),
                    stop=bar.close * (1 - stop_loss),
                ), Action.BUY
            return state, Action.HOLD

        if bar.close >= state.target or bar.close <= state.stop:
            return Flat(), Action.SELL
        return state, Action.HOLD

    return run_state_machine(frame, transition)


def compute_cup_handle_trail(frame: pd.DataFrame, params: Dict[str, float]) -> pd.Series:
    entries = _breakout_indices(frame)

    def transition(state, i, bar):
        if isinstance(state, Flat):
            if i in entries:
                return Holding(entry_price=bar.close, entry_index=i, peak=bar.close), Action.BUY
            return state, Action.HOLD

        peak = max(state.peak, bar.close)
        pnl = pct_change(bar.close, state.entry_price)
        drop_from_peak = (peak - bar.close) / peak * 100
        if pnl <= -params['stop_loss_pct'] or drop_from_peak >= params['trail_pct']:
            return Flat(), Action.SELL
        return Holding(entry_price=state.entry_price, entry_index=state.entry_index, peak=peak), Action.HOLD

    return run_state_machine(frame, transition)
