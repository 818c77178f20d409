"""
Fixed-amount accumulation (dollar-cost averaging).

BUY on the first bar of every calendar month, regardless of price; never
SELL. The purchase size comes from the monthly_amount parameter and is
applied by the simulator in fixed-amount mode.
"""

from typing import Dict

import pandas as pd

from .base import Action, Flat, run_state_machine


def compute_dca(frame: pd.DataFrame, params: Dict[str, float]) -> pd.Series:
    months = pd.to_datetime(frame['date']).dt.to_period('M').to_numpy()

    def transition(state, i, bar):
        if i == 0 or months[i] != months[i - 1]:
            return state, Action.BUY
        return state, Action.HOLD

    return run_state_machine(frame, transition, Flat())
