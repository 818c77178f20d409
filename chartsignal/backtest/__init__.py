"""
Backtest Simulator

Deterministic single-symbol trade simulation over a strategy's action stream.

Components:
    - simulator.py: run_backtest / simulate, PositionTracker
    - metrics.py: BacktestStats aggregation (win rate, drawdown, Sharpe, ...)
"""

from .metrics import calculate_stats, pair_round_trips, sharpe_ratio
from .simulator import PositionTracker, run_backtest, simulate

__all__ = [
    "PositionTracker",
    "calculate_stats",
    "pair_round_trips",
    "run_backtest",
    "sharpe_ratio",
    "simulate",
]
