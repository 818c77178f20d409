"""
Strategy Registry

Pure (frame, params) -> per-bar action streams, each written as an explicit
Flat / Holding state machine folded over the bars.

Families:
    - Crossover: ma_cross, macd_signal, macd_trail
    - Threshold / reversal: rsi_reversal, band_reversal, capitulation_gap
    - Drawdown / recovery: dip_buy, dip_ma_deviation, dip_rsi_volume, dip_bb3sigma
    - Breakout: cup_handle, cup_handle_trail
    - Accumulation: dca (fixed-amount mode)
"""

from .base import (
    Action,
    ExecutionMode,
    Flat,
    Holding,
    StrategyDef,
    StrategyId,
    StrategyParam,
    run_state_machine,
)
from .crossover import macd_trail_levels
from .registry import STRATEGIES, get_default_params, get_strategy, get_strategy_params
from .signal_points import PointAction, SignalPoint, extract_signal_points

__all__ = [
    "Action",
    "ExecutionMode",
    "Flat",
    "Holding",
    "PointAction",
    "STRATEGIES",
    "SignalPoint",
    "StrategyDef",
    "StrategyId",
    "StrategyParam",
    "extract_signal_points",
    "get_default_params",
    "get_strategy",
    "get_strategy_params",
    "macd_trail_levels",
    "run_state_machine",
]
