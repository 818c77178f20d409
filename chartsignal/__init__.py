"""
chartsignal: Signal Detection and Backtest Engine

Technical indicators, chart-pattern buy signals and deterministic
single-symbol backtests over daily or weekly OHLCV bars.

Data flow:
    price frame -> indicators -> pattern signals -> strategy actions
    -> simulator -> BacktestResult

Modules:
    - indicators: RSI, MACD, Bollinger Bands, ATR, SMA
    - patterns: band reversal, capitulation gap, cup with handle, sentiment
    - strategies: strategy registry (StrategyId -> StrategyDef)
    - presets: optimized parameter table
    - backtest: trade simulator and statistics
    - exit_levels: take-profit / stop-loss levels for display

Usage:
    from chartsignal import run_backtest, to_frame

    frame = to_frame(bars)
    result = run_backtest(frame, "ma_cross")
    print(result.stats.win_rate)
"""

__version__ = '0.1.0'

from .backtest import run_backtest, simulate
from .backtest_config import (
    BacktestConfig,
    BacktestResult,
    BacktestStats,
    CupHandleConfig,
    EquityPoint,
    PriceBar,
    Trade,
    TradeSide,
)
from .config import configure_logging
from .exceptions import (
    ChartSignalError,
    InvalidParameterError,
    PresetValidationError,
    PriceDataError,
    UnknownStrategyError,
)
from .exit_levels import ExitLevels, get_exit_levels
from .patterns import detect_buy_signals, detect_cup_with_handle, detect_cup_with_handle_forming
from .presets import PresetMode, PresetStore, SamplingPeriod, default_store
from .price_data import to_frame, to_weekly
from .strategies import Action, ExecutionMode, StrategyId, get_strategy

__all__ = [
    "Action",
    "BacktestConfig",
    "BacktestResult",
    "BacktestStats",
    "ChartSignalError",
    "CupHandleConfig",
    "EquityPoint",
    "ExecutionMode",
    "ExitLevels",
    "InvalidParameterError",
    "PresetMode",
    "PresetStore",
    "PresetValidationError",
    "PriceBar",
    "PriceDataError",
    "SamplingPeriod",
    "StrategyId",
    "Trade",
    "TradeSide",
    "UnknownStrategyError",
    "configure_logging",
    "default_store",
    "detect_buy_signals",
    "detect_cup_with_handle",
    "detect_cup_with_handle_forming",
    "get_exit_levels",
    "get_strategy",
    "run_backtest",
    "simulate",
    "to_frame",
    "to_weekly",
]
