"""
Strategy Registry

Static table of every strategy, keyed by StrategyId.

Usage:
    from chartsignal.strategies.registry import StrategyId, get_strategy

    strategy = get_strategy(StrategyId.MA_CROSS)   # or get_strategy("ma_cross")
    actions = strategy.run(frame, {"short_period": 5})
"""

from typing import Dict, Optional, Union

from ..exceptions import UnknownStrategyError
from .accumulation import compute_dca
from .base import ExecutionMode, StrategyDef, StrategyId, StrategyParam
from .breakout import compute_cup_handle, compute_cup_handle_trail
from .crossover import compute_ma_cross, compute_macd_signal, compute_macd_trail
from .drawdown import (
    compute_dip_bb3sigma,
    compute_dip_buy,
    compute_dip_ma_deviation,
    compute_dip_rsi_volume,
)
from .reversal import compute_band_reversal, compute_capitulation_gap, compute_rsi_reversal


_MACD_PARAMS = (
    StrategyParam("short_period", "Short EMA", 12, 5, 30),
    StrategyParam("long_period", "Long EMA", 26, 10, 50),
    StrategyParam("signal_period", "Signal", 9, 3, 20),
)

_DEFINITIONS = (
    StrategyDef(
        id=StrategyId.MA_CROSS,
        name="Golden cross / dead cross",
        description="Buy when the short MA crosses above the long MA, sell on the cross below",
        mode=ExecutionMode.ALL_IN_OUT,
        params=(
            StrategyParam("short_period", "Short MA", 5, 2, 50),
            StrategyParam("long_period", "Long MA", 25, 5, 200),
        ),
        compute=compute_ma_cross,
    ),
    StrategyDef(
        id=StrategyId.MACD_SIGNAL,
        name="MACD signal",
        description="Buy when MACD crosses above its signal line, sell on the cross below",
        mode=ExecutionMode.ALL_IN_OUT,
        params=_MACD_PARAMS,
        compute=compute_macd_signal,
    ),
    StrategyDef(
        id=StrategyId.MACD_TRAIL,
        name="MACD trailing stop",
        description="Buy on a MACD golden cross, exit on a trailing stop from the peak or a fixed stop",
        mode=ExecutionMode.ALL_IN_OUT,
        params=_MACD_PARAMS + (
            StrategyParam("trail_pct", "Trail (%)", 12, 5, 30, 1),
            StrategyParam("stop_loss_pct", "Stop loss (%)", 5, 2, 20, 1),
        ),
        compute=compute_macd_trail,
    ),
    StrategyDef(
        id=StrategyId.RSI_REVERSAL,
        name="RSI reversal",
        description="Buy when RSI is oversold, sell when overbought or at the ATR/percent stop",
        mode=ExecutionMode.ALL_IN_OUT,
        params=(
            StrategyParam("period", "RSI period", 14, 5, 30),
            StrategyParam("oversold", "Buy (RSI <)", 30, 10, 50),
            StrategyParam("overbought", "Sell (RSI >)", 70, 50, 90),
            StrategyParam("atr_period", "ATR period", 14, 5, 30),
            StrategyParam("atr_multiple", "ATR multiple", 2, 1, 5, 0.5),
            StrategyParam("stop_loss_pct", "Stop loss (%)", 10, 3, 20, 1),
        ),
        compute=compute_rsi_reversal,
    ),
    StrategyDef(
        id=StrategyId.BAND_REVERSAL,
        name="Bollinger band reversal",
        description="Buy on a white candle after a close below BB -2σ, exit at MA25 or below the entry low",
        mode=ExecutionMode.ALL_IN_OUT,
        params=(),
        compute=compute_band_reversal,
    ),
    StrategyDef(
        id=StrategyId.CAPITULATION_GAP,
        name="Capitulation gap",
        description="Buy on a gap down with two black candles near BB -2σ, exit at the gap top or below the entry low",
        mode=ExecutionMode.ALL_IN_OUT,
        params=(),
        compute=compute_capitulation_gap,
    ),
    StrategyDef(
        id=StrategyId.DIP_BUY,
        name="Dip buy",
        description="Buy after an N% drop from the recent peak, sell after an M% recovery or at the stop",
        mode=ExecutionMode.ALL_IN_OUT,
        params=(
            StrategyParam("dip_pct", "Drop (%)", 10, 3, 30, 1),
            StrategyParam("recovery_pct", "Recovery (%)", 15, 5, 50, 1),
            StrategyParam("stop_loss_pct", "Stop loss (%)", 15, 3, 30, 1),
        ),
        compute=compute_dip_buy,
    ),
    StrategyDef(
        id=StrategyId.DIP_MA_DEVIATION,
        name="Dip buy (MA deviation)",
        description="Buy at -10% from MA25, exit at -5% deviation, an MA5 touch, a -7% stop or a 5-bar time stop",
        mode=ExecutionMode.ALL_IN_OUT,
        params=(
            StrategyParam("entry_deviation", "Entry deviation (%)", -10, -30, -5, 1),
            StrategyParam("exit_deviation", "Exit deviation (%)", -5, -15, 0, 1),
            StrategyParam("stop_loss_pct", "Stop loss (%)", 7, 3, 15, 1),
            StrategyParam("time_stop_days", "Time stop (bars)", 5, 2, 10, 1),
        ),
        compute=compute_dip_ma_deviation,
    ),
    StrategyDef(
        id=StrategyId.DIP_RSI_VOLUME,
        name="Dip buy (RSI + volume)",
        description="Buy at RSI <= 20 on double volume, exit at RSI 40, +5% or below the entry low",
        mode=ExecutionMode.ALL_IN_OUT,
        params=(
            StrategyParam("rsi_threshold", "RSI threshold", 20, 10, 30, 1),
            StrategyParam("volume_multiple", "Volume multiple", 2, 1.5, 5, 0.5),
            StrategyParam("rsi_exit", "Exit RSI", 40, 30, 60, 5),
            StrategyParam("take_profit_pct", "Take profit (%)", 5, 3, 15, 1),
        ),
        compute=compute_dip_rsi_volume,
    ),
    StrategyDef(
        id=StrategyId.DIP_BB3SIGMA,
        name="Dip buy (BB -3σ)",
        description="Buy on a close at BB -3σ, exit back at -2σ or at a -5% stop",
        mode=ExecutionMode.ALL_IN_OUT,
        params=(
            StrategyParam("stop_loss_pct", "Stop loss (%)", 5, 3, 10, 1),
        ),
        compute=compute_dip_bb3sigma,
    ),
    StrategyDef(
        id=StrategyId.CUP_HANDLE,
        name="Cup with handle",
        description="Buy on a cup-with-handle breakout, take profit at +20%, stop at -7%",
        mode=ExecutionMode.ALL_IN_OUT,
        params=(
            StrategyParam("take_profit_pct", "Take profit (%)", 20, 5, 50, 1),
            StrategyParam("stop_loss_pct", "Stop loss (%)", 7, 2, 20, 1),
        ),
        compute=compute_cup_handle,
    ),
    StrategyDef(
        id=StrategyId.CUP_HANDLE_TRAIL,
        name="Cup with handle, trailing stop",
        description="Buy on a cup-with-handle breakout, exit on a trailing stop from the peak or a fixed stop",
        mode=ExecutionMode.ALL_IN_OUT,
        params=(
            StrategyParam("trail_pct", "Trail (%)", 12, 5, 30, 1),
            StrategyParam("stop_loss_pct", "Stop loss (%)", 5, 2, 20, 1),
        ),
        compute=compute_cup_handle_trail,
    ),
    StrategyDef(
        id=StrategyId.DCA,
        name="Dollar-cost averaging",
        description="Buy a fixed amount on the first trading day of each month",
        mode=ExecutionMode.FIXED_AMOUNT,
        params=(
            StrategyParam("monthly_amount", "Monthly amount", 100000, 10000, 10000000, 10000),
        ),
        compute=compute_dca,
    ),
)

STRATEGIES: Dict[StrategyId, StrategyDef] = {d.id: d for d in _DEFINITIONS}


def get_strategy(strategy_id: Union[StrategyId, str]) -> StrategyDef:
    """
    Look up a registered strategy.

    Args:
        strategy_id: StrategyId or its string value

    Returns:
        StrategyDef

    Raises:
        UnknownStrategyError: Identifier is not registered
    """
    try:
        return STRATEGIES[StrategyId(strategy_id)]
    except ValueError:
        raise UnknownStrategyError(f"Unknown strategy: {strategy_id!r}") from None


def get_default_params(strategy_id: Union[StrategyId, str]) -> Dict[str, float]:
    """Schema defaults of a strategy"""
    return get_strategy(strategy_id).default_params()


def get_strategy_params(
    strategy_id: Union[StrategyId, str],
    params: Optional[Dict[str, float]] = None,
) -> Dict[str, float]:
    """Caller parameters merged over the strategy defaults"""
    return get_strategy(strategy_id).resolve_params(params)
