"""
Exit Levels

Take-profit and stop-loss levels of an open position, expressed as prices
and labels for display. Each branch restates the exit rule of the matching
strategy; strategies whose exits are event-driven (crosses, RSI) carry a
label without a price.

Usage:
    from chartsignal.exit_levels import get_exit_levels

    levels = get_exit_levels("cup_handle", frame, buy_index, buy_price, params)
    print(levels.take_profit_price, levels.stop_loss_price)
"""

from dataclasses import dataclass
from typing import Dict, Optional, Union

import numpy as np
import pandas as pd

from .indicators.atr import calculate_atr
from .indicators.bollinger_bands import calculate_bollinger_bands
from .indicators.common import round_price
from .strategies.base import StrategyId
from .strategies.registry import get_default_params


@dataclass(frozen=True)
class ExitLevels:
    """Display levels for an open position; None where a strategy has no level"""

    take_profit_price: Optional[float] = None
    take_profit_label: Optional[str] = None
    stop_loss_price: Optional[float] = None
    stop_loss_label: Optional[str] = None


def _price(value: float) -> float:
    return float(round_price(value))


def _pct(value: float) -> str:
    return f"{value:g}"


def get_exit_levels(
    strategy_id: Union[StrategyId, str],
    frame: pd.DataFrame,
    buy_index: int,
    buy_price: float,
    params: Dict[str, float],
) -> ExitLevels:
    """
    Exit levels for a position opened at `buy_index`.

    Args:
        strategy_id: Strategy that opened the position
        frame: Price frame up to the current bar
        buy_index: Entry bar position
        buy_price: Entry price
        params: Strategy parameters (missing keys use the strategy defaults)

    Returns:
        ExitLevels; empty for strategies without defined levels
    """
    try:
        strategy_id = StrategyId(strategy_id)
    except ValueError:
        return ExitLevels()

    params = {**get_default_params(strategy_id), **params}
    lows = frame['low'].to_numpy(dtype=float)

    if strategy_id is StrategyId.BAND_REVERSAL:
        middle = calculate_bollinger_bands(frame, 25)['middle']
        current_ma = middle.iat[-1] if len(middle) else np.nan
        return ExitLevels(
            take_profit_price=None if np.isnan(current_ma) else _price(current_ma),
            take_profit_label="MA25 touch",
            stop_loss_price=_price(lows[buy_index]),
            stop_loss_label="Close below entry low",
        )

    if strategy_id is StrategyId.CAPITULATION_GAP:
        gap_top = lows[buy_index - 2] if buy_index >= 2 else None
        return ExitLevels(
            take_profit_price=None if gap_top is None else _price(gap_top),
            take_profit_label="Gap filled",
            stop_loss_price=_price(lows[buy_index]),
            stop_loss_label="Close below entry low",
        )

    if strategy_id is StrategyId.CUP_HANDLE:
        tp = params['take_profit_pct']
        sl = params['stop_loss_pct']
        return ExitLevels(
            take_profit_price=_price(buy_price * (1 + tp / 100)),
            take_profit_label=f"+{_pct(tp)}%",
            stop_loss_price=_price(buy_price * (1 - sl / 100)),
            stop_loss_label=f"-{_pct(sl)}%",
        )

    if strategy_id is StrategyId.CUP_HANDLE_TRAIL:
        trail = params['trail_pct']
        sl = params['stop_loss_pct']
        return ExitLevels(
            take_profit_label=f"Trailing stop {_pct(trail)}% below the high",
            stop_loss_price=_price(buy_price * (1 - sl / 100)),
            stop_loss_label=f"-{_pct(sl)}% (initial stop)",
        )

    if strategy_id is StrategyId.MA_CROSS:
        short = int(params['short_period'])
        long = int(params['long_period'])
        return ExitLevels(stop_loss_label=f"Sell on MA{short}/MA{long} dead cross")

    if strategy_id is StrategyId.MACD_SIGNAL:
        sp = int(params['short_period'])
        lp = int(params['long_period'])
        sig = int(params['signal_period'])
        return ExitLevels(stop_loss_label=f"Sell on MACD({sp},{lp},{sig}) dead cross")

    if strategy_id is StrategyId.RSI_REVERSAL:
        overbought = params['overbought']
        atr_period = int(params['atr_period'])
        atr_multiple = params['atr_multiple']
        stop_pct = params['stop_loss_pct']

        atr = calculate_atr(frame, atr_period).to_numpy()
        atr_at_entry = atr[buy_index] if buy_index < len(atr) else np.nan
        has_atr = not np.isnan(atr_at_entry)
        atr_stop = buy_price - atr_at_entry * atr_multiple if has_atr else 0.0
        pct_stop = buy_price * (1 - stop_pct / 100)
        stop_price = max(atr_stop, pct_stop)

        if has_atr and atr_stop >= pct_stop:
            stop_label = (
                f"ATR({atr_period})x{_pct(atr_multiple)} = "
                f"-{(buy_price - stop_price) / buy_price * 100:.1f}%"
            )
        else:
            stop_label = f"-{_pct(stop_pct)}%"
        return ExitLevels(
            take_profit_label=f"Take profit at RSI > {_pct(overbought)}",
            stop_loss_price=_price(stop_price),
            stop_loss_label=f"Stop: {stop_label}",
        )

    if strategy_id is StrategyId.DIP_BUY:
        recovery = params['recovery_pct']
        sl = params['stop_loss_pct']
        return ExitLevels(
            take_profit_price=_price(buy_price * (1 + recovery / 100)),
            take_profit_label=f"+{_pct(recovery)}% recovery",
            stop_loss_price=_price(buy_price * (1 - sl / 100)),
            stop_loss_label=f"-{_pct(sl)}%",
        )

    if strategy_id is StrategyId.MACD_TRAIL:
        trail = params['trail_pct']
        sl = params['stop_loss_pct']
        return ExitLevels(
            take_profit_label=f"Trailing stop {_pct(trail)}% below the high",
            stop_loss_price=_price(buy_price * (1 - sl / 100)),
            stop_loss_label=f"-{_pct(sl)}% (initial stop)",
        )

    return ExitLevels()
