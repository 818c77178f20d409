"""
Chart points derived from a strategy's action stream.

A BUY becomes a buy point at the bar close. The next SELL becomes a take
profit when it closes at or above that buy, otherwise a stop loss; MA-cross
sells are labelled as dead crosses instead. SELLs with no open buy are
skipped.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Union

import pandas as pd

from .base import Action, StrategyId
from .registry import get_strategy


class PointAction(str, Enum):
    """Kind of chart point."""

    BUY = "buy"
    TAKE_PROFIT = "take_profit"
    STOP_LOSS = "stop_loss"
    DEAD_CROSS = "dead_cross"


@dataclass(frozen=True)
class SignalPoint:
    """Marker for one strategy action on a chart"""

    index: int
    date: str
    price: float
    action: PointAction
    label: str


_LABELS: Dict[StrategyId, Dict[PointAction, str]] = {
    StrategyId.RSI_REVERSAL: {
        PointAction.BUY: "RSI buy",
        PointAction.TAKE_PROFIT: "RSI take profit",
        PointAction.STOP_LOSS: "RSI stop",
    },
    StrategyId.MA_CROSS: {
        PointAction.BUY: "GC",
        PointAction.DEAD_CROSS: "DC",
    },
    StrategyId.MACD_SIGNAL: {
        PointAction.BUY: "MACD buy",
        PointAction.TAKE_PROFIT: "MACD take profit",
        PointAction.STOP_LOSS: "MACD stop",
    },
    StrategyId.MACD_TRAIL: {
        PointAction.BUY: "MACD buy",
        PointAction.TAKE_PROFIT: "Trail take profit",
        PointAction.STOP_LOSS: "Trail stop",
    },
}

_DEFAULT_LABELS = {
    PointAction.BUY: "Buy",
    PointAction.TAKE_PROFIT: "Take profit",
    PointAction.STOP_LOSS: "Stop loss",
}


def extract_signal_points(
    strategy_id: Union[StrategyId, str],
    frame: pd.DataFrame,
    actions: pd.Series,
) -> List[SignalPoint]:
    """
    Convert an action stream into chart points.

    Args:
        strategy_id: Strategy that produced the actions
        frame: Price frame the actions were computed on
        actions: Series of Action aligned with frame

    Returns:
        Points ordered by index

    Raises:
        UnknownStrategyError: Identifier is not registered
    """
    strategy_id = get_strategy(strategy_id).id
    labels = _LABELS.get(strategy_id, _DEFAULT_LABELS)
    closes = frame['close'].to_numpy(dtype=float)
    dates = frame['date'].astype(str).to_numpy()

    points: List[SignalPoint] = []
    last_buy_price = 0.0
    for i, action in enumerate(actions):
        if action == Action.BUY:
            last_buy_price = closes[i]
            points.append(SignalPoint(i, dates[i], float(closes[i]), PointAction.BUY, labels[PointAction.BUY]))
        elif action == Action.SELL and last_buy_price > 0:
            if strategy_id is StrategyId.MA_CROSS:
                kind = PointAction.DEAD_CROSS
            elif closes[i] >= last_buy_price:
                kind = PointAction.TAKE_PROFIT
            else:
                kind = PointAction.STOP_LOSS
            points.append(SignalPoint(i, dates[i], float(closes[i]), kind, labels[kind]))
            last_buy_price = 0.0

    return points
