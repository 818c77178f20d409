"""
Strategy Building Blocks

Purpose: Shared types for the strategy registry and the state-machine fold
every strategy is written as.

Strategy Contract:
    compute(frame, params) -> pd.Series of Action aligned with frame

    Each compute call builds its indicator arrays, then folds a pure
    transition function over the bars:

        def transition(state, i, bar):
            ...
            return next_state, action

    Position bookkeeping lives in the Flat / Holding state values threaded
    through the fold; nothing is shared between calls.

Usage:
    actions = run_state_machine(frame, transition)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

import pandas as pd

from ..exceptions import InvalidParameterError


class StrategyId(str, Enum):
    """Registered strategy identifiers."""

    MA_CROSS = "ma_cross"
    MACD_SIGNAL = "macd_signal"
    MACD_TRAIL = "macd_trail"
    RSI_REVERSAL = "rsi_reversal"
    BAND_REVERSAL = "band_reversal"
    CAPITULATION_GAP = "capitulation_gap"
    DIP_BUY = "dip_buy"
    DIP_MA_DEVIATION = "dip_ma_deviation"
    DIP_RSI_VOLUME = "dip_rsi_volume"
    DIP_BB3SIGMA = "dip_bb3sigma"
    CUP_HANDLE = "cup_handle"
    CUP_HANDLE_TRAIL = "cup_handle_trail"
    DCA = "dca"


class Action(str, Enum):
    """Per-bar strategy output."""

    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


class ExecutionMode(str, Enum):
    """How the simulator executes BUY/SELL actions."""

    ALL_IN_OUT = "all_in_out"
    FIXED_AMOUNT = "fixed_amount"


@dataclass(frozen=True)
class StrategyParam:
    """
    Tunable strategy parameter.

    Bounds and step are advisory (for forms and optimizers); they are not
    enforced when a strategy runs.
    """

    key: str
    label: str
    default: float
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    step: Optional[float] = None


@dataclass(frozen=True)
class Flat:
    """
    No open position.

    Attributes:
        peak: Running reference high (drawdown strategies)
        armed: Entry precondition already seen (band reversal)
    """

    peak: float = 0.0
    armed: bool = False


@dataclass(frozen=True)
class Holding:
    """
    Open position.

    Attributes:
        entry_price: Close at the entry bar
        entry_index: Entry bar position
        entry_low: Low at the entry bar
        peak: Highest close since entry (trailing exits)
        stop: Fixed stop level decided at entry
        target: Fixed take-profit level decided at entry
    """

    entry_price: float
    entry_index: int
    entry_low: float = 0.0
    peak: float = 0.0
    stop: float = 0.0
    target: float = 0.0


State = Union[Flat, Holding]
Transition = Callable[[State, int, Any], Tuple[State, Action]]
ComputeFn = Callable[[pd.DataFrame, Dict[str, float]], pd.Series]


def run_state_machine(
    frame: pd.DataFrame,
    transition: Transition,
    initial: Optional[State] = None,
) -> pd.Series:
    """
    Fold a transition function left to right over the bars.

    Args:
        frame: Price frame
        transition: (state, index, bar) -> (next_state, action); bar is a
            namedtuple with the frame's columns
        initial: Starting state (default: Flat())

    Returns:
        Series of Action aligned with frame
    """
    state = initial if initial is not None else Flat()
    actions = []
    for i, bar in enumerate(frame.itertuples(index=False)):
        state, action = transition(state, i, bar)
        actions.append(action)
    return pd.Series(actions, index=frame.index, dtype=object, name='action')


def pct_change(price: float, reference: float) -> float:
    """Percent move of price relative to reference."""
    return (price - reference) / reference * 100


@dataclass(frozen=True)
class StrategyDef:
    """
    Registered strategy.

    Attributes:
        id: Strategy identifier
        name: Display name
        description: One-line rule summary
        mode: Simulator execution mode
        params: Parameter schema
        compute: Pure (frame, params) -> Series[Action]
    """

    id: StrategyId
    name: str
    description: str
    mode: ExecutionMode
    params: Tuple[StrategyParam, ...]
    compute: ComputeFn

    def default_params(self) -> Dict[str, float]:
        """Schema defaults as a new dict"""
        return {p.key: p.default for p in self.params}

    def resolve_params(self, params: Optional[Dict[str, float]] = None) -> Dict[str, float]:
        """
        Merge caller parameters over the schema defaults.

        Args:
            params: Partial parameter dict (None for all defaults)

        Returns:
            Complete parameter dict

        Raises:
            InvalidParameterError: A key is not part of the schema
        """
        resolved = self.default_params()
        if not params:
            return resolved

        unknown = sorted(set(params) - set(resolved))
        if unknown:
            raise InvalidParameterError(
                f"Unknown parameters for {self.id.value}: {unknown} "
                f"(expected a subset of {sorted(resolved)})"
            )
        resolved.update(params)
        return resolved

    def run(self, frame: pd.DataFrame, params: Optional[Dict[str, float]] = None) -> pd.Series:
        """Resolve parameters and compute the action stream"""
        return self.compute(frame, self.resolve_params(params))
