"""
Backtest Configuration and Data Classes

Purpose: Define configuration structures and data models shared by the
indicator, pattern, strategy and backtest layers.

Classes:
  - BacktestConfig: Run configuration for the trade simulator
  - CupHandleConfig: Thresholds for cup-with-handle detection
  - PriceBar: One OHLCV bar
  - Trade: Trade ledger entry
  - EquityPoint: Daily mark-to-market snapshot
  - BacktestStats: Aggregate performance statistics
  - BacktestResult: Complete backtest results
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import List

import pandas as pd

from .config import SETTINGS


@dataclass(frozen=True)
class BacktestConfig:
    """
    Run configuration for the trade simulator.

    Attributes:
        initial_capital: Starting cash balance
        fixed_amount: Budget per BUY in fixed-amount mode, used when the
            strategy parameters carry no monthly_amount
        periods_per_year: Annualization factor for the Sharpe ratio
    """

    initial_capital: float = SETTINGS.initial_capital
    fixed_amount: float = SETTINGS.fixed_amount
    periods_per_year: int = SETTINGS.periods_per_year

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.initial_capital < 0:
            raise ValueError("initial_capital must be non-negative")
        if self.fixed_amount <= 0:
            raise ValueError("fixed_amount must be positive")
        if self.periods_per_year <= 0:
            raise ValueError("periods_per_year must be positive")


@dataclass(frozen=True)
class CupHandleConfig:
    """
    Cup-with-handle detection thresholds.

    Attributes:
        min_bars: Shortest series the detector will scan
        peak_window: Bars on each side a rim must dominate
        cup_min_days / cup_max_days: Allowed distance between rims
        cup_min_depth / cup_max_depth: Bottom depth below the rim level (fraction)
        rim_tolerance: Maximum relative difference between rim highs
        bottom_min_pos / bottom_max_pos: Bottom position within the cup span
        handle_min_days / handle_max_days: Handle length after the right rim
        handle_min_pullback: Shallowest handle accepted for a breakout
        handle_max_pullback: Deepest handle retrace before the cup is discarded
        forming_min_pullback: Shallowest handle reported for a forming pattern
        breakout_volume_ratio: Breakout volume vs trailing average volume
        volume_lookback: Bars in the trailing volume average
        require_52w_high: Require the breakout close to set a trailing high
        high_lookback: Bars in the trailing-high check (52 weeks of sessions)
        require_uptrend: Apply the 50/200 moving-average precondition
        uptrend_ma_short / uptrend_ma_long: Uptrend moving-average windows
        ready_distance: Distance to breakout that marks a handle as ready
        dedup_bars: Signals this close to the previous one are dropped
    """

    min_bars: int = 30
    peak_window: int = 5
    cup_min_days: int = 15
    cup_max_days: int = 120
    cup_min_depth: float = 0.08
    cup_max_depth: float = 0.50
    rim_tolerance: float = 0.06
    bottom_min_pos: float = 0.15
    bottom_max_pos: float = 0.85
    handle_min_days: int = 3
    handle_max_days: int = 25
    handle_min_pullback: float = 0.01
    handle_max_pullback: float = 0.12
    forming_min_pullback: float = 0.005
    breakout_volume_ratio: float = 1.5
    volume_lookback: int = 20
    require_52w_high: bool = True
    high_lookback: int = 252
    require_uptrend: bool = True
    uptrend_ma_short: int = 50
    uptrend_ma_long: int = 200
    ready_distance: float = 0.05
    dedup_bars: int = 3

    def __post_init__(self):
        """Validate detector thresholds."""
        if self.cup_min_days >= self.cup_max_days:
            raise ValueError("cup_min_days must be less than cup_max_days")
        if not 0 < self.cup_min_depth < self.cup_max_depth < 1.0:
            raise ValueError("cup depth bounds must satisfy 0 < min < max < 1")
        if not 0 <= self.bottom_min_pos < self.bottom_max_pos <= 1.0:
            raise ValueError("bottom position bounds must satisfy 0 <= min < max <= 1")
        if self.peak_window <= 0:
            raise ValueError("peak_window must be positive")


@dataclass(frozen=True)
class PriceBar:
    """
    One OHLCV bar.

    Attributes:
        date: Calendar date (ISO string, e.g. '2024-01-05')
        open: Opening price
        high: High price
        low: Low price
        close: Closing price
        volume: Traded volume
    """

    date: str
    open: float
    high: float
    low: float
    close: float
    volume: int = 0


class TradeSide(str, Enum):
    """Ledger entry side."""

    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class Trade:
    """
    Trade ledger entry.

    Attributes:
        date: Execution date (bar date)
        side: BUY or SELL
        price: Execution price (bar close)
        shares: Number of shares
        value: Notional value (price * shares)
        reason: Human-readable reason
    """

    date: str
    side: TradeSide
    price: float
    shares: int
    value: float
    reason: str


@dataclass(frozen=True)
class EquityPoint:
    """
    Mark-to-market snapshot for one bar.

    Attributes:
        date: Bar date
        equity: Total equity (cash + position)
        cash: Cash balance
        position: Position value at the bar close
        drawdown: Fraction below the running equity peak
    """

    date: str
    equity: float
    cash: float
    position: float
    drawdown: float


@dataclass(frozen=True)
class BacktestStats:
    """
    Aggregate performance statistics.

    Percentages are expressed in percent (12.5 == 12.5%). Round-trip
    statistics pair each SELL with the preceding BUY; a round trip with
    zero or negative profit counts as a loss.
    """

    total_return: float = 0.0
    total_return_pct: float = 0.0
    win_rate: float = 0.0
    num_trades: int = 0
    num_wins: int = 0
    num_losses: int = 0
    max_drawdown: float = 0.0
    max_drawdown_pct: float = 0.0
    avg_drawdown_pct: float = 0.0
    sharpe_ratio: float = 0.0
    profit_factor: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    max_trade_return_pct: float = 0.0
    recovery_factor: float = 0.0
    avg_holding_days: float = 0.0
    holding_days_min: float = 0.0
    holding_days_q1: float = 0.0
    holding_days_median: float = 0.0
    holding_days_q3: float = 0.0
    holding_days_max: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for reporting"""
        return asdict(self)


@dataclass
class BacktestResult:
    """
    Complete backtest results.

    Attributes:
        trades: Ordered trade ledger
        equity: One EquityPoint per input bar
        stats: Aggregate statistics
        initial_capital: Starting capital
        final_equity: Equity at the last bar (initial capital when empty)
    """

    trades: List[Trade] = field(default_factory=list)
    equity: List[EquityPoint] = field(default_factory=list)
    stats: BacktestStats = field(default_factory=BacktestStats)
    initial_capital: float = 0.0
    final_equity: float = 0.0

    @property
    def total_profit(self) -> float:
        """Calculate total profit."""
        return self.final_equity - self.initial_capital

    def trades_frame(self) -> pd.DataFrame:
        """Trade ledger as a DataFrame"""
        columns = ['date', 'side', 'price', 'shares', 'value', 'reason']
        if not self.trades:
            return pd.DataFrame(columns=columns)
        rows = [{**asdict(t), 'side': t.side.value} for t in self.trades]
        return pd.DataFrame(rows, columns=columns)

    def equity_frame(self) -> pd.DataFrame:
        """Equity curve as a DataFrame indexed by date"""
        columns = ['equity', 'cash', 'position', 'drawdown']
        if not self.equity:
            return pd.DataFrame(columns=columns)
        df = pd.DataFrame([asdict(p) for p in self.equity])
        df.set_index('date', inplace=True)
        return df[columns]
