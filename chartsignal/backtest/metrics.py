"""
Backtest Statistics

Aggregate statistics over a trade ledger and equity curve.

Round trips pair each SELL with the most recent BUY. Division-by-zero cases
resolve to documented sentinels, never NaN:
    - win rate, averages, Sharpe: 0 when there is nothing to average
    - profit factor: inf with winners and no losers, 0 with neither
    - recovery factor: 0 without a drawdown
"""

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np
import pandas as pd

from ..backtest_config import BacktestStats, EquityPoint, Trade, TradeSide


@dataclass(frozen=True)
class RoundTrip:
    """Completed BUY -> SELL pair"""

    buy: Trade
    sell: Trade

    @property
    def profit(self) -> float:
        return (self.sell.price - self.buy.price) * self.sell.shares

    @property
    def return_pct(self) -> float:
        return (self.sell.price - self.buy.price) / self.buy.price * 100

    @property
    def holding_days(self) -> int:
        return (pd.Timestamp(self.sell.date) - pd.Timestamp(self.buy.date)).days


def pair_round_trips(trades: Sequence[Trade]) -> List[RoundTrip]:
    """
    Pair SELLs with the preceding BUY.

    Args:
        trades: Ordered trade ledger

    Returns:
        Round trips in ledger order
    """
    trips = []
    last_buy = None
    for trade in trades:
        if trade.side is TradeSide.BUY:
            last_buy = trade
        elif trade.side is TradeSide.SELL and last_buy is not None:
            trips.append(RoundTrip(last_buy, trade))
            last_buy = None
    return trips


def sharpe_ratio(equity: Sequence[float], periods_per_year: int = 252) -> float:
    """
    Annualized Sharpe ratio of bar-to-bar equity returns.

    Returns are taken only where the previous equity is positive; the
    standard deviation is the sample (n - 1) one.

    Args:
        equity: Equity values in bar order
        periods_per_year: Annualization factor

    Returns:
        mean / std * sqrt(periods_per_year); 0 with fewer than 2 returns or
        zero standard deviation
    """
    values = np.asarray(equity, dtype=float)
    if len(values) < 2:
        return 0.0

    prev = values[:-1]
    valid = prev > 0
    returns = (values[1:][valid] - prev[valid]) / prev[valid]
    if len(returns) < 2:
        return 0.0

    std = returns.std(ddof=1)
    if std == 0:
        return 0.0
    return float(returns.mean() / std * np.sqrt(periods_per_year))


def max_drawdown_amount(equity: Sequence[float], initial_capital: float) -> float:
    """Largest peak-minus-equity gap, with the running peak starting at initial_capital"""
    values = np.asarray(equity, dtype=float)
    if len(values) == 0:
        return 0.0
    peaks = np.maximum.accumulate(np.maximum(values, initial_capital))
    return float(max((peaks - values).max(), 0.0))


def calculate_stats(
    trades: Sequence[Trade],
    equity: Sequence[EquityPoint],
    initial_capital: float,
    final_equity: float,
    periods_per_year: int = 252,
) -> BacktestStats:
    """
    Compute BacktestStats for a finished run.

    Args:
        trades: Ordered trade ledger
        equity: One EquityPoint per bar
        initial_capital: Starting capital
        final_equity: Equity at the last bar
        periods_per_year: Sharpe annualization factor

    Returns:
        BacktestStats (percentages in percent)
    """
    total_return = final_equity - initial_capital
    total_return_pct = total_return / initial_capital * 100 if initial_capital > 0 else 0.0

    trips = pair_round_trips(trades)
    profits = np.array([t.profit for t in trips], dtype=float)
    wins = profits[profits > 0]
    losses = profits[profits <= 0]

    win_rate = len(wins) / len(trips) * 100 if trips else 0.0
    avg_win = float(wins.mean()) if len(wins) else 0.0
    avg_loss = float(abs(losses.mean())) if len(losses) else 0.0

    gross_profit = float(wins.sum())
    gross_loss = float(abs(losses.sum()))
    if gross_loss > 0:
        profit_factor = gross_profit / gross_loss
    elif gross_profit > 0:
        profit_factor = float('inf')
    else:
        profit_factor = 0.0

    drawdowns = np.array([p.drawdown for p in equity], dtype=float)
    equity_values = [p.equity for p in equity]
    max_drawdown_pct = float(drawdowns.max() * 100) if len(drawdowns) else 0.0
    avg_drawdown_pct = float(drawdowns.mean() * 100) if len(drawdowns) else 0.0
    max_drawdown = max_drawdown_amount(equity_values, initial_capital)
    recovery_factor = total_return / max_drawdown if max_drawdown > 0 else 0.0

    max_trade_return_pct = max((t.return_pct for t in trips), default=0.0)

    holding = np.array([t.holding_days for t in trips], dtype=float)
    if len(holding):
        q_min, q1, median, q3, q_max = np.percentile(holding, [0, 25, 50, 75, 100])
        avg_holding = holding.mean()
    else:
        q_min = q1 = median = q3 = q_max = avg_holding = 0.0

    return BacktestStats(
        total_return=total_return,
        total_return_pct=total_return_pct,
        win_rate=win_rate,
        num_trades=len(trips),
        num_wins=len(wins),
        num_losses=len(losses),
        max_drawdown=max_drawdown,
        max_drawdown_pct=max_drawdown_pct,
        avg_drawdown_pct=avg_drawdown_pct,
        sharpe_ratio=sharpe_ratio(equity_values, periods_per_year),
        profit_factor=profit_factor,
        avg_win=avg_win,
        avg_loss=avg_loss,
        max_trade_return_pct=float(max_trade_return_pct),
        recovery_factor=recovery_factor,
        avg_holding_days=float(avg_holding),
        holding_days_min=float(q_min),
        holding_days_q1=float(q1),
        holding_days_median=float(median),
        holding_days_q3=float(q3),
        holding_days_max=float(q_max),
    )
