"""
Backtest Simulator

Bar-by-bar execution of a strategy's action stream against a single
long-only position, marked to market at each close.

Execution Modes:
    ALL_IN_OUT:
        BUY while flat converts all cash into whole shares at the close
        (skipped when not even one share is affordable). SELL while holding
        liquidates at the close. BUY while holding and SELL while flat are
        no-ops.
    FIXED_AMOUNT:
        BUY spends up to the fixed amount (or the remaining cash when lower)
        on whole shares at the close. Positions only accumulate.

Every bar appends one EquityPoint; the running equity peak starts at the
initial capital.

Usage:
    from chartsignal.backtest.simulator import run_backtest

    result = run_backtest(frame, "ma_cross", {"short_period": 5, "long_period": 25})
    print(result.stats.total_return_pct)
"""

import math
from typing import Dict, List, Optional, Union

import pandas as pd
from loguru import logger

from ..backtest_config import BacktestConfig, BacktestResult, EquityPoint, Trade, TradeSide
from ..strategies.base import Action, ExecutionMode, StrategyDef, StrategyId
from ..strategies.registry import get_strategy
from .metrics import calculate_stats


class PositionTracker:
    """
    Cash, share count and equity peak for one simulation run.

    Tracks:
    - Cash balance
    - Shares held
    - Running equity peak for drawdown
    - Trade ledger and equity curve
    """

    def __init__(self, initial_capital: float):
        """
        Initialize position tracker.

        Args:
            initial_capital: Starting cash balance
        """
        self.initial_capital = initial_capital
        self.cash = initial_capital
        self.shares = 0
        self.peak_equity = initial_capital
        self.trades: List[Trade] = []
        self.equity: List[EquityPoint] = []

    def buy(self, date: str, price: float, budget: float, reason: str) -> Optional[Trade]:
        """
        Buy whole shares for up to `budget` at `price`.

        Returns:
            Recorded trade, or None when no share is affordable
        """
        shares = math.floor(min(budget, self.cash) / price)
        if shares <= 0:
            return None

        cost = shares * price
        self.cash -= cost
        self.shares += shares
        trade = Trade(date=date, side=TradeSide.BUY, price=price, shares=shares, value=cost, reason=reason)
        self.trades.append(trade)
        logger.debug(f"BUY {shares}@{price:,.2f} on {date} ({reason})")
        return trade

    def sell_all(self, date: str, price: float, reason: str) -> Optional[Trade]:
        """
        Liquidate the whole position at `price`.

        Returns:
            Recorded trade, or None when flat
        """
        if self.shares <= 0:
            return None

        proceeds = self.shares * price
        trade = Trade(date=date, side=TradeSide.SELL, price=price, shares=self.shares, value=proceeds, reason=reason)
        self.cash += proceeds
        self.shares = 0
        self.trades.append(trade)
        logger.debug(f"SELL {trade.shares}@{price:,.2f} on {date} ({reason})")
        return trade

    def mark(self, date: str, price: float) -> EquityPoint:
        """Append the mark-to-market snapshot for a bar"""
        position = self.shares * price
        equity = self.cash + position
        if equity > self.peak_equity:
            self.peak_equity = equity
        drawdown = (self.peak_equity - equity) / self.peak_equity if self.peak_equity > 0 else 0.0

        point = EquityPoint(date=date, equity=equity, cash=self.cash, position=position, drawdown=drawdown)
        self.equity.append(point)
        return point


def simulate(
    frame: pd.DataFrame,
    actions: pd.Series,
    mode: ExecutionMode = ExecutionMode.ALL_IN_OUT,
    initial_capital: Optional[float] = None,
    fixed_amount: Optional[float] = None,
    config: Optional[BacktestConfig] = None,
) -> BacktestResult:
    """
    Execute a precomputed action stream.

    Args:
        frame: Price frame
        actions: Series of Action aligned with frame
        mode: Execution mode
        initial_capital: Starting cash (default: config.initial_capital)
        fixed_amount: Budget per BUY in FIXED_AMOUNT mode (default: config.fixed_amount)
        config: Run configuration (default: BacktestConfig())

    Returns:
        BacktestResult
    """
    config = config or BacktestConfig()
    mode = ExecutionMode(mode)
    capital = config.initial_capital if initial_capital is None else initial_capital
    amount = config.fixed_amount if fixed_amount is None else fixed_amount

    if len(actions) != len(frame):
        raise ValueError(f"actions length {len(actions)} does not match {len(frame)} bars")

    tracker = PositionTracker(capital)
    dates = frame['date'].astype(str).to_numpy()
    closes = frame['close'].to_numpy(dtype=float)

    for i, action in enumerate(actions):
        date = dates[i]
        price = closes[i]

        if mode is ExecutionMode.FIXED_AMOUNT:
            if action == Action.BUY and tracker.cash >= price:
                tracker.buy(date, price, amount, "Fixed-amount purchase")
        elif action == Action.BUY and tracker.shares == 0 and tracker.cash > 0:
            tracker.buy(date, price, tracker.cash, "Signal: buy")
        elif action == Action.SELL and tracker.shares > 0:
            tracker.sell_all(date, price, "Signal: sell")

        tracker.mark(date, price)

    final_equity = tracker.equity[-1].equity if tracker.equity else capital
    stats = calculate_stats(tracker.trades, tracker.equity, capital, final_equity, config.periods_per_year)

    return BacktestResult(
        trades=tracker.trades,
        equity=tracker.equity,
        stats=stats,
        initial_capital=capital,
        final_equity=final_equity,
    )


def run_backtest(
    frame: pd.DataFrame,
    strategy: Union[StrategyDef, StrategyId, str],
    params: Optional[Dict[str, float]] = None,
    initial_capital: Optional[float] = None,
    config: Optional[BacktestConfig] = None,
) -> BacktestResult:
    """
    Run a strategy over a price frame.

    Args:
        frame: Price frame (see price_data.to_frame)
        strategy: StrategyDef or registered identifier
        params: Strategy parameters merged over its defaults
        initial_capital: Starting cash (default: config.initial_capital)
        config: Run configuration (default: BacktestConfig())

    Returns:
        BacktestResult; an empty frame yields no trades, no equity points and
        final equity equal to the initial capital

    Raises:
        UnknownStrategyError: Strategy identifier is not registered
        InvalidParameterError: params has keys outside the strategy schema
    """
    config = config or BacktestConfig()
    strategy_def = strategy if isinstance(strategy, StrategyDef) else get_strategy(strategy)
    resolved = strategy_def.resolve_params(params)
    capital = config.initial_capital if initial_capital is None else initial_capital

    if frame.empty:
        logger.debug(f"{strategy_def.id.value}: empty price series, nothing to simulate")
        return BacktestResult(initial_capital=capital, final_equity=capital)

    actions = strategy_def.compute(frame, resolved)
    fixed_amount = resolved.get('monthly_amount', config.fixed_amount)

    result = simulate(
        frame,
        actions,
        mode=strategy_def.mode,
        initial_capital=capital,
        fixed_amount=fixed_amount,
        config=config,
    )

    logger.info(
        f"{strategy_def.id.value}: {len(frame)} bars, {len(result.trades)} trades, "
        f"return {result.stats.total_return_pct:+.2f}%, max DD {result.stats.max_drawdown_pct:.2f}%"
    )
    return result
